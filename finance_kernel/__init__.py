"""
Finance Kernel - reporting infrastructure

Shared plumbing for the financial report engine:
- Typed, coded exceptions
- Structured JSON logging
- Injectable clock
- SQLAlchemy models and read-only ledger selectors
"""

__version__ = "0.1.0"
