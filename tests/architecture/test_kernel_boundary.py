"""
Kernel boundary contract.

Tests that enforce the architectural layering:

1. finance_kernel/** may NOT import finance_modules. The kernel never
   depends upward.

2. The pure reporting pipeline (periods, hierarchy, aggregation, rows,
   statements, models) may NOT import SQLAlchemy. Storage is reached only
   through the ledger query adapters.

These tests read source code via AST; they cannot break anything.
"""

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(package: str) -> list[Path]:
    """Return all .py files under a top-level package."""
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(files: list[Path], prefixes: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in files:
        for lineno, module in _extract_imports(filepath):
            for prefix in prefixes:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(
                        f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'"
                    )
    return found


# ---------------------------------------------------------------------------
# Test: Kernel has no upward dependencies
# ---------------------------------------------------------------------------


class TestKernelNoUpwardDependencies:
    """finance_kernel/** must not import finance_modules."""

    def test_kernel_files_found(self):
        assert _python_files("finance_kernel")

    def test_kernel_does_not_import_modules(self):
        violations = _violations(_python_files("finance_kernel"), ("finance_modules",))
        assert not violations, (
            "Kernel boundary violation: finance_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# Test: Pure pipeline has no storage dependency
# ---------------------------------------------------------------------------


class TestPurePipeline:
    """Only adapters.py may touch SQLAlchemy inside the reporting module."""

    PURE_MODULES = (
        "models.py",
        "periods.py",
        "hierarchy.py",
        "aggregation.py",
        "rows.py",
        "statements.py",
    )

    def test_pure_modules_do_not_import_storage(self):
        reporting = ROOT / "finance_modules" / "reporting"
        files = [reporting / name for name in self.PURE_MODULES]
        violations = _violations(
            files, ("sqlalchemy", "finance_kernel.db", "finance_kernel.models"),
        )
        assert not violations, (
            "Pure reporting modules must not reach storage directly:\n"
            + "\n".join(violations)
        )
