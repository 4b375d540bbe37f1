"""
Bottom-up tree aggregation and ValueMap arithmetic.

Pure functions over ``AccountTreeNode`` trees.  After ``aggregate_tree``
every group node satisfies, for every period key present in any
descendant::

    node.value_map[key].balance == sum(child.value_map[key].balance
                                       for child in node.children)

with a missing key counting as zero.  ``Decimal`` addition is exact within
the context precision, so the result does not depend on child order.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Iterator, Mapping
from decimal import Decimal

from finance_modules.reporting.models import (
    ZERO,
    AccountTreeNode,
    PeriodBalance,
    ValueMap,
    balance_at,
)


def sum_value_maps(maps: Iterable[Mapping[str, PeriodBalance]]) -> ValueMap:
    """Per-key sum over ``maps``; keys ordered by first appearance."""
    totals: dict[str, Decimal] = {}
    for value_map in maps:
        for key, entry in value_map.items():
            totals[key] = totals.get(key, ZERO) + entry.balance
    return {key: PeriodBalance(balance) for key, balance in totals.items()}


def combine_value_maps(
    left: Mapping[str, PeriodBalance],
    right: Mapping[str, PeriodBalance],
    op: Callable[[Decimal, Decimal], Decimal] = operator.sub,
) -> ValueMap:
    """
    ``result[key] = op(left[key], right[key])`` for every key in either map.

    Keys follow ``left``'s order, then keys only ``right`` has.  The missing
    side counts as zero.
    """
    keys = list(left)
    keys.extend(k for k in right if k not in left)
    return {
        key: PeriodBalance(op(balance_at(left, key), balance_at(right, key)))
        for key in keys
    }


def aggregate_tree(node: AccountTreeNode) -> AccountTreeNode:
    """
    Post-order: aggregate children, then set this node to their sum.

    Mutates ``node`` in place and returns it.  Leaves keep their own
    ``ValueMap``; ``has_postings`` propagates upward.
    """
    # Reversed pre-order visits every child before its parent.
    for current in reversed(list(node.walk())):
        if current.is_leaf:
            continue
        current.value_map = sum_value_maps(
            child.value_map for child in current.children
        )
        current.has_postings = any(child.has_postings for child in current.children)
    return node


def iter_aggregation_violations(
    node: AccountTreeNode,
) -> Iterator[tuple[str, str, Decimal, Decimal]]:
    """
    Yield ``(account_id, key, stored, expected)`` wherever a group node's
    balance differs from the sum of its children.
    """
    for current in node.walk():
        if current.is_leaf:
            continue
        keys = set(current.value_map)
        for child in current.children:
            keys.update(child.value_map)
        for key in sorted(keys):
            expected = sum(
                (balance_at(child.value_map, key) for child in current.children),
                ZERO,
            )
            stored = balance_at(current.value_map, key)
            if stored != expected:
                yield current.account_id, key, stored, expected
