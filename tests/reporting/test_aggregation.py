"""
Tests for bottom-up tree aggregation.

The central property: every group node's balance equals the sum of its
children's, per period key, with absent keys read as zero.
NO database required.
"""

from __future__ import annotations

import operator
import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from finance_modules.reporting.aggregation import (
    aggregate_tree,
    combine_value_maps,
    iter_aggregation_violations,
    sum_value_maps,
)
from finance_modules.reporting.hierarchy import build_account_trees
from finance_modules.reporting.models import (
    AccountTreeNode,
    PeriodBalance,
    RootType,
)
from tests.reporting.conftest import make_meta, make_posting, month_range


def _pb(value: str) -> PeriodBalance:
    return PeriodBalance(Decimal(value))


def _random_chart(rng: random.Random, size: int):
    """Random valid chart: every account hangs off an earlier group."""
    root_types = list(RootType)
    metas = [make_meta(f"root_{rt.value}", rt, is_group=True) for rt in root_types]
    groups = list(metas)
    leaves = []
    for i in range(size):
        parent = rng.choice(groups)
        is_group = rng.random() < 0.3
        meta = make_meta(f"acct_{i}", parent.root_type, parent.account_id, is_group=is_group)
        metas.append(meta)
        (groups if is_group else leaves).append(meta)
    return metas, leaves


def _random_postings(rng: random.Random, leaves, count: int):
    start = date(2024, 1, 1)
    return [
        make_posting(
            leaf.account_id,
            start + timedelta(days=rng.randrange(366)),
            debit=Decimal(rng.randrange(0, 100000)) / 100,
            credit=Decimal(rng.randrange(0, 100000)) / 100,
        )
        for leaf in (rng.choice(leaves) for _ in range(count))
    ]


class TestValueMapArithmetic:
    """sum_value_maps / combine_value_maps."""

    def test_sum_keys_in_first_appearance_order(self):
        result = sum_value_maps([
            {"b": _pb("1")},
            {"a": _pb("2"), "b": _pb("3")},
        ])
        assert list(result) == ["b", "a"]
        assert result == {"b": _pb("4"), "a": _pb("2")}

    def test_sum_of_nothing_is_empty(self):
        assert sum_value_maps([]) == {}

    def test_combine_missing_side_is_zero(self):
        result = combine_value_maps(
            {"2023": _pb("10"), "2024": _pb("100")},
            {"2024": _pb("40"), "2025": _pb("5")},
        )
        assert result == {
            "2023": _pb("10"),
            "2024": _pb("60"),
            "2025": _pb("-5"),
        }
        assert list(result) == ["2023", "2024", "2025"]

    def test_combine_with_addition(self):
        result = combine_value_maps({"k": _pb("1.5")}, {"k": _pb("2.25")}, operator.add)
        assert result == {"k": _pb("3.75")}


class TestAggregateTree:
    """Post-order summation."""

    def _tree(self) -> AccountTreeNode:
        rent = AccountTreeNode(
            "rent", "Rent", RootType.EXPENSE, level=2,
            value_map={"Jan": _pb("40"), "Feb": _pb("40")}, has_postings=True,
        )
        power = AccountTreeNode(
            "power", "Power", RootType.EXPENSE, level=2,
            value_map={"Feb": _pb("7.5")}, has_postings=True,
        )
        operating = AccountTreeNode(
            "operating", "Operating", RootType.EXPENSE, level=1,
            is_group=True, children=[rent, power],
        )
        travel = AccountTreeNode(
            "travel", "Travel", RootType.EXPENSE, level=1,
            value_map={"Jan": _pb("0"), "Feb": _pb("0")},
        )
        return AccountTreeNode(
            "expenses", "Expenses", RootType.EXPENSE,
            is_group=True, children=[operating, travel],
        )

    def test_group_balances_are_child_sums(self):
        tree = aggregate_tree(self._tree())
        assert tree.value_map == {"Jan": _pb("40"), "Feb": _pb("47.5")}
        assert tree.children[0].value_map == {"Jan": _pb("40"), "Feb": _pb("47.5")}

    def test_missing_key_treated_as_zero(self):
        tree = aggregate_tree(self._tree())
        operating = tree.children[0]
        assert operating.value_map["Jan"].balance == Decimal("40")

    def test_mutates_in_place_and_returns_root(self):
        tree = self._tree()
        assert aggregate_tree(tree) is tree

    def test_leaves_unchanged(self):
        tree = aggregate_tree(self._tree())
        power = tree.children[0].children[1]
        assert power.value_map == {"Feb": _pb("7.5")}

    def test_has_postings_propagates(self):
        tree = aggregate_tree(self._tree())
        assert tree.has_postings
        assert tree.children[0].has_postings
        assert not tree.children[1].has_postings

    def test_no_violations_after_aggregation(self):
        assert list(iter_aggregation_violations(aggregate_tree(self._tree()))) == []

    def test_violation_detected(self):
        tree = aggregate_tree(self._tree())
        tree.value_map["Jan"] = _pb("999")
        assert list(iter_aggregation_violations(tree)) == [
            ("expenses", "Jan", Decimal("999"), Decimal("40")),
        ]

    def test_order_independent(self):
        forward = aggregate_tree(self._tree())
        reversed_tree = self._tree()
        reversed_tree.children.reverse()
        for child in reversed_tree.children:
            child.children.reverse()
        backward = aggregate_tree(reversed_tree)
        assert {k: v.balance for k, v in forward.value_map.items()} == {
            k: v.balance for k, v in backward.value_map.items()
        }

    def test_deep_chain(self):
        node = AccountTreeNode(
            "n3000", "N3000", RootType.ASSET, level=3000,
            value_map={"Jan": _pb("2")}, has_postings=True,
        )
        for depth in range(2999, -1, -1):
            node = AccountTreeNode(
                f"n{depth}", f"N{depth}", RootType.ASSET, level=depth,
                is_group=True, children=[node],
            )
        aggregate_tree(node)
        assert node.value_map == {"Jan": _pb("2")}
        assert node.has_postings
        assert list(iter_aggregation_violations(node)) == []


@pytest.mark.slow
class TestAggregationProperties:
    """Seeded random charts: the invariant holds for every node and key."""

    @pytest.mark.parametrize("seed", range(20))
    def test_invariant_holds_on_random_charts(self, seed):
        rng = random.Random(seed)
        metas, leaves = _random_chart(rng, size=60)
        postings = _random_postings(rng, leaves, count=300)
        ranges = [month_range(2024, m) for m in range(1, 13)]

        trees = build_account_trees(postings, metas, ranges)
        for tree in trees.values():
            assert list(iter_aggregation_violations(tree)) == []

    @pytest.mark.parametrize("seed", range(10))
    def test_root_total_equals_sum_of_postings(self, seed):
        rng = random.Random(seed)
        metas, leaves = _random_chart(rng, size=40)
        postings = _random_postings(rng, leaves, count=200)
        ranges = [month_range(2024, m) for m in range(1, 13)]
        by_id = {m.account_id: m for m in metas}

        trees = build_account_trees(postings, metas, ranges)
        for root_type, tree in trees.items():
            expected = sum(
                (
                    p.credit - p.debit if root_type.is_credit_normal else p.debit - p.credit
                    for p in postings
                    if by_id[p.account_id].root_type is root_type
                ),
                Decimal("0"),
            )
            total = sum((pb.balance for pb in tree.value_map.values()), Decimal("0"))
            assert total == expected

    @pytest.mark.parametrize("seed", range(5))
    def test_posting_order_does_not_change_result(self, seed):
        rng = random.Random(seed)
        metas, leaves = _random_chart(rng, size=30)
        postings = _random_postings(rng, leaves, count=150)
        shuffled = list(postings)
        rng.shuffle(shuffled)
        ranges = [month_range(2024, m) for m in range(1, 13)]

        assert build_account_trees(postings, metas, ranges) == build_account_trees(
            shuffled, metas, ranges,
        )
