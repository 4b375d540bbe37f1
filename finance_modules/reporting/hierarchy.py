"""
Account hierarchy builder.

Turns the flat chart of accounts (parent references) plus per-account
``ValueMap``s into one ``AccountTreeNode`` tree per root type.  ZERO I/O.

The chart is validated on the way in: dangling parents and cycles raise
``HierarchyIntegrityError`` subclasses instead of producing a partial tree.
An account is a group exactly when some other account names it as parent;
the stored ``is_group`` flag does not decide the shape.  Accounts without
postings are kept as zero-balance nodes; pruning unpopulated roots is the
assembler's call.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from finance_kernel.exceptions import (
    AccountCycleError,
    DanglingParentError,
    HierarchyIntegrityError,
)
from finance_kernel.logging_config import get_logger
from finance_modules.reporting.aggregation import aggregate_tree
from finance_modules.reporting.models import (
    AccountMeta,
    AccountTreeNode,
    DateRange,
    PeriodBalance,
    Posting,
    RootType,
    ValueMap,
)
from finance_modules.reporting.periods import (
    group_by_date_ranges,
    group_postings_by_account,
)

logger = get_logger("modules.reporting.hierarchy")

SYNTHETIC_ROOT_PREFIX = "__root__:"


def index_accounts(accounts: Iterable[AccountMeta]) -> dict[str, AccountMeta]:
    """Index metas by id, keeping source order. Duplicate ids are rejected."""
    index: dict[str, AccountMeta] = {}
    for meta in accounts:
        if meta.account_id in index:
            raise HierarchyIntegrityError(f"Duplicate account id {meta.account_id}")
        index[meta.account_id] = meta
    return index


def validate_hierarchy(accounts: Mapping[str, AccountMeta]) -> None:
    """
    Verify every parent chain ends at a top-level account.

    Walks each chain once; accounts already proven acyclic short-circuit
    later walks, so the check is linear in the number of accounts.

    Raises:
        DanglingParentError: parent id not present in ``accounts``.
        AccountCycleError: a chain revisits an account.
    """
    verified: set[str] = set()
    for account_id in accounts:
        path: list[str] = []
        on_path: set[str] = set()
        current: str | None = account_id
        while current is not None and current not in verified:
            if current in on_path:
                cycle_start = path.index(current)
                raise AccountCycleError(tuple(path[cycle_start:]) + (current,))
            path.append(current)
            on_path.add(current)
            parent_id = accounts[current].parent_id
            if parent_id is not None and parent_id not in accounts:
                raise DanglingParentError(current, parent_id)
            current = parent_id
        verified.update(path)


def _children_by_parent(
    accounts: Mapping[str, AccountMeta],
) -> dict[str | None, list[AccountMeta]]:
    children: dict[str | None, list[AccountMeta]] = {}
    for meta in accounts.values():
        children.setdefault(meta.parent_id, []).append(meta)
    return children


def _new_node(meta: AccountMeta, level: int, is_group: bool) -> AccountTreeNode:
    return AccountTreeNode(
        account_id=meta.account_id,
        name=meta.name,
        root_type=meta.root_type,
        level=level,
        is_group=is_group,
    )


def _build_node(
    meta: AccountMeta,
    level: int,
    children_by_parent: Mapping[str | None, list[AccountMeta]],
    value_maps: Mapping[str, ValueMap],
    period_keys: Sequence[str],
) -> AccountTreeNode:
    """Build the subtree under ``meta`` with an explicit stack, any depth."""
    root = _new_node(meta, level, bool(children_by_parent.get(meta.account_id)))
    stack = [(root, meta)]
    while stack:
        node, current = stack.pop()
        kids = children_by_parent.get(current.account_id, [])
        if kids:
            node.children = [
                _new_node(kid, node.level + 1, bool(children_by_parent.get(kid.account_id)))
                for kid in kids
            ]
            stack.extend(zip(node.children, kids))
        elif current.account_id in value_maps:
            node.value_map = dict(value_maps[current.account_id])
            node.has_postings = True
        else:
            node.value_map = {key: PeriodBalance() for key in period_keys}
    return root


def build_account_tree(
    accounts: Sequence[AccountMeta],
    value_maps: Mapping[str, ValueMap],
    period_keys: Sequence[str] = (),
) -> dict[RootType, AccountTreeNode]:
    """
    Build one un-aggregated tree per root type.

    Leaves take their ``ValueMap`` from ``value_maps`` (or zeros for every
    key in ``period_keys``).  Group nodes are left empty for the
    aggregator.  When several top-level accounts share a root type they are
    wrapped in a synthetic group node named after the root type.

    Returns:
        Mapping of root type to tree, in order of first appearance.
    """
    index = index_accounts(accounts)
    validate_hierarchy(index)
    children_by_parent = _children_by_parent(index)

    tops_by_root: dict[RootType, list[AccountMeta]] = {}
    for top in children_by_parent.get(None, []):
        tops_by_root.setdefault(top.root_type, []).append(top)

    trees: dict[RootType, AccountTreeNode] = {}
    for root_type, tops in tops_by_root.items():
        if len(tops) == 1:
            trees[root_type] = _build_node(
                tops[0], 0, children_by_parent, value_maps, period_keys,
            )
            continue
        trees[root_type] = AccountTreeNode(
            account_id=f"{SYNTHETIC_ROOT_PREFIX}{root_type.value}",
            name=root_type.value,
            root_type=root_type,
            level=0,
            is_group=True,
            children=[
                _build_node(top, 1, children_by_parent, value_maps, period_keys)
                for top in tops
            ],
        )
    return trees


def build_account_trees(
    postings: Iterable[Posting],
    accounts: Sequence[AccountMeta],
    ranges: Sequence[DateRange],
) -> dict[RootType, AccountTreeNode]:
    """
    Full pipeline for one report run: group, bucket, build, aggregate.

    Every returned tree satisfies the aggregation invariant: each group
    node's balance per key is the sum of its children's.
    """
    index = index_accounts(accounts)
    by_account = group_postings_by_account(postings)
    value_maps = group_by_date_ranges(by_account, index, ranges)
    period_keys = [r.key for r in ranges]

    trees = build_account_tree(list(index.values()), value_maps, period_keys)
    for tree in trees.values():
        aggregate_tree(tree)

    logger.info(
        "account_tree_built",
        extra={
            "account_count": len(index),
            "posted_account_count": len(value_maps),
            "root_types": [rt.value for rt in trees],
            "period_keys": period_keys,
        },
    )
    return trees
