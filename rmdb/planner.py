"""Building query plans from resolved tables, conditions and selections."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Sequence
from typing import Optional

from rmdb.plan import (
    Condition,
    DatabaseError,
    DMLPlan,
    JoinPlan,
    Plan,
    PlanTag,
    ProjectionPlan,
    ScanPlan,
    SortPlan,
    TabCol,
)

IndexLookup = Callable[[str, list[str]], bool]


def pop_conds(conds: list[Condition], tab_name: str) -> list[Condition]:
    """Remove and return the conditions that a scan of ``tab_name`` can evaluate alone.

    These are value comparisons on ``tab_name`` and comparisons between two
    columns of one and the same table. ``conds`` is modified in place.
    """
    solved: list[Condition] = []
    kept: list[Condition] = []
    for cond in conds:
        same_table = cond.rhs_col is not None and cond.lhs_col.tab_name == cond.rhs_col.tab_name
        if (cond.is_rhs_val and cond.lhs_col.tab_name == tab_name) or same_table:
            solved.append(cond)
        else:
            kept.append(cond)
    conds[:] = kept
    return solved


def push_conds(cond: Condition, plan: Plan) -> int:
    """Push a join condition down to the join in ``plan`` that covers both its tables.

    For a scan, returns 1 if it reads the left-hand table, 2 if it reads the
    right-hand table and 0 otherwise. Returns 3 once the condition has been
    attached to a join, with its sides exchanged if the join has them the
    other way round.
    """
    if isinstance(plan, ScanPlan):
        if plan.tab_name == cond.lhs_col.tab_name:
            return 1
        if cond.rhs_col is not None and plan.tab_name == cond.rhs_col.tab_name:
            return 2
        return 0
    if isinstance(plan, JoinPlan):
        left_res = push_conds(cond, plan.left)
        if left_res == 3:
            return 3
        right_res = push_conds(cond, plan.right)
        if right_res == 3:
            return 3
        if left_res == 0 or right_res == 0:
            return left_res + right_res
        if left_res == 2:
            cond.swap_sides()
        plan.conds.append(cond)
        return 3
    return 0


def pop_scan(
    scanned: list[bool], table: str, joined_tables: list[str], plans: Sequence[Plan]
) -> Optional[Plan]:
    """Take the scan of ``table`` from ``plans`` for joining.

    Marks it in ``scanned`` and records the table in ``joined_tables``.
    Returns None when no scan reads ``table``.
    """
    for position, plan in enumerate(plans):
        if isinstance(plan, ScanPlan) and plan.tab_name == table:
            scanned[position] = True
            joined_tables.append(plan.tab_name)
            return plan
    return None


class Planner:
    """Chooses scans and join order for a query.

    ``has_index(tab_name, col_names)`` tells whether an index exists on
    exactly those columns of the table.
    """

    def __init__(self, has_index: IndexLookup) -> None:
        self.has_index = has_index
        self.enable_nestedloop_join = True
        self.enable_sortmerge_join = False

    def index_columns(self, tab_name: str, conds: Iterable[Condition]) -> Optional[list[str]]:
        """Return the index columns usable for ``conds`` on ``tab_name``, or None.

        An index is used only when the equality-with-value conditions on the
        table name exactly its columns, in the order the conditions appear.
        """
        names = [
            cond.lhs_col.col_name
            for cond in conds
            if cond.is_rhs_val and cond.op.value == "=" and cond.lhs_col.tab_name == tab_name
        ]
        return names if self.has_index(tab_name, names) else None

    def make_scan(self, tab_name: str, conds: Iterable[Condition]) -> ScanPlan:
        """Return an index scan if an index fits ``conds``, else a sequential scan."""
        conds = list(conds)
        index_cols = self.index_columns(tab_name, conds)
        if index_cols is None:
            return ScanPlan(PlanTag.SEQ_SCAN, tab_name, conds, [])
        return ScanPlan(PlanTag.INDEX_SCAN, tab_name, conds, index_cols)

    def _first_join_tag(self) -> PlanTag:
        if self.enable_nestedloop_join:
            return PlanTag.NEST_LOOP
        if self.enable_sortmerge_join:
            return PlanTag.SORT_MERGE
        raise DatabaseError("No join executor selected!")

    def make_one_rel(self, tables: Sequence[str], conds: Iterable[Condition]) -> Plan:
        """Build the scan and join tree over ``tables`` filtered by ``conds``."""
        remaining = [copy.copy(cond) for cond in conds]
        scans: list[Plan] = [self.make_scan(table, pop_conds(remaining, table)) for table in tables]
        if len(scans) == 1:
            return scans[0]

        scanned = [False] * len(scans)
        joined_tables: list[str] = []
        join: Optional[Plan]

        if remaining:
            first, *rest = remaining
            left = pop_scan(scanned, first.lhs_col.tab_name, joined_tables, scans)
            right = pop_scan(
                scanned,
                first.rhs_col.tab_name if first.rhs_col is not None else "",
                joined_tables,
                scans,
            )
            join = JoinPlan(self._first_join_tag(), left, right, [first])

            for cond in rest:
                left_scan: Optional[Plan] = None
                right_scan: Optional[Plan] = None
                reverse = False
                if cond.lhs_col.tab_name not in joined_tables:
                    left_scan = pop_scan(scanned, cond.lhs_col.tab_name, joined_tables, scans)
                rhs_tab = cond.rhs_col.tab_name if cond.rhs_col is not None else ""
                if rhs_tab not in joined_tables:
                    right_scan = pop_scan(scanned, rhs_tab, joined_tables, scans)
                    reverse = True

                if left_scan is not None and right_scan is not None:
                    inner = JoinPlan(PlanTag.NEST_LOOP, left_scan, right_scan, [cond])
                    join = JoinPlan(PlanTag.NEST_LOOP, inner, join, [])
                elif left_scan is not None or right_scan is not None:
                    if reverse:
                        cond.swap_sides()
                        left_scan = right_scan
                    join = JoinPlan(PlanTag.NEST_LOOP, left_scan, join, [cond])
                else:
                    push_conds(cond, join)
        else:
            join = scans[0]
            scanned[0] = True

        for scan, done in zip(scans, scanned):
            if not done:
                join = JoinPlan(PlanTag.NEST_LOOP, scan, join, [])
        return join

    def plan_select(
        self,
        tables: Sequence[str],
        conds: Iterable[Condition],
        sel_cols: Iterable[TabCol],
        sort_col: Optional[TabCol] = None,
        is_desc: bool = False,
    ) -> DMLPlan:
        """Build the complete plan of a SELECT statement."""
        plan = self.make_one_rel(tables, conds)
        if sort_col is not None:
            plan = SortPlan(PlanTag.SORT, plan, sort_col, is_desc)
        projection = ProjectionPlan(PlanTag.PROJECTION, plan, list(sel_cols))
        return DMLPlan(PlanTag.SELECT, projection)