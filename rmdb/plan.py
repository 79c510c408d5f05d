"""Query plan nodes, conditions and the column metadata they refer to."""

from __future__ import annotations

import copy
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional

from rmdb.keys import ColType


class DatabaseError(Exception):
    """Base class of all errors raised by the database."""


class InternalError(DatabaseError):
    """An unexpected internal state was reached."""


class ColumnNotFoundError(DatabaseError):
    """A referenced column does not exist."""

    def __init__(self, column: str) -> None:
        super().__init__(f"Column not found: {column}")
        self.column = column


class AmbiguousColumnError(DatabaseError):
    """An unqualified column name matches columns of several tables."""

    def __init__(self, column: str) -> None:
        super().__init__(f"Ambiguous column: {column}")
        self.column = column


class CompOp(Enum):
    """Comparison operator of a condition."""

    EQ = "="
    NE = "<>"
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    def swapped(self) -> "CompOp":
        """Return the operator that keeps the meaning when both sides are exchanged."""
        return _SWAPPED[self]


_SWAPPED = {
    CompOp.EQ: CompOp.EQ,
    CompOp.NE: CompOp.NE,
    CompOp.LT: CompOp.GT,
    CompOp.GT: CompOp.LT,
    CompOp.LE: CompOp.GE,
    CompOp.GE: CompOp.LE,
}


class PlanTag(IntEnum):
    """Kind of a plan node."""

    INVALID = 1
    HELP = 2
    SHOW_TABLE = 3
    DESC_TABLE = 4
    CREATE_TABLE = 5
    DROP_TABLE = 6
    CREATE_INDEX = 7
    DROP_INDEX = 8
    SET_KNOB = 9
    INSERT = 10
    UPDATE = 11
    DELETE = 12
    SELECT = 13
    TRANSACTION_BEGIN = 14
    TRANSACTION_COMMIT = 15
    TRANSACTION_ABORT = 16
    TRANSACTION_ROLLBACK = 17
    SEQ_SCAN = 18
    INDEX_SCAN = 19
    NEST_LOOP = 20
    SORT_MERGE = 21
    SORT = 22
    PROJECTION = 23


class JoinType(Enum):
    """Kind of join performed by a join plan."""

    INNER = "inner"
    LEFT = "left"
    RIGHT = "right"
    FULL = "full"


class SetKnobType(Enum):
    """Planner setting changed by a SET statement."""

    ENABLE_NEST_LOOP = "enable_nestloop"
    ENABLE_SORT_MERGE = "enable_sortmerge"


@dataclass(frozen=True)
class TabCol:
    """A column reference, optionally qualified by its table."""

    tab_name: str
    col_name: str

    def __str__(self) -> str:
        return f"{self.tab_name}.{self.col_name}" if self.tab_name else self.col_name


@dataclass
class Column:
    """Metadata of a table column: its type, length and offset in a record."""

    tab_name: str
    name: str
    type: ColType
    len: int
    offset: int = 0
    index: bool = False


@dataclass
class Condition:
    """``lhs_col op rhs``, where the right side is a value or another column."""

    lhs_col: TabCol
    op: CompOp
    rhs_val: Any = None
    rhs_col: Optional[TabCol] = None

    @property
    def is_rhs_val(self) -> bool:
        return self.rhs_col is None

    def swap_sides(self) -> None:
        """Exchange the two columns and mirror the operator."""
        if self.rhs_col is None:
            raise ValueError("cannot swap a condition whose right side is a value")
        self.lhs_col, self.rhs_col = self.rhs_col, self.lhs_col
        self.op = self.op.swapped()


def find_column(columns: Sequence[Column], target: TabCol) -> int:
    """Return the position of ``target`` among ``columns``."""
    for position, col in enumerate(columns):
        if col.tab_name == target.tab_name and col.name == target.col_name:
            return position
    raise ColumnNotFoundError(f"{target.tab_name}.{target.col_name}")


@dataclass
class Plan:
    """A node of a query plan."""

    tag: PlanTag


@dataclass
class ScanPlan(Plan):
    """Sequential or index scan of one table."""

    tab_name: str
    conds: list[Condition] = field(default_factory=list)
    index_col_names: list[str] = field(default_factory=list)
    cols: list[Column] = field(default_factory=list)
    fed_conds: list[Condition] = field(init=False)

    def __post_init__(self) -> None:
        self.conds = list(self.conds)
        self.index_col_names = list(self.index_col_names)
        self.cols = list(self.cols)
        self.fed_conds = copy.deepcopy(self.conds)

    @property
    def tuple_len(self) -> int:
        """Length in bytes of a record produced by the scan."""
        if not self.cols:
            return 0
        last = self.cols[-1]
        return last.offset + last.len


@dataclass
class JoinPlan(Plan):
    """Join of two sub-plans under a list of conditions."""

    left: Plan
    right: Plan
    conds: list[Condition] = field(default_factory=list)
    join_type: JoinType = JoinType.INNER


@dataclass
class ProjectionPlan(Plan):
    """Selection of output columns from a sub-plan."""

    subplan: Plan
    sel_cols: list[TabCol] = field(default_factory=list)


@dataclass
class SortPlan(Plan):
    """Ordering of a sub-plan's output by one column."""

    subplan: Plan
    sel_col: TabCol
    is_desc: bool = False


@dataclass
class DMLPlan(Plan):
    """INSERT, DELETE, UPDATE or SELECT."""

    subplan: Optional[Plan]
    tab_name: str = ""
    values: list[Any] = field(default_factory=list)
    conds: list[Condition] = field(default_factory=list)
    set_clauses: list[Any] = field(default_factory=list)


@dataclass
class DDLPlan(Plan):
    """CREATE/DROP TABLE or CREATE/DROP INDEX."""

    tab_name: str
    col_names: list[str] = field(default_factory=list)
    cols: list[Any] = field(default_factory=list)


@dataclass
class OtherPlan(Plan):
    """HELP, SHOW TABLES, DESC, BEGIN, COMMIT, ABORT and ROLLBACK."""

    tab_name: str = ""


@dataclass
class SetKnobPlan(Plan):
    """Change of a planner setting."""

    tag: PlanTag = field(default=PlanTag.SET_KNOB, init=False)
    knob_type: SetKnobType
    bool_value: bool