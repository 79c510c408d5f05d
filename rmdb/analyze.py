"""Semantic checks on parsed queries: column resolution and type checking."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Sequence
from typing import Any

from rmdb.keys import ColType
from rmdb.plan import (
    AmbiguousColumnError,
    Column,
    ColumnNotFoundError,
    Condition,
    DatabaseError,
    InternalError,
    TabCol,
    find_column,
)


class IncompatibleTypeError(DatabaseError):
    """The two sides of a condition have different types."""

    def __init__(self, lhs: str, rhs: str) -> None:
        super().__init__(f"Incompatible type error: lhs {lhs}, rhs {rhs}")
        self.lhs = lhs
        self.rhs = rhs


def resolve_column(all_cols: Sequence[Column], target: TabCol) -> TabCol:
    """Fill in the table of an unqualified column reference.

    Qualified references are returned unchanged.
    """
    if target.tab_name:
        return target
    tab_name = ""
    for col in all_cols:
        if col.name == target.col_name:
            if tab_name:
                raise AmbiguousColumnError(target.col_name)
            tab_name = col.tab_name
    if not tab_name:
        raise ColumnNotFoundError(target.col_name)
    return TabCol(tab_name, target.col_name)


def _value_type(value: Any) -> ColType:
    if isinstance(value, bool):
        raise InternalError("Unexpected sv value type")
    if isinstance(value, int):
        return ColType.INT
    if isinstance(value, float):
        return ColType.FLOAT
    if isinstance(value, str):
        return ColType.STRING
    raise InternalError("Unexpected sv value type")


def resolve_conditions(all_cols: Sequence[Column], conds: Iterable[Condition]) -> list[Condition]:
    """Resolve the columns of each condition and check both sides share a type."""
    resolved = []
    for cond in conds:
        lhs = resolve_column(all_cols, cond.lhs_col)
        rhs_col = None if cond.is_rhs_val else resolve_column(all_cols, cond.rhs_col)
        lhs_type = all_cols[find_column(all_cols, lhs)].type
        if rhs_col is None:
            rhs_type = _value_type(cond.rhs_val)
        else:
            rhs_type = all_cols[find_column(all_cols, rhs_col)].type
        if lhs_type != rhs_type:
            raise IncompatibleTypeError(ColType(lhs_type).name, ColType(rhs_type).name)
        resolved.append(dataclasses.replace(cond, lhs_col=lhs, rhs_col=rhs_col))
    return resolved


def expand_selection(all_cols: Sequence[Column], selected: Iterable[TabCol]) -> list[TabCol]:
    """Return the output columns of a SELECT; an empty selection means all columns."""
    selected = list(selected)
    if not selected:
        return [TabCol(col.tab_name, col.name) for col in all_cols]
    return [resolve_column(all_cols, col) for col in selected]