"""On-disk layout of B+ tree index files and comparison of index keys.

Integers and page numbers are stored as little-endian 32-bit values and
floats as little-endian IEEE-754 single precision.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

IX_NO_PAGE = -1
IX_FILE_HDR_PAGE = 0
IX_LEAF_HEADER_PAGE = 1
IX_INIT_ROOT_PAGE = 2
IX_INIT_NUM_PAGES = 3
IX_MAX_COL_LEN = 512

_INT = struct.Struct("<i")
_FLOAT = struct.Struct("<f")
_HEAD = struct.Struct("<iiiii")  # tot_len, first_free, num_pages, root, col_num
_TAIL = struct.Struct("<iiiii")  # col_tot_len, btree_order, keys_size, first_leaf, last_leaf
_PAGE_HDR = struct.Struct("<iii?3xii")


class ColType(IntEnum):
    """Type of a column stored in a record or an index key."""

    INT = 0
    FLOAT = 1
    STRING = 2


def compare_value(a: bytes, b: bytes, col_type: ColType, col_len: int) -> int:
    """Compare two encoded column values; return -1, 0 or 1."""
    col_type = ColType(col_type)
    if col_type is ColType.INT:
        x, y = _INT.unpack_from(a)[0], _INT.unpack_from(b)[0]
    elif col_type is ColType.FLOAT:
        x, y = _FLOAT.unpack_from(a)[0], _FLOAT.unpack_from(b)[0]
    else:
        x, y = bytes(a[:col_len]), bytes(b[:col_len])
    if x < y:
        return -1
    if x > y:
        return 1
    return 0


def compare_keys(
    a: bytes, b: bytes, col_types: Sequence[ColType], col_lens: Sequence[int]
) -> int:
    """Compare two composite keys column by column; return -1, 0 or 1."""
    if len(col_types) != len(col_lens):
        raise ValueError("col_types and col_lens differ in length")
    offset = 0
    for col_type, col_len in zip(col_types, col_lens):
        result = compare_value(a[offset:offset + col_len], b[offset:offset + col_len], col_type, col_len)
        if result:
            return result
        offset += col_len
    return 0


def index_name(table: str, col_names: Iterable[str]) -> str:
    """Return the file name of the index on ``col_names`` of ``table``."""
    return table + "".join(f"_{name}" for name in col_names) + ".idx"


@dataclass
class IxFileHdr:
    """Header page of an index file."""

    first_free_page_no: int = IX_NO_PAGE
    num_pages: int = IX_INIT_NUM_PAGES
    root_page: int = IX_INIT_ROOT_PAGE
    col_types: list[ColType] = field(default_factory=list)
    col_lens: list[int] = field(default_factory=list)
    col_tot_len: int = 0
    btree_order: int = 0
    keys_size: int = 0
    first_leaf: int = IX_INIT_ROOT_PAGE
    last_leaf: int = IX_INIT_ROOT_PAGE
    tot_len: int = 0

    @property
    def col_num(self) -> int:
        return len(self.col_types)

    def _encoded_size(self) -> int:
        return _HEAD.size + 8 * self.col_num + _TAIL.size

    def update_tot_len(self) -> None:
        """Set ``tot_len`` to the size of the serialised header."""
        self.tot_len = self._encoded_size()

    def to_bytes(self) -> bytes:
        """Serialise the header; ``tot_len`` must already be up to date."""
        if len(self.col_lens) != self.col_num:
            raise ValueError("col_types and col_lens differ in length")
        if self.tot_len != self._encoded_size():
            raise ValueError(f"tot_len {self.tot_len} does not match header size {self._encoded_size()}")
        n = self.col_num
        return b"".join(
            (
                _HEAD.pack(self.tot_len, self.first_free_page_no, self.num_pages, self.root_page, n),
                struct.pack(f"<{n}i", *(int(t) for t in self.col_types)),
                struct.pack(f"<{n}i", *self.col_lens),
                _TAIL.pack(self.col_tot_len, self.btree_order, self.keys_size, self.first_leaf, self.last_leaf),
            )
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "IxFileHdr":
        """Read a header from the start of ``data``."""
        try:
            tot_len, first_free, num_pages, root, n = _HEAD.unpack_from(data, 0)
            if n < 0:
                raise ValueError(f"negative column count {n}")
            offset = _HEAD.size
            types = struct.unpack_from(f"<{n}i", data, offset)
            offset += 4 * n
            lens = struct.unpack_from(f"<{n}i", data, offset)
            offset += 4 * n
            col_tot_len, order, keys_size, first_leaf, last_leaf = _TAIL.unpack_from(data, offset)
            offset += _TAIL.size
        except struct.error as exc:
            raise ValueError(f"truncated index file header: {exc}") from exc
        if offset != tot_len:
            raise ValueError(f"header length {tot_len} does not match its contents ({offset})")
        return cls(
            first_free_page_no=first_free,
            num_pages=num_pages,
            root_page=root,
            col_types=[ColType(t) for t in types],
            col_lens=list(lens),
            col_tot_len=col_tot_len,
            btree_order=order,
            keys_size=keys_size,
            first_leaf=first_leaf,
            last_leaf=last_leaf,
            tot_len=tot_len,
        )


@dataclass
class IxPageHdr:
    """Header at the start of every B+ tree node page."""

    next_free_page_no: int = IX_NO_PAGE
    parent: int = IX_NO_PAGE
    num_key: int = 0
    is_leaf: bool = False
    prev_leaf: int = IX_NO_PAGE
    next_leaf: int = IX_NO_PAGE

    SIZE = _PAGE_HDR.size

    def to_bytes(self) -> bytes:
        return _PAGE_HDR.pack(
            self.next_free_page_no, self.parent, self.num_key, self.is_leaf, self.prev_leaf, self.next_leaf
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "IxPageHdr":
        """Read a node header from the start of a page buffer."""
        try:
            fields = _PAGE_HDR.unpack_from(data, 0)
        except struct.error as exc:
            raise ValueError(f"truncated page header: {exc}") from exc
        return cls(*fields)


@dataclass(frozen=True)
class Iid:
    """Position of an entry inside the index: node page and slot."""

    page_no: int
    slot_no: int