import struct

import pytest

from rmdb.keys import (
    IX_INIT_ROOT_PAGE,
    IX_LEAF_HEADER_PAGE,
    IX_NO_PAGE,
    ColType,
    Iid,
    IxFileHdr,
    IxPageHdr,
    compare_keys,
    compare_value,
    index_name,
)


def _i(v):
    return struct.pack("<i", v)


def _f(v):
    return struct.pack("<f", v)


@pytest.mark.parametrize(
    "a,b,expected",
    [(_i(1), _i(2), -1), (_i(5), _i(5), 0), (_i(7), _i(-3), 1)],
)
def test_compare_int(a, b, expected):
    assert compare_value(a, b, ColType.INT, 4) == expected


def test_compare_float():
    assert compare_value(_f(1.5), _f(2.5), ColType.FLOAT, 4) == -1
    assert compare_value(_f(2.5), _f(2.5), ColType.FLOAT, 4) == 0
    assert compare_value(_f(3.0), _f(-1.0), ColType.FLOAT, 4) == 1


def test_compare_string_uses_only_col_len():
    assert compare_value(b"abcX", b"abcY", ColType.STRING, 3) == 0
    assert compare_value(b"abd", b"abc", ColType.STRING, 3) == 1
    assert compare_value(b"ab\0", b"abc", ColType.STRING, 3) == -1


def test_compare_unknown_type():
    with pytest.raises(ValueError):
        compare_value(_i(1), _i(1), 9, 4)


def test_compare_keys_first_difference_decides():
    a = _i(1) + b"zz"
    b = _i(1) + b"aa"
    assert compare_keys(a, b, [ColType.INT, ColType.STRING], [4, 2]) == 1
    c = _i(0) + b"zz"
    assert compare_keys(c, b, [ColType.INT, ColType.STRING], [4, 2]) == -1
    assert compare_keys(a, a, [ColType.INT, ColType.STRING], [4, 2]) == 0


def test_compare_keys_length_mismatch():
    with pytest.raises(ValueError):
        compare_keys(_i(1), _i(1), [ColType.INT], [4, 4])


def test_index_name():
    assert index_name("orders", ["id", "name"]) == "orders_id_name.idx"
    assert index_name("t", []) == "t.idx"


def _header():
    hdr = IxFileHdr(
        col_types=[ColType.INT, ColType.STRING],
        col_lens=[4, 8],
        col_tot_len=12,
        btree_order=100,
        keys_size=101 * 12,
    )
    hdr.update_tot_len()
    return hdr


def test_file_header_round_trip():
    hdr = _header()
    data = hdr.to_bytes()
    assert len(data) == hdr.tot_len
    assert IxFileHdr.from_bytes(data + b"\0" * 50) == hdr


def test_file_header_tot_len_single_column():
    hdr = IxFileHdr(col_types=[ColType.INT], col_lens=[4], col_tot_len=4)
    hdr.update_tot_len()
    assert hdr.tot_len == 48
    assert hdr.col_num == 1


def test_file_header_leading_bytes():
    data = _header().to_bytes()
    tot_len, first_free, num_pages, root, col_num = struct.unpack_from("<5i", data)
    assert (first_free, num_pages, root, col_num) == (IX_NO_PAGE, 3, IX_INIT_ROOT_PAGE, 2)
    assert tot_len == len(data)


def test_file_header_stale_tot_len_rejected():
    hdr = _header()
    hdr.col_types.append(ColType.FLOAT)
    hdr.col_lens.append(4)
    with pytest.raises(ValueError):
        hdr.to_bytes()


def test_file_header_truncated():
    data = _header().to_bytes()
    with pytest.raises(ValueError):
        IxFileHdr.from_bytes(data[:10])


def test_file_header_inconsistent_length():
    data = bytearray(_header().to_bytes())
    struct.pack_into("<i", data, 0, 999)
    with pytest.raises(ValueError):
        IxFileHdr.from_bytes(bytes(data))


def test_page_header_round_trip():
    hdr = IxPageHdr(
        next_free_page_no=IX_NO_PAGE,
        parent=IX_NO_PAGE,
        num_key=0,
        is_leaf=True,
        prev_leaf=IX_LEAF_HEADER_PAGE,
        next_leaf=IX_LEAF_HEADER_PAGE,
    )
    data = hdr.to_bytes()
    assert len(data) == IxPageHdr.SIZE
    assert IxPageHdr.from_bytes(data + b"\0" * 100) == hdr


def test_page_header_layout():
    data = IxPageHdr(7, 3, 5, True, 1, 2).to_bytes()
    assert struct.unpack_from("<3i", data) == (7, 3, 5)
    assert data[12] == 1


def test_page_header_truncated():
    with pytest.raises(ValueError):
        IxPageHdr.from_bytes(b"\0" * 4)


def test_iid_equality():
    assert Iid(2, 3) == Iid(2, 3)
    assert not (Iid(2, 3) == Iid(2, 4))
    assert len({Iid(1, 1), Iid(1, 1), Iid(1, 2)}) == 2