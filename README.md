# rmdb

Pieces of a small relational database, and an interactive client for
talking to a database server over a socket.

## Client

Install the package and start the shell:

```
pip install .
rmdb-client -h 127.0.0.1 -p 8765
```

Options:

- `-h HOST`: server host (default `127.0.0.1`)
- `-p PORT`: server port (default `8765`)
- `-s PATH`: connect through a Unix domain socket instead of TCP

At the `Rucbase> ` prompt, type a statement. Each non-empty line is sent to
the server followed by a NUL byte, and the reply, up to its first NUL byte, is
printed. Type `exit`, `exit;`, `bye` or `bye;` to leave, or send end-of-file.
The client stops as well when the server closes the connection. If the
connection cannot be made, the error goes to standard error and the command
exits with status 1.

The same pieces can be used from Python through `rmdb.client`:

- `connect_tcp(host, port)` and `connect_unix(path)` return a connected
  socket or raise `ConnectionError`.
- `read_reply(sock)` returns the text of one reply, or `None` when the peer
  has closed the connection.
- `run_session(sock, lines, out)` sends each non-empty line, writes the
  replies to `out` and returns the number of commands sent.
- `is_exit_command(command)` tells whether a line ends the session.
- `main(argv=None)` is the `rmdb-client` command.

## Library modules

- `rmdb.keys`: the column types (`ColType`), comparison of encoded values
  and composite index keys (`compare_value`, `compare_keys`), index file
  naming (`index_name`), the index file header `IxFileHdr` and node page
  header `IxPageHdr` with `to_bytes` / `from_bytes`, and `Iid` for index
  slot positions. Values are little-endian 32-bit integers and floats, and
  fixed-length byte strings.
- `rmdb.plan`: plan nodes (`ScanPlan`, `JoinPlan`, `ProjectionPlan`,
  `SortPlan`, `DMLPlan`, `DDLPlan`, `OtherPlan`, `SetKnobPlan`), `PlanTag`,
  column references (`TabCol`), column metadata (`Column`), `Condition`
  with `swap_sides`, `CompOp` with `swapped`, `find_column`, and the errors
  `DatabaseError`, `InternalError`, `ColumnNotFoundError` and
  `AmbiguousColumnError`.
- `rmdb.analyze`: resolves unqualified column names against table columns
  (`resolve_column`), checks that both sides of each condition share a type
  (`resolve_conditions`, raising `IncompatibleTypeError`), and expands an
  empty selection to all columns (`expand_selection`).
- `rmdb.planner`: `Planner` builds scan, join, sort and projection plans.
  It chooses an index scan when the equality-with-value conditions on a
  table name exactly the columns of an index, as reported by the
  `has_index(table, col_names)` callable it is given. The helpers
  `pop_conds`, `push_conds` and `pop_scan` are public as well. Join
  algorithms are chosen through the `enable_nestedloop_join` and
  `enable_sortmerge_join` attributes.
- `rmdb.execution`: renders encoded fields as text (`format_field`), formats
  a result line (`format_output_line`) and appends a header and rows to a
  file (`append_output`).

Example:

```python
from rmdb.plan import CompOp, Condition, TabCol
from rmdb.planner import Planner

planner = Planner(has_index=lambda table, cols: cols == ["id"])
plan = planner.plan_select(
    tables=["a"],
    conds=[Condition(TabCol("a", "id"), CompOp.EQ, rhs_val=1)],
    sel_cols=[TabCol("a", "id")],
)
# plan.subplan is a ProjectionPlan over an index scan of table "a"
```

## What the package does not do

There is no database server here, no SQL parser, no storage: no record
files, buffer pool or B+ tree operations beyond the header layouts and key
comparison, and no executors that run a plan. The client needs a server
that speaks its NUL-terminated protocol.

## Tests

```
pip install .[test]
pytest
```