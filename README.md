# minidb

minidb is a small relational storage engine built from fixed-size 4096-byte
pages. It is a library and has no command-line program. It has no
dependencies outside the standard library.

## What it contains

- `minidb.config`: engine constants such as `PAGE_SIZE` and `INVALID_PAGE_ID`.
  It also has the `ErrorCode` enum and `DatabaseError`, which carries one of
  those codes.
- `minidb.rowid`: `RowId` (a page id plus a slot number), with `from_int` and
  `as_int` to convert to and from the packed 64-bit form, and `INVALID_ROWID`.
- `minidb.rwlatch`: `ReaderWriterLatch`, a reader-writer latch that favours
  writers. It has `acquire_read` / `release_read`, `acquire_write` /
  `release_write`, and the context managers `read_locked()` and
  `write_locked()`.
- `minidb.bitmap_page`: `BitmapPage`, the free-page bitmap for one extent.
- `minidb.disk_manager`: `DiskManager`, which reads, writes, allocates and
  frees the logical pages of one database file. `DiskFileMetaPage` is the
  allocation summary kept in physical page 0. The file layout is
  `| meta | bitmap 1 | pages 1..N | bitmap 2 | pages N+1..2N | ...`.
  `DiskManager` is a context manager. `close()` writes the meta page and then
  closes the file.
- `minidb.page`: `Page`, an in-memory frame. It holds a `bytearray` of data,
  the page id, a pin count, a dirty flag, and `read_latch()` / `write_latch()`.
- `minidb.replacer`: the `Replacer` interface (`victim`, `pin`, `unpin`,
  `len()`) and two implementations, `LRUReplacer` and `ClockReplacer`.
- `minidb.buffer_pool`: `BufferPoolManager`, which caches pages in a fixed
  number of frames and evicts unpinned frames in LRU order. Its methods are
  `fetch_page`, `new_page`, `unpin_page`, `flush_page`, `flush_all`,
  `delete_page`, `is_page_free` and `check_all_unpinned`.
- `minidb.types`: `TypeId` (INT, FLOAT, CHAR), `CmpBool` (a three-valued
  comparison result) and `Field`, a typed value in which `None` means NULL.
  `Field` has `compare_*` methods and binary `serialize` / `deserialize`.
- `minidb.schema`: `Column` and `Schema`, both with binary encoding. `Schema`
  also has `column_index`, `shallow_copy` and `deep_copy`.
- `minidb.row`: `Row`, a list of fields plus a `row_id`. Its encoding is a
  field count, then a null bitmap, then the fields. `key_from_row` projects a
  row onto a key schema.
- `minidb.table_page`: `TablePage`, a slotted-page view over a `Page`. It
  supports insert, in-place update, mark/apply/rollback delete and slot
  iteration.
- `minidb.table_heap`: `TableHeap`, a table stored as a chain of table pages,
  and `TableIterator`, which walks the live rows of a table.
- `minidb.expressions`: `ColumnValueExpression`, `ConstantValueExpression`,
  `ComparisonExpression` (`=`, `<>`, `<`, `<=`, `>`, `>=`, `is`, `not`) and
  `LogicExpression` (AND / OR with three-valued logic). Each one is evaluated
  against a row with `evaluate` or against a pair of rows with
  `evaluate_join`.
- `minidb.result_writer`: `ResultWriter`, which writes bordered result tables
  and the summary lines `"N row in set"`, `"Empty set"` and
  `"Query OK, N row affected"` to a text stream.

## Example

```python
from minidb.buffer_pool import BufferPoolManager
from minidb.disk_manager import DiskManager
from minidb.row import Row
from minidb.schema import Column, Schema
from minidb.table_heap import TableHeap
from minidb.types import Field, TypeId

with DiskManager("data/example.db") as disk:
    pool = BufferPoolManager(64, disk)
    schema = Schema([
        Column("id", TypeId.INT, table_ind=0),
        Column("name", TypeId.CHAR, length=32, table_ind=1),
    ])
    heap = TableHeap.create(pool, schema)
    rid = heap.insert_tuple(Row([Field(TypeId.INT, 1), Field(TypeId.CHAR, "alice")]))
    print(heap.get_tuple(rid).fields[1])  # alice
    for row in heap:
        print([str(value) for value in row.fields])
    pool.flush_all()
```

`DiskManager` creates the file, and any missing parent directories, if it does
not exist. The buffer pool writes pages to disk only when it evicts them or
when `flush_page` or `flush_all` is called. Call `flush_all()` before the disk
manager closes.

Errors are raised as Python exceptions. Engine conditions, such as a full
buffer pool, a full file or an unknown column name, raise
`minidb.config.DatabaseError` with an `ErrorCode`. Bad arguments raise
`ValueError`, `TypeError` or `IndexError`.

## What it does not do

minidb is a storage layer only. It has none of the following:

- an SQL parser, planner or query executor
- a catalog of tables or indexes
- B+ tree or other indexes
- transactions, locking or a write-ahead log
- a server or an interactive shell

To read a table back after reopening a file, you must keep the table's first
page id and its `Schema` yourself, then call `TableHeap.open(pool, first_page_id, schema)`.

## Running the tests

```
pip install -e .[test]
pytest
```