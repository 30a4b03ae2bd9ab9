import pytest

from minidb.buffer_pool import BufferPoolManager
from minidb.config import DatabaseError
from minidb.disk_manager import DiskManager


@pytest.fixture
def disk(tmp_path):
    manager = DiskManager(tmp_path / "test.db")
    yield manager
    manager.close()


def test_new_pages_are_distinct_and_pinned(disk):
    bpm = BufferPoolManager(3, disk)
    pages = [bpm.new_page() for _ in range(3)]
    assert len({page.page_id for page in pages}) == 3
    assert all(page.pin_count == 1 for page in pages)
    with pytest.raises(DatabaseError):
        bpm.new_page()
    assert not bpm.check_all_unpinned()


def test_eviction_writes_back(disk):
    bpm = BufferPoolManager(2, disk)
    page = bpm.new_page()
    page_id = page.page_id
    page.data[:5] = b"hello"
    assert bpm.unpin_page(page_id, True)
    for _ in range(3):
        other = bpm.new_page()
        bpm.unpin_page(other.page_id, False)
    assert disk.read_page(page_id)[:5] == b"hello"
    fetched = bpm.fetch_page(page_id)
    assert bytes(fetched.data[:5]) == b"hello"
    assert fetched.pin_count == 1


def test_fetch_cached_page_pins_again(disk):
    bpm = BufferPoolManager(2, disk)
    page = bpm.new_page()
    again = bpm.fetch_page(page.page_id)
    assert again is page
    assert page.pin_count == 2
    assert bpm.unpin_page(page.page_id, False)
    assert bpm.unpin_page(page.page_id, False)
    assert not bpm.unpin_page(page.page_id, False)
    assert bpm.check_all_unpinned()


def test_unknown_page(disk):
    bpm = BufferPoolManager(2, disk)
    assert not bpm.unpin_page(99, False)
    assert not bpm.flush_page(99)


def test_fetch_negative_page_id(disk):
    bpm = BufferPoolManager(2, disk)
    with pytest.raises(ValueError):
        bpm.fetch_page(-1)


def test_flush_page(disk):
    bpm = BufferPoolManager(2, disk)
    page = bpm.new_page()
    page.data[:3] = b"abc"
    assert bpm.flush_page(page.page_id)
    assert not page.is_dirty
    assert disk.read_page(page.page_id)[:3] == b"abc"


def test_flush_all(disk):
    bpm = BufferPoolManager(3, disk)
    first = bpm.new_page()
    second = bpm.new_page()
    first.data[:1] = b"x"
    second.data[:1] = b"y"
    bpm.flush_all()
    assert disk.read_page(first.page_id)[:1] == b"x"
    assert disk.read_page(second.page_id)[:1] == b"y"


def test_delete_page(disk):
    bpm = BufferPoolManager(2, disk)
    page = bpm.new_page()
    page_id = page.page_id
    assert not bpm.is_page_free(page_id)
    assert not bpm.delete_page(page_id)
    bpm.unpin_page(page_id, False)
    assert bpm.delete_page(page_id)
    assert bpm.is_page_free(page_id)
    assert not bpm.unpin_page(page_id, False)