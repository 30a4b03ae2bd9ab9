import threading

from minidb.config import INVALID_PAGE_ID, PAGE_SIZE
from minidb.page import Page


def test_fresh_page_state():
    page = Page()
    assert page.data == bytearray(PAGE_SIZE)
    assert page.page_id == INVALID_PAGE_ID
    assert page.pin_count == 0
    assert page.is_dirty is False


def test_lsn_round_trip_and_location():
    page = Page()
    page.lsn = -1
    assert page.lsn == -1
    page.lsn = 77
    assert page.lsn == 77
    assert page.data[Page.OFFSET_LSN] == 77
    assert page.data[:Page.OFFSET_LSN] == bytearray(Page.OFFSET_LSN)


def test_reset_memory_keeps_buffer_object():
    page = Page()
    buffer = page.data
    page.data[10] = 5
    page.lsn = 3
    page.reset_memory()
    assert page.data is buffer
    assert page.data == bytearray(PAGE_SIZE)


def test_write_latch_blocks_readers():
    page = Page()
    acquired = threading.Event()
    seen = []

    def reader():
        with page.read_latch():
            seen.append(page.data[0])
            acquired.set()

    with page.write_latch():
        thread = threading.Thread(target=reader, daemon=True)
        thread.start()
        assert not acquired.wait(0.1)
        assert seen == []
        page.data[0] = 9
    assert acquired.wait(2.0)
    thread.join()
    assert page.data[0] == 9
    assert seen == [page.data[0]]


def test_read_latches_are_shared():
    page = Page()
    page.lsn = 42
    acquired = threading.Event()
    seen = []

    def reader():
        with page.read_latch():
            seen.append(page.lsn)
            acquired.set()

    with page.read_latch():
        thread = threading.Thread(target=reader, daemon=True)
        thread.start()
        assert acquired.wait(2.0)
        assert page.lsn == 42
        assert seen == [page.lsn]
    thread.join()
    assert page.lsn == 42