import pytest

from minidb.config import DatabaseError, ErrorCode


def test_error_codes_follow_declared_order():
    assert ErrorCode.SUCCESS == 0
    assert ErrorCode(5) is ErrorCode.TABLE_NOT_EXIST
    assert list(ErrorCode)[-1] is ErrorCode.QUIT


def test_database_error_carries_code_and_message():
    err = DatabaseError(ErrorCode.KEY_NOT_FOUND, "no such key")
    assert isinstance(err, Exception)
    assert err.code is ErrorCode.KEY_NOT_FOUND
    assert str(err) == "no such key"


def test_database_error_default_message_from_code():
    err = DatabaseError(ErrorCode.TABLE_ALREADY_EXIST)
    assert err.message == "table already exist"


def test_database_error_accepts_plain_int_code():
    err = DatabaseError(int(ErrorCode.INDEX_NOT_FOUND), "missing")
    assert err.code is ErrorCode.INDEX_NOT_FOUND


def test_database_error_rejects_unknown_code():
    with pytest.raises(ValueError):
        DatabaseError(999, "bad")