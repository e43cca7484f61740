"""
Tests for configuration validation and the database lock retry decorator.
"""

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from datajeopardy.config import Settings
from datajeopardy.decorators import retry_on_db_lock
from datajeopardy.exceptions import TransactionException


class TestSettings:

    def test_default_threshold(self, monkeypatch):
        monkeypatch.delenv("AUTO_LOCK_RISK_THRESHOLD", raising=False)
        assert Settings(_env_file=None).AUTO_LOCK_RISK_THRESHOLD == 60

    def test_threshold_from_env(self, monkeypatch):
        monkeypatch.setenv("AUTO_LOCK_RISK_THRESHOLD", "45")
        assert Settings(_env_file=None).AUTO_LOCK_RISK_THRESHOLD == 45

    def test_threshold_out_of_range(self, monkeypatch):
        monkeypatch.setenv("AUTO_LOCK_RISK_THRESHOLD", "150")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)


def _locked_error():
    return OperationalError("UPDATE user_accounts", {}, Exception("database is locked"))


class TestRetryOnDbLock:

    def test_retries_wrapped_lock_error(self):
        calls = []

        @retry_on_db_lock(max_retries=2, delay=0)
        def write():
            calls.append(1)
            if len(calls) < 3:
                raise TransactionException("write failed") from _locked_error()
            return "done"

        assert write() == "done"
        assert len(calls) == 3

    def test_gives_up_after_max_retries(self):
        calls = []

        @retry_on_db_lock(max_retries=1, delay=0)
        def write():
            calls.append(1)
            raise _locked_error()

        with pytest.raises(OperationalError):
            write()
        assert len(calls) == 2

    def test_other_errors_not_retried(self):
        calls = []

        @retry_on_db_lock(max_retries=3, delay=0)
        def write():
            calls.append(1)
            raise TransactionException("constraint failed")

        with pytest.raises(TransactionException):
            write()
        assert len(calls) == 1
