"""
Name: Structured Logger Tests

Responsibilities:
  - JSON output with request context
  - Sensitive keys are redacted
  - Store logs never carry passwords
"""

import json
import logging

import pytest

from docauth.context import clear_context, set_request_context
from docauth.crosscutting.exceptions import AuthError
from docauth.crosscutting.logger import REDACTED, JSONFormatter

pytestmark = pytest.mark.unit


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="docauth",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_json_with_context():
    set_request_context(request_id="req-1", method="POST", path="/auth/login")
    try:
        line = JSONFormatter().format(_record(email="a@b.com"))
    finally:
        clear_context()

    payload = json.loads(line)
    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-1"
    assert payload["path"] == "/auth/login"
    assert payload["email"] == "a@b.com"


def test_redacts_sensitive_keys():
    line = JSONFormatter().format(
        _record(password="secret1", token="abc", meta={"password_hash": "$argon2"})
    )

    payload = json.loads(line)
    assert payload["password"] == REDACTED
    assert payload["token"] == REDACTED
    assert payload["meta"]["password_hash"] == REDACTED


def test_store_logs_do_not_contain_password(store, caplog):
    caplog.set_level(logging.INFO, logger="docauth")

    store.create_user(email="a@b.com", username="alice", password="hunter22")
    with pytest.raises(AuthError):
        store.authenticate("a@b.com", "wrongpass")

    assert caplog.records
    for record in caplog.records:
        assert "hunter22" not in record.getMessage()
        assert "wrongpass" not in record.getMessage()
        assert "hunter22" not in str(record.__dict__)
