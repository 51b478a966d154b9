import json
import logging
import uuid

from app.core.logging import RequestIdFilter, StructuredJsonFormatter
from app.core.request_context import log_context, reset_request_id, set_request_id


def _format(message: str, **extra) -> dict:
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    RequestIdFilter().filter(record)
    return json.loads(StructuredJsonFormatter().format(record))


def test_log_record_carries_request_and_comic_ids():
    comic_id = uuid.uuid4()
    token = set_request_id("req-42")
    try:
        with log_context(comic_id=comic_id):
            payload = _format("comic_published", pages=3)
    finally:
        reset_request_id(token)

    assert payload["message"] == "comic_published"
    assert payload["request_id"] == "req-42"
    assert payload["comic_id"] == str(comic_id)
    assert payload["pages"] == 3
    assert "revision_id" not in payload


def test_context_is_cleared_after_block():
    with log_context(comic_id="c1", revision_id="r1"):
        pass
    payload = _format("request_complete")
    assert payload["request_id"] == "unknown"
    assert "comic_id" not in payload
    assert "revision_id" not in payload
