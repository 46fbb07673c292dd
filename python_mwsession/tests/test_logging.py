import json
import logging
import sys

import httpx
import pytest

from common.models.headers import HeaderItem, Headers
from common.models.request import ApiRequest
from common.state import ClientState
from downloader.client import RequestDownloader
from utils.logger import JsonFormatter, setup_logging

BASE_URL = "https://wiki.example.org/w/api.php"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_writes_json_to_stderr(restore_root_logger):
    setup_logging(level="debug", format_type="json", client_name="bot")

    (handler,) = restore_root_logger.handlers
    assert handler.stream is sys.stderr
    assert isinstance(handler.formatter, JsonFormatter)
    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


def test_json_formatter_includes_call_fields():
    record = logging.LogRecord("downloader.client", logging.DEBUG, __file__, 1, "Received %s", (200,), None)
    record.request_id = "0190-abc"
    record.action = "login"
    record.status = 200

    entry = json.loads(JsonFormatter(client_name="bot").format(record))

    assert entry["message"] == "Received 200"
    assert entry["client"] == "bot"
    assert entry["request_id"] == "0190-abc"
    assert entry["action"] == "login"
    assert entry["status"] == 200


def test_json_formatter_omits_absent_call_fields():
    record = logging.LogRecord("auth.login", logging.INFO, __file__, 1, "Logged out", (), None)
    entry = json.loads(JsonFormatter().format(record))

    assert "request_id" not in entry
    assert "action" not in entry
    assert "status" not in entry


def test_cookie_headers_keep_names_only():
    assert HeaderItem(key="Cookie", value="wiki_session=s1; wikiUserID=3").redacted_value() == (
        "wiki_session=***; wikiUserID=***"
    )
    assert HeaderItem(key="Set-Cookie", value="wiki_session=s1; Path=/; HttpOnly").redacted_value() == (
        "wiki_session=***"
    )
    item = HeaderItem(key="Authorization", value="Bearer abc")
    assert "abc" not in repr(item)
    assert Headers.from_dict({"User-Agent": "bot/1.0"}).redacted() == {"User-Agent": "bot/1.0"}


@pytest.mark.asyncio
async def test_dispatch_logs_action_status_and_redacted_cookies(caplog):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    downloader = RequestDownloader(client=client, timeout=5.0, user_agent="mwsession-tests")
    state = ClientState(BASE_URL, params={"format": "json"})
    state.cookie_jar.ingest("wiki_session=secret-value", "wiki.example.org")

    caplog.set_level(logging.DEBUG, logger="downloader.client")
    request = ApiRequest(url=BASE_URL).with_form({"action": "logout", "token": "t"})
    await downloader.dispatch(state, request)

    records = [r for r in caplog.records if r.name == "downloader.client"]
    assert all(r.action == "logout" for r in records)
    assert all(r.request_id == request.id for r in records)
    assert [r.status for r in records if hasattr(r, "status")] == [200]
    assert "wiki_session=***" in caplog.text
    assert "secret-value" not in caplog.text
