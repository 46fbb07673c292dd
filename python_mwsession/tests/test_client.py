import httpx
import pytest

from api.client import MediaWikiClient
from common.config import ClientConfig
from errors import AuthError, ConfigError, ValidationError


def make_client(handler, base_url="https://wiki.example.org/w", **params):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return MediaWikiClient(base_url, config=ClientConfig(), http_client=http_client, **params)


def not_called(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


@pytest.mark.parametrize("base_url, expected", [
    ("https://wiki.example.org/w", "https://wiki.example.org/w/api.php"),
    ("https://wiki.example.org/w/", "https://wiki.example.org/w/api.php"),
    ("https://wiki.example.org/w/api.php", "https://wiki.example.org/w/api.php"),
])
def test_base_url_is_normalized(base_url, expected):
    assert make_client(not_called, base_url=base_url).base_url == expected


def test_missing_base_url_is_config_error():
    with pytest.raises(ConfigError):
        MediaWikiClient(None, config=ClientConfig(base_url=None))


def test_non_json_format_is_rejected():
    with pytest.raises(ConfigError, match="json"):
        make_client(not_called, format="xml")


def test_default_params_and_overrides():
    client = make_client(not_called, formatversion=1, curtimestamp=True)
    params = client.get_params()

    assert params["format"] == "json"
    assert params["formatversion"] == 1
    assert params["curtimestamp"] is True

    params["format"] = "php"
    assert client.get_params()["format"] == "json"


def test_initial_state():
    client = make_client(not_called)

    assert client.is_authorized() is False
    assert client.get_cookies() == []
    info = client.get_debug_info()
    assert info["base_url"] == "https://wiki.example.org/w/api.php"
    assert info["authorized"] is False


@pytest.mark.parametrize("options", [
    {"title": "A", "titles": ["B"]},
    {"titles": ["A"], "pageids": [1]},
    {"titles": ["A"], "list": ["allpages"]},
    {"export": True},
    {"indexpageids": True},
    {"redirects": True},
    {"prop": ["info"]},
])
@pytest.mark.asyncio
async def test_query_rejects_invalid_combinations_before_network(options):
    client = make_client(not_called)

    with pytest.raises(ValidationError):
        await client.query(**options)


@pytest.mark.asyncio
async def test_query_sends_joined_values():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"batchcomplete": True, "query": {"pages": []}})

    client = make_client(handler)
    await client.query(titles=["Main Page", "Sandbox"], prop=["info", "revisions"], redirects=True)

    params = seen[0].url.params
    assert params["action"] == "query"
    assert params["titles"] == "Main Page|Sandbox"
    assert params["prop"] == "info|revisions"
    assert params["redirects"] == "1"
    assert "title" not in params


@pytest.mark.asyncio
async def test_site_info_accessors():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["meta"] == "siteinfo"
        return httpx.Response(200, json={
            "batchcomplete": True,
            "query": {
                "general": {"sitename": "TestWiki"},
                "namespaces": {
                    "0": {"id": 0, "name": ""},
                    "1": {"id": 1, "name": "Talk"},
                },
            },
        })

    client = make_client(handler)
    with pytest.raises(ValidationError):
        client.get_site_name()

    await client.site_info()

    assert client.get_site_name() == "TestWiki"
    assert set(client.get_namespace_list()) == {"0", "1"}
    assert client.get_namespace_array() == [{"id": 0, "name": ""}, {"id": 1, "name": "Talk"}]


@pytest.mark.asyncio
async def test_site_info_without_namespaces():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"query": {"general": {}}})

    client = make_client(handler)
    await client.site_info()

    assert client.get_site_name() is None
    assert client.get_namespace_list() is None
    assert client.get_namespace_array() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("userinfo, expected", [
    ({"id": 0, "name": "127.0.0.1", "anon": True}, False),
    ({"id": 5, "name": "Bot"}, True),
])
async def test_is_logged_in(userinfo, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["meta"] == "userinfo"
        return httpx.Response(200, json={"query": {"userinfo": userinfo}})

    client = make_client(handler)
    assert await client.is_logged_in() is expected


@pytest.mark.asyncio
async def test_get_token_joins_types():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"query": {"tokens": {"csrftoken": "c+\\", "watchtoken": "w+\\"}}})

    client = make_client(handler)
    tokens = await client.get_token(["csrf", "watch"])

    assert tokens["csrftoken"] == "c+\\"
    assert seen[0].url.params["type"] == "csrf|watch"


@pytest.mark.asyncio
async def test_get_token_without_tokens_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"batchcomplete": True})

    client = make_client(handler)
    with pytest.raises(AuthError):
        await client.get_token()


@pytest.mark.asyncio
async def test_login_logout_roundtrip_keeps_cookies():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        body = request.content.decode()
        if request.method == "GET":
            kind = request.url.params["type"]
            token = {"login": {"logintoken": "L+\\"}, "csrf": {"csrftoken": "C+\\"}}[kind]
            return httpx.Response(200, json={"query": {"tokens": token}},
                                  headers={"Set-Cookie": "wiki_session=s1; Path=/; Secure; HttpOnly"})
        if "action=login" in body:
            return httpx.Response(200, json={"login": {"result": "Success", "lguserid": 3, "lgusername": "Bot"}},
                                  headers={"Set-Cookie": "wikiUserID=3; Domain=.example.org; Path=/"})
        return httpx.Response(200, json={})

    async with make_client(handler) as client:
        user = await client.login("Bot@task", "pw")
        assert user.user_name == "Bot"
        assert client.is_authorized()
        assert [c.name for c in client.get_cookies()] == ["wiki_session", "wikiUserID"]

        assert await client.logout() is True
        assert not client.is_authorized()

    # the csrf lookup re-set wiki_session, which moves it to the end of the jar
    assert calls[-1].headers["cookie"] == "wikiUserID=3; wiki_session=s1"


@pytest.mark.asyncio
async def test_request_accepts_lowercase_method():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    client = make_client(handler)
    assert await client.request({"action": "purge", "titles": "A"}, method="post") == {"ok": True}
    assert seen[0].method == "POST"
    assert "titles=A" in seen[0].content.decode()


@pytest.mark.asyncio
async def test_request_rejects_unknown_method():
    client = make_client(not_called)

    with pytest.raises(ValidationError, match="DELETE"):
        await client.request({"action": "query"}, method="DELETE")
