"""MediaWiki Action API client.

Public Interface:
    - MediaWikiClient: session-keeping client (cookies, login state, defaults)

Example:
    >>> async with MediaWikiClient("https://en.wikipedia.org/w") as wiki:
    ...     await wiki.login("MyBot@task", "bot-password")
    ...     info = await wiki.user_info()
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import httpx

from auth.login import fetch_tokens, login as login_session, logout as logout_session
from common.config import ClientConfig, settings
from common.models.cookies import Cookie, CookieJar
from common.models.request import ApiRequest, RequestMethod
from common.models.user import User
from common.state import ClientState
from downloader.client import RequestDownloader
from errors import AuthError, ValidationError
from utils.params import filter_params


def _validate_query(options: Dict[str, Any]):
    """Reject parameter combinations the query module cannot satisfy."""
    has = {key for key, value in options.items() if value not in (None, False, "", [], ())}

    if "title" in has and "titles" in has:
        raise ValidationError('Use either "title" or "titles", not both.')
    if "titles" in has and "pageids" in has:
        raise ValidationError('Cannot use both "titles" and "pageids". Use only one identifier method.')
    if "titles" in has and "list" in has and not has & {"prop", "meta"}:
        raise ValidationError('"titles" provided but no "prop" or "meta" specified. Nothing to retrieve.')
    if "export" in has and "titles" not in has:
        raise ValidationError('"export" requires "titles" to be set.')
    if "indexpageids" in has and not has & {"titles", "pageids"}:
        raise ValidationError('"indexpageids" only works with "titles" or "pageids".')
    if "redirects" in has and not has & {"titles", "title", "pageids"}:
        raise ValidationError('"redirects" has no effect without "titles", "pageids", or "title".')
    if "prop" in has and not has & {"titles", "pageids"}:
        raise ValidationError('"prop" requires either "titles" or "pageids".')


class MediaWikiClient:
    """Client for one MediaWiki API endpoint.

    Args:
        base_url: ``api.php`` URL or the script path in front of it
            (``/api.php`` is appended when missing). Falls back to the
            configured ``client.base_url``.
        config: client settings; defaults to the loaded application settings
        http_client: preconfigured ``httpx.AsyncClient`` (e.g. on a mock
            transport); the caller keeps ownership of it
        **params: default API parameters overriding the configured ones
            (``format``, ``formatversion``, ``servedby``, ``curtimestamp``,
            ``responselanginfo``, ``requestid``, ``ascii``, ``utf8``)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        **params: Any,
    ):
        config = config or settings.client
        defaults = config.default_params()
        defaults.update(params)
        self.state = ClientState(base_url or config.base_url, params=defaults)
        self.downloader = RequestDownloader(
            client=http_client,
            timeout=config.timeout,
            user_agent=config.user_agent,
        )

    async def __aenter__(self) -> "MediaWikiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self.downloader.close()

    # -- session --------------------------------------------------------

    async def login(self, username: str, password: str) -> User:
        """Log in, preferably with BotPassword credentials (``User@botname``)."""
        return await login_session(self.downloader, self.state, username, password)

    async def logout(self) -> bool:
        return await logout_session(self.downloader, self.state)

    def is_authorized(self) -> bool:
        return self.state.authorized

    async def is_logged_in(self) -> bool:
        """Ask the server whether the current session belongs to a named user."""
        res = await self.user_info()
        userinfo = (res.get("query") or {}).get("userinfo") or {}
        return not userinfo.get("anon", False)

    @property
    def base_url(self) -> str:
        return self.state.base_url

    @property
    def cookie_jar(self) -> CookieJar:
        return self.state.cookie_jar

    def get_params(self) -> Dict[str, Any]:
        return dict(self.state.params)

    def get_cookies(self) -> List[Cookie]:
        return self.state.cookie_jar.cookies_for(self.state.base_url)

    def get_debug_info(self) -> Dict[str, Any]:
        return self.state.debug_info()

    # -- raw access -----------------------------------------------------

    async def request(
        self,
        params: Optional[Dict[str, Any]] = None,
        *,
        method: str = "GET",
        data: Optional[Dict[str, Any]] = None,
        content: Optional[Union[bytes, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        try:
            verb = RequestMethod(method.upper())
        except ValueError as e:
            raise ValidationError(f"unsupported HTTP method {method!r}", source=e) from e
        request = ApiRequest(url=self.state.base_url, method=verb, params=params or {})
        if headers:
            request.with_headers(headers)
        if content is not None:
            request.with_body(content)
        elif data is not None:
            request.with_form(data)
        return await self.downloader.dispatch(self.state, request)

    # -- query module ---------------------------------------------------

    async def query(
        self,
        *,
        titles: Optional[Sequence[str]] = None,
        title: Optional[str] = None,
        pageids: Optional[Sequence[int]] = None,
        prop: Optional[Sequence[str]] = None,
        list: Optional[Sequence[str]] = None,
        meta: Optional[Sequence[str]] = None,
        indexpageids: Optional[bool] = None,
        export: Optional[bool] = None,
        redirects: Optional[bool] = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        options = {
            "titles": titles,
            "title": title,
            "pageids": pageids,
            "prop": prop,
            "list": list,
            "meta": meta,
            "indexpageids": indexpageids,
            "export": export,
            "redirects": redirects,
        }
        _validate_query(options)
        # "title" only takes part in validation; the query module has no such parameter
        options.pop("title")
        params = filter_params({"action": "query", **options, **extra})
        return await self.request(params)

    async def get_token(self, types: Union[str, Iterable[str]] = "csrf") -> Dict[str, Any]:
        tokens = await fetch_tokens(self.downloader, self.state, types)
        if not tokens:
            raise AuthError("Failed to retrieve tokens: response has no query.tokens")
        return tokens

    async def user_info(self) -> Dict[str, Any]:
        return await self.query(meta=["userinfo"], uiprop="*")

    async def site_info(self) -> Dict[str, Any]:
        res = await self.query(meta=["siteinfo"], siprop=["general", "namespaces"])
        query = res.get("query") if isinstance(res, dict) else None
        self.state.site_info = query or None
        return res

    # -- site info accessors --------------------------------------------

    def _require_site_info(self) -> Dict[str, Any]:
        if self.state.site_info is None:
            raise ValidationError("site info not loaded; call site_info() first")
        return self.state.site_info

    def get_site_name(self) -> Optional[str]:
        general = self._require_site_info().get("general")
        if isinstance(general, dict) and isinstance(general.get("sitename"), str):
            return general["sitename"]
        return None

    def get_namespace_list(self) -> Optional[Dict[str, Any]]:
        return self._require_site_info().get("namespaces") or None

    def get_namespace_array(self) -> List[Dict[str, Any]]:
        namespaces = self._require_site_info().get("namespaces")
        if not isinstance(namespaces, dict):
            return []
        return [
            {"id": int(ns_id), "name": ns.get("name", ns.get("*")) if isinstance(ns, dict) else None}
            for ns_id, ns in namespaces.items()
        ]
