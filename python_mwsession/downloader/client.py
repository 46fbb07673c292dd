import httpx
import logging
import time
from typing import Any, Dict, Optional
from common.config import settings
from common.models.headers import Headers
from common.models.request import ApiRequest, RequestMethod
from common.state import ClientState
from errors import ApiError, CookieError, ResponseDecodeError, TransportError
from utils.params import encode_params, merge_params

logger = logging.getLogger(__name__)


class RequestDownloader:
    """Single choke point for every API call.

    Cookies are handled by the client's own ``CookieJar`` only: requests are
    built directly rather than through ``AsyncClient.build_request`` so httpx
    never merges its internal cookie store into them.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.client.timeout
        self.user_agent = user_agent or settings.client.user_agent
        self._owns_client = client is None
        self.client = client or self._create_client()

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, follow_redirects=False)

    def _build_request(self, state: ClientState, request: ApiRequest) -> httpx.Request:
        params = encode_params(merge_params(state.params, request.params))
        headers = Headers.from_dict(request.headers.to_dict())
        if not headers.contains("User-Agent"):
            headers.add("User-Agent", self.user_agent)

        query: Optional[Dict[str, str]] = None
        form: Optional[Dict[str, str]] = None
        content = None
        if request.method == RequestMethod.GET:
            query = params
        elif request.is_form:
            form = dict(params)
            form.update(encode_params(request.data or {}))
        else:
            query = params
            content = request.content

        cookie_header = state.cookie_jar.header_for(state.base_url)
        headers.remove("Cookie")
        if cookie_header:
            headers.add("Cookie", cookie_header)

        return httpx.Request(
            request.method.value,
            request.url,
            params=query,
            headers=headers.to_dict(),
            data=form,
            content=content,
            extensions={"timeout": httpx.Timeout(self.timeout).as_dict()},
        )

    def _store_cookies(self, state: ClientState, response: httpx.Response):
        for header in response.headers.get_list("set-cookie"):
            try:
                state.cookie_jar.ingest(header, state.host)
            except CookieError as e:
                logger.warning(f"Ignoring malformed Set-Cookie header: {e}")

    async def dispatch(self, state: ClientState, request: ApiRequest) -> Any:
        httpx_req = self._build_request(state, request)
        action = request.params.get("action") or (request.data or {}).get("action")
        log_extra = {"request_id": request.id, "action": action}
        if logger.isEnabledFor(logging.DEBUG):
            sent_headers = Headers.from_dict(dict(httpx_req.headers)).redacted()
            logger.debug(f"Dispatching {httpx_req.method} {httpx_req.url} headers={sent_headers}", extra=log_extra)

        start_time = time.time()
        try:
            resp = await self.client.send(httpx_req, follow_redirects=False)
        except httpx.TransportError as e:
            logger.warning(f"{httpx_req.method} {request.url} failed: {e!r}", extra=log_extra)
            raise TransportError(f"{httpx_req.method} {request.url} failed", source=e) from e

        self._store_cookies(state, resp)

        response_time_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"Received {resp.status_code} in {response_time_ms}ms", extra={**log_extra, "status": resp.status_code})

        text = resp.text
        if not resp.is_success:
            try:
                data = resp.json()
            except ValueError:
                data = None
            raise ApiError(resp.status_code, text, data)

        try:
            return resp.json()
        except ValueError as e:
            raise ResponseDecodeError(
                f"Expected a JSON body from {request.url} (status {resp.status_code})", source=e
            ) from e

    async def close(self):
        if self._owns_client:
            await self.client.aclose()
