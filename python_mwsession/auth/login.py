"""Login/logout handshake for the MediaWiki Action API.

Login is two-phase: fetch a ``login`` token, then post the credentials with
it. Some servers answer the first attempt with ``NeedToken`` and a fresh
challenge token; the attempt is repeated exactly once with that token.
"""
import json
import logging
from typing import Any, Dict, Iterable, Union

from common.models.request import ApiRequest
from common.models.user import User
from common.state import ClientState
from downloader.client import RequestDownloader
from errors import AuthError, LoginFailedError

logger = logging.getLogger(__name__)

NEED_TOKEN = "NeedToken"
SUCCESS = "Success"


async def fetch_tokens(
    downloader: RequestDownloader,
    state: ClientState,
    types: Union[str, Iterable[str]],
) -> Dict[str, Any]:
    """Return the ``query.tokens`` object for the requested token types."""
    request = ApiRequest(
        url=state.base_url,
        params={"action": "query", "meta": "tokens", "type": types if isinstance(types, str) else list(types)},
    )
    res = await downloader.dispatch(state, request)
    tokens = (res.get("query") or {}).get("tokens") if isinstance(res, dict) else None
    return tokens if isinstance(tokens, dict) else {}


async def _attempt_login(
    downloader: RequestDownloader,
    state: ClientState,
    username: str,
    password: str,
    token: str,
) -> Dict[str, Any]:
    request = ApiRequest(url=state.base_url).with_form(
        {"action": "login", "lgname": username, "lgpassword": password, "lgtoken": token}
    )
    res = await downloader.dispatch(state, request)
    return res if isinstance(res, dict) else {}


def _login_section(res: Dict[str, Any]) -> Dict[str, Any]:
    section = res.get("login")
    return section if isinstance(section, dict) else {}


async def login(downloader: RequestDownloader, state: ClientState, username: str, password: str) -> User:
    tokens = await fetch_tokens(downloader, state, "login")
    token = tokens.get("logintoken")
    if not token:
        raise AuthError("missing login token")

    res = await _attempt_login(downloader, state, username, password, token)

    if _login_section(res).get("result") == NEED_TOKEN:
        challenge = _login_section(res).get("token")
        if not challenge:
            raise AuthError("missing challenge token")
        logger.info(f"Login for {username} answered {NEED_TOKEN}; retrying with challenge token")
        res = await _attempt_login(downloader, state, username, password, challenge)

    details = _login_section(res)
    result = details.get("result")
    if result != SUCCESS:
        raise LoginFailedError(result, details.get("reason"), res)

    if details.get("lguserid") is None or not details.get("lgusername"):
        raise AuthError("login response missing user identity")
    user = User(user_id=details["lguserid"], user_name=details["lgusername"])
    state.authorized = True
    logger.info(f"Logged in as {user.user_name} (id {user.user_id})")
    return user


async def logout(downloader: RequestDownloader, state: ClientState) -> bool:
    if not state.authorized:
        raise AuthError("You are not authorized.")

    tokens = await fetch_tokens(downloader, state, "csrf")
    token = tokens.get("csrftoken")
    if not token:
        raise AuthError("missing csrf token")

    request = ApiRequest(url=state.base_url).with_form({"action": "logout", "token": token})
    res = await downloader.dispatch(state, request)
    if isinstance(res, dict) and res.get("error"):
        raise AuthError(f"Logout failed: {json.dumps(res)}")

    state.authorized = False
    logger.info("Logged out")
    return True
