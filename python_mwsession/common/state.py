from typing import Any, Dict, Optional
from urllib.parse import urlsplit

from errors import ConfigError
from .models.cookies import CookieJar

API_SCRIPT = "/api.php"


def normalize_base_url(base_url: Optional[str]) -> str:
    if not base_url:
        raise ConfigError("base_url is required")
    base_url = base_url.strip()
    if base_url.endswith(API_SCRIPT):
        return base_url
    return base_url.rstrip("/") + API_SCRIPT


class ClientState:
    """Everything one client instance remembers between calls.

    The pipeline and the auth helpers are stateless and receive this record
    explicitly; nothing here is shared between client instances.
    """

    def __init__(self, base_url: str, params: Optional[Dict[str, Any]] = None, cookie_jar: Optional[CookieJar] = None):
        self.base_url: str = normalize_base_url(base_url)
        self.params: Dict[str, Any] = dict(params or {})
        self.cookie_jar: CookieJar = cookie_jar if cookie_jar is not None else CookieJar()
        self.authorized: bool = False
        self.site_info: Optional[Dict[str, Any]] = None

        if self.params.get("format", "json") != "json":
            raise ConfigError(
                f'Expected "json" format but got "{self.params["format"]}"; only JSON responses are supported'
            )

    @property
    def host(self) -> str:
        return (urlsplit(self.base_url).hostname or "").lower()

    def debug_info(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "params": dict(self.params),
            "authorized": self.authorized,
            "cookies": self.cookie_jar.cookies_for(self.base_url),
        }
