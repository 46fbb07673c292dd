from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterator, List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from errors import CookieError


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_cookie_date(value: str) -> Optional[datetime]:
    """Parse an ``Expires`` attribute, returning None when it is not a date."""
    value = value.strip()
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Cookie(BaseModel):
    name: str
    value: str
    domain: str
    path: str = "/"
    expires: Optional[datetime] = None
    secure: bool = False
    http_only: bool = False
    same_site: Optional[str] = None
    host_only: bool = False
    creation_time: datetime = Field(default_factory=_now)

    def __repr__(self):
        return f"Cookie(name='{self.name}', value='***REDACTED***', domain='{self.domain}', path='{self.path}')"

    @property
    def key(self):
        return (self.name, self.domain, self.path)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires is None:
            return False
        return self.expires < (now or _now())

    def matches_host(self, host: str) -> bool:
        if self.host_only:
            return host == self.domain
        return host == self.domain or host.endswith("." + self.domain)

    def matches_path(self, path: str) -> bool:
        return (path or "/").startswith(self.path)


class CookieJar:
    """In-memory session cookie store with RFC 6265 style matching.

    Writes rebuild the backing list and swap it in with a single assignment,
    so a concurrent reader always iterates over a complete snapshot.
    """

    def __init__(self, cookies: Optional[List[Cookie]] = None):
        self._cookies: List[Cookie] = list(cookies or [])

    def __iter__(self) -> Iterator[Cookie]:
        return iter(self._cookies)

    def __len__(self) -> int:
        return len(self._cookies)

    def store(self, cookie: Cookie) -> Cookie:
        kept = [c for c in self._cookies if c.key != cookie.key]
        kept.append(cookie)
        self._cookies = kept
        return cookie

    def ingest(self, set_cookie: str, origin_host: str) -> Cookie:
        """Parse one ``Set-Cookie`` header value and store the result."""
        parts = [p.strip() for p in set_cookie.split(";")]
        name, _, value = parts[0].partition("=")
        name = name.strip()
        if not name:
            raise CookieError(f"Set-Cookie header has no cookie name: {set_cookie!r}")

        attrs = {}
        for part in parts[1:]:
            if not part:
                continue
            key, _, attr_value = part.partition("=")
            attrs[key.strip().lower()] = attr_value.strip()

        domain = attrs.get("domain", "")
        if domain.startswith("."):
            domain = domain[1:]

        cookie = Cookie(
            name=name,
            value=value.strip(),
            domain=(domain or origin_host).lower(),
            path=attrs.get("path") or "/",
            expires=parse_cookie_date(attrs["expires"]) if "expires" in attrs else None,
            secure="secure" in attrs,
            http_only="httponly" in attrs,
            same_site=attrs.get("samesite"),
            host_only=not domain,
        )
        return self.store(cookie)

    def cookies_for(self, url: str) -> List[Cookie]:
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()
        now = _now()
        matched = []
        for cookie in self._cookies:
            if cookie.is_expired(now):
                continue
            if cookie.secure and parts.scheme != "https":
                continue
            if not cookie.matches_host(host):
                continue
            if not cookie.matches_path(parts.path):
                continue
            matched.append(cookie)
        return matched

    def header_for(self, url: str) -> Optional[str]:
        cookies = self.cookies_for(url)
        if not cookies:
            return None
        return "; ".join(f"{c.name}={c.value}" for c in cookies)

    def clear(self):
        self._cookies = []
