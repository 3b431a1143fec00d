"""Session cookie validation and policy normalization."""

from __future__ import annotations

import dataclasses
import math
import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence
from urllib.parse import urlparse

from customer_sync.errors import (
    ExpiredSessionError,
    MissingAuthCookieError,
    NoCookiesError,
    SessionRejectedError,
)

AUTH_COOKIE = "sid"
RENEW_WARNING_DAYS = 7
SECONDS_PER_DAY = 86400

SAME_SITE_VALUES = {"strict": "Strict", "lax": "Lax", "none": "None"}
DEFAULT_SAME_SITE = "Lax"

LOGIN_PATH_MARKERS = ("login", "signin", "auth")


@dataclass(slots=True, frozen=True)
class SessionCookie:
    name: str
    value: str
    domain: str
    path: str = "/"
    secure: bool = False
    http_only: bool = False
    same_site: str | None = None
    expires_at: float | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SessionCookie":
        expires = data.get("expirationDate", data.get("expires"))
        return cls(
            name=str(data.get("name") or ""),
            value=str(data.get("value") or ""),
            domain=str(data.get("domain") or ""),
            path=str(data.get("path") or "/"),
            secure=bool(data.get("secure", False)),
            http_only=bool(data.get("httpOnly", data.get("http_only", False))),
            same_site=data.get("sameSite", data.get("same_site")),
            expires_at=_parse_expiry(expires),
        )

    @property
    def has_expiry(self) -> bool:
        return self.expires_at is not None and self.expires_at > 0

    @property
    def expiry_unreadable(self) -> bool:
        return self.expires_at is not None and math.isnan(self.expires_at)

    def to_playwright(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
            "expires": self.expires_at if self.has_expiry else -1,
            "httpOnly": self.http_only,
            "secure": self.secure,
            "sameSite": normalize_same_site(self.same_site),
        }


def _parse_expiry(value: Any) -> float | None:
    # Unreadable expiries become NaN so validation can reject them.
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


@dataclass(slots=True, frozen=True)
class SessionStatus:
    valid: bool
    days_remaining: float

    @property
    def renew_soon(self) -> bool:
        return 0 < self.days_remaining <= RENEW_WARNING_DAYS


def parse_cookies(raw: Iterable[Any] | None) -> list[SessionCookie]:
    if not raw:
        return []
    return [SessionCookie.from_mapping(item) for item in raw if isinstance(item, Mapping)]


def validate(cookies: Sequence[SessionCookie] | None, *, now: float | None = None) -> SessionStatus:
    """Check that ``cookies`` still describe a usable merchant session.

    Raises NoCookiesError, MissingAuthCookieError or ExpiredSessionError.
    A status with ``renew_soon`` set is still valid; surfacing it is left to
    the caller.
    """
    if not cookies:
        raise NoCookiesError("No cookies found; store a 'cookies' record for this session")
    sid = next((c for c in cookies if c.name == AUTH_COOKIE), None)
    if sid is None:
        raise MissingAuthCookieError(f"Cookie '{AUTH_COOKIE}' is missing; capture the session again")
    if sid.expiry_unreadable:
        raise ExpiredSessionError(f"Cookie '{AUTH_COOKIE}' has an unreadable expiry; capture the session again")
    if not sid.has_expiry:
        return SessionStatus(valid=True, days_remaining=math.inf)
    current = time.time() if now is None else now
    days_remaining = (sid.expires_at - current) / SECONDS_PER_DAY
    if days_remaining <= 0:
        raise ExpiredSessionError("Session cookie has expired; capture the session again")
    return SessionStatus(valid=True, days_remaining=days_remaining)


def normalize_same_site(value: Any) -> str:
    if not isinstance(value, str):
        return DEFAULT_SAME_SITE
    return SAME_SITE_VALUES.get(value.strip().lower(), DEFAULT_SAME_SITE)


def sanitize_cookies(cookies: Iterable[SessionCookie]) -> list[SessionCookie]:
    """Return injectable copies: canonical sameSite, bare host domains."""
    sanitized: list[SessionCookie] = []
    for cookie in cookies:
        if not cookie.name or not cookie.domain:
            continue
        domain = cookie.domain[1:] if cookie.domain.startswith(".") else cookie.domain
        if not domain:
            continue
        sanitized.append(
            dataclasses.replace(
                cookie,
                domain=domain,
                same_site=normalize_same_site(cookie.same_site),
            )
        )
    return sanitized


def check_landing_url(url: str) -> None:
    path = urlparse(url).path.lower()
    if any(marker in path for marker in LOGIN_PATH_MARKERS):
        raise SessionRejectedError(f"Redirected to login page ({url}); cookies were rejected")
