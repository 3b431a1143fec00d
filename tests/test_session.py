import math

import pytest

from customer_sync.errors import ExpiredSessionError, MissingAuthCookieError, NoCookiesError, SessionRejectedError
from customer_sync.session.cookies import (
    SessionCookie,
    check_landing_url,
    normalize_same_site,
    parse_cookies,
    sanitize_cookies,
    validate,
)

NOW = 1_700_000_000.0
DAY = 86400


def sid(expires_at=None, **kwargs):
    return SessionCookie(name="sid", value="v", domain=".ubereats.com", expires_at=expires_at, **kwargs)


def test_validate_requires_cookies():
    with pytest.raises(NoCookiesError):
        validate([], now=NOW)
    with pytest.raises(NoCookiesError):
        validate(None, now=NOW)


def test_validate_requires_sid():
    cookies = [SessionCookie(name="other", value="v", domain="ubereats.com", expires_at=NOW + 30 * DAY)]
    with pytest.raises(MissingAuthCookieError):
        validate(cookies, now=NOW)


@pytest.mark.parametrize("offset", [0, -1, -10 * DAY])
def test_validate_expired(offset):
    with pytest.raises(ExpiredSessionError):
        validate([sid(NOW + offset)], now=NOW)


def test_validate_renew_window():
    status = validate([sid(NOW + 3 * DAY)], now=NOW)
    assert status.valid
    assert status.renew_soon
    assert status.days_remaining == pytest.approx(3)

    edge = validate([sid(NOW + 7 * DAY)], now=NOW)
    assert edge.renew_soon

    half_day = validate([sid(NOW + DAY / 2)], now=NOW)
    assert half_day.renew_soon


def test_validate_healthy_session():
    status = validate([sid(NOW + 30 * DAY)], now=NOW)
    assert status.valid
    assert not status.renew_soon


def test_validate_without_expiry():
    status = validate([sid(None)], now=NOW)
    assert status.days_remaining == math.inf
    assert not status.renew_soon
    # A non-positive expiry marks a browser-session cookie.
    assert validate([sid(0)], now=NOW).days_remaining == math.inf


def test_validate_only_checks_sid_expiry():
    cookies = [
        sid(NOW + 30 * DAY),
        SessionCookie(name="tracking", value="v", domain="ubereats.com", expires_at=NOW - DAY),
    ]
    assert validate(cookies, now=NOW).valid


@pytest.mark.parametrize("value", ["no_restriction", "", None, "garbage", "unspecified"])
def test_same_site_defaults_to_lax(value):
    assert normalize_same_site(value) == "Lax"


@pytest.mark.parametrize(
    "value,expected",
    [("Strict", "Strict"), ("strict", "Strict"), ("LAX", "Lax"), ("none", "None"), ("None", "None")],
)
def test_same_site_canonical(value, expected):
    assert normalize_same_site(value) == expected


def test_parse_cookies_reads_extension_format(raw_cookies):
    cookies = parse_cookies(raw_cookies + ["not-a-cookie"])
    assert len(cookies) == 3
    first = cookies[0]
    assert first.name == "sid"
    assert first.http_only is True
    assert first.same_site == "no_restriction"
    assert first.expires_at == raw_cookies[0]["expirationDate"]
    assert cookies[1].path == "/"
    assert cookies[1].expires_at is None


def test_parse_cookies_reads_playwright_format():
    (cookie,) = parse_cookies([{"name": "sid", "value": "v", "domain": "a.com", "expires": 123.0}])
    assert cookie.expires_at == 123.0
    assert parse_cookies(None) == []


def test_parse_cookies_reads_string_expiry():
    (cookie,) = parse_cookies([{"name": "sid", "value": "v", "domain": "a.com", "expirationDate": str(NOW - DAY)}])
    assert cookie.expires_at == NOW - DAY
    with pytest.raises(ExpiredSessionError):
        validate([cookie], now=NOW)


@pytest.mark.parametrize("value", ["next week", True, {"seconds": 1}])
def test_validate_rejects_unreadable_expiry(value):
    (cookie,) = parse_cookies([{"name": "sid", "value": "v", "domain": "a.com", "expirationDate": value}])
    assert cookie.expiry_unreadable
    assert cookie.to_playwright()["expires"] == -1
    with pytest.raises(ExpiredSessionError):
        validate([cookie], now=NOW)


def test_sanitize_strips_domain_and_drops_incomplete(raw_cookies):
    cookies = parse_cookies(raw_cookies)
    sanitized = sanitize_cookies(cookies)
    assert [c.name for c in sanitized] == ["sid", "jwt-session"]
    assert sanitized[0].domain == "ubereats.com"
    assert sanitized[0].same_site == "Lax"
    assert sanitized[1].same_site == "Lax"
    # Inputs are left untouched.
    assert cookies[0].domain == ".ubereats.com"
    assert cookies[0].same_site == "no_restriction"


def test_sanitize_drops_missing_name():
    cookies = [SessionCookie(name="", value="v", domain="example.com"), sid(None)]
    sanitized = sanitize_cookies(cookies)
    assert [c.name for c in sanitized] == ["sid"]


def test_to_playwright():
    cookie = sanitize_cookies([sid(None, same_site="strict")])[0]
    payload = cookie.to_playwright()
    assert payload["expires"] == -1
    assert payload["domain"] == "ubereats.com"
    assert payload["sameSite"] == "Strict"
    assert sid(NOW).to_playwright()["expires"] == NOW


@pytest.mark.parametrize(
    "url",
    [
        "https://merchants.ubereats.com/login?next=/manager",
        "https://auth.uber.com/v2/signin",
        "https://merchants.ubereats.com/oauth/callback",
        "https://merchants.ubereats.com/LOGIN",
    ],
)
def test_check_landing_url_rejects_login_pages(url):
    with pytest.raises(SessionRejectedError):
        check_landing_url(url)


def test_check_landing_url_accepts_dashboard():
    check_landing_url(
        "https://merchants.ubereats.com/manager/home/S1/analytics/customers/?dateRangePreset=last_12_weeks"
    )
