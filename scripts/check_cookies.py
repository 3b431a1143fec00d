"""Report whether the stored session cookies are still usable."""

from __future__ import annotations

import asyncio
import sys

from dotenv import load_dotenv

from customer_sync.config import RunSettings, resolve_store
from customer_sync.errors import SessionError
from customer_sync.jobs.sync import build_cookie_source
from customer_sync.session.cookies import parse_cookies, sanitize_cookies, validate


async def check(store_id: str | None) -> int:
    store = resolve_store(store_id)
    source = build_cookie_source(RunSettings.from_env())
    try:
        raw = await source.load(store.cookie_store_id)
    finally:
        await source.close()
    cookies = parse_cookies(raw)
    try:
        status = validate(cookies)
    except SessionError as exc:
        print(f"{store.store_id}: {exc}", file=sys.stderr)
        return 1
    injectable = sanitize_cookies(cookies)
    print(f"{store.store_id}: {len(injectable)}/{len(cookies)} cookies injectable")
    if status.renew_soon:
        print(f"Cookie expires in {int(status.days_remaining)} days; capture it again soon")
    else:
        print(f"Cookie valid: {status.days_remaining} days remaining")
    return 0


def main() -> None:
    load_dotenv()
    sys.exit(asyncio.run(check(sys.argv[1] if len(sys.argv) > 1 else None)))


if __name__ == "__main__":
    main()
