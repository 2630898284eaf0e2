"""Post-deploy helper: ask the running service to register its webhook.

Calls ``GET <BASE_URL>/set-webhook`` and exits non-zero on any failure.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence

import httpx

from hellobot.cli.common import CLI_TIMEOUT_SECONDS, HttpResult, build_parser, fetch, load_settings


async def trigger_set_webhook(
    base_url: str,
    *,
    timeout: float = CLI_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HttpResult:
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        return await fetch(client, "GET", f"{base_url}/set-webhook")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser(__doc__.splitlines()[0]).parse_args(argv)
    settings = load_settings(args.env_file)
    if settings is None:
        return 1
    if settings.base_url is None:
        print("BASE_URL is missing; cannot trigger set-webhook", file=sys.stderr)
        return 1

    result = asyncio.run(trigger_set_webhook(settings.base_url))
    if result.status == 0:
        print(f"Error calling set-webhook: {result.data}", file=sys.stderr)
        return 1
    if not result.ok:
        print(f"Trigger set-webhook failed: {result.status} {result.body_text()}", file=sys.stderr)
        return 1
    print(f"Triggered set-webhook: {result.body_text()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
