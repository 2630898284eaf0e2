"""Helpers shared by the operational command-line tools."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from hellobot.core.config import ScriptSettings

CLI_TIMEOUT_SECONDS = 8.0


@dataclass(frozen=True)
class HttpResult:
    """Outcome of one HTTP call; ``status`` is 0 when no response arrived."""

    ok: bool
    status: int
    data: Any

    def body_text(self) -> str:
        if isinstance(self.data, str):
            return self.data
        return json.dumps(self.data, separators=(",", ":"))


async def fetch(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> HttpResult:
    """Perform a request and decode JSON bodies, folding transport errors into the result."""
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        return HttpResult(ok=False, status=0, data=str(exc) or type(exc).__name__)

    data: Any = response.text
    if "application/json" in response.headers.get("content-type", ""):
        try:
            data = response.json()
        except ValueError:
            data = response.text
    return HttpResult(ok=response.is_success, status=response.status_code, data=data)


def build_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--env-file",
        default=".env",
        help="KEY=value file read before the process environment (default: .env)",
    )
    return parser


def load_settings(env_file: str) -> ScriptSettings | None:
    """Load settings for a tool, printing configuration errors instead of raising."""
    try:
        return ScriptSettings(_env_file=env_file)
    except ValidationError as exc:
        # Error inputs may hold secrets; print messages only.
        messages = "; ".join(str(error["msg"]) for error in exc.errors())
        print(f"Invalid configuration: {messages}", file=sys.stderr)
        return None
