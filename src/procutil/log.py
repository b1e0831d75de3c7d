"""Timestamped diagnostics on stderr + GitHub Actions formatting."""

import os
import sys
from datetime import datetime

from procutil.config import settings_or_defaults


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _is_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def _emit(msg: str) -> None:
    print(f"[{_timestamp()}] {msg}", file=sys.stderr, flush=True)


def debug(msg: str) -> None:
    if not settings_or_defaults().debug:
        return
    if _is_github_actions():
        print(f"::debug::{msg}", file=sys.stderr, flush=True)
        return
    _emit(f"DEBUG: {msg}")


def error(msg: str) -> None:
    if _is_github_actions():
        print(f"::error::{msg}", file=sys.stderr, flush=True)
    _emit(f"ERROR: {msg}")
