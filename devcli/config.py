"""Configuration helpers for devcli."""

from __future__ import annotations

import os

ENVIRONMENTS = ("prod", "qa")
DEFAULT_ENV = "prod"

API_BASE_URLS = {
    "prod": os.environ.get("DEVCLI_API_BASE_URL", "https://api.hubapi.com"),
    "qa": os.environ.get("DEVCLI_QA_API_BASE_URL", "https://api.hubapiqa.com"),
}
DEFAULT_TIMEOUT_SECONDS = 15.0


def sanitize_base_url(url: str) -> str:
    """Ensure the base URL never ends with a trailing slash."""

    return url.rstrip("/")


def get_valid_env(env: str | None, default: str = DEFAULT_ENV) -> str:
    """Map any user supplied environment name onto a known one."""

    if env and env.strip().lower() == "qa":
        return "qa"
    if env and env.strip().lower() == "prod":
        return "prod"
    return default


def get_base_url(env: str | None = None) -> str:
    return sanitize_base_url(API_BASE_URLS[get_valid_env(env)])
