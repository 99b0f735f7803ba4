"""Builders for account entries and the canonical config key order."""

from __future__ import annotations

import logging
import os
from typing import Any

from ..config import get_valid_env
from .constants import (
    API_KEY_AUTH_METHOD,
    ENV_ACCOUNT_ID,
    ENV_API_KEY,
    ENV_CLIENT_ID,
    ENV_CLIENT_SECRET,
    ENV_ENVIRONMENT,
    ENV_PERSONAL_ACCESS_KEY,
    ENV_REFRESH_TOKEN,
    OAUTH_AUTH_METHOD,
    OAUTH_SCOPES,
    PERSONAL_ACCESS_KEY_AUTH_METHOD,
)
from .types import Account, CLIConfig

logger = logging.getLogger(__name__)

_ACCOUNT_KEY_ORDER = ("name", "accountId", "env", "authType")
_CONFIG_KEY_ORDER = ("defaultAccount", "defaultMode", "httpTimeout", "allowUsageTracking")


def ordered_account(account: dict[str, Any]) -> Account:
    """Return ``account`` with identifying keys first and unset values dropped."""
    ordered = {key: account[key] for key in _ACCOUNT_KEY_ORDER if account.get(key) is not None}
    ordered.update({k: v for k, v in account.items() if k not in _ACCOUNT_KEY_ORDER and v is not None})
    return ordered  # type: ignore[return-value]


def ordered_config(config: dict[str, Any]) -> CLIConfig:
    """Return ``config`` in the order it is written to disk, accounts last."""
    ordered: dict[str, Any] = {}
    if config.get("defaultAccount"):
        ordered["defaultAccount"] = config["defaultAccount"]
    for key in _CONFIG_KEY_ORDER[1:]:
        if config.get(key) is not None:
            ordered[key] = config[key]
    for key, value in config.items():
        if key not in _CONFIG_KEY_ORDER and key != "accounts" and value is not None:
            ordered[key] = value
    ordered["accounts"] = [ordered_account(account) for account in config.get("accounts") or []]
    return ordered  # type: ignore[return-value]


def generate_personal_access_key_account(account_id: int, personal_access_key: str, env: str) -> Account:
    return {
        "authType": PERSONAL_ACCESS_KEY_AUTH_METHOD,
        "accountId": account_id,
        "personalAccessKey": personal_access_key,
        "env": env,
    }


def generate_oauth_account(
    account_id: int,
    client_id: str,
    client_secret: str,
    refresh_token: str,
    scopes: list[str],
    env: str,
) -> Account:
    return {
        "authType": OAUTH_AUTH_METHOD,
        "accountId": account_id,
        "auth": {
            "clientId": client_id,
            "clientSecret": client_secret,
            "scopes": list(scopes),
            "tokenInfo": {"refreshToken": refresh_token},
        },
        "env": env,
    }


def generate_api_key_account(account_id: int, api_key: str, env: str) -> Account:
    return {
        "authType": API_KEY_AUTH_METHOD,
        "accountId": account_id,
        "apiKey": api_key,
        "env": env,
    }


def generate_config(auth_type: str, **options: Any) -> CLIConfig | None:
    """Build a config holding a single account of the given auth type.

    Args:
        auth_type: "personalaccesskey", "oauth2" or "apikey".
        **options: Keyword arguments of the matching ``generate_*_account``
            builder (``account_id``, ``env`` and the auth specific fields).

    Returns:
        The config, or None when ``options`` is empty or ``auth_type`` is unknown.
    """
    if not options:
        return None

    if auth_type == API_KEY_AUTH_METHOD:
        account = generate_api_key_account(**options)
    elif auth_type == PERSONAL_ACCESS_KEY_AUTH_METHOD:
        account = generate_personal_access_key_account(**options)
    elif auth_type == OAUTH_AUTH_METHOD:
        account = generate_oauth_account(**options)
    else:
        logger.debug("Unable to generate config for unknown auth type %r", auth_type)
        return None

    return {"accounts": [account]}


def load_config_from_environment(use_env: bool = False) -> CLIConfig | None:
    """Build a single account config from DEVCLI_* environment variables.

    A personal access key wins over OAuth client credentials, which win over
    an API key. Returns None when the account id or every credential is missing.
    """
    raw_account_id = os.environ.get(ENV_ACCOUNT_ID, "")
    account_id = int(raw_account_id) if raw_account_id.strip().isdigit() else None
    env = get_valid_env(os.environ.get(ENV_ENVIRONMENT))

    personal_access_key = os.environ.get(ENV_PERSONAL_ACCESS_KEY)
    client_id = os.environ.get(ENV_CLIENT_ID)
    client_secret = os.environ.get(ENV_CLIENT_SECRET)
    refresh_token = os.environ.get(ENV_REFRESH_TOKEN)
    api_key = os.environ.get(ENV_API_KEY)

    config: CLIConfig | None = None
    if account_id:
        if personal_access_key:
            config = generate_config(
                PERSONAL_ACCESS_KEY_AUTH_METHOD,
                account_id=account_id,
                personal_access_key=personal_access_key,
                env=env,
            )
        elif client_id and client_secret and refresh_token:
            config = generate_config(
                OAUTH_AUTH_METHOD,
                account_id=account_id,
                client_id=client_id,
                client_secret=client_secret,
                refresh_token=refresh_token,
                scopes=list(OAUTH_SCOPES),
                env=env,
            )
        elif api_key:
            config = generate_config(API_KEY_AUTH_METHOD, account_id=account_id, api_key=api_key, env=env)

    if config is None:
        if use_env:
            logger.error("Unable to load config from environment variables.")
        return None

    logger.debug("Loaded config from environment variables for account %s", account_id)
    return config
