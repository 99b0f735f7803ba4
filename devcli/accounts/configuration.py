"""Read and update the YAML accounts config.

The config is looked up by walking up from the working directory for
``devcli.config.yml`` (or ``.yaml``), unless a path is given. It can also be
built from DEVCLI_* environment variables, in which case it is never written
back to disk.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

import yaml

from ..config import DEFAULT_ENV, get_valid_env
from ..exceptions import ConfigError
from .config_utils import load_config_from_environment, ordered_config
from .constants import CONFIG_FILE_NAMES, DEFAULT_CONFIG_FILE_NAME, MIN_HTTP_TIMEOUT, MODES
from .types import Account, CLIConfig

logger = logging.getLogger(__name__)

_LEGACY_KEYS = {"portals": "accounts", "defaultPortal": "defaultAccount"}


def find_config(directory: str | Path) -> Path | None:
    """Walk up from ``directory`` looking for a config file."""
    directory = Path(directory).resolve()
    for candidate_dir in (directory, *directory.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = candidate_dir / name
            if candidate.is_file():
                return candidate
    return None


def normalize_config(config: dict[str, Any]) -> CLIConfig:
    """Rename legacy ``portals``/``portalId``/``defaultPortal`` keys."""
    for legacy, current in _LEGACY_KEYS.items():
        if legacy in config:
            value = config.pop(legacy)
            config.setdefault(current, value)
    for account in config.get("accounts") or []:
        if isinstance(account, dict) and "portalId" in account:
            account.setdefault("accountId", account.pop("portalId"))
    return config  # type: ignore[return-value]


def parse_config(source: str) -> CLIConfig | None:
    """Parse YAML config text. Blank text parses to None."""
    if not source or not source.strip():
        return None
    try:
        parsed = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file could not be parsed: {e}") from e
    if parsed is None:
        return None
    if not isinstance(parsed, dict):
        raise ConfigError("Config file must contain a mapping")
    return normalize_config(parsed)


def _parse_account_identifier(name_or_id: str | int) -> tuple[str | None, int | None]:
    if isinstance(name_or_id, int):
        return None, name_or_id
    if re.fullmatch(r"\d+", name_or_id):
        return None, int(name_or_id)
    return name_or_id, None


class CLIConfiguration:
    """The accounts config of one CLI invocation.

    Example:
        >>> config = CLIConfiguration()
        >>> config.load()
        >>> account_id = config.get_account_id("my-sandbox")
        >>> config.update_default_account("my-sandbox")
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path: Path | None = Path(path) if path else None
        self.config: CLIConfig | None = None
        self.loaded_from_env = False

    # ------------------------------------------------------------------
    # Loading and writing
    # ------------------------------------------------------------------

    def resolve_path(self, path: str | Path | None = None) -> Path | None:
        if path:
            return Path(path)
        if self.config_file_exists():
            return self.path
        return find_config(Path.cwd())

    def load(
        self,
        path: str | Path | None = None,
        *,
        use_env: bool = False,
        silence_errors: bool = False,
    ) -> CLIConfig | None:
        """Load the config from the environment or from disk.

        Args:
            path: Explicit config path. Defaults to the current path, then a
                search upwards from the working directory.
            use_env: Try DEVCLI_* environment variables first.
            silence_errors: Log a missing config file at debug level only.

        Returns:
            The loaded config, or None if no config file was found.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        if use_env:
            env_config = load_config_from_environment(use_env=True)
            if env_config:
                logger.debug("Loaded environment variable config")
                self.config = env_config
                self.loaded_from_env = True
                return self.config

        self.loaded_from_env = False
        resolved = self.resolve_path(path)
        if not resolved:
            message = f"A {DEFAULT_CONFIG_FILE_NAME} file could not be found."
            if silence_errors:
                logger.debug(message)
            else:
                logger.error("%s To create a new config file, use the 'devcli accounts add' command.", message)
            return None

        self.path = resolved
        logger.debug("Reading config from %s", self.path)
        try:
            source = self.path.read_text()
        except OSError as e:
            raise ConfigError(f"Config file could not be read: {self.path}") from e

        self.config = parse_config(source)
        if self.config is None:
            logger.debug("The config file was empty, initializing an empty config")
            self.config = {"accounts": []}
        return self.config

    def get_and_load_if_needed(self) -> CLIConfig:
        if self.config is None:
            self.load(silence_errors=True)
        return self.config if self.config is not None else {}

    def write(self, source: str | None = None, path: str | Path | None = None) -> None:
        """Write the config to disk.

        Uses an atomic write (temp file in the same directory, then
        ``os.replace``) and owner-only permissions, since accounts hold
        credentials. Does nothing for a config loaded from the environment.

        Args:
            source: Raw text to write instead of the current config.
            path: Destination. Defaults to the current config path.
        """
        if self.loaded_from_env:
            return

        if source is None:
            source = yaml.safe_dump(ordered_config(self.config or {}), sort_keys=False, default_flow_style=False)

        config_path = Path(path) if path else self.path
        if not config_path:
            raise ConfigError("No config path is set")

        logger.debug("Writing current config to %s", config_path)
        config_dir = config_path.parent
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=config_dir, prefix=".config_", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(source)
                os.chmod(tmp_path, 0o600)
                os.replace(tmp_path, config_path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise ConfigError(f"Config file could not be written: {config_path}") from e

        self.path = config_path
        self.config = parse_config(source)

    def set_default_path_if_unset(self) -> None:
        if not self.path:
            self.path = Path.cwd() / DEFAULT_CONFIG_FILE_NAME

    def config_file_exists(self) -> bool:
        return bool(self.path and self.path.exists())

    def config_file_is_blank(self) -> bool:
        return bool(self.path and self.path.read_text().strip() == "")

    def create_empty_config_file(self, path: str | Path | None = None) -> None:
        if path:
            self.path = Path(path)
        else:
            self.set_default_path_if_unset()
            if self.config_file_exists():
                return
        self.write(source="")

    def delete_empty_config_file(self) -> bool:
        if self.config_file_exists() and self.config_file_is_blank():
            self.path.unlink()
            return True
        return False

    def delete_config_file(self) -> bool:
        if self.config_file_exists():
            self.path.unlink()
            return True
        return False

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def accounts(self) -> list[Account]:
        return self.get_and_load_if_needed().get("accounts") or []

    @property
    def default_account(self) -> str | int | None:
        return self.get_and_load_if_needed().get("defaultAccount")

    def validate(self) -> bool:
        """Check the loaded config, logging the first problem found."""
        if self.config is None:
            logger.error("No config was found")
            return False

        accounts = self.config.get("accounts")
        if not isinstance(accounts, list):
            logger.error("config.accounts[] is not defined")
            return False

        ids: set[int] = set()
        names: set[str] = set()
        for account in accounts:
            if not account:
                logger.error("config.accounts[] has an empty entry")
                return False

            account_id = account.get("accountId")
            if not account_id:
                logger.error("config.accounts[] has an entry missing accountId")
                return False
            if account_id in ids:
                logger.error("config.accounts[] has multiple entries with accountId=%s", account_id)
                return False

            name = account.get("name")
            if name:
                if name in names:
                    logger.error("config.name has multiple entries with accountId=%s", account_id)
                    return False
                if re.search(r"\s", name):
                    logger.error("config.name '%s' cannot contain spaces", name)
                    return False
                names.add(name)

            ids.add(account_id)
        return True

    def account_name_exists(self, name: str) -> bool:
        return any(account.get("name") == name for account in self.accounts)

    def get_account_id(self, name_or_id: str | int | None = None) -> int | None:
        """Resolve an account name or id to an id present in the config.

        Numeric strings are treated as ids. Without an argument the default
        account is used.
        """
        if name_or_id is None or name_or_id == "":
            name_or_id = self.default_account
            if name_or_id is None or name_or_id == "":
                return None

        name, account_id = _parse_account_identifier(name_or_id)
        for account in self.accounts:
            if name is not None and account.get("name") == name:
                return account.get("accountId")
            if account_id is not None and account.get("accountId") == account_id:
                return account_id
        return None

    def get_account(self, account_id: int | None) -> Account | None:
        if account_id is None:
            return None
        return next((a for a in self.accounts if a.get("accountId") == account_id), None)

    def get_env(self, name_or_id: str | int | None = None) -> str:
        account = self.get_account(self.get_account_id(name_or_id))
        if account and account.get("env"):
            return account["env"]
        return self.get_and_load_if_needed().get("env") or DEFAULT_ENV

    def is_tracking_allowed(self) -> bool:
        if not self.config_file_exists() or self.config_file_is_blank():
            return True
        return self.get_and_load_if_needed().get("allowUsageTracking") is not False

    def is_flag_enabled(self, flag: str) -> bool:
        if not self.config_file_exists() or self.config_file_is_blank():
            return False
        return bool(self.get_and_load_if_needed().get(flag, False))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_account(
        self,
        account_id: int,
        *,
        auth_type: str | None = None,
        environment: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        scopes: list[str] | None = None,
        token_info: dict[str, Any] | None = None,
        default_mode: str | None = None,
        name: str | None = None,
        api_key: str | None = None,
        personal_access_key: str | None = None,
        sandbox_account_type: str | None = None,
        parent_account_id: int | None = None,
    ) -> Account:
        """Add or update an account entry in memory.

        Fields left as None keep their current value. Call :meth:`write`
        to persist the change.

        Raises:
            ConfigError: If no account id is given.
        """
        if not account_id:
            raise ConfigError("An accountId is required to update the config")

        config = self.get_and_load_if_needed()
        if self.config is None:
            self.config = config = {"accounts": []}
        existing = self.get_account(account_id)

        next_account: dict[str, Any] = dict(existing or {})
        if any(value is not None for value in (client_id, client_secret, scopes, token_info)):
            auth = dict(next_account.get("auth") or {})
            for key, value in (
                ("clientId", client_id),
                ("clientSecret", client_secret),
                ("scopes", scopes),
                ("tokenInfo", token_info),
            ):
                if value is not None:
                    auth[key] = value
            next_account["auth"] = auth

        mode = default_mode.lower() if default_mode else None
        next_account.update(
            {
                k: v
                for k, v in {
                    "name": name,
                    "accountId": account_id,
                    "authType": auth_type,
                    "apiKey": api_key,
                    "defaultMode": mode if mode in MODES else None,
                    "personalAccessKey": personal_access_key,
                    "sandboxAccountType": sandbox_account_type,
                    "parentAccountId": parent_account_id,
                }.items()
                if v is not None
            }
        )
        next_account["env"] = get_valid_env(environment or next_account.get("env"))

        accounts = config.setdefault("accounts", [])
        if existing is not None:
            logger.debug("Updating config for %s", account_id)
            accounts[accounts.index(existing)] = next_account
        else:
            logger.debug("Adding config entry for %s", account_id)
            accounts.append(next_account)
        return next_account  # type: ignore[return-value]

    def _update_and_write(self, key: str, value: Any) -> None:
        config = self.get_and_load_if_needed()
        if self.config is None:
            self.config = config = {"accounts": []}
        config[key] = value
        self.set_default_path_if_unset()
        self.write()

    def update_default_account(self, default_account: str | int) -> None:
        if not default_account or isinstance(default_account, bool) or not isinstance(default_account, (str, int)):
            raise ConfigError("A 'defaultAccount' with value of number or string is required to update the config")
        self._update_and_write("defaultAccount", default_account)

    def update_default_mode(self, default_mode: str) -> None:
        if default_mode not in MODES:
            raise ConfigError(f"The mode {default_mode} is invalid. Valid values are {' and '.join(MODES)}.")
        self._update_and_write("defaultMode", default_mode)

    def update_http_timeout(self, timeout: int | str) -> None:
        try:
            parsed = int(timeout)
        except (TypeError, ValueError):
            parsed = None
        if parsed is None or parsed < MIN_HTTP_TIMEOUT:
            raise ConfigError(
                f"The value {timeout} is invalid. The value must be a number greater than {MIN_HTTP_TIMEOUT}."
            )
        self._update_and_write("httpTimeout", parsed)

    def update_allow_usage_tracking(self, enabled: bool) -> None:
        if not isinstance(enabled, bool):
            raise ConfigError(
                f"Unable to update allowUsageTracking. The value {enabled} is invalid. The value must be a boolean."
            )
        self._update_and_write("allowUsageTracking", enabled)

    def rename_account(self, current_name: str, new_name: str) -> None:
        account = self.get_account(self.get_account_id(current_name))
        if account is None:
            raise ConfigError(f"Cannot find account with identifier {current_name}")

        was_default = account.get("name") is not None and account.get("name") == self.default_account
        self.update_account(account["accountId"], name=new_name)
        if was_default:
            self.update_default_account(new_name)
        self.write()

    def delete_account(self, account_name: str | int) -> None:
        account_id = self.get_account_id(account_name)
        if account_id is None:
            raise ConfigError(f"Cannot find account with identifier {account_name}")

        config = self.get_and_load_if_needed()
        if config.get("defaultAccount") in (account_name, account_id):
            config["defaultAccount"] = None
        config["accounts"] = [a for a in config.get("accounts") or [] if a.get("accountId") != account_id]
        self.write()

    def remove_sandbox_account(self, name_or_id: str | int) -> bool:
        """Remove a sandbox account from the config.

        Returns:
            True when the removed account was the default, so the caller
            should ask for a new default.

        Raises:
            ConfigError: If the account cannot be found.
        """
        account_id = self.get_account_id(name_or_id)
        if account_id is None:
            raise ConfigError(f"Unable to find account for {name_or_id}.")

        account = self.get_account(account_id)
        if not account or not account.get("sandboxAccountType"):
            return False

        config = self.get_and_load_if_needed()
        prompt_default_account = config.get("defaultAccount") == account.get("name")

        logger.debug("Deleting config for %s", account_id)
        config["accounts"].remove(account)
        self.write()
        return prompt_default_account
