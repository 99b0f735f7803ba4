"""Constants for account configuration."""

from __future__ import annotations

DEFAULT_CONFIG_FILE_NAME = "devcli.config.yml"
CONFIG_FILE_NAMES = (DEFAULT_CONFIG_FILE_NAME, DEFAULT_CONFIG_FILE_NAME.replace(".yml", ".yaml"))

# Auth types as written to the config file
API_KEY_AUTH_METHOD = "apikey"
OAUTH_AUTH_METHOD = "oauth2"
PERSONAL_ACCESS_KEY_AUTH_METHOD = "personalaccesskey"
AUTH_METHODS = (PERSONAL_ACCESS_KEY_AUTH_METHOD, OAUTH_AUTH_METHOD, API_KEY_AUTH_METHOD)

OAUTH_SCOPES = ("content", "hubdb", "files")

MODES = ("draft", "publish")
MIN_HTTP_TIMEOUT = 3000

# Environment variables read by load_config_from_environment()
ENV_API_KEY = "DEVCLI_API_KEY"
ENV_CLIENT_ID = "DEVCLI_CLIENT_ID"
ENV_CLIENT_SECRET = "DEVCLI_CLIENT_SECRET"
ENV_PERSONAL_ACCESS_KEY = "DEVCLI_PERSONAL_ACCESS_KEY"
ENV_ACCOUNT_ID = "DEVCLI_ACCOUNT_ID"
ENV_REFRESH_TOKEN = "DEVCLI_REFRESH_TOKEN"
ENV_ENVIRONMENT = "DEVCLI_ENVIRONMENT"
