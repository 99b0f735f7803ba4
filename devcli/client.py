"""Synchronous HTTP client for the devcli APIs."""

from __future__ import annotations

import os
from typing import Any

import httpx

from ._http import build_headers
from .api import CustomObjectsNamespace, FileMapperNamespace, SecretsNamespace
from .config import DEFAULT_TIMEOUT_SECONDS, get_base_url, get_valid_env, sanitize_base_url
from .exceptions import AuthenticationError


class DevClient:
    """Synchronous client for the account scoped REST APIs.

    Example:
        >>> from devcli import DevClient
        >>> client = DevClient(123456, access_token="pat-...")
        >>> print(client.secrets.list())
        >>> print(client.custom_objects.list_schemas())

    The client provides namespaced access to different API areas:
        - client.secrets: Serverless function secrets
        - client.custom_objects: CRM custom objects and schemas
        - client.file_mapper: Design manager file upload/download
    """

    def __init__(
        self,
        account_id: int,
        access_token: str | None = None,
        *,
        auth_type: str = "bearer",
        env: str = "prod",
        account_auth_type: str | None = None,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the client.

        Args:
            account_id: The account every request is scoped to.
            access_token: Bearer token or API key. If not provided, reads
                from the DEVCLI_ACCESS_TOKEN environment variable.
            auth_type: "bearer" or "api_key".
            env: "prod" or "qa"; selects the default base URL.
            account_auth_type: The account's configured auth type, used to pick
                the usage tracking endpoint.
            base_url: Overrides the environment's base URL.
            timeout: Request timeout in seconds.

        Raises:
            AuthenticationError: If no token is provided or found in environment.
        """
        access_token = access_token or os.environ.get("DEVCLI_ACCESS_TOKEN")
        if not access_token:
            raise AuthenticationError(
                "No access token provided. Pass access_token or set the DEVCLI_ACCESS_TOKEN environment variable."
            )

        self.account_id = account_id
        self._access_token = access_token
        self._env = get_valid_env(env)
        self._base_url = sanitize_base_url(base_url) if base_url else get_base_url(self._env)
        self._client = httpx.Client(timeout=timeout)
        headers = build_headers(access_token, auth_type)

        self.secrets = SecretsNamespace(self._client, self._base_url, headers, account_id)
        self.custom_objects = CustomObjectsNamespace(self._client, self._base_url, headers, account_id)
        self.file_mapper = FileMapperNamespace(
            self._client,
            self._base_url,
            headers,
            account_id,
            account_auth_type=account_auth_type,
        )

    @classmethod
    def from_account(cls, account: dict[str, Any], *, timeout: float | None = None) -> DevClient:
        """Build a client from an entry of the accounts config.

        API key accounts authenticate with their key. Personal access key and
        OAuth accounts need an access token already stored under
        ``auth.tokenInfo.accessToken``.
        """
        auth_type = account.get("authType")
        if auth_type == "apikey":
            token = account.get("apiKey")
            header_type = "api_key"
        else:
            token_info = (account.get("auth") or {}).get("tokenInfo") or {}
            token = token_info.get("accessToken")
            header_type = "bearer"

        if not token:
            raise AuthenticationError(
                f"No access token stored for account {account.get('name') or account.get('accountId')}."
            )

        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return cls(
            account["accountId"],
            token,
            auth_type=header_type,
            env=account.get("env") or "prod",
            account_auth_type=auth_type,
            **kwargs,
        )

    def close(self) -> None:
        """Release the underlying HTTP client resources."""
        self._client.close()

    def __enter__(self) -> DevClient:
        return self

    def __exit__(self, exc_type: type | None, exc: BaseException | None, traceback: Any) -> None:
        self.close()
