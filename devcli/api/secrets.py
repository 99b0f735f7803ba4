"""Serverless function secrets namespace."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .._http import build_query_params, handle_response

if TYPE_CHECKING:
    import httpx

SECRETS_API_PATH = "cms/v3/functions/secrets"


class SecretsNamespace:
    """Namespace for secrets available to serverless functions."""

    def __init__(self, client: httpx.Client, base_url: str, headers: dict[str, str], account_id: int) -> None:
        self._client = client
        self._base_url = base_url
        self._headers = headers
        self._account_id = account_id

    def add(self, key: str, value: str) -> dict[str, Any]:
        """Create a secret.

        Args:
            key: Name of the secret.
            value: Secret value.
        """
        response = self._client.post(
            f"{self._base_url}/{SECRETS_API_PATH}",
            headers=self._headers,
            params=build_query_params(portalId=self._account_id),
            json={"key": key, "secret": value},
        )
        return handle_response(response)

    def update(self, key: str, value: str) -> dict[str, Any]:
        """Replace the value of an existing secret."""
        response = self._client.put(
            f"{self._base_url}/{SECRETS_API_PATH}",
            headers=self._headers,
            params=build_query_params(portalId=self._account_id),
            json={"key": key, "secret": value},
        )
        return handle_response(response)

    def delete(self, key: str) -> dict[str, Any]:
        response = self._client.delete(
            f"{self._base_url}/{SECRETS_API_PATH}/{key}",
            headers=self._headers,
            params=build_query_params(portalId=self._account_id),
        )
        return handle_response(response)

    def list(self) -> dict[str, Any]:
        """List the names of all secrets.

        Returns:
            Dictionary with a ``results`` list of secret names.
        """
        response = self._client.get(
            f"{self._base_url}/{SECRETS_API_PATH}",
            headers=self._headers,
            params=build_query_params(portalId=self._account_id),
        )
        return handle_response(response)
