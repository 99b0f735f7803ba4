"""Custom objects and object schemas namespace."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .._http import build_query_params, handle_response

if TYPE_CHECKING:
    import httpx

CUSTOM_OBJECTS_API_PATH = "crm/v3/objects"
SCHEMA_API_PATH = "crm-object-schemas/v3/schemas"


class CustomObjectsNamespace:
    """Namespace for CRM custom objects and their schemas."""

    def __init__(self, client: httpx.Client, base_url: str, headers: dict[str, str], account_id: int) -> None:
        self._client = client
        self._base_url = base_url
        self._headers = headers
        self._account_id = account_id

    def _params(self) -> dict[str, Any]:
        return build_query_params(portalId=self._account_id)

    def batch_create(self, object_type_id: str, objects: dict[str, Any]) -> dict[str, Any]:
        """Create a batch of objects of one custom type.

        Args:
            object_type_id: The object type id (e.g. ``2-123456``).
            objects: Batch payload, usually ``{"inputs": [...]}``.

        Returns:
            Dictionary describing the created objects.
        """
        response = self._client.post(
            f"{self._base_url}/{CUSTOM_OBJECTS_API_PATH}/{object_type_id}/batch/create",
            headers=self._headers,
            params=self._params(),
            json=objects,
        )
        return handle_response(response)

    def create_schema(self, schema: dict[str, Any]) -> dict[str, Any]:
        response = self._client.post(
            f"{self._base_url}/{SCHEMA_API_PATH}",
            headers=self._headers,
            params=self._params(),
            json=schema,
        )
        return handle_response(response)

    def update_schema(self, schema_object_type: str, schema: dict[str, Any]) -> dict[str, Any]:
        """Patch an existing object schema."""
        response = self._client.patch(
            f"{self._base_url}/{SCHEMA_API_PATH}/{schema_object_type}",
            headers=self._headers,
            params=self._params(),
            json=schema,
        )
        return handle_response(response)

    def get_schema(self, schema_object_type: str) -> dict[str, Any]:
        response = self._client.get(
            f"{self._base_url}/{SCHEMA_API_PATH}/{schema_object_type}",
            headers=self._headers,
            params=self._params(),
        )
        return handle_response(response)

    def list_schemas(self) -> dict[str, Any]:
        """List every custom object schema of the account.

        Returns:
            Dictionary with a ``results`` list of schemas.
        """
        response = self._client.get(
            f"{self._base_url}/{SCHEMA_API_PATH}",
            headers=self._headers,
            params=self._params(),
        )
        return handle_response(response)

    def delete_schema(self, schema_object_type: str) -> dict[str, Any]:
        response = self._client.delete(
            f"{self._base_url}/{SCHEMA_API_PATH}/{schema_object_type}",
            headers=self._headers,
            params=self._params(),
        )
        return handle_response(response)
