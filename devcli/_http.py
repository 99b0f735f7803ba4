"""Shared HTTP request utilities for the API namespaces."""

from __future__ import annotations

from typing import Any

import httpx

from .exceptions import APIError, AuthenticationError


def build_headers(token: str, auth_type: str = "bearer") -> dict[str, str]:
    """Build request headers with appropriate authentication."""
    headers = {"Content-Type": "application/json"}

    if auth_type == "api_key":
        headers["x-api-key"] = token
    elif auth_type == "bearer":
        headers["Authorization"] = f"Bearer {token}"
    else:
        raise ValueError(f"Unsupported auth type: {auth_type}")

    return headers


def handle_response(response: httpx.Response) -> Any:
    """Process HTTP response, raising appropriate errors for failures."""
    if response.status_code == 401:
        raise AuthenticationError("Invalid or expired access token")

    if response.status_code >= 400:
        raise APIError(
            message=response.text or "API call failed",
            status_code=response.status_code,
            response=response,
        )

    if response.content:
        return response.json()
    return {}


def build_query_params(**kwargs: Any) -> dict[str, Any]:
    """Build query parameters, filtering out None values."""
    return {k: v for k, v in kwargs.items() if v is not None}
