"""File mapper namespace: upload, download and manage design manager files."""

from __future__ import annotations

import logging
import posixpath
from email.message import Message
from email.utils import collapse_rfc2231_value
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from .._http import build_query_params, handle_response
from .types import FileMapperNode

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

FILE_MAPPER_API_PATH = "content/filemapper/v1"

# Usage event name -> analytics endpoint
USAGE_EVENT_ENDPOINTS = {
    "cli-interaction": "cms-cli-usage",
    "vscode-extension-interaction": "vscode-extension-usage",
}


def _encode(path: str) -> str:
    return quote(path, safe="!~*'()")


def _int_or_zero(value: str | None) -> int:
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


def create_node_from_stream_response(file_path: str, headers: Any) -> FileMapperNode:
    """Build a FileMapperNode from a streamed download's response headers.

    The node name and timestamps come from the ``Content-Disposition`` header
    when the server sends one.
    """
    if not file_path.startswith("/"):
        file_path = f"/{file_path}"
    if file_path.endswith("/"):
        file_path = file_path[:-1]

    node = FileMapperNode(name=posixpath.basename(file_path), path=file_path)

    disposition = headers.get("content-disposition") if headers else None
    if not disposition:
        return node

    message = Message()
    message["content-disposition"] = disposition

    def param(name: str) -> str | None:
        value = message.get_param(name, header="content-disposition")
        if value is None:
            return None
        return collapse_rfc2231_value(value)

    node.name = param("filename") or node.name
    node.created_at = _int_or_zero(param("creation-date"))
    node.updated_at = _int_or_zero(param("modification-date"))
    return node


class FileMapperNamespace:
    """Namespace for file mapper operations."""

    def __init__(
        self,
        client: httpx.Client,
        base_url: str,
        headers: dict[str, str],
        account_id: int,
        *,
        account_auth_type: str | None = None,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._headers = headers
        self._account_id = account_id
        self._account_auth_type = account_auth_type

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{FILE_MAPPER_API_PATH}/{path}"

    def _params(self, **kwargs: Any) -> dict[str, Any]:
        return build_query_params(portalId=self._account_id, **kwargs)

    def upload(self, src: str | Path, dest: str, **params: Any) -> dict[str, Any]:
        """Upload a local file to ``dest`` in the design manager.

        Args:
            src: Local file path, relative to the working directory.
            dest: Remote destination path.
            **params: Extra query parameters (e.g. ``buffer=True``).

        Returns:
            Dictionary describing the uploaded file.
        """
        # httpx sets the multipart boundary itself
        headers = {k: v for k, v in self._headers.items() if k.lower() != "content-type"}
        with open(Path(src).resolve(), "rb") as f:
            response = self._client.post(
                self._url(f"upload/{_encode(dest)}"),
                headers=headers,
                params=self._params(**params),
                files={"file": f},
            )
        return handle_response(response)

    def fetch_module(self, module_id: int, **params: Any) -> dict[str, Any]:
        response = self._client.get(
            self._url(f"modules/{module_id}"),
            headers=self._headers,
            params=self._params(**params),
        )
        return handle_response(response)

    def fetch_file_stream(self, file_path: str, destination: str | Path, **params: Any) -> FileMapperNode:
        """Stream a remote file to ``destination`` on disk.

        Args:
            file_path: Remote path of the file.
            destination: Local path to write to. Parent directories are created.

        Returns:
            FileMapperNode describing the downloaded file.
        """
        destination = Path(destination)
        headers = {**self._headers, "Accept": "application/octet-stream"}
        with self._client.stream(
            "GET",
            self._url(f"stream/{_encode(file_path)}"),
            headers=headers,
            params=self._params(**params),
        ) as response:
            if response.status_code >= 400:
                response.read()
                handle_response(response)
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
            logger.debug("Wrote %s to %s", file_path, destination)
            return create_node_from_stream_response(file_path, response.headers)

    def download(self, file_path: str, **params: Any) -> dict[str, Any]:
        """Fetch a folder or file node by path."""
        response = self._client.get(
            self._url(f"download/{_encode(file_path)}"),
            headers=self._headers,
            params=self._params(**params),
        )
        return handle_response(response)

    def download_default(self, file_path: str, **params: Any) -> dict[str, Any]:
        """Fetch a folder or file node from the default (read-only) assets."""
        response = self._client.get(
            self._url(f"download-default/{file_path}"),
            headers=self._headers,
            params=self._params(**params),
        )
        return handle_response(response)

    def delete_file(self, file_path: str, **params: Any) -> dict[str, Any]:
        """Delete a file or folder by path."""
        response = self._client.delete(
            self._url(f"delete/{_encode(file_path)}"),
            headers=self._headers,
            params=self._params(**params),
        )
        return handle_response(response)

    def delete_folder(self, folder_path: str, **params: Any) -> dict[str, Any]:
        """Delete a folder by path.

        Deprecated: use :meth:`delete_file`, which handles folders too.
        """
        logger.warning("FileMapperNamespace.delete_folder() is deprecated. Use delete_file() instead.")
        response = self._client.delete(
            self._url(f"delete/folder/{folder_path}"),
            headers=self._headers,
            params=self._params(**params),
        )
        return handle_response(response)

    def move_file(self, src_path: str, dest_path: str) -> dict[str, Any]:
        response = self._client.put(
            self._url(f"rename/{src_path}"),
            headers=self._headers,
            params=self._params(path=dest_path),
        )
        return handle_response(response)

    def get_directory_contents(self, path: str) -> dict[str, Any]:
        response = self._client.get(
            self._url(f"meta/{path}"),
            headers=self._headers,
            params=self._params(),
        )
        return handle_response(response)

    def track_usage(
        self,
        event_name: str,
        event_class: str,
        meta: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Send a CLI usage event.

        Personal access key accounts report to the authenticated endpoint,
        everything else reports anonymously.

        Returns:
            The API response, or None when ``event_name`` is not a known event type.
        """
        endpoint = USAGE_EVENT_ENDPOINTS.get(event_name)
        if endpoint is None:
            logger.debug("Usage tracking event '%s' is not a valid event type.", event_name)
            return None

        usage_event = {
            "accountId": self._account_id,
            "eventName": event_name,
            "eventClass": event_class,
            "meta": meta or {},
        }

        if self._account_auth_type == "personalaccesskey":
            logger.debug("Sending usage event to authenticated endpoint")
            response = self._client.post(
                self._url(f"{endpoint}/authenticated"),
                headers=self._headers,
                params=self._params(),
                json=usage_event,
            )
        else:
            logger.debug("Sending usage event to unauthenticated endpoint")
            response = self._client.post(
                self._url(endpoint),
                headers={"Content-Type": "application/json"},
                json=usage_event,
            )
        return handle_response(response)
