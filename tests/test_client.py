"""Tests for DevClient and its API namespaces."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from devcli import APIError, AuthenticationError, DevClient
from devcli.api.file_mapper import create_node_from_stream_response


def _json_response(payload, status_code=200):
    mock_response = MagicMock(spec=httpx.Response)
    mock_response.status_code = status_code
    mock_response.content = b"{}" if payload is not None else b""
    mock_response.json.return_value = payload
    mock_response.text = ""
    return mock_response


class TestDevClientInit:
    def test_init_with_token(self):
        client = DevClient(123, access_token="token")
        assert client.account_id == 123
        assert client._base_url == "https://api.hubapi.com"
        client.close()

    def test_qa_env_uses_qa_base_url(self):
        with DevClient(123, access_token="token", env="QA") as client:
            assert client._base_url == "https://api.hubapiqa.com"

    def test_custom_base_url(self):
        with DevClient(123, access_token="token", base_url="https://custom.example.com/") as client:
            assert client._base_url == "https://custom.example.com"

    def test_init_without_token_raises(self, monkeypatch):
        monkeypatch.delenv("DEVCLI_ACCESS_TOKEN", raising=False)
        with pytest.raises(AuthenticationError):
            DevClient(123)

    def test_init_from_env_var(self, monkeypatch):
        monkeypatch.setenv("DEVCLI_ACCESS_TOKEN", "env-token")
        with DevClient(123) as client:
            assert client._access_token == "env-token"

    def test_unsupported_auth_type(self):
        with pytest.raises(ValueError):
            DevClient(123, access_token="token", auth_type="basic")


class TestFromAccount:
    def test_api_key_account(self):
        account = {"accountId": 1, "authType": "apikey", "apiKey": "key", "env": "qa"}
        with DevClient.from_account(account) as client:
            assert client.secrets._headers["x-api-key"] == "key"
            assert client._base_url == "https://api.hubapiqa.com"

    def test_personal_access_key_account_uses_stored_access_token(self):
        account = {
            "accountId": 1,
            "authType": "personalaccesskey",
            "personalAccessKey": "pak",
            "auth": {"tokenInfo": {"accessToken": "access"}},
        }
        with DevClient.from_account(account) as client:
            assert client.secrets._headers["Authorization"] == "Bearer access"

    def test_missing_access_token_raises(self):
        account = {"accountId": 1, "name": "sandbox", "authType": "oauth2", "auth": {}}
        with pytest.raises(AuthenticationError, match="sandbox"):
            DevClient.from_account(account)


class TestSecretsNamespace:
    def test_list(self, client):
        with patch.object(httpx.Client, "get", return_value=_json_response({"results": ["A"]})) as mock_get:
            result = client.secrets.list()

        assert result == {"results": ["A"]}
        assert mock_get.call_args[0][0].endswith("/cms/v3/functions/secrets")
        assert mock_get.call_args[1]["params"] == {"portalId": 123456}

    def test_add(self, client):
        with patch.object(httpx.Client, "post", return_value=_json_response(None)) as mock_post:
            assert client.secrets.add("KEY", "value") == {}

        assert mock_post.call_args[1]["json"] == {"key": "KEY", "secret": "value"}

    def test_update(self, client):
        with patch.object(httpx.Client, "put", return_value=_json_response(None)) as mock_put:
            client.secrets.update("KEY", "new")

        assert mock_put.call_args[1]["json"] == {"key": "KEY", "secret": "new"}

    def test_delete(self, client):
        with patch.object(httpx.Client, "delete", return_value=_json_response(None)) as mock_delete:
            client.secrets.delete("KEY")

        assert mock_delete.call_args[0][0].endswith("/cms/v3/functions/secrets/KEY")

    def test_auth_error(self, client):
        with patch.object(httpx.Client, "get", return_value=_json_response(None, status_code=401)):
            with pytest.raises(AuthenticationError):
                client.secrets.list()

    def test_api_error(self, client):
        response = _json_response(None, status_code=404)
        response.text = "Not Found"
        with patch.object(httpx.Client, "delete", return_value=response):
            with pytest.raises(APIError) as exc_info:
                client.secrets.delete("MISSING")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Not Found"


class TestCustomObjectsNamespace:
    def test_batch_create(self, client):
        objects = {"inputs": [{"properties": {"name": "x"}}]}
        with patch.object(httpx.Client, "post", return_value=_json_response({"status": "COMPLETE"})) as mock_post:
            client.custom_objects.batch_create("2-123", objects)

        assert mock_post.call_args[0][0].endswith("/crm/v3/objects/2-123/batch/create")
        assert mock_post.call_args[1]["json"] == objects

    def test_create_schema(self, client):
        with patch.object(httpx.Client, "post", return_value=_json_response({"name": "cars"})) as mock_post:
            result = client.custom_objects.create_schema({"name": "cars"})

        assert result["name"] == "cars"
        assert mock_post.call_args[0][0].endswith("/crm-object-schemas/v3/schemas")

    def test_update_schema_patches(self, client):
        with patch.object(httpx.Client, "patch", return_value=_json_response({"name": "cars"})) as mock_patch:
            client.custom_objects.update_schema("cars", {"labels": {}})

        assert mock_patch.call_args[0][0].endswith("/crm-object-schemas/v3/schemas/cars")

    def test_get_and_list_schemas(self, client):
        with patch.object(httpx.Client, "get", return_value=_json_response({"results": []})) as mock_get:
            client.custom_objects.get_schema("cars")
            client.custom_objects.list_schemas()

        urls = [call[0][0] for call in mock_get.call_args_list]
        assert urls[0].endswith("/schemas/cars")
        assert urls[1].endswith("/schemas")

    def test_delete_schema(self, client):
        with patch.object(httpx.Client, "delete", return_value=_json_response(None)) as mock_delete:
            client.custom_objects.delete_schema("cars")

        assert mock_delete.call_args[0][0].endswith("/schemas/cars")


class TestFileMapperNamespace:
    def test_upload(self, client, tmp_path):
        src = tmp_path / "module.html"
        src.write_text("<p>hi</p>")

        with patch.object(httpx.Client, "post", return_value=_json_response({"path": "x"})) as mock_post:
            client.file_mapper.upload(src, "my theme/module.html")

        url = mock_post.call_args[0][0]
        assert url.endswith("/content/filemapper/v1/upload/my%20theme%2Fmodule.html")
        assert "file" in mock_post.call_args[1]["files"]
        assert "Content-Type" not in mock_post.call_args[1]["headers"]

    def test_fetch_module(self, client):
        with patch.object(httpx.Client, "get", return_value=_json_response({"id": 7})) as mock_get:
            client.file_mapper.fetch_module(7)

        assert mock_get.call_args[0][0].endswith("/content/filemapper/v1/modules/7")

    def test_fetch_file_stream(self, client, tmp_path):
        response = MagicMock()
        response.status_code = 200
        response.headers = httpx.Headers(
            {"Content-Disposition": 'attachment; filename="page.html"; creation-date="100"; modification-date="200"'}
        )
        response.iter_bytes.return_value = [b"<html>", b"</html>"]
        stream = MagicMock()
        stream.__enter__.return_value = response

        destination = tmp_path / "out" / "page.html"
        with patch.object(httpx.Client, "stream", return_value=stream) as mock_stream:
            node = client.file_mapper.fetch_file_stream("site/page.html", destination)

        assert destination.read_bytes() == b"<html></html>"
        assert mock_stream.call_args[0][1].endswith("/stream/site%2Fpage.html")
        assert node.name == "page.html"
        assert node.path == "/site/page.html"
        assert node.created_at == 100
        assert node.updated_at == 200

    def test_fetch_file_stream_error(self, client, tmp_path):
        response = MagicMock(spec=httpx.Response)
        response.status_code = 404
        response.text = "missing"
        stream = MagicMock()
        stream.__enter__.return_value = response

        with patch.object(httpx.Client, "stream", return_value=stream):
            with pytest.raises(APIError):
                client.file_mapper.fetch_file_stream("nope.html", tmp_path / "nope.html")

        assert not (tmp_path / "nope.html").exists()

    def test_download_variants(self, client):
        with patch.object(httpx.Client, "get", return_value=_json_response({})) as mock_get:
            client.file_mapper.download("a b")
            client.file_mapper.download_default("@hubspot/x")
            client.file_mapper.get_directory_contents("folder")

        urls = [call[0][0] for call in mock_get.call_args_list]
        assert urls[0].endswith("/download/a%20b")
        assert urls[1].endswith("/download-default/@hubspot/x")
        assert urls[2].endswith("/meta/folder")

    def test_delete_file_and_folder(self, client, caplog):
        with patch.object(httpx.Client, "delete", return_value=_json_response(None)) as mock_delete:
            client.file_mapper.delete_file("a/b.html")
            client.file_mapper.delete_folder("a")

        urls = [call[0][0] for call in mock_delete.call_args_list]
        assert urls[0].endswith("/delete/a%2Fb.html")
        assert urls[1].endswith("/delete/folder/a")
        assert "deprecated" in caplog.text

    def test_move_file(self, client):
        with patch.object(httpx.Client, "put", return_value=_json_response(None)) as mock_put:
            client.file_mapper.move_file("old.html", "new.html")

        assert mock_put.call_args[0][0].endswith("/rename/old.html")
        assert mock_put.call_args[1]["params"]["path"] == "new.html"

    def test_track_usage_unauthenticated(self, client):
        with patch.object(httpx.Client, "post", return_value=_json_response(None)) as mock_post:
            client.file_mapper.track_usage("cli-interaction", "INTERACTION", {"command": "upload"})

        assert mock_post.call_args[0][0].endswith("/content/filemapper/v1/cms-cli-usage")
        assert "Authorization" not in mock_post.call_args[1]["headers"]
        assert mock_post.call_args[1]["json"]["meta"] == {"command": "upload"}

    def test_track_usage_authenticated_for_personal_access_key(self):
        with DevClient(1, access_token="t", account_auth_type="personalaccesskey") as client:
            with patch.object(httpx.Client, "post", return_value=_json_response(None)) as mock_post:
                client.file_mapper.track_usage("vscode-extension-interaction", "INTERACTION")

        assert mock_post.call_args[0][0].endswith("/vscode-extension-usage/authenticated")

    def test_track_usage_unknown_event(self, client):
        with patch.object(httpx.Client, "post") as mock_post:
            assert client.file_mapper.track_usage("other", "INTERACTION") is None
        mock_post.assert_not_called()


class TestCreateNodeFromStreamResponse:
    def test_without_content_disposition(self):
        node = create_node_from_stream_response("folder/file.html/", {})
        assert node.path == "/folder/file.html"
        assert node.name == "file.html"
        assert node.created_at == 0
        assert node.folder is False
        assert node.children == []

    def test_invalid_dates_default_to_zero(self):
        headers = {"content-disposition": 'attachment; filename="x.css"; creation-date="soon"'}
        node = create_node_from_stream_response("/x.css", headers)
        assert node.name == "x.css"
        assert node.created_at == 0
