"""
Tests for DsmApiClient and DirSize path encoding.

The HTTP layer is a mocked requests.Session; nothing touches the network.
"""

from unittest.mock import Mock

import pytest
import requests

from folder_size_agent.core.exceptions import TransportError
from folder_size_agent.services.dsm.api_client import DsmApiClient, encode_path_list


def make_response(payload=None, status_code=200, json_error=None) -> Mock:
    response = Mock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} Server Error")
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def client():
    client = DsmApiClient("http://192.0.2.10:5000/", timeout_seconds=10)
    client._session = Mock()
    return client


class TestRequest:
    @pytest.mark.asyncio
    async def test_builds_url_and_query(self, client):
        client._session.get.return_value = make_response({"success": True, "data": {"taskid": "T1"}})

        response = await client.request(
            "entry.cgi", "SYNO.FileStation.DirSize", 2, "start", path="/Moms-Storage", _sid="abc"
        )

        assert response.success is True
        assert response.data == {"taskid": "T1"}
        client._session.get.assert_called_once_with(
            "http://192.0.2.10:5000/webapi/entry.cgi",
            params={
                "api": "SYNO.FileStation.DirSize",
                "version": "2",
                "method": "start",
                "path": "/Moms-Storage",
                "_sid": "abc",
            },
            timeout=10,
        )

    @pytest.mark.asyncio
    async def test_application_failure_is_returned_not_raised(self, client):
        client._session.get.return_value = make_response({"success": False, "error": {"code": 599}})

        response = await client.request("entry.cgi", "SYNO.FileStation.DirSize", 2, "status", taskid="T1")

        assert response.success is False
        assert response.error_code == 599
        assert response.data == {}

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self, client):
        client._session.get.side_effect = requests.exceptions.Timeout("read timed out")

        with pytest.raises(TransportError) as exc_info:
            await client.request("entry.cgi", "SYNO.FileStation.DirSize", 2, "status")

        assert exc_info.value.operation == "SYNO.FileStation.DirSize.status"

    @pytest.mark.asyncio
    async def test_connection_refused_raises_transport_error(self, client):
        client._session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TransportError):
            await client.request("query.cgi", "SYNO.API.Info", 1, "query")

    @pytest.mark.asyncio
    async def test_http_error_status_raises_transport_error(self, client):
        client._session.get.return_value = make_response(status_code=502)

        with pytest.raises(TransportError):
            await client.request("query.cgi", "SYNO.API.Info", 1, "query")

    @pytest.mark.asyncio
    async def test_non_json_body_raises_transport_error(self, client):
        client._session.get.return_value = make_response(json_error=ValueError("Expecting value"))

        with pytest.raises(TransportError):
            await client.request("query.cgi", "SYNO.API.Info", 1, "query")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            ["not", "an", "object"],
            {"data": {}},
            {"success": "true"},
            {"success": True, "data": ["x"]},
        ],
    )
    async def test_malformed_envelope_raises_transport_error(self, client, payload):
        client._session.get.return_value = make_response(payload)

        with pytest.raises(TransportError):
            await client.request("query.cgi", "SYNO.API.Info", 1, "query")

    def test_close_releases_session(self, client):
        client.close()

        client._session.close.assert_called_once()


class TestEncodePathList:
    def test_plain_path_is_unchanged(self):
        assert encode_path_list(["/Moms-Storage"]) == "/Moms-Storage"

    def test_multiple_paths_are_comma_joined(self):
        assert encode_path_list(["/photo", "/video"]) == "/photo,/video"

    def test_unsafe_characters_are_escaped(self):
        assert encode_path_list(["/Family Photos/æ"]) == "/Family%20Photos/%C3%A6"

    def test_existing_escapes_are_preserved(self):
        assert encode_path_list(["/Family%20Photos"]) == "/Family%20Photos"

    def test_lone_percent_is_escaped(self):
        assert encode_path_list(["/100% done"]) == "/100%25%20done"

    def test_backslash_is_left_unescaped(self):
        assert encode_path_list(["/share\\sub dir"]) == "/share\\sub%20dir"
