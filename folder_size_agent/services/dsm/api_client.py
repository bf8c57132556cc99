import asyncio
import logging
import re
from typing import Any, Dict, Iterable
from urllib.parse import quote

import requests

from ...core.exceptions import TransportError
from ...models import ApiResponse

# Characters DSM accepts unescaped inside a path list (mirrors encodeurl)
_PATH_SAFE_CHARS = "!#$&'()*+,-./:;=?@[\\]^_|~%"
_LONE_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_path_list(paths: Iterable[str]) -> str:
    """
    Encode appliance paths for the DirSize 'path' parameter.

    Paths are joined with commas; unsafe characters are percent-encoded while
    existing %XX escapes, '/' and ',' are left alone.
    """
    encoded = []
    for path in paths:
        encoded.append(quote(_LONE_PERCENT.sub("%25", path), safe=_PATH_SAFE_CHARS))
    return ",".join(encoded)


class DsmApiClient:
    """
    Thin client for the Synology DSM web API (/webapi/*.cgi).

    Returns the parsed success/data/error envelope and leaves interpretation
    to the caller. Transport problems raise TransportError.
    """

    def __init__(self, base_url: str, timeout_seconds: float = 10.0):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(
        self, cgi_path: str, api: str, version: int, method: str, **params: Any
    ) -> ApiResponse:
        operation = f"{api}.{method}"
        url = f"{self._base_url}/webapi/{cgi_path}"
        query = {"api": api, "version": str(version), "method": method, **params}

        logging.debug(f"DSM request {operation} -> {url}")

        def _sync_get() -> Dict[str, Any]:
            response = self._session.get(url, params=query, timeout=self._timeout)
            response.raise_for_status()
            return response.json()

        try:
            payload = await asyncio.to_thread(_sync_get)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{operation} request failed: {e}", operation) from e
        except ValueError as e:
            raise TransportError(f"{operation} returned a non-JSON body: {e}", operation) from e

        return self._parse_envelope(payload, operation)

    def _parse_envelope(self, payload: Any, operation: str) -> ApiResponse:
        if not isinstance(payload, dict) or not isinstance(payload.get("success"), bool):
            raise TransportError(
                f"{operation} returned a malformed envelope: {payload!r}", operation
            )

        data = payload.get("data") or {}
        error = payload.get("error") or {}
        if not isinstance(data, dict) or not isinstance(error, dict):
            raise TransportError(
                f"{operation} returned a malformed envelope: {payload!r}", operation
            )

        return ApiResponse(success=payload["success"], data=data, error=error)

    def close(self) -> None:
        self._session.close()
