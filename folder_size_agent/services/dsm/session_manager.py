import logging
from typing import Optional

from .api_client import DsmApiClient
from .error_codes import AUTH_API, describe_error
from ...core.exceptions import (
    AuthenticationError,
    DiscoveryError,
    FolderSizeError,
    ProtocolError,
    TransportError,
)
from ...models import DsmSession

INFO_API = "SYNO.API.Info"
DIRSIZE_API = "SYNO.FileStation.DirSize"
SESSION_NAME = "FileStation"


class SessionManager:
    """
    Owns the DSM login/logout lifecycle.

    Each call to open() discovers the API routes and logs in fresh; sessions
    are never reused across runs.
    """

    def __init__(self, api_client: DsmApiClient, username: str, password: str):
        self._api_client = api_client
        self._username = username
        self._password = password

    async def open(self) -> DsmSession:
        auth_path, dirsize_path = await self._discover_routes()

        logging.info("Starting DSM login")
        response = await self._api_client.request(
            auth_path,
            AUTH_API,
            3,
            "login",
            account=self._username,
            passwd=self._password,
            session=SESSION_NAME,
            format="sid",
        )

        if not response.success:
            raise AuthenticationError(
                f"DSM login rejected for user '{self._username}'",
                operation="login",
                error=response.error,
                description=describe_error(AUTH_API, response.error),
            )

        sid: Optional[str] = response.data.get("sid")
        if not sid:
            raise ProtocolError(
                "DSM login succeeded but response has no session id", "login"
            )

        session = DsmSession(sid=sid, auth_path=auth_path, dirsize_path=dirsize_path)
        logging.info(f"DSM login completed - session {session.masked_sid}")
        return session

    async def close(self, session: DsmSession) -> bool:
        """Log out. Failures are logged, never raised."""
        logging.info(f"Starting DSM logout for session {session.masked_sid}")
        try:
            response = await self._api_client.request(
                session.auth_path,
                AUTH_API,
                1,
                "logout",
                session=SESSION_NAME,
                _sid=session.sid,
            )
        except FolderSizeError as e:
            logging.warning(f"DSM logout failed (session left dangling): {e}")
            return False

        if not response.success:
            logging.warning(
                f"DSM logout rejected: {response.error} "
                f"({describe_error(AUTH_API, response.error) or 'unknown code'})"
            )
            return False

        logging.info("DSM logout completed")
        return True

    async def _discover_routes(self) -> tuple[str, str]:
        logging.info("Starting to retrieve API info")
        try:
            response = await self._api_client.request(
                "query.cgi",
                INFO_API,
                1,
                "query",
                query=f"{AUTH_API},{DIRSIZE_API}",
            )
        except TransportError as e:
            raise DiscoveryError(
                f"API route table could not be fetched: {e}", operation="discover"
            ) from e

        if not response.success:
            raise DiscoveryError(
                "API info query rejected",
                operation="discover",
                error=response.error,
                description=describe_error(INFO_API, response.error),
            )

        try:
            auth_path = response.data[AUTH_API]["path"]
            dirsize_path = response.data[DIRSIZE_API]["path"]
        except (KeyError, TypeError) as e:
            raise DiscoveryError(
                f"API route table is missing {e}", operation="discover"
            ) from e

        logging.info(f"API info retrieved - auth: {auth_path}, dirsize: {dirsize_path}")
        return auth_path, dirsize_path
