"""
Synology DSM web API access.

Components:
- DsmApiClient: Parameterized GET requests against /webapi, parsed envelopes
- SessionManager: Route discovery, login and best-effort logout
- error_codes: Readable descriptions of DSM error codes for logging
"""

from .api_client import DsmApiClient, encode_path_list
from .session_manager import SessionManager

__all__ = ["DsmApiClient", "SessionManager", "encode_path_list"]
