from typing import Any, Dict, Optional

AUTH_API = "SYNO.API.Auth"
FILE_STATION_PREFIX = "SYNO.FileStation."

# Codes shared by every DSM web API
COMMON_ERROR_CODES: Dict[int, str] = {
    100: "Unknown error",
    101: "No parameter of API, method or version",
    102: "The requested API does not exist",
    103: "The requested method does not exist",
    104: "The requested version does not support the functionality",
    105: "The logged in session does not have permission",
    106: "Session timeout",
    107: "Session interrupted by duplicate login",
    119: "SID not found",
}

AUTH_ERROR_CODES: Dict[int, str] = {
    400: "No such account or incorrect password",
    401: "Account disabled",
    402: "Permission denied",
    403: "2-step verification code required",
    404: "Failed to authenticate 2-step verification code",
}

FILE_STATION_ERROR_CODES: Dict[int, str] = {
    400: "Invalid parameter of file operation",
    401: "Unknown error of file operation",
    402: "System is too busy",
    403: "Invalid user does this file operation",
    404: "Invalid group does this file operation",
    405: "Invalid user and group does this file operation",
    406: "Can't get user/group information from the account server",
    407: "Operation not permitted",
    408: "No such file or directory",
    409: "Non-supported file system",
    410: "Failed to connect internet-based file system",
    411: "Read-only file system",
    414: "File already exists",
    415: "Disk quota exceeded",
    416: "No space left on device",
    417: "Input/output error",
    418: "Illegal name or path",
    421: "Device or resource busy",
    599: "No such task of the file operation",
}


def describe_error(api: str, error: Optional[Dict[str, Any]]) -> Optional[str]:
    """Readable text for a DSM error payload, or None when the code is unknown."""
    if not error:
        return None

    code = error.get("code")
    if not isinstance(code, int):
        return None

    if code in COMMON_ERROR_CODES:
        return COMMON_ERROR_CODES[code]

    if api == AUTH_API:
        return AUTH_ERROR_CODES.get(code)
    if api.startswith(FILE_STATION_PREFIX):
        return FILE_STATION_ERROR_CODES.get(code)

    return None
