from folder_size_agent.services.dsm.error_codes import describe_error


def test_common_codes_apply_to_every_api():
    assert describe_error("SYNO.FileStation.DirSize", {"code": 119}) == "SID not found"
    assert describe_error("SYNO.API.Auth", {"code": 106}) == "Session timeout"


def test_same_code_differs_per_api():
    assert describe_error("SYNO.API.Auth", {"code": 400}) == "No such account or incorrect password"
    assert describe_error("SYNO.FileStation.DirSize", {"code": 400}) == "Invalid parameter of file operation"


def test_unknown_or_missing_code():
    assert describe_error("SYNO.FileStation.DirSize", {"code": 12345}) is None
    assert describe_error("SYNO.API.Auth", {}) is None
    assert describe_error("SYNO.API.Auth", {"code": "400"}) is None
