"""
Host-specific configuration management utility.

Selects a hostname-specific settings file when one exists, so the same
checkout can run against different appliances on different machines.
"""

import logging
import socket
from pathlib import Path

BASE_SETTINGS_FILE = "settings.env"


def get_hostname() -> str:
    """Get the current hostname (without domain)."""
    return socket.gethostname().split(".")[0]


def get_hostname_settings_file() -> str:
    """
    Get the appropriate settings file for this host.

    Logic:
    1. Get current hostname
    2. Use {hostname}-settings.env if it exists
    3. Otherwise fall back to settings.env

    Returns:
        str: Path to the settings file pydantic-settings should read
    """
    try:
        host_settings = Path(f"{get_hostname()}-settings.env")
        if host_settings.exists():
            logging.debug(f"Using host-specific configuration: {host_settings}")
            return str(host_settings)
    except OSError as e:
        logging.error(f"Error resolving host-specific settings: {e}")

    return BASE_SETTINGS_FILE


def list_all_settings_files() -> list[str]:
    """
    List all available settings files (base + host-specific).

    Returns:
        list[str]: List of settings file paths
    """
    settings_files = []

    if Path(BASE_SETTINGS_FILE).exists():
        settings_files.append(BASE_SETTINGS_FILE)

    for file_path in Path(".").glob("*-settings.env"):
        settings_files.append(str(file_path))

    return settings_files
