"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from folder_size_agent.config import Settings
from folder_size_agent.dependencies import reset_singletons
from folder_size_agent.models import DsmSession
from folder_size_agent.services.dsm.api_client import DsmApiClient
from folder_size_agent.services.dsm.session_manager import SessionManager


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before each test."""
    reset_singletons()
    yield
    reset_singletons()


@pytest.fixture
def settings():
    """Settings without reading any .env file, and no waiting between polls."""
    return Settings(
        _env_file=None,
        synology_ip="192.0.2.10",
        synology_user="monitor",
        synology_pass="secret",
        shared_folder_path="/Moms-Storage",
        max_size_tb=6,
        poll_interval_seconds=0,
    )


@pytest.fixture
def dsm_session():
    return DsmSession(sid="sid-abcdef", auth_path="entry.cgi", dirsize_path="entry.cgi")


@pytest.fixture
def api_client():
    client = Mock(spec=DsmApiClient)
    client.request = AsyncMock()
    return client


@pytest.fixture
def session_manager(dsm_session):
    manager = Mock(spec=SessionManager)
    manager.open = AsyncMock(return_value=dsm_session)
    manager.close = AsyncMock(return_value=True)
    return manager
