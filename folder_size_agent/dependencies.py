from functools import lru_cache
from typing import Any, Dict

from .config import Settings
from .services.dsm.api_client import DsmApiClient
from .services.dsm.session_manager import SessionManager
from .services.folder_size.orchestrator import FolderSizeOrchestrator
from .services.folder_size.result_cache import ResultCache
from .services.folder_size.schedule import HourlySchedule
from .services.folder_size.scheduler import FolderSizeScheduler

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    """Get the Settings singleton instance."""
    return Settings()


def get_result_cache() -> ResultCache:
    if "result_cache" not in _singletons:
        _singletons["result_cache"] = ResultCache()
    return _singletons["result_cache"]


def get_api_client() -> DsmApiClient:
    if "api_client" not in _singletons:
        settings = get_settings()
        _singletons["api_client"] = DsmApiClient(
            base_url=settings.dsm_url,
            timeout_seconds=settings.request_timeout_seconds,
        )
    return _singletons["api_client"]


def get_session_manager() -> SessionManager:
    if "session_manager" not in _singletons:
        settings = get_settings()
        _singletons["session_manager"] = SessionManager(
            api_client=get_api_client(),
            username=settings.synology_user,
            password=settings.synology_pass.get_secret_value(),
        )
    return _singletons["session_manager"]


def get_orchestrator() -> FolderSizeOrchestrator:
    if "orchestrator" not in _singletons:
        _singletons["orchestrator"] = FolderSizeOrchestrator(
            settings=get_settings(),
            api_client=get_api_client(),
            session_manager=get_session_manager(),
            result_cache=get_result_cache(),
        )
    return _singletons["orchestrator"]


def get_scheduler() -> FolderSizeScheduler:
    if "scheduler" not in _singletons:
        settings = get_settings()
        _singletons["scheduler"] = FolderSizeScheduler(
            settings=settings,
            orchestrator=get_orchestrator(),
            schedule=HourlySchedule.from_expression(
                settings.schedule_hours, settings.schedule_minute
            ),
        )
    return _singletons["scheduler"]


def reset_singletons() -> None:
    _singletons.clear()
