from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.host_config import get_hostname_settings_file

BYTES_PER_TB = 1024**4


class Settings(BaseSettings):
    # Synology DSM appliance
    synology_ip: str
    synology_user: str
    synology_pass: SecretStr
    dsm_port: int = 5000
    dsm_scheme: str = "http"

    # Folder measurement
    shared_folder_path: str = "/Moms-Storage"
    max_size_tb: float = Field(6, gt=0)  # Capacity the folder is measured against

    # Timing
    request_timeout_seconds: float = Field(10.0, gt=0)
    poll_interval_seconds: float = Field(30.0, ge=0)
    max_restarts: int = Field(1, ge=0)  # Restarts per run after a failed status poll

    # Schedule: every hour at schedule_minute within schedule_hours
    schedule_hours: str = "8-22"
    schedule_minute: int = 0
    run_on_startup: bool = True

    # HTTP listener
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_file_path: str = "logs/folder_size_agent.log"
    log_retention_days: int = 30

    model_config = SettingsConfigDict(env_file=get_hostname_settings_file())

    @property
    def dsm_url(self) -> str:
        return f"{self.dsm_scheme}://{self.synology_ip}:{self.dsm_port}"

    @property
    def max_size_bytes(self) -> int:
        return int(self.max_size_tb * BYTES_PER_TB)

    @property
    def log_directory(self) -> Path:
        """Returns log directory as a Path object"""
        return Path(self.log_file_path).parent

    @property
    def config_file_info(self) -> dict:
        """Return information about which configuration file is being used."""
        from .utils.host_config import get_hostname, list_all_settings_files

        return {
            "hostname": get_hostname(),
            "active_config_file": get_hostname_settings_file(),
            "all_available_configs": list_all_settings_files(),
        }
