from pathlib import Path
from typing import Dict

from pydantic_settings import BaseSettings, SettingsConfigDict
from .utils.host_config import get_hostname_settings_file


class Settings(BaseSettings):
    # Listing scope
    root_path: str
    recurse: bool = True
    file_filter: str = r"[^\.].*"  # Every name that does not start with a dot
    root_path_variables: Dict[str, str] = {}  # Values for ${name} placeholders in root_path

    # Scheduling
    polling_interval_seconds: int = 60
    error_retry_delay_seconds: int = 5
    max_concurrent_listings: int = 8  # Sibling directories listed in parallel

    # Remote file system
    filesystem_backend: str = "local"  # local | memory
    local_filesystem_root: str = "data/lake"

    # Listing cursor persistence
    cursor_backend: str = "json"  # json | memory | redis
    cursor_file_path: str = "state/listing_cursor.json"
    cursor_redis_url: str = ""
    cursor_key: str = "listing-agent:cursor"

    # Downstream handoff
    sink_backend: str = "jsonl"  # jsonl | queue
    record_output_path: str = "output/records.jsonl"

    # Single file transfers
    put_directory: str = "/outbound/${relativePath}"
    transfer_chunk_size_kb: int = 4096

    # Logging
    log_level: str = "INFO"
    log_file_path: str = "logs/listing_agent.log"
    log_retention_days: int = 30

    model_config = SettingsConfigDict(env_file=get_hostname_settings_file())

    @property
    def log_directory(self) -> Path:
        return Path(self.log_file_path).parent

    @property
    def transfer_chunk_size(self) -> int:
        return self.transfer_chunk_size_kb * 1024

    @property
    def config_file_info(self) -> dict:
        """Return information about which configuration file is being used."""
        from .utils.host_config import get_hostname, list_all_settings_files

        return {
            "hostname": get_hostname(),
            "active_config_file": get_hostname_settings_file(),
            "all_available_configs": list_all_settings_files(),
        }
