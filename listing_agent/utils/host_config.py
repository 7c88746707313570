"""
Host-specific configuration file selection.

Every node of a cluster reads its own {hostname}-settings.env, created from
the shared settings.env the first time the agent starts on that host.
"""

import logging
import shutil
import socket
from pathlib import Path

BASE_SETTINGS_FILE = "settings.env"


def get_hostname() -> str:
    """Current hostname without domain."""
    return socket.gethostname().split('.')[0]


def get_hostname_settings_file() -> str:
    """
    Path of the settings file for this host.

    Creates {hostname}-settings.env from settings.env when it does not exist
    yet. Falls back to settings.env when neither can be used.
    """
    try:
        hostname = get_hostname()
        base_settings = Path(BASE_SETTINGS_FILE)
        host_settings = Path(f"{hostname}-settings.env")

        if host_settings.exists():
            logging.debug(f"Using existing host-specific configuration: {host_settings}")
            return str(host_settings)

        if not base_settings.exists():
            logging.debug(f"No {BASE_SETTINGS_FILE} found, using environment only")
            return BASE_SETTINGS_FILE

        shutil.copy2(base_settings, host_settings)
        content = host_settings.read_text(encoding="utf-8")
        header = (
            f"# Host-specific configuration for: {hostname}\n"
            f"# Generated from {BASE_SETTINGS_FILE}; edit freely for this node\n\n"
        )
        host_settings.write_text(header + content, encoding="utf-8")
        logging.info(f"Created host-specific configuration: {host_settings}")
        return str(host_settings)

    except OSError as e:
        logging.error(f"Error handling host-specific settings: {e}")
        return BASE_SETTINGS_FILE


def list_all_settings_files() -> list[str]:
    """List the base settings file and every host-specific one in the working directory."""
    settings_files = []

    if Path(BASE_SETTINGS_FILE).exists():
        settings_files.append(BASE_SETTINGS_FILE)

    for file_path in Path(".").glob("*-settings.env"):
        settings_files.append(str(file_path))

    return settings_files
