from __future__ import annotations

import os
import sys
from pathlib import Path

APP_DIR_NAME = "WorkLog"
DATA_DIR_ENV = "WORKLOG_DATA_DIR"


def data_directory() -> Path:
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    if sys.platform == "win32":
        local_appdata = os.environ.get("LOCALAPPDATA")
        base = Path(local_appdata) if local_appdata else Path.home() / "AppData" / "Local"
        return base / APP_DIR_NAME
    xdg_data = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg_data) if xdg_data else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME.lower()


def database_path(data_dir: Path | None = None) -> Path:
    return (data_dir or data_directory()) / "worklog.sqlite3"


def log_path(data_dir: Path | None = None) -> Path:
    return (data_dir or data_directory()) / "logs" / "worklog.log"


def ensure_directories(data_dir: Path | None = None) -> None:
    (data_dir or data_directory()).mkdir(parents=True, exist_ok=True)
