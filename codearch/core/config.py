from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel
from PySide6.QtCore import QSettings

# QSettings scope
ORG = "CodeArchitect"
APP = "codearch"

DEFAULT_EXT = ".json"


class Config(BaseModel):
    path_file_profile: str = ""
    path_projects: str = ""
    document_ext: str = DEFAULT_EXT
    log_level: str = "INFO"

    @property
    def schema_path(self) -> Path:
        return Path(self.path_file_profile)

    @property
    def projects_path(self) -> Path:
        return Path(self.path_projects)


def _s() -> QSettings:
    return QSettings(ORG, APP)


def load_config() -> Config:
    s = _s()

    # --- Schema ---
    s.beginGroup("schema")
    path_file_profile = str(s.value("pathFileProfile", "", str))
    s.endGroup()

    # --- Projects ---
    s.beginGroup("projects")
    path_projects = str(s.value("pathProjects", "", str))
    document_ext = str(s.value("documentExt", DEFAULT_EXT, str)) or DEFAULT_EXT
    s.endGroup()

    # --- Logging ---
    s.beginGroup("logging")
    log_level = str(s.value("level", "INFO", str)) or "INFO"
    s.endGroup()

    return Config(
        path_file_profile=path_file_profile,
        path_projects=path_projects,
        document_ext=document_ext,
        log_level=log_level,
    )


def save_config(cfg: Config) -> None:
    s = _s()

    # --- Schema ---
    s.beginGroup("schema")
    s.setValue("pathFileProfile", cfg.path_file_profile)
    s.endGroup()

    # --- Projects ---
    s.beginGroup("projects")
    s.setValue("pathProjects", cfg.path_projects)
    s.setValue("documentExt", cfg.document_ext)
    s.endGroup()

    # --- Logging ---
    s.beginGroup("logging")
    s.setValue("level", cfg.log_level)
    s.endGroup()

    s.sync()
