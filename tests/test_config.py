import logging
import sys

import pytest
from PySide6.QtCore import QSettings

from codearch.core import config as config_mod
from codearch.core.config import Config, load_config, save_config
from codearch.core.context import ProjectContext
from codearch.core.errors import DocumentError, SchemaError
from codearch.core.logging_config import LOGGER_NAME, configure_logging

from tests.project_fixtures import write_json


@pytest.fixture()
def isolated_settings(tmp_path, monkeypatch):
    """ Point QSettings at an ini file under tmp_path. """
    ini = tmp_path / "settings.ini"
    monkeypatch.setattr(config_mod, "_s", lambda: QSettings(str(ini), QSettings.Format.IniFormat))
    return ini


# --- Persisted configuration

def test_defaults_when_nothing_saved(isolated_settings):
    cfg = load_config()
    assert cfg == Config()
    assert cfg.document_ext == ".json"
    assert cfg.log_level == "INFO"


def test_save_and_load_round_trip(isolated_settings):
    cfg = Config(path_file_profile="/s/hero.schema.json", path_projects="/p", document_ext=".hero",
                 log_level="DEBUG")
    save_config(cfg)

    assert isolated_settings.exists()
    assert load_config() == cfg


# --- Opening a project

def test_open_resolves_schema(make_config, hero_file):
    with ProjectContext.open(make_config()) as ctx:
        assert ctx.schema["properties"]["armors"]["items"]["title"] == "Armor"
        assert ctx.projects_path == hero_file.parent
        assert ctx.base_path == ctx.schema_path.parent


def test_open_requires_schema_file_name(make_config, schema_dir):
    write_json(schema_dir / "hero.json", {"type": "object"})
    with pytest.raises(SchemaError, match="not a JSON Schema"):
        ProjectContext.open(make_config("hero.json"))


def test_open_requires_projects_dir(make_config, projects_dir):
    cfg = make_config()
    cfg.path_projects = str(projects_dir / "missing")
    with pytest.raises(DocumentError, match="does not exist"):
        ProjectContext.open(cfg)


def test_open_rejects_broken_reference(make_config, schema_dir):
    write_json(schema_dir / "broken.schema.json", {"type": "object", "properties": {"a": {"$ref": "gone.schema.json"}}})
    with pytest.raises(SchemaError):
        ProjectContext.open(make_config("broken.schema.json"))


def test_open_rejects_non_object_schema(make_config, schema_dir):
    write_json(schema_dir / "odd.schema.json", ["not", "a", "schema"])
    with pytest.raises(SchemaError, match="not a JSON object"):
        ProjectContext.open(make_config("odd.schema.json"))


def test_empty_project_logs_warning(make_config, caplog):
    with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
        ProjectContext.open(make_config()).close()
    assert "No documents found" in caplog.text


def test_close_clears_cache(service, hero_root):
    service.get_children(hero_root)
    assert len(service.cache) > 0
    service.ctx.close()
    assert len(service.cache) == 0


# --- Logging

def test_configure_logging_is_idempotent():
    logger = logging.getLogger(LOGGER_NAME)
    first = configure_logging("debug")
    second = configure_logging(logging.WARNING)

    assert first is second
    assert first.stream is sys.stderr
    assert logger.level == logging.WARNING
    assert sum(h is first for h in logger.handlers) == 1


def test_configure_logging_unknown_level_falls_back_to_info():
    configure_logging("chatty")
    assert logging.getLogger(LOGGER_NAME).level == logging.INFO
