import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from codearch.core.config import Config
from codearch.core.context import ProjectContext
from codearch.store.services import TreeService

from tests.project_fixtures import HERO_SCHEMA, WEAPON_SCHEMA, ARMOR_SCHEMA, hero_document, write_json


# --- Project fixtures ----------------------------------------------------------
@pytest.fixture()
def schema_dir(tmp_path):
    d = tmp_path / "schemas"
    d.mkdir()
    write_json(d / "hero.schema.json", HERO_SCHEMA)
    write_json(d / "weapon.schema.json", WEAPON_SCHEMA)
    write_json(d / "armor.schema.json", ARMOR_SCHEMA)
    return d


@pytest.fixture()
def projects_dir(tmp_path):
    d = tmp_path / "projects"
    d.mkdir()
    return d


@pytest.fixture()
def hero_file(projects_dir):
    return write_json(projects_dir / "Conan.json", hero_document())


@pytest.fixture()
def make_config(schema_dir, projects_dir):
    def _mk(schema_name: str = "hero.schema.json") -> Config:
        return Config(path_file_profile=str(schema_dir / schema_name), path_projects=str(projects_dir))

    return _mk


@pytest.fixture()
def make_service(make_config, qapp):
    """ Open a project on the given top-level schema file and wrap it in a TreeService. """
    opened = []

    def _mk(schema_name: str = "hero.schema.json") -> TreeService:
        ctx = ProjectContext.open(make_config(schema_name))
        opened.append(ctx)
        return TreeService(ctx)

    yield _mk
    for ctx in opened:
        ctx.close()


@pytest.fixture()
def service(make_service):
    return make_service()


@pytest.fixture()
def ctx(service):
    return service.ctx


@pytest.fixture()
def hero_root(service, hero_file):
    roots = service.get_children()
    return next(r for r in roots if r.file_path == str(hero_file))


@pytest.fixture()
def changes(service):
    """ Records every treeChanged emission of the service. """
    seen = []
    service.treeChanged.connect(lambda: seen.append(True))
    return seen


@pytest.fixture()
def diagnostics(service):
    seen = []
    service.diagnosticReported.connect(lambda msg: seen.append(msg))
    return seen
