import pytest

from codearch.core.errors import DocumentError, ValidationError
from codearch.store.models import Collapsible

from tests.project_fixtures import read_json, write_json


# --- Roots

def test_one_root_per_document(service, projects_dir):
    write_json(projects_dir / "Conan.json", {})
    write_json(projects_dir / "Belit.json", {})
    (projects_dir / "readme.md").write_text("x", encoding="utf-8")

    roots = service.get_children()
    assert [r.label for r in roots] == ["Belit", "Conan"]
    assert all(r.path == [] and r.is_root for r in roots)
    assert all(r.description == "Hero" for r in roots)
    assert all(r.collapsible is Collapsible.COLLAPSED and not r.decoded for r in roots)
    assert service.get_cached_item(roots[0].file_path, []) is roots[0]


def test_root_presentation(hero_root):
    assert hero_root.icon == "symbol-object"
    assert hero_root.context_value == "item-object"


def test_parent_lookup(service, hero_root):
    service.get_children(hero_root)
    weapons = hero_root.children[0]
    axe = service.get_children(weapons)[1]

    assert service.get_parent(axe) is weapons
    assert service.get_parent(weapons) is hero_root
    assert service.get_parent(hero_root) is None


def test_expanding_vanished_path_raises(service, hero_root, hero_file):
    service.get_children(hero_root)
    weapons = hero_root.children[0]
    doc = read_json(hero_file)
    del doc["weapons"]
    write_json(hero_file, doc)

    with pytest.raises(DocumentError, match="not found"):
        service.get_children(weapons)


def test_refresh_emits(service, qtbot):
    with qtbot.waitSignal(service.treeChanged, timeout=1000):
        service.refresh()


# --- create_parent

def test_create_parent(service, projects_dir, qtbot):
    with qtbot.waitSignal(service.treeChanged, timeout=1000):
        target = service.create_parent("  Valeria ")

    assert target == projects_dir / "Valeria.json"
    doc = read_json(target)
    assert doc["$label"] == "Valeria"
    assert doc["name"] == "" and doc["alive"] is False
    assert doc["stats"] == {"hp": 0, "mp": 0}
    assert doc["weapons"] == [] and doc["inventory"] == []
    assert isinstance(doc["$id"], str)
    assert "$tags" not in doc

    assert "Valeria" in [r.label for r in service.get_children()]


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_parent_rejects_empty_name(service, projects_dir, changes, name):
    with pytest.raises(ValidationError):
        service.create_parent(name)
    assert changes == []
    assert list(projects_dir.iterdir()) == []


def test_create_parent_rejects_existing_document(service, hero_file, changes):
    before = hero_file.read_bytes()
    with pytest.raises(ValidationError, match="already exists"):
        service.create_parent("Conan")
    assert hero_file.read_bytes() == before
    assert changes == []


@pytest.mark.parametrize("name", ["../escape", "a/b", "a\\b", ".."])
def test_create_parent_rejects_path_like_names(service, projects_dir, changes, name):
    with pytest.raises(ValidationError, match="path separators"):
        service.create_parent(name)
    assert list(projects_dir.iterdir()) == []
    assert not (projects_dir.parent / "escape.json").exists()
    assert changes == []


def test_create_parent_requires_object_schema(make_service, schema_dir, projects_dir):
    write_json(schema_dir / "list.schema.json", {"type": "array", "items": {"type": "string"}})
    svc = make_service("list.schema.json")
    with pytest.raises(ValidationError, match="type object"):
        svc.create_parent("x")
    assert list(projects_dir.iterdir()) == []


def test_create_parent_tagged_root_registers_itself(make_service, schema_dir):
    write_json(schema_dir / "item.schema.json", {
        "type": "object",
        "properties": {
            "$label": {"type": "string", "format": "hidden"},
            "$tag": {"const": "Item", "format": "hidden"},
            "note": {"type": "null", "format": "hidden"},
        },
    })
    svc = make_service("item.schema.json")
    seen = []
    svc.diagnosticReported.connect(seen.append)

    doc = read_json(svc.create_parent("Lamp"))
    assert doc["$tags"] == [{"$tag": "Item", "$label": "Lamp", "$id": doc["$id"]}]
    assert "note" not in doc
    assert len(seen) == 1


# --- create_child_from

def test_create_child_appends_default(service, hero_root, hero_file, qtbot):
    service.get_children(hero_root)
    armors = hero_root.children[1]
    with qtbot.waitSignal(service.treeChanged, timeout=1000):
        service.create_child_from(armors, "Helm")

    doc = read_json(hero_file)
    assert len(doc["armors"]) == 2
    helm = doc["armors"][1]
    assert helm["$label"] == "Helm" and helm["defense"] == 0
    assert [e.label for e in service.get_children(armors)] == ["Shield", "Helm"]


def test_create_child_rejects_non_array(service, hero_root, hero_file, changes):
    service.get_children(hero_root)
    before = hero_file.read_bytes()
    weapons = hero_root.children[0]
    sword = service.get_children(weapons)[0]

    with pytest.raises(ValidationError, match="type array"):
        service.create_child_from(sword, "x")
    with pytest.raises(ValidationError, match="empty"):
        service.create_child_from(weapons, " ")
    assert hero_file.read_bytes() == before
    assert changes == []


def test_create_child_requires_items(service, hero_root):
    service.get_children(hero_root)
    weapons = hero_root.children[0]
    del weapons.schema["items"]
    with pytest.raises(ValidationError, match="items"):
        service.create_child_from(weapons, "x")


# --- remove_item

def test_remove_needs_confirmation(service, hero_root, hero_file, changes):
    service.get_children(hero_root)
    before = hero_file.read_bytes()

    assert service.remove_item(hero_root.children[0], confirmed=False) is False
    assert hero_file.read_bytes() == before
    assert changes == []


def test_remove_root_deletes_document(service, hero_root, hero_file, changes):
    service.get_children(hero_root)
    assert service.remove_item(hero_root)

    assert not hero_file.exists()
    assert service.get_children() == []
    assert len(service.cache) == 0
    assert len(changes) == 1


def test_remove_hidden_field(service, hero_root, hero_file):
    service.get_children(hero_root)
    skills = hero_root.find(["skills"])
    service.remove_item(skills)
    assert "skills" not in read_json(hero_file)


# --- rename_item

def test_rename_updates_label_and_tag(service, hero_root, hero_file, changes):
    service.get_children(hero_root)
    axe = service.get_children(hero_root.children[0])[1]

    service.rename_item(axe, " Great Axe ")

    doc = read_json(hero_file)
    assert doc["weapons"][1]["$label"] == "Great Axe"
    assert {"$tag": "Weapon", "$label": "Great Axe", "$id": "w-2"} in doc["$tags"]
    assert axe.label == "Great Axe"
    assert len(changes) == 1


def test_rename_rejects_empty_and_non_objects(service, hero_root, changes):
    service.get_children(hero_root)
    with pytest.raises(ValidationError):
        service.rename_item(hero_root, "")
    with pytest.raises(ValidationError, match="cannot be renamed"):
        service.rename_item(hero_root.find(["name"]), "x")
    assert changes == []


# --- Diagnostics

def test_decode_diagnostics_are_signalled(service, hero_file, qtbot):
    doc = read_json(hero_file)
    doc["mystery"] = 42
    write_json(hero_file, doc)
    root = service.get_children()[0]

    with qtbot.waitSignal(service.diagnosticReported, timeout=1000) as blocker:
        service.get_children(root)
    assert "mystery" in blocker.args[0]


def test_create_parent_minimal_schema(make_service, schema_dir, projects_dir):
    write_json(schema_dir / "min.schema.json", {
        "type": "object",
        "properties": {"name": {"type": "string"}, "$id": {}, "list": {"type": "array", "items": {"type": "string"}}},
    })
    svc = make_service("min.schema.json")
    doc = read_json(svc.create_parent("Hero"))

    assert list(doc) == ["name", "$id", "list"]
    assert doc["name"] == "" and doc["list"] == []
    assert isinstance(doc["$id"], str) and doc["$id"]
