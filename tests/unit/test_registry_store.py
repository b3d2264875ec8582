import json
from pathlib import Path

import pytest

from allmind.errors import RegistryError
from allmind.registry.store import load_registry, parse_entry, parse_registry
from allmind.registry.types import ShimBinding


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_absent_registry_is_none(tmp_path: Path) -> None:
    assert load_registry(tmp_path / "registry.json") is None


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(RegistryError):
        load_registry(path)


def test_non_object_document_raises(tmp_path: Path) -> None:
    path = _write(tmp_path / "registry.json", [{"name": "a"}])
    with pytest.raises(RegistryError):
        load_registry(path)


def test_repos_must_be_a_list() -> None:
    with pytest.raises(RegistryError):
        parse_registry({"repos": {"name": "a"}})


def test_missing_repos_key_is_empty() -> None:
    assert parse_registry({"version": 2}).entries == ()


def test_utf8_bom_is_accepted(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    path.write_bytes(b"\xef\xbb\xbf" + json.dumps({"repos": [{"name": "a"}]}).encode())
    registry = load_registry(path)
    assert registry is not None
    assert [entry.name for entry in registry.entries] == ["a"]


def test_nameless_entries_are_skipped_in_order(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "registry.json",
        {"repos": [{"name": "b"}, {"path": "/x"}, "junk", {"name": "a"}]},
    )
    registry = load_registry(path)
    assert registry is not None
    assert [entry.name for entry in registry.entries] == ["b", "a"]


def test_parse_entry_fields() -> None:
    entry = parse_entry(
        {
            "id": "chinvex",
            "name": "chinvex",
            "repoPath": "/srv/software/chinvex",
            "scope": "software",
            "tags": ["python", "rag"],
            "chinvex_context": "chinvex",
            "shims": [{"name": "chinvex", "type": "venv"}, {"name": "chx"}],
            "created_at": "2025-01-01T00:00:00Z",
        }
    )
    assert entry is not None
    assert entry.path == "/srv/software/chinvex"
    assert entry.tags == ("python", "rag")
    assert entry.shims == (ShimBinding(name="chinvex", kind="venv"), ShimBinding(name="chx"))
    assert entry.shim_names == ("chinvex", "chx")
    assert entry.updated_at is None


def test_parse_entry_shim_shapes() -> None:
    as_names = parse_entry({"name": "a", "shims": ["one", "", "two"]})
    single = parse_entry({"name": "b", "shims": {"name": "solo"}})
    garbage = parse_entry({"name": "c", "shims": 7})
    assert as_names is not None and as_names.shim_names == ("one", "two")
    assert single is not None and single.shim_names == ("solo",)
    assert garbage is not None and garbage.shim_names == ()


def test_resolve_path_defaults_to_root_child(tmp_path: Path) -> None:
    entry = parse_entry({"name": "tool"})
    assert entry is not None
    assert entry.resolve_path(tmp_path) == tmp_path / "tool"


def test_undecodable_registry_raises(tmp_path: Path) -> None:
    path = tmp_path / "registry.json"
    path.write_bytes(b'{"repos": [{"name": "\xff"}]}')
    with pytest.raises(RegistryError, match="cannot decode"):
        load_registry(path)
