"""Read-only access to the strap registry document."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from allmind.errors import RegistryError
from allmind.registry.types import Registry, RegistryEntry, ShimBinding

logger = logging.getLogger(__name__)


def read_json_document(path: Path) -> dict[str, Any] | None:
    """Load a JSON object from ``path``.

    Returns None when the file does not exist. Raises RegistryError when it
    exists but cannot be read, is not valid JSON, or is not an object.
    """
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise RegistryError(f"cannot read {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise RegistryError(f"cannot decode {path}: {exc}") from exc
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise RegistryError(f"invalid JSON in {path}: {exc}") from exc
    if not isinstance(decoded, dict):
        raise RegistryError(f"{path} does not contain a JSON object")
    return decoded


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_shims(raw: object) -> tuple[ShimBinding, ...]:
    # The registry has carried shims as a list of objects, a list of names,
    # and (in older entries) a single object.
    items = raw if isinstance(raw, list) else [raw] if isinstance(raw, dict) else []
    bindings: list[ShimBinding] = []
    for item in items:
        if isinstance(item, str) and item.strip():
            bindings.append(ShimBinding(name=item.strip()))
        elif isinstance(item, dict):
            name = _optional_str(item.get("name"))
            if name:
                bindings.append(ShimBinding(name=name, kind=str(item.get("type") or "")))
    return tuple(bindings)


def parse_entry(raw: dict[str, Any]) -> RegistryEntry | None:
    name = _optional_str(raw.get("name"))
    if name is None:
        return None
    tags = raw.get("tags")
    return RegistryEntry(
        name=name,
        path=_optional_str(raw.get("repoPath") or raw.get("path")),
        id=_optional_str(raw.get("id")),
        scope=_optional_str(raw.get("scope")),
        tags=tuple(str(tag) for tag in tags) if isinstance(tags, list) else (),
        status=_optional_str(raw.get("status")),
        chinvex_context=_optional_str(raw.get("chinvex_context")),
        shims=_parse_shims(raw.get("shims")),
        created_at=_optional_str(raw.get("created_at")),
        updated_at=_optional_str(raw.get("updated_at")),
    )


def parse_registry(document: dict[str, Any]) -> Registry:
    raw_repos = document.get("repos")
    if raw_repos is None:
        return Registry()
    if not isinstance(raw_repos, list):
        raise RegistryError("registry 'repos' must be a list")
    entries: list[RegistryEntry] = []
    for index, raw in enumerate(raw_repos):
        entry = parse_entry(raw) if isinstance(raw, dict) else None
        if entry is None:
            logger.warning("Skipping registry entry #%d without a name", index)
            continue
        entries.append(entry)
    return Registry(entries=tuple(entries))


def load_registry(path: Path) -> Registry | None:
    """Load the registry, or None when the document is absent."""
    document = read_json_document(path)
    if document is None:
        return None
    return parse_registry(document)
