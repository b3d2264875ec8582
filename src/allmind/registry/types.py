"""Strap registry data models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ShimBinding:
    name: str
    kind: str = ""


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    name: str
    path: str | None = None
    id: str | None = None
    scope: str | None = None
    tags: tuple[str, ...] = ()
    status: str | None = None
    chinvex_context: str | None = None
    shims: tuple[ShimBinding, ...] = ()
    created_at: str | None = None
    updated_at: str | None = None

    def resolve_path(self, root: Path) -> Path:
        if self.path:
            return Path(self.path).expanduser()
        return root / self.name

    @property
    def shim_names(self) -> tuple[str, ...]:
        return tuple(binding.name for binding in self.shims)


@dataclass(frozen=True, slots=True)
class Registry:
    entries: tuple[RegistryEntry, ...] = ()
