"""Strap registry package."""

from allmind.registry.store import load_registry, parse_registry, read_json_document
from allmind.registry.types import Registry, RegistryEntry, ShimBinding

__all__ = [
    "Registry",
    "RegistryEntry",
    "ShimBinding",
    "load_registry",
    "parse_registry",
    "read_json_document",
]
