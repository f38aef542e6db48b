"""
Manifest modules: how independent modules declare their addins.

A manifest is a Python module named ``manifest`` that exposes a ``paths``
list. Each item groups addins under one logical path::

    paths = [
        {
            "path": "Web/Routes",
            "addins": [
                {"type": "Route", "order": 100, "verb": "get", "route": "/admin/log", "handler": get_log},
            ],
        },
    ]

Modules never import each other; the engine concatenates their declarations.
"""

from __future__ import annotations

import asyncio
import importlib
import logging
import pkgutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import ModuleType
from typing import Any, final

from subdivision.errors import InvalidManifestError

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class PathDeclaration:
    """A ``{path, addins[]}`` grouping supplied by one declaration source."""

    path: str
    addins: Sequence[Mapping[str, Any]]
    source: str | None = None
    """The module the declaration came from, for error reporting."""


def parse_manifest(paths: object, *, source: str | None = None) -> tuple[PathDeclaration, ...]:
    """
    Parse a manifest's ``paths`` value.

    :param paths: A sequence of ``{"path": str, "addins": [...]}`` mappings.
    :param source: The name of the declaring module.
    :raises InvalidManifestError: If the structure is malformed.
    """
    if isinstance(paths, str | bytes) or not isinstance(paths, Sequence):
        raise InvalidManifestError(
            f"Manifest paths must be a sequence, got {type(paths).__name__} in {source}"
        )

    declarations: list[PathDeclaration] = []
    for entry in paths:
        if not isinstance(entry, Mapping):
            raise InvalidManifestError(
                f"Manifest path entry must be a mapping, got {type(entry).__name__} in {source}"
            )
        path = entry.get("path")
        if not isinstance(path, str) or not path:
            raise InvalidManifestError(f"Manifest path must be a non-empty string, got {path!r} in {source}")
        addins = entry.get("addins", ())
        if isinstance(addins, str | bytes) or not isinstance(addins, Sequence):
            raise InvalidManifestError(
                f"Addins of {path!r} must be a sequence, got {type(addins).__name__} in {source}"
            )
        declarations.append(PathDeclaration(path=path, addins=tuple(addins), source=source))
    return tuple(declarations)


def read_manifest_module(module: ModuleType) -> tuple[PathDeclaration, ...]:
    try:
        paths = module.paths
    except AttributeError as e:
        raise InvalidManifestError(f"Manifest module {module.__name__} has no 'paths'") from e
    return parse_manifest(paths, source=module.__name__)


def read_manifest_modules(
    package: ModuleType | str, *, module_name: str = "manifest"
) -> tuple[PathDeclaration, ...]:
    """
    Import every ``module_name`` submodule below ``package`` and collect its declarations.

    Modules are visited in sorted order of their qualified names, so the resulting
    registration order does not depend on filesystem iteration order.
    """
    if isinstance(package, str):
        package = importlib.import_module(package)
    if not hasattr(package, "__path__"):
        raise InvalidManifestError(f"{package.__name__} is not a package")

    names = sorted(
        module_info.name
        for module_info in pkgutil.walk_packages(package.__path__, prefix=f"{package.__name__}.")
        if module_info.name.rsplit(".", 1)[-1] == module_name
    )
    declarations: list[PathDeclaration] = []
    for name in names:
        module = importlib.import_module(name)
        found = read_manifest_module(module)
        logger.debug("Read %d path declaration(s) from %s", len(found), name)
        declarations.extend(found)
    return tuple(declarations)


async def discover_manifests(
    package: ModuleType | str, *, module_name: str = "manifest"
) -> tuple[PathDeclaration, ...]:
    """Awaitable form of :func:`read_manifest_modules`, for ``Subdivision.start``."""
    return await asyncio.to_thread(read_manifest_modules, package, module_name=module_name)
