"""
subdivision: an addin composition engine.

Independent modules declare typed *addins* on logical *paths*, optionally
ordered relative to one another. After the engine starts, *builders* keyed by
addin type turn the ordered addins of a path into artifacts.

## Example

```python
from subdivision import Subdivision

engine = Subdivision()

# In the users module:
engine.register("Web/Routes", {"id": "verifyUser", "type": "Route", "order": 0, "verb": "use", "handler": verify})
engine.register("Web/Routes", {"type": "Route", "order": ">verifyUser", "verb": "get", "route": "/user", "handler": user})

# In the host:
await engine.start()
engine.add_builder("Route", route_builder)
artifacts = engine.build("Web/Routes")  # verify first, then user
```

The module-level functions operate on ``default_engine``, a process-wide
engine for hosts that load manifests from many modules.
"""

from typing import Any

from subdivision.addin import (
    Addin,
    AnchoredOrder,
    ChainedOrder,
    Order,
    addin_from_mapping,
    parse_order,
)
from subdivision.builders import Builder, BuilderRegistry
from subdivision.config import EngineConfig, LifecycleState
from subdivision.engine import Subdivision
from subdivision.errors import (
    AlreadyStartedError,
    DuplicateBuilderError,
    DuplicateIdError,
    InvalidAddinError,
    InvalidManifestError,
    NotReadyError,
    OrderCycleError,
    PathCycleError,
    SubdivisionError,
    UnknownTypeError,
    UnresolvedReferenceError,
)
from subdivision.lifecycle import Discovery, LifecycleGate
from subdivision.manifest import (
    PathDeclaration,
    discover_manifests,
    parse_manifest,
    read_manifest_modules,
)
from subdivision.ordering import resolve_order
from subdivision.store import DeclarationStore

default_engine = Subdivision()


def register(path: str, addin: Any) -> Addin:
    return default_engine.register(path, addin)


def add_builder(target: str, build: Builder) -> None:
    default_engine.add_builder(target, build)


def get_addins(path: str, /, **criteria: Any) -> tuple[Addin, ...]:
    return tuple(default_engine.get_addins(path, **criteria))


def build(path: str, /, **criteria: Any) -> tuple[Any, ...]:
    return default_engine.build(path, **criteria)


async def start(*discoveries: Discovery) -> None:
    await default_engine.start(*discoveries)


__all__ = [
    "Addin",
    "AlreadyStartedError",
    "AnchoredOrder",
    "Builder",
    "BuilderRegistry",
    "ChainedOrder",
    "DeclarationStore",
    "Discovery",
    "DuplicateBuilderError",
    "DuplicateIdError",
    "EngineConfig",
    "InvalidAddinError",
    "InvalidManifestError",
    "LifecycleGate",
    "LifecycleState",
    "NotReadyError",
    "Order",
    "OrderCycleError",
    "PathCycleError",
    "PathDeclaration",
    "Subdivision",
    "SubdivisionError",
    "UnknownTypeError",
    "UnresolvedReferenceError",
    "add_builder",
    "addin_from_mapping",
    "build",
    "default_engine",
    "discover_manifests",
    "get_addins",
    "parse_manifest",
    "parse_order",
    "read_manifest_modules",
    "register",
    "resolve_order",
    "start",
]
