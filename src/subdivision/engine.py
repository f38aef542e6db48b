"""
The composition engine: registration, lifecycle, and ``build(path)``.

Builders for container types call back into :meth:`Subdivision.build` to
obtain the artifacts of a nested path. That indirect recursion is how trees
of any depth are composed; the engine only guards against a path being
re-entered while it is still being built.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from contextvars import ContextVar
from typing import Any

from subdivision.addin import Addin
from subdivision.builders import Builder, BuilderDecorator, BuilderRegistry
from subdivision.config import DEFAULT_CONFIG, EngineConfig, LifecycleState
from subdivision.errors import PathCycleError
from subdivision.lifecycle import Discovery, LifecycleGate
from subdivision.manifest import PathDeclaration
from subdivision.ordering import resolve_order
from subdivision.store import DeclarationStore

logger = logging.getLogger(__name__)


class Subdivision:
    """
    An addin composition engine.

    Example::

        engine = Subdivision()
        engine.register("Web/Routes", {"type": "Route", "verb": "get", "route": "/", "handler": index})
        await engine.start()
        engine.add_builder("Route", route_builder)
        routes = engine.build("Web/Routes")
    """

    def __init__(self, *, config: EngineConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.store = DeclarationStore(config=config)
        self.builders = BuilderRegistry()
        self.lifecycle = LifecycleGate(self.store)
        self._building: ContextVar[tuple[str, ...]] = ContextVar(
            f"subdivision_building_{id(self):x}", default=()
        )

    @property
    def state(self) -> LifecycleState:
        return self.lifecycle.state

    # Load phase

    def register(
        self, path: str, addin: Addin | Mapping[str, Any], *, source: str | None = None
    ) -> Addin:
        """
        Declare an addin on ``path``.

        :raises AlreadyStartedError: If ``start()`` has been called.
        :raises DuplicateIdError: If ``path`` already has an addin with the same id.
        """
        self.lifecycle.require_not_started("register")
        return self.store.register(path, addin, source=source)

    def register_declarations(self, declarations: Iterable[PathDeclaration]) -> None:
        self.lifecycle.require_not_started("register_declarations")
        self.store.extend(declarations)

    async def start(self, *discoveries: Discovery) -> None:
        await self.lifecycle.start(*discoveries)

    # Builders

    def add_builder(self, target: str, build: Builder) -> None:
        self.builders.add_builder(target, build)

    def builder(self, target: str) -> BuilderDecorator:
        return self.builders.builder(target)

    def get_builder(self, target: str) -> Builder:
        self.lifecycle.require_ready("get_builder")
        return self.builders.get_builder(target)

    # Build phase

    def get_addins(self, path: str, /, **criteria: Any) -> Sequence[Addin]:
        """
        The addins of ``path`` in resolved order, optionally filtered by ``criteria``.

        Filtering happens after ordering, so a matching addin may be chained to one
        that does not match.
        """
        self.lifecycle.require_ready("get_addins")
        ordered = resolve_order(self.store.list(path), path=path)
        if criteria:
            return tuple(addin for addin in ordered if addin.matches(criteria))
        return ordered

    def build(self, path: str, /, **criteria: Any) -> tuple[Any, ...]:
        """
        Build every addin of ``path`` in resolved order and return the artifacts.

        An empty path yields an empty tuple. Builders are looked up before any of
        them runs, so a missing one aborts the build without side effects.

        :raises NotReadyError: If called before ``start()`` completes.
        :raises UnknownTypeError: If an addin's type has no builder.
        :raises PathCycleError: If a builder re-enters a path that is still being built.
        """
        addins = self.get_addins(path, **criteria)
        stack = self._building.get()
        if path in stack:
            raise PathCycleError((*stack, path))

        dispatch = [(addin, self.builders.get_builder(addin.type)) for addin in addins]
        token = self._building.set((*stack, path))
        try:
            artifacts = []
            for addin, build in dispatch:
                logger.debug("Building %s on %r", addin.describe(), path)
                artifacts.append(build(addin))
        finally:
            self._building.reset(token)
        return tuple(artifacts)
