"""
The builder registry: a one-to-one table from addin type to build function.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any, Protocol, TypeAlias

from subdivision.addin import Addin
from subdivision.errors import DuplicateBuilderError, UnknownTypeError

logger = logging.getLogger(__name__)


class Builder(Protocol):
    """Turns one addin into an artifact."""

    def __call__(self, addin: Addin, /) -> Any: ...


BuilderDecorator: TypeAlias = Callable[[Builder], Builder]


class BuilderRegistry:
    def __init__(self) -> None:
        self._builders: dict[str, Builder] = {}
        self._lock = threading.Lock()

    def add_builder(self, target: str, build: Builder) -> None:
        """
        Register ``build`` for addins of type ``target``.

        :raises DuplicateBuilderError: If ``target`` already has a builder.
        """
        if not callable(build):
            raise TypeError(f"Builder for {target!r} must be callable")
        with self._lock:
            if target in self._builders:
                raise DuplicateBuilderError(target)
            self._builders[target] = build
        logger.debug("Registered builder for type %r", target)

    def builder(self, target: str) -> BuilderDecorator:
        """Decorator form of :meth:`add_builder`."""

        def decorator(build: Builder) -> Builder:
            self.add_builder(target, build)
            return build

        return decorator

    def get_builder(self, target: str) -> Builder:
        try:
            return self._builders[target]
        except KeyError:
            raise UnknownTypeError(target) from None

    def has_builder(self, target: str) -> bool:
        return target in self._builders

    def targets(self) -> Sequence[str]:
        return tuple(self._builders)
