"""
The declaration store: addins grouped by logical path.

Independent modules append to the store during the load phase. Lists for the
same path are concatenated, never overwritten, and insertion order is kept as
the final ordering tie-break. Once frozen, the store is read-only.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from subdivision.addin import Addin, addin_from_mapping
from subdivision.config import DEFAULT_CONFIG, EngineConfig
from subdivision.errors import AlreadyStartedError, DuplicateIdError
from subdivision.manifest import PathDeclaration

logger = logging.getLogger(__name__)


class DeclarationStore:
    def __init__(self, *, config: EngineConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self._addins: dict[str, list[Addin]] = {}
        self._ids: dict[str, set[str]] = {}
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(
        self, path: str, addin: Addin | Mapping[str, Any], *, source: str | None = None
    ) -> Addin:
        """
        Append an addin to ``path``.

        :return: The registered Addin.
        :raises DuplicateIdError: If another addin on ``path`` already has the same id.
        :raises AlreadyStartedError: If the store has been frozen.
        """
        parsed = addin_from_mapping(addin, source=source, config=self.config)
        with self._lock:
            self._append(path, parsed)
        return parsed

    def extend(self, declarations: Iterable[PathDeclaration]) -> None:
        """Register every addin of ``declarations``; nothing is registered if any fails."""
        staged = [
            (declaration.path, addin_from_mapping(raw, source=declaration.source, config=self.config))
            for declaration in declarations
            for raw in declaration.addins
        ]
        with self._lock:
            self._check_writable()
            seen: dict[str, set[str]] = {}
            for path, addin in staged:
                if addin.id is None:
                    continue
                taken = seen.setdefault(path, set(self._ids.get(path, ())))
                if addin.id in taken:
                    raise DuplicateIdError(path, addin.id)
                taken.add(addin.id)
            for path, addin in staged:
                self._append(path, addin)

    def _check_writable(self) -> None:
        if self._frozen:
            raise AlreadyStartedError(
                "Declarations cannot be registered after the engine has started"
            )

    def _append(self, path: str, addin: Addin) -> None:
        self._check_writable()
        if addin.id is not None:
            ids = self._ids.setdefault(path, set())
            if addin.id in ids:
                raise DuplicateIdError(path, addin.id)
            ids.add(addin.id)
        self._addins.setdefault(path, []).append(addin)
        logger.debug("Registered addin %s on %r", addin.describe(), path)

    def list(self, path: str) -> Sequence[Addin]:
        """The addins of ``path`` in registration order, empty if none were registered."""
        return tuple(self._addins.get(path, ()))

    def paths(self) -> Sequence[str]:
        return tuple(self._addins)

    def path_exists(self, path: str) -> bool:
        return path in self._addins

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True
