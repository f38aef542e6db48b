"""
The lifecycle gate: ``NOT_READY -> STARTING -> READY``, one way, no reset.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Iterable

from subdivision.config import LifecycleState
from subdivision.errors import AlreadyStartedError, NotReadyError
from subdivision.manifest import PathDeclaration
from subdivision.store import DeclarationStore

logger = logging.getLogger(__name__)

Discovery = Awaitable[Iterable[PathDeclaration]]


class LifecycleGate:
    def __init__(self, store: DeclarationStore) -> None:
        self._store = store
        self._state = LifecycleState.NOT_READY
        self._lock = threading.Lock()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state is LifecycleState.READY

    def require_ready(self, operation: str) -> None:
        if self._state is not LifecycleState.READY:
            raise NotReadyError(f"{operation}() requires a started engine; call start() first")

    def require_not_started(self, operation: str) -> None:
        if self._state is not LifecycleState.NOT_READY:
            raise AlreadyStartedError(f"{operation}() is not allowed once start() has been called")

    def _begin(self) -> None:
        with self._lock:
            if self._state is not LifecycleState.NOT_READY:
                raise AlreadyStartedError("start() has already been called")
            self._state = LifecycleState.STARTING

    async def start(self, *discoveries: Discovery) -> None:
        """
        Await every discovery, register what they found, freeze the store and become ready.

        If any discovery fails, nothing it found is registered, the gate returns
        to ``NOT_READY`` and the error propagates.

        :raises AlreadyStartedError: On a second call.
        """
        self._begin()
        try:
            results = await asyncio.gather(*discoveries)
            self._store.extend(
                declaration for declarations in results for declaration in declarations
            )
            self._store.freeze()
        except BaseException:
            self._state = LifecycleState.NOT_READY
            raise
        self._state = LifecycleState.READY
        logger.info(
            "Composition engine ready with %d path(s)", len(self._store.paths())
        )
