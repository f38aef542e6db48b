"""
Exception hierarchy for addin composition.

Every error here signals a configuration defect discovered at startup or
build time. None of them is retried or recovered from inside the engine.
"""

from __future__ import annotations

from collections.abc import Sequence


class SubdivisionError(Exception):
    """Base class of every error raised by the composition engine."""


class InvalidAddinError(SubdivisionError, ValueError):
    """An addin declaration is malformed."""


class InvalidManifestError(SubdivisionError, ValueError):
    """A manifest's ``paths`` structure is malformed."""


class DuplicateIdError(SubdivisionError, ValueError):
    def __init__(self, path: str | None, addin_id: str) -> None:
        self.path = path
        self.addin_id = addin_id
        where = f" on path {path!r}" if path is not None else ""
        super().__init__(f"Duplicate addin id {addin_id!r}{where}")


class OrderCycleError(SubdivisionError, ValueError):
    """Relative order references form a cycle, so no total order exists."""

    def __init__(self, cycle: Sequence[str], path: str | None = None) -> None:
        self.cycle = tuple(cycle)
        self.path = path
        where = f" on path {path!r}" if path is not None else ""
        super().__init__(f"Order references form a cycle{where}: {' -> '.join(self.cycle)}")


class UnresolvedReferenceError(SubdivisionError, KeyError):
    def __init__(self, addin_id: str | None, reference: str, path: str | None = None) -> None:
        self.addin_id = addin_id
        self.reference = reference
        self.path = path
        super().__init__(reference)

    def __str__(self) -> str:
        source = repr(self.addin_id) if self.addin_id is not None else "anonymous addin"
        where = f" on path {self.path!r}" if self.path is not None else ""
        return f"Order of {source}{where} references unknown id {self.reference!r}"


class DuplicateBuilderError(SubdivisionError, ValueError):
    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"A builder for type {target!r} is already registered")


class UnknownTypeError(SubdivisionError, KeyError):
    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(target)

    def __str__(self) -> str:
        return f"No builder registered for type {self.target!r}"


class PathCycleError(SubdivisionError, RuntimeError):
    """A builder asked for a path that is already being built further up the stack."""

    def __init__(self, stack: Sequence[str]) -> None:
        self.stack = tuple(stack)
        super().__init__(f"Recursive build of path: {' -> '.join(self.stack)}")


class AlreadyStartedError(SubdivisionError, RuntimeError):
    pass


class NotReadyError(SubdivisionError, RuntimeError):
    pass
