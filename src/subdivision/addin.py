"""
Addin declarations and their order expressions.

An addin is a named, typed unit of extension attached to a logical path.
Its ``order`` is either anchored (a number) or chained (a run of markers
followed by the id of another addin on the same path)::

    {"id": "verifyUser", "type": "Route", "order": 0, ...}
    {"id": "doSomethingWithUser", "type": "Route", "order": ">verifyUser", ...}
    {"type": "Route", "order": ">>doSomethingWithUser", ...}
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias, final

from subdivision.config import DEFAULT_CONFIG, EngineConfig
from subdivision.errors import InvalidAddinError

RESERVED_KEYS = frozenset({"id", "type", "order"})


@final
@dataclass(frozen=True, slots=True)
class AnchoredOrder:
    """A numeric order. Lower values sort first."""

    value: int | float

    def __post_init__(self) -> None:
        if not math.isfinite(self.value):
            raise InvalidAddinError(f"Order must be a finite number, got {self.value!r}")


@final
@dataclass(frozen=True, slots=True)
class ChainedOrder:
    """An order relative to another addin: ``depth`` markers after ``reference``."""

    reference: str
    depth: int


Order: TypeAlias = AnchoredOrder | ChainedOrder


@final
@dataclass(frozen=True, kw_only=True, slots=True, weakref_slot=True)
class Addin(Mapping[str, Any]):
    """
    A single declared addin.

    The addin behaves as a read-only mapping over its payload, so builders can
    write ``addin["route"]`` or ``addin.get("route", "/")``.
    """

    type: str
    id: str | None = None
    order: Order = AnchoredOrder(0)
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    source: str | None = None
    """Where the addin was declared, for error reporting. Not compared."""

    def __post_init__(self) -> None:
        if not isinstance(self.payload, MappingProxyType):
            object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def __getitem__(self, key: str) -> Any:
        return self.payload[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.payload)

    def __len__(self) -> int:
        return len(self.payload)

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def matches(self, criteria: Mapping[str, Any]) -> bool:
        """Whether every criterion equals the addin's field or payload value."""
        for key, expected in criteria.items():
            if key == "type":
                actual = self.type
            elif key == "id":
                actual = self.id
            elif key in self.payload:
                actual = self.payload[key]
            else:
                return False
            if actual != expected:
                return False
        return True

    def describe(self) -> str:
        label = self.id if self.id is not None else "<anonymous>"
        if self.source is not None:
            return f"{label} ({self.type}, from {self.source})"
        return f"{label} ({self.type})"


def parse_order(value: object, *, config: EngineConfig = DEFAULT_CONFIG) -> Order:
    """
    Parse a raw ``order`` value.

    :param value: A number, ``None``, a numeric string, or a marker-run string such as ``">>id"``.
    :return: An AnchoredOrder or a ChainedOrder.
    :raises InvalidAddinError: If the value cannot be interpreted as an order.
    """
    if value is None:
        return AnchoredOrder(config.default_order)
    # bool is a subclass of int but never a meaningful order
    if isinstance(value, bool):
        raise InvalidAddinError(f"Order must be a number or a relative expression, got {value!r}")
    if isinstance(value, int | float):
        if not math.isfinite(value):
            raise InvalidAddinError(f"Order must be a finite number, got {value!r}")
        return AnchoredOrder(value)
    if isinstance(value, str):
        text = value.strip()
        depth = len(text) - len(text.lstrip(config.marker))
        if depth == 0:
            try:
                number = float(text)
            except ValueError:
                raise InvalidAddinError(
                    f"Order {value!r} is neither a number nor a relative expression"
                ) from None
            if not math.isfinite(number):
                raise InvalidAddinError(f"Order must be a finite number, got {value!r}")
            return AnchoredOrder(int(number) if number.is_integer() else number)
        reference = text[depth:].strip()
        if not reference:
            raise InvalidAddinError(f"Relative order {value!r} does not name an addin id")
        return ChainedOrder(reference=reference, depth=depth)
    raise InvalidAddinError(
        f"Order must be a number or a relative expression, got {type(value).__name__}"
    )


def addin_from_mapping(
    declaration: Mapping[str, Any],
    *,
    source: str | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Addin:
    """
    Convert a raw declaration mapping into an Addin.

    ``id``, ``type`` and ``order`` are lifted out; every other key becomes payload.
    """
    if isinstance(declaration, Addin):
        return declaration
    if not isinstance(declaration, Mapping):
        raise InvalidAddinError(
            f"Addin declaration must be a mapping, got {type(declaration).__name__}"
        )

    addin_type = declaration.get("type")
    if not isinstance(addin_type, str) or not addin_type:
        raise InvalidAddinError(f"Addin type must be a non-empty string, got {addin_type!r}")

    addin_id = declaration.get("id")
    if addin_id is not None and not isinstance(addin_id, str):
        raise InvalidAddinError(f"Addin id must be a string, got {type(addin_id).__name__}")
    if addin_id == "":
        addin_id = None

    return Addin(
        type=addin_type,
        id=addin_id,
        order=parse_order(declaration.get("order"), config=config),
        payload={
            key: value for key, value in declaration.items() if key not in RESERVED_KEYS
        },
        source=source,
    )
