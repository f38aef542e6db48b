from dataclasses import dataclass
from enum import Enum, auto


class LifecycleState(Enum):
    NOT_READY = auto()
    """
    Declarations may be registered; builds are rejected.
    """

    STARTING = auto()
    """
    ``start()`` is awaiting manifest discovery. Neither registration nor builds are accepted.
    """

    READY = auto()
    """
    The declaration store is frozen and ``build`` may be called.
    """


@dataclass(kw_only=True, frozen=True, slots=True, weakref_slot=True)
class EngineConfig:
    marker: str = ">"
    """
    The ordering marker. A run of one or more markers followed by an id is a relative order,
    e.g. ``">verifyUser"`` or ``">>doSomethingWithUser"``.
    """

    default_order: int | float = 0
    """
    The anchored order given to addins that declare no ``order``.
    """

    def __post_init__(self) -> None:
        if len(self.marker) != 1 or self.marker.isalnum() or self.marker.isspace():
            raise ValueError(f"Order marker must be a single symbol character, got {self.marker!r}")


DEFAULT_CONFIG = EngineConfig()
