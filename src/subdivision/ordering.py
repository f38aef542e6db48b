"""
Order resolution for the addins of one path.

Relative orders form a dependency graph: a chained addin has an edge to the
addin it references. The graph is resolved in topological order so that a
chained addin's key is computed only after its reference's key is final::

    key(anchored) = order
    key(chained)  = key(reference) + depth * epsilon

``epsilon`` is chosen so that even the longest chain stays strictly below the
next larger anchored key. Keys are exact fractions, and ties are broken by
registration order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from fractions import Fraction
from graphlib import CycleError, TopologicalSorter

from subdivision.addin import Addin, AnchoredOrder, ChainedOrder
from subdivision.errors import DuplicateIdError, OrderCycleError, UnresolvedReferenceError

logger = logging.getLogger(__name__)


def _index_ids(addins: Sequence[Addin], path: str | None) -> dict[str, int]:
    indices: dict[str, int] = {}
    for index, addin in enumerate(addins):
        if addin.id is None:
            continue
        if addin.id in indices:
            raise DuplicateIdError(path, addin.id)
        indices[addin.id] = index
    return indices


def _reference_graph(
    addins: Sequence[Addin], indices: dict[str, int], path: str | None
) -> dict[int, int]:
    """Map each chained addin's index to the index of the addin it references."""
    references: dict[int, int] = {}
    for index, addin in enumerate(addins):
        if isinstance(addin.order, ChainedOrder):
            try:
                references[index] = indices[addin.order.reference]
            except KeyError:
                raise UnresolvedReferenceError(addin.id, addin.order.reference, path) from None
    return references


def _topological_order(
    addins: Sequence[Addin], references: dict[int, int], path: str | None
) -> tuple[int, ...]:
    sorter: TopologicalSorter[int] = TopologicalSorter()
    for index in range(len(addins)):
        if index in references:
            sorter.add(index, references[index])
        else:
            sorter.add(index)
    try:
        return tuple(sorter.static_order())
    except CycleError as e:
        _, nodes = e.args
        # The cycle follows reference-to-dependent edges; reversed it reads "x after y".
        raise OrderCycleError(
            [addins[node].id or "<anonymous>" for node in reversed(nodes)],
            path,
        ) from None


def _epsilon(anchors: Sequence[Fraction], max_depth: int) -> Fraction:
    distinct = sorted(set(anchors))
    gaps = [upper - lower for lower, upper in zip(distinct, distinct[1:])]
    smallest_gap = min(gaps) if gaps else Fraction(1)
    return smallest_gap / (max_depth + 1)


def resolve_keys(addins: Sequence[Addin], *, path: str | None = None) -> tuple[Fraction, ...]:
    """
    Compute the sort key of every addin, aligned with ``addins``.

    :raises DuplicateIdError: If two addins share an id.
    :raises UnresolvedReferenceError: If a relative order names an id absent from ``addins``.
    :raises OrderCycleError: If relative orders reference each other in a cycle.
    """
    indices = _index_ids(addins, path)
    references = _reference_graph(addins, indices, path)
    topological = _topological_order(addins, references, path)

    anchors: list[Fraction] = [Fraction(0)] * len(addins)
    depths: list[int] = [0] * len(addins)
    for index in topological:
        order = addins[index].order
        if isinstance(order, AnchoredOrder):
            anchors[index] = Fraction(order.value)
        else:
            reference = references[index]
            anchors[index] = anchors[reference]
            depths[index] = depths[reference] + order.depth

    epsilon = _epsilon(
        [anchors[index] for index in range(len(addins)) if index not in references],
        max(depths, default=0),
    )
    return tuple(anchor + depth * epsilon for anchor, depth in zip(anchors, depths))


def resolve_order(addins: Sequence[Addin], *, path: str | None = None) -> tuple[Addin, ...]:
    """
    Return ``addins`` in resolved order.

    The result is recomputed on every call and never cached.
    """
    keys = resolve_keys(addins, path=path)
    ranked = sorted(range(len(addins)), key=lambda index: (keys[index], index))
    if path is not None:
        logger.debug(
            "Resolved order of %r: %s",
            path,
            ", ".join(addins[index].describe() for index in ranked),
        )
    return tuple(addins[index] for index in ranked)
