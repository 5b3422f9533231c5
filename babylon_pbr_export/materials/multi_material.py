"""Order-independent identity of multi-material groups."""

from __future__ import annotations

from typing import List, Sequence

from ..host.graph import ShadingNode

SEPARATOR = "_"


def sort_members(materials: Sequence[ShadingNode]) -> List[ShadingNode]:
    return sorted(materials, key=lambda node: node.uuid)


def compute_identity(materials: Sequence[ShadingNode]) -> str:
    """Member UUIDs in ascending order joined by '_'."""
    return SEPARATOR.join(node.uuid for node in sort_members(materials))


def compute_name(materials: Sequence[ShadingNode]) -> str:
    """Member names joined by '_', ordered by member UUID like compute_identity()."""
    return SEPARATOR.join(node.name for node in sort_members(materials))
