"""Read-only view of the host's shading graph consumed by the exporter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Set


@dataclass(frozen=True)
class ShadingNode:
    """Handle to a host node. Holds identifiers only, never host objects."""
    uuid: str
    name: str
    type_id: int


class SceneGraph(Protocol):
    """
    Queries the exporter makes against the host scene.

    Attribute values are floats for scalars, tuples of floats for vectors,
    bools for flags and strings for paths. Compound attributes report their
    sub-channels through get_attribute_children() in declaration order.
    """

    def has_attribute(self, node: ShadingNode, name: str) -> bool:
        ...

    def get_attribute_value(self, node: ShadingNode, name: str) -> Any:
        ...

    def get_attribute_children(self, node: ShadingNode, name: str) -> Sequence[str]:
        ...

    def is_attribute_connected(self, node: ShadingNode, name: str) -> bool:
        ...

    def resolve_connection_source(self, node: ShadingNode, name: str) -> Optional[ShadingNode]:
        ...

    def query_uv_set_linkage(self, texture_node: ShadingNode) -> Set[int]:
        ...
