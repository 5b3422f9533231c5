"""In-memory SceneGraph implementation for scripted exports and tests."""

from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Set, Tuple

from .graph import ShadingNode


@dataclass
class _Attribute:
    value: Any = None
    children: Tuple[str, ...] = ()
    source: Optional[ShadingNode] = None


class MemorySceneGraph:
    """
    A shading graph held in plain dictionaries.

    Compound attributes are stored as their children plus a parent entry
    listing them; the parent's value is the tuple of the children's values.
    """

    def __init__(self):
        self._nodes: Dict[str, ShadingNode] = {}
        self._attributes: Dict[str, Dict[str, _Attribute]] = {}
        self._uv_links: Dict[str, Set[int]] = {}

    # -- building -----------------------------------------------------------

    def add_node(
        self,
        name: str,
        type_id: int,
        attributes: Optional[Mapping[str, Any]] = None,
        uuid: Optional[str] = None,
    ) -> ShadingNode:
        if uuid is None:
            uuid = str(uuid_lib.uuid5(uuid_lib.NAMESPACE_OID, name)).upper()
        node = ShadingNode(uuid=uuid, name=name, type_id=int(type_id))
        self._nodes[uuid] = node
        self._attributes[uuid] = {}
        for attr_name, value in (attributes or {}).items():
            self.set_attribute(node, attr_name, value)
        return node

    def set_attribute(self, node: ShadingNode, name: str, value: Any) -> None:
        attrs = self._attributes[node.uuid]
        attr = attrs.get(name)
        if attr is None:
            attrs[name] = _Attribute(value=value)
        else:
            attr.value = value

    def add_compound(self, node: ShadingNode, name: str,
                     children: Mapping[str, Any]) -> None:
        """Declare a compound attribute; children keep their mapping order."""
        for child_name, value in children.items():
            self.set_attribute(node, child_name, value)
        self._attributes[node.uuid][name] = _Attribute(children=tuple(children))

    def connect(self, source: ShadingNode, node: ShadingNode, name: str) -> None:
        attr = self._attributes[node.uuid].get(name)
        if attr is None:
            raise KeyError(f"{node.name} has no attribute {name}")
        attr.source = source

    def link_uv_sets(self, texture_node: ShadingNode, indices: Iterable[int]) -> None:
        self._uv_links[texture_node.uuid] = set(indices)

    def node(self, uuid: str) -> ShadingNode:
        return self._nodes[uuid]

    @property
    def nodes(self) -> Sequence[ShadingNode]:
        return list(self._nodes.values())

    @classmethod
    def from_dict(cls, description: Mapping[str, Any]) -> "MemorySceneGraph":
        """
        Build a graph from a JSON-style description:

        {"nodes": [{"uuid", "name", "type", "attributes": {...},
                    "compounds": {"baseColor": {"baseColorR": 0.8, ...}}}],
         "connections": [{"source": uuid, "target": uuid, "attribute": name}],
         "uvLinks": {uuid: [0, 1]}}
        """
        graph = cls()
        for entry in description.get("nodes", []):
            node = graph.add_node(entry["name"], entry["type"],
                                  entry.get("attributes"), uuid=entry.get("uuid"))
            for compound_name, children in entry.get("compounds", {}).items():
                graph.add_compound(node, compound_name, children)
        for link in description.get("connections", []):
            graph.connect(graph.node(link["source"]), graph.node(link["target"]),
                          link["attribute"])
        for texture_uuid, indices in description.get("uvLinks", {}).items():
            graph.link_uv_sets(graph.node(texture_uuid), indices)
        return graph

    # -- SceneGraph ---------------------------------------------------------

    def _get(self, node: ShadingNode, name: str) -> _Attribute:
        try:
            return self._attributes[node.uuid][name]
        except KeyError:
            raise KeyError(f"{node.name} has no attribute {name}") from None

    def has_attribute(self, node: ShadingNode, name: str) -> bool:
        return name in self._attributes.get(node.uuid, {})

    def get_attribute_value(self, node: ShadingNode, name: str) -> Any:
        attr = self._get(node, name)
        if attr.children:
            return tuple(self._get(node, child).value for child in attr.children)
        return attr.value

    def get_attribute_children(self, node: ShadingNode, name: str) -> Sequence[str]:
        return self._get(node, name).children

    def is_attribute_connected(self, node: ShadingNode, name: str) -> bool:
        return self._get(node, name).source is not None

    def resolve_connection_source(self, node: ShadingNode, name: str) -> Optional[ShadingNode]:
        return self._get(node, name).source

    def query_uv_set_linkage(self, texture_node: ShadingNode) -> Set[int]:
        return set(self._uv_links.get(texture_node.uuid, ()))
