"""Find the texture node driving a material attribute."""

from __future__ import annotations

from typing import Optional

from ..core.errors import MissingAttributeError
from ..core.logging import ExportLogger
from ..host.graph import SceneGraph, ShadingNode


def require_attribute(graph: SceneGraph, node: ShadingNode, name: str) -> None:
    if not graph.has_attribute(node, name):
        raise MissingAttributeError(node.name, name)


def get_value(graph: SceneGraph, node: ShadingNode, name: str):
    """Constant value of an attribute, raising if the node lacks it."""
    require_attribute(graph, node, name)
    return graph.get_attribute_value(node, name)


def get_float(graph: SceneGraph, node: ShadingNode, name: str) -> float:
    return float(get_value(graph, node, name))


def get_color(graph: SceneGraph, node: ShadingNode, name: str):
    value = get_value(graph, node, name)
    return (float(value[0]), float(value[1]), float(value[2]))


def resolve_texture_source(
    graph: SceneGraph,
    node: ShadingNode,
    attribute: str,
    log: Optional[ExportLogger] = None,
) -> Optional[ShadingNode]:
    """
    Return the node connected upstream of node.attribute, or None.

    An unconnected compound attribute (a color split in R/G/B channels) is
    represented by the first of its children that carries a connection.
    None means "use the constant value" and is not a failure; an attribute
    missing from the node raises MissingAttributeError.
    """
    require_attribute(graph, node, attribute)

    plug = attribute
    if not graph.is_attribute_connected(node, plug):
        plug = next((child for child in graph.get_attribute_children(node, attribute)
                     if graph.is_attribute_connected(node, child)), None)
        if plug is None:
            if log is not None:
                log.verbose(f"{node.name}.{attribute} has no input connection", 2)
            return None

    source = graph.resolve_connection_source(node, plug)
    if source is not None and log is not None:
        log.verbose(f"{node.name}.{plug} is driven by {source.name}", 2)
    return source
