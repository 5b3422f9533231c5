"""UV placement and wrap mode extraction for texture nodes."""

from __future__ import annotations

from typing import Iterable

from ..core.logging import ExportLogger
from ..core.types import AddressMode
from ..data.babylon_material import UVTransform
from ..host.graph import SceneGraph, ShadingNode


def coordinates_index(uv_set_indices: Iterable[int], log: ExportLogger) -> int:
    """
    Map the host UV sets a texture is linked to onto the runtime's two UV channels.

    The first host UV set can never be deleted so it always maps to channel 0.
    Later sets have unstable ordinals and all map to channel 1.
    """
    indices = set(uv_set_indices)
    if not indices:
        return 0

    zeros = sum(1 for index in indices if index == 0)
    if 0 < zeros < len(indices):
        log.warning("Texture is linked to more than one UV set. "
                    "Only one UV set per texture is supported.", 3)
    return 1 if len(indices) - zeros > zeros else 0


def _read(graph: SceneGraph, node: ShadingNode, name: str, default):
    # aiImage nodes carry no place2d attributes
    if not graph.has_attribute(node, name):
        return default
    return graph.get_attribute_value(node, name)


def _address_mode(mirror: bool, wrap: bool) -> AddressMode:
    if mirror:
        return AddressMode.MIRROR
    if wrap:
        return AddressMode.WRAP
    return AddressMode.CLAMP


def extract_uv(graph: SceneGraph, texture_node: ShadingNode, log: ExportLogger) -> UVTransform:
    """Read offset, tiling, rotation, wrap modes and UV set of a texture node."""
    uv = UVTransform(
        u_offset=float(_read(graph, texture_node, "offsetU", 0.0)),
        v_offset=float(_read(graph, texture_node, "offsetV", 0.0)),
        u_scale=float(_read(graph, texture_node, "repeatU", 1.0)),
        v_scale=float(_read(graph, texture_node, "repeatV", 1.0)),
        w_ang=float(_read(graph, texture_node, "rotateFrame", 0.0)),
        wrap_u=_address_mode(bool(_read(graph, texture_node, "mirrorU", False)),
                             bool(_read(graph, texture_node, "wrapU", True))),
        wrap_v=_address_mode(bool(_read(graph, texture_node, "mirrorV", False)),
                             bool(_read(graph, texture_node, "wrapV", True))),
        coordinates_index=coordinates_index(graph.query_uv_set_linkage(texture_node), log),
    )

    if uv.w_ang != 0.0 and (uv.u_scale != 1.0 or uv.v_scale != 1.0):
        log.warning("Texture rotation and tiling (scale) are applied separately "
                    "and may combine unexpectedly in the renderer", 3)
    return uv
