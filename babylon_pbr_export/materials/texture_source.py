"""Backing file lookup and format validation for texture nodes."""

from __future__ import annotations

import os

from ..core.errors import UnsupportedInputError
from ..core.types import TextureNodeType
from ..host.graph import SceneGraph, ShadingNode

SUPPORTED_FORMATS = frozenset({"bmp", "gif", "jpg", "jpeg", "png", "tga"})

_PATH_ATTRIBUTES = {
    TextureNodeType.AI_IMAGE: "filename",
    TextureNodeType.MAYA_FILE: "fileTextureName",
}


def image_extension(path: str) -> str:
    """Extension token without the leading dot, case preserved."""
    return os.path.splitext(path)[1].replace(".", "")


def get_source_path(graph: SceneGraph, texture_node: ShadingNode) -> str:
    """Path stored on a file-backed texture node, unvalidated."""
    try:
        kind = TextureNodeType(texture_node.type_id)
    except ValueError:
        raise UnsupportedInputError(
            f"Texture {texture_node.name} (type id {texture_node.type_id:#x}) is not supported, "
            f"only file or aiImage textures are") from None

    path_attribute = _PATH_ATTRIBUTES[kind]
    if not graph.has_attribute(texture_node, path_attribute):
        raise UnsupportedInputError(f"Texture {texture_node.name} path is missing")
    return graph.get_attribute_value(texture_node, path_attribute) or ""


def locate_source(graph: SceneGraph, texture_node: ShadingNode) -> str:
    """
    Return the image file backing a texture node.

    Existence of the file is not checked here; packing fails later when the
    image cannot be opened.
    """
    path = get_source_path(graph, texture_node)
    if not path.strip():
        raise UnsupportedInputError(f"Texture {texture_node.name} path is missing or invalid")

    extension = image_extension(path)
    if extension not in SUPPORTED_FORMATS:
        raise UnsupportedInputError(
            f"Texture {texture_node.name} format '{extension}' is not supported and cannot be used")
    return path
