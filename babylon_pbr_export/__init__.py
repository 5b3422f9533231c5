"""Shader-graph to PBR material export with texture channel packing."""

__version__ = "1.0.0"

from .core.errors import (
    ChannelPackError,
    ExportError,
    MissingAttributeError,
    UnsupportedInputError,
)
from .core.logging import ExportLogger
from .core.types import ExportSettings, ShaderType, TextureNodeType, TransparencyMode
from .host.graph import SceneGraph, ShadingNode
from .host.memory import MemorySceneGraph
from .session import ExportSession, build_settings

__all__ = (
    "ChannelPackError",
    "ExportError",
    "ExportLogger",
    "ExportSession",
    "ExportSettings",
    "MemorySceneGraph",
    "MissingAttributeError",
    "SceneGraph",
    "ShaderType",
    "ShadingNode",
    "TextureNodeType",
    "TransparencyMode",
    "UnsupportedInputError",
    "build_settings",
)
