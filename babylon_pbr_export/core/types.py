from dataclasses import dataclass
from enum import IntEnum


class ShaderType(IntEnum):
    """Host type ids of the surface shaders the exporter knows about."""
    AI_CAR_PAINT = 0x115d8b
    AI_FLAT = 0x115d85
    AI_LAMBERT = 0x115db0
    AI_STANDARD_SURFACE = 0x115d51
    AI_WIREFRAME = 0x115d08
    MAYA_BLINN = 0x52424c4e
    MAYA_LAMBERT = 0x524c414d
    MAYA_PHONG = 0x5250484f
    MAYA_SURFACE = 0x52535348


LEGACY_SHADER_TYPES = frozenset({
    ShaderType.MAYA_LAMBERT,
    ShaderType.MAYA_BLINN,
    ShaderType.MAYA_PHONG,
})


class TextureNodeType(IntEnum):
    """Host type ids of file-backed texture nodes."""
    AI_IMAGE = 0x115d17
    MAYA_FILE = 0x52544654


class AddressMode(IntEnum):
    """Texture wrap mode, numbered like the runtime's sampler constants."""
    CLAMP = 0
    WRAP = 1
    MIRROR = 2


class TransparencyMode(IntEnum):
    OPAQUE = 0
    ALPHATEST = 1
    ALPHABLEND = 2


class ShaderModel(IntEnum):
    """Runtime-facing material model an exported record belongs to."""
    LEGACY = 0
    UNLIT = 1
    METALLIC_ROUGHNESS = 2
    PBR = 3


@dataclass
class ExportSettings:
    """All export settings, populated from the caller's option mapping."""

    # Textures
    export_textures: bool = True
    write_textures: bool = True
    txt_quality: int = 100  # JPEG quality of packed composites

    # Materials
    full_pbr: bool = False

    # Files
    output_path: str = ""

    def __post_init__(self):
        self.txt_quality = max(1, min(100, int(self.txt_quality)))
