"""Runtime material, texture and scene output data structures."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional, Tuple

from ..core.types import AddressMode, ShaderModel, TransparencyMode

Color3 = Tuple[float, float, float]

WHITE: Color3 = (1.0, 1.0, 1.0)
BLACK: Color3 = (0.0, 0.0, 0.0)

# Approximates the coat thickness the source shading model has no input for
CLEAR_COAT_TINT_THICKNESS = 0.65


@dataclass
class UVTransform:
    """Texture coordinate placement read from a texture node."""
    u_offset: float = 0.0
    v_offset: float = 0.0
    u_scale: float = 1.0
    v_scale: float = 1.0
    u_ang: float = 0.0
    v_ang: float = 0.0
    w_ang: float = 0.0  # the host only rotates around W
    wrap_u: AddressMode = AddressMode.WRAP
    wrap_v: AddressMode = AddressMode.WRAP
    coordinates_index: int = 0  # 0 = first UV set, 1 = any other set


@dataclass
class TextureReference:
    """A texture slot of an exported material."""
    id: str
    name: str = ""
    original_path: str = ""
    has_alpha: bool = False
    level: float = 1.0
    uv: UVTransform = field(default_factory=UVTransform)

    # Packed RGBA pixels (height, width, 4) when the texture is a composite
    bitmap: Optional[Any] = field(default=None, repr=False, compare=False)


@dataclass
class Material:
    """Fields shared by every exported material."""
    shader_model: ClassVar[ShaderModel] = ShaderModel.LEGACY
    custom_type: ClassVar[Optional[str]] = None

    id: str
    name: str = ""
    alpha: float = 1.0
    back_face_culling: bool = True
    is_unlit: bool = False


@dataclass
class LegacyMaterial(Material):
    """Minimal standard material emitted for non-physical host shaders."""
    diffuse: Color3 = (0.8, 0.8, 0.8)
    emissive: Color3 = BLACK


@dataclass
class UnlitMaterial(Material):
    shader_model: ClassVar[ShaderModel] = ShaderModel.UNLIT
    custom_type: ClassVar[Optional[str]] = "BABYLON.UnlitMaterial"

    base_color: Color3 = WHITE
    base_texture: Optional[TextureReference] = None
    alpha_cut_off: Optional[float] = None
    double_sided: bool = False
    transparency_mode: TransparencyMode = TransparencyMode.OPAQUE
    is_unlit: bool = True


@dataclass
class ClearCoat:
    """Secondary specular layer of a metallic-roughness material."""
    is_enabled: bool = True
    intensity: float = 1.0
    roughness: float = 0.0
    index_of_refraction: float = 1.5
    texture: Optional[TextureReference] = None
    bump_texture: Optional[TextureReference] = None
    is_tint_enabled: bool = False
    tint_color: Color3 = WHITE
    tint_texture: Optional[TextureReference] = None
    tint_thickness: float = CLEAR_COAT_TINT_THICKNESS


@dataclass
class PBRMetallicRoughnessMaterial(Material):
    shader_model: ClassVar[ShaderModel] = ShaderModel.METALLIC_ROUGHNESS
    custom_type: ClassVar[Optional[str]] = "BABYLON.PBRMetallicRoughnessMaterial"

    base_color: Color3 = WHITE
    base_texture: Optional[TextureReference] = None
    metallic: float = 1.0
    roughness: float = 1.0
    metallic_roughness_texture: Optional[TextureReference] = None
    occlusion_texture: Optional[TextureReference] = None
    occlusion_strength: float = 1.0
    emissive: Color3 = BLACK
    emissive_texture: Optional[TextureReference] = None
    normal_texture: Optional[TextureReference] = None
    alpha_cut_off: Optional[float] = None
    transparency_mode: TransparencyMode = TransparencyMode.OPAQUE
    double_sided: bool = False
    clear_coat: Optional[ClearCoat] = None


@dataclass
class PBRMaterial(Material):
    """Full PBR record a metallic-roughness material is upgraded to."""
    shader_model: ClassVar[ShaderModel] = ShaderModel.PBR
    custom_type: ClassVar[Optional[str]] = "BABYLON.PBRMaterial"

    albedo: Color3 = WHITE
    albedo_texture: Optional[TextureReference] = None
    metallic: Optional[float] = None
    roughness: Optional[float] = None
    metallic_texture: Optional[TextureReference] = None
    ambient_texture: Optional[TextureReference] = None
    use_roughness_from_metallic_texture_green: bool = False
    use_metallness_from_metallic_texture_blue: bool = False
    use_ambient_occlusion_from_metallic_texture_red: bool = False
    emissive: Color3 = BLACK
    emissive_texture: Optional[TextureReference] = None
    bump_texture: Optional[TextureReference] = None
    alpha_cut_off: Optional[float] = None
    transparency_mode: TransparencyMode = TransparencyMode.OPAQUE
    clear_coat: Optional[ClearCoat] = None

    @classmethod
    def from_metallic_roughness(cls, source: PBRMetallicRoughnessMaterial) -> "PBRMaterial":
        """Wrap a metallic-roughness record.

        The ORM map packs occlusion in R, roughness in G and metalness in B,
        so it feeds both the metallic and the ambient slot.
        """
        orm = source.metallic_roughness_texture
        return cls(
            id=source.id,
            name=source.name,
            alpha=source.alpha,
            back_face_culling=source.back_face_culling,
            is_unlit=source.is_unlit,
            albedo=source.base_color,
            albedo_texture=source.base_texture,
            metallic=source.metallic,
            roughness=source.roughness,
            metallic_texture=orm,
            ambient_texture=source.occlusion_texture,
            use_roughness_from_metallic_texture_green=orm is not None,
            use_metallness_from_metallic_texture_blue=orm is not None,
            use_ambient_occlusion_from_metallic_texture_red=(
                orm is not None and source.occlusion_texture is orm),
            emissive=source.emissive,
            emissive_texture=source.emissive_texture,
            bump_texture=source.normal_texture,
            alpha_cut_off=source.alpha_cut_off,
            transparency_mode=source.transparency_mode,
            clear_coat=source.clear_coat,
        )


@dataclass
class MultiMaterial:
    """A material group assigned per face subset, referencing members by id."""
    id: str
    name: str = ""
    materials: List[str] = field(default_factory=list)


@dataclass
class BabylonScene:
    """In-memory output scene the exported records are appended to."""
    output_path: str = ""
    materials_list: List[Material] = field(default_factory=list)
    multi_materials_list: List[MultiMaterial] = field(default_factory=list)

    def find_material(self, material_id: str) -> Optional[Material]:
        return next((m for m in self.materials_list if m.id == material_id), None)
