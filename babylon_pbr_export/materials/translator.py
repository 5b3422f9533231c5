"""Translate host surface shader nodes into runtime material records."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

from ..core.errors import MissingAttributeError
from ..core.logging import ExportLogger
from ..core.types import LEGACY_SHADER_TYPES, ExportSettings, ShaderType, TransparencyMode
from ..data.babylon_material import (
    WHITE,
    BabylonScene,
    ClearCoat,
    LegacyMaterial,
    Material,
    PBRMaterial,
    PBRMetallicRoughnessMaterial,
    UnlitMaterial,
)
from ..host.graph import SceneGraph, ShadingNode
from .plug_resolver import get_color, get_float, resolve_texture_source
from .texture_export import TextureExporter

DEFAULT_ALPHA_CUTOFF = 0.5


def _scale(color: Tuple[float, float, float], weight: float) -> Tuple[float, float, float]:
    return (color[0] * weight, color[1] * weight, color[2] * weight)


class MaterialTranslator:
    """
    Dispatches a shader node on its type id to one translation function and
    appends the resulting record to the output scene.

    Legacy Maya shaders get a minimal standard material, aiFlat an unlit
    material and aiStandardSurface a metallic-roughness material. Every other
    type is reported and skipped.
    """

    def __init__(self, graph: SceneGraph, settings: ExportSettings,
                 scene: BabylonScene, log: ExportLogger):
        self.graph = graph
        self.settings = settings
        self.scene = scene
        self.log = log
        self.textures = TextureExporter(graph, settings, log)

        self._translators: Dict[int, Callable[[ShadingNode], Material]] = {
            ShaderType.AI_FLAT: self._export_flat,
            ShaderType.AI_STANDARD_SURFACE: self._export_standard_surface,
        }
        for shader_type in LEGACY_SHADER_TYPES:
            self._translators[shader_type] = self._export_legacy

    def export_material(self, node: ShadingNode) -> Optional[Material]:
        """Translate one node. Returns the appended record, or None when skipped."""
        self.log.message(f"Exporting material dependency node {node.name}", 1)

        translate = self._translators.get(node.type_id)
        if translate is None:
            self.log.warning(f"{node.name} is an unsupported material type and will not be exported", 2)
            return None

        try:
            material = translate(node)
        except MissingAttributeError as e:
            self.log.error(f"{e}, material {node.name} is not exported", 2)
            return None

        self.scene.materials_list.append(material)
        return material

    # -- legacy -------------------------------------------------------------

    def _export_legacy(self, node: ShadingNode) -> LegacyMaterial:
        self.log.message("Exporting Maya non-physical material as a minimal standard material", 2)
        color = get_color(self.graph, node, "color")
        diffuse = get_float(self.graph, node, "diffuse")
        transparency = get_color(self.graph, node, "transparency")
        return LegacyMaterial(
            id=node.uuid,
            name=node.name,
            diffuse=_scale(color, diffuse),
            emissive=get_color(self.graph, node, "incandescence"),
            alpha=1.0 - sum(transparency) / 3.0,
        )

    # -- aiFlat ---------------------------------------------------------------

    def _export_flat(self, node: ShadingNode) -> UnlitMaterial:
        self.log.message("Exporting AiFlat shader", 2)
        color = get_color(self.graph, node, "color")
        base_texture = self.textures.export_texture(node, "color")
        return UnlitMaterial(
            id=node.uuid,
            name=node.name,
            base_color=WHITE if base_texture is not None else color,
            base_texture=base_texture,
        )

    # -- aiStandardSurface ----------------------------------------------------

    def _export_standard_surface(self, node: ShadingNode) -> Material:
        self.log.message("Exporting AiStandardSurface shader", 2)
        graph, textures, log = self.graph, self.textures, self.log
        material = PBRMetallicRoughnessMaterial(id=node.uuid, name=node.name)

        log.verbose("Exporting AiStandardSurface base color and opacity", 1)
        base_weight = get_float(graph, node, "base")
        base_color = get_color(graph, node, "baseColor")
        opacity = get_color(graph, node, "opacity")
        opacity_avg = sum(opacity) / 3.0

        base_texture = textures.export_color_alpha(node, "baseColor", "opacity",
                                                   base_color, opacity_avg)
        material.base_texture = base_texture
        # Weight and color are already combined in the packed map
        material.base_color = ((base_weight, base_weight, base_weight) if base_texture is not None
                               else _scale(base_color, base_weight))
        material.alpha = 1.0 if base_texture is not None and base_texture.has_alpha else opacity_avg

        log.verbose("Exporting AiStandardSurface metalness and roughness", 1)
        metallic = get_float(graph, node, "metalness")
        roughness = get_float(graph, node, "specularRoughness")
        orm_texture = textures.export_orm(node, "metalness", "specularRoughness",
                                          metallic, roughness)
        if orm_texture is not None:
            metallic = roughness = 1.0
        material.metallic = metallic
        material.roughness = roughness
        material.metallic_roughness_texture = orm_texture
        material.occlusion_texture = orm_texture

        log.verbose("Exporting AiStandardSurface emission", 1)
        emission_weight = get_float(graph, node, "emission")
        emission_color = get_color(graph, node, "emissionColor")
        emissive_texture = textures.export_texture(node, "emissionColor")
        material.emissive_texture = emissive_texture
        material.emissive = ((emission_weight, emission_weight, emission_weight)
                             if emissive_texture is not None
                             else _scale(emission_color, emission_weight))

        log.verbose("Exporting AiStandardSurface normal", 1)
        material.normal_texture = textures.export_texture(node, "normalCamera")

        # A connection on coat enables the layer even when its weight is 0
        coat_weight = get_float(graph, node, "coat")
        if coat_weight > 0.0 or resolve_texture_source(graph, node, "coat") is not None:
            log.verbose("Exporting AiStandardSurface clear coat", 1)
            material.clear_coat = self._export_clear_coat(node, coat_weight)

        log.verbose("Exporting AiStandardSurface alpha mode", 1)
        if material.alpha != 1.0 or (base_texture is not None and base_texture.has_alpha):
            material.transparency_mode = TransparencyMode.ALPHABLEND
        # Unreachable while the rule above covers every translucent case
        if material.transparency_mode == TransparencyMode.ALPHATEST:
            material.alpha_cut_off = DEFAULT_ALPHA_CUTOFF

        if self.settings.full_pbr:
            log.verbose("Converting AiStandardSurface material to full PBR", 1)
            return PBRMaterial.from_metallic_roughness(material)
        return material

    def _export_clear_coat(self, node: ShadingNode, coat_weight: float) -> ClearCoat:
        graph, textures = self.graph, self.textures
        coat_roughness = get_float(graph, node, "coatRoughness")
        coat_color = get_color(graph, node, "coatColor")

        coat_texture = textures.export_clear_coat(node, "coat", "coatRoughness",
                                                  coat_weight, coat_roughness)
        tint_texture = textures.export_texture(node, "coatColor")

        return ClearCoat(
            is_enabled=True,
            intensity=1.0 if coat_texture is not None else coat_weight,
            roughness=1.0 if coat_texture is not None else coat_roughness,
            index_of_refraction=get_float(graph, node, "coatIOR"),
            texture=coat_texture,
            bump_texture=textures.export_texture(node, "coatNormal"),
            is_tint_enabled=tint_texture is not None or coat_color == WHITE,
            tint_color=WHITE if tint_texture is not None else coat_color,
            tint_texture=tint_texture,
        )
