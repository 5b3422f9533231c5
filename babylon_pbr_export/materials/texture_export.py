"""Texture slot export: single textures, packed composites and output copies."""

from __future__ import annotations

import os
import shutil
from typing import Optional, Sequence

from ..core.errors import ExportError
from ..core.logging import ExportLogger
from ..core.types import ExportSettings
from ..data.babylon_material import TextureReference
from ..host.graph import SceneGraph, ShadingNode
from .channel_pack import ChannelPackRequest, pack
from .plug_resolver import resolve_texture_source
from .texture_source import locate_source
from .uv_transform import extract_uv

# Destination channel -> (source slot, source channel). Slots without a
# source image fall back to the request defaults.
COLOR_ALPHA_MAPPING = ((0, 0), (0, 1), (0, 2), (1, 0))
ORM_MAPPING = ((2, 0), (0, 1), (1, 1), (3, 0))  # slot 0 = roughness, 1 = metalness
CLEAR_COAT_MAPPING = ((0, 0), (1, 1), (2, 0), (3, 0))  # slot 0 = intensity, 1 = roughness


def texture_name(filename: str) -> str:
    return filename.replace(":", "_")


class TextureExporter:
    """
    Builds TextureReferences for the texture slots of a material node.

    Each export_* method returns None when the slot has no texture or when
    any step fails; failures are reported and the caller falls back to the
    constant parameter values.
    """

    def __init__(self, graph: SceneGraph, settings: ExportSettings, log: ExportLogger):
        self.graph = graph
        self.settings = settings
        self.log = log

    # -- single texture -------------------------------------------------------

    def export_texture(self, node: ShadingNode, plug: str) -> Optional[TextureReference]:
        if not self.settings.export_textures:
            return None
        self.log.verbose(f"Exporting texture {node.name}.{plug}", 2)
        try:
            texture_node = resolve_texture_source(self.graph, node, plug, self.log)
            if texture_node is None:
                return None
            texture = self._texture_from_node(texture_node, locate_source(self.graph, texture_node))
        except ExportError as e:
            self.log.error(str(e), 2)
            return None

        self.copy_to_output(texture)
        return texture

    # -- packed composites ----------------------------------------------------

    def export_color_alpha(
        self,
        node: ShadingNode,
        color_plug: str,
        alpha_plug: str,
        default_color: Sequence[float],
        default_opacity: float,
    ) -> Optional[TextureReference]:
        """Pack color RGB and opacity R into one RGBA image."""
        if not self.settings.export_textures:
            return None
        self.log.verbose(f"Exporting texture {node.name}.{color_plug} and {alpha_plug}", 2)
        try:
            color_node = resolve_texture_source(self.graph, node, color_plug, self.log)
            alpha_node = resolve_texture_source(self.graph, node, alpha_plug, self.log)
            if color_node is None and alpha_node is None:
                return None
            color_path = locate_source(self.graph, color_node) if color_node else None
            alpha_path = locate_source(self.graph, alpha_node) if alpha_node else None

            reference_node = color_node or alpha_node
            reference_path = color_path or alpha_path
            stem = os.path.splitext(os.path.basename(reference_path))[0]
            texture = self._texture_from_node(reference_node, reference_path)
            # Per material: materials sharing a color map differ in opacity
            texture.name = texture_name(f"{node.name}_{stem}_RGBA.png")
            texture.has_alpha = alpha_node is not None or default_opacity < 1.0
        except ExportError as e:
            self.log.error(str(e), 2)
            return None

        request = ChannelPackRequest(
            sources=[color_path, alpha_path],
            defaults=[default_color[0], default_color[1], default_color[2], default_opacity],
            mapping=COLOR_ALPHA_MAPPING,
            destination=os.path.join(os.path.dirname(reference_path), texture.name),
            label="Color and alpha",
        )
        return self._pack_into(texture, request)

    def export_orm(
        self,
        node: ShadingNode,
        metal_plug: str,
        roughness_plug: str,
        default_metallic: float,
        default_roughness: float,
    ) -> Optional[TextureReference]:
        """
        Pack roughness (G) and metalness (B) into an occlusion-roughness-metallic map.

        Occlusion is not an input of the source shader and is written as 1.0.
        """
        if not self.settings.export_textures:
            return None
        self.log.verbose(f"Exporting texture {node.name}.{metal_plug} and {roughness_plug}", 2)
        return self._export_two_channel(
            node, roughness_plug, metal_plug,
            defaults=[1.0, default_roughness, default_metallic, 1.0],
            mapping=ORM_MAPPING,
            filename=f"{node.name}_ORM.jpg",
            label="Metallic and roughness",
        )

    def export_clear_coat(
        self,
        node: ShadingNode,
        intensity_plug: str,
        roughness_plug: str,
        default_intensity: float,
        default_roughness: float,
    ) -> Optional[TextureReference]:
        """Pack clear coat intensity (R) and roughness (G)."""
        if not self.settings.export_textures:
            return None
        self.log.verbose(f"Exporting texture {node.name}.{intensity_plug} and {roughness_plug}", 2)
        return self._export_two_channel(
            node, intensity_plug, roughness_plug,
            defaults=[default_intensity, default_roughness, 0.0, 1.0],
            mapping=CLEAR_COAT_MAPPING,
            filename=f"{node.name}_coat.jpg",
            label="Coat intensity and roughness",
        )

    def _export_two_channel(self, node, first_plug, second_plug, defaults, mapping,
                            filename, label) -> Optional[TextureReference]:
        try:
            first_node = resolve_texture_source(self.graph, node, first_plug, self.log)
            second_node = resolve_texture_source(self.graph, node, second_plug, self.log)
            if first_node is None and second_node is None:
                return None
            first_path = locate_source(self.graph, first_node) if first_node else None
            second_path = locate_source(self.graph, second_node) if second_node else None

            reference_node = second_node or first_node
            reference_path = second_path or first_path
            texture = self._texture_from_node(reference_node, reference_path)
        except ExportError as e:
            self.log.error(str(e), 2)
            return None

        if first_path is not None and first_path == second_path:
            # Same file on both inputs: assumed to be packed already
            self.log.warning(
                f"{node.name}.{first_plug} and {node.name}.{second_plug} use the same file "
                f"'{os.path.basename(first_path)}', it is exported as an already packed texture", 2)
            self.copy_to_output(texture)
            return texture

        texture.name = texture_name(filename)
        request = ChannelPackRequest(
            sources=[first_path, second_path],
            defaults=defaults,
            mapping=mapping,
            destination=os.path.join(os.path.dirname(reference_path), texture.name),
            label=label,
        )
        return self._pack_into(texture, request)

    # -- helpers --------------------------------------------------------------

    def _texture_from_node(self, texture_node: ShadingNode, path: str) -> TextureReference:
        texture = TextureReference(
            id=texture_node.uuid,
            name=texture_name(os.path.basename(path)),
            original_path=path,
        )
        texture.uv = extract_uv(self.graph, texture_node, self.log)
        return texture

    def _pack_into(self, texture: TextureReference,
                   request: ChannelPackRequest) -> Optional[TextureReference]:
        pixels = pack(request, self.settings.txt_quality, self.log)
        if pixels is None:
            return None
        texture.bitmap = pixels
        texture.original_path = request.destination
        self.copy_to_output(texture)
        return texture

    def copy_to_output(self, texture: TextureReference) -> bool:
        """Copy a texture file into the scene output directory when enabled."""
        output_path = self.settings.output_path
        if not self.settings.write_textures or not output_path:
            return False

        dest_path = os.path.join(output_path, texture.name)
        try:
            os.makedirs(output_path, exist_ok=True)
            if os.path.abspath(texture.original_path) != os.path.abspath(dest_path):
                shutil.copy2(texture.original_path, dest_path)
        except OSError as e:
            self.log.error(f"Failed to copy texture {texture.name} to scene output path "
                           f"{output_path}: {e}", 3)
            return False

        self.log.message(f"Copied texture {texture.name} to scene output path {output_path}", 3)
        return True
