"""Export session: owns the output scene and the set of exported materials."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence, Set

from .core.logging import ExportLogger
from .core.types import ExportSettings
from .data.babylon_material import BabylonScene, Material, MultiMaterial
from .host.graph import SceneGraph, ShadingNode
from .materials.multi_material import compute_identity, compute_name
from .materials.translator import MaterialTranslator

# Recognised option keys -> ExportSettings fields
_OPTION_KEYS = {
    "exportTextures": "export_textures",
    "writeTextures": "write_textures",
    "txtQuality": "txt_quality",
    "fullPBR": "full_pbr",
    "outputPath": "output_path",
}


def build_settings(options: Mapping[str, Any], log: Optional[ExportLogger] = None) -> ExportSettings:
    """Convert a caller option mapping to the ExportSettings dataclass."""
    values = {}
    for key, value in options.items():
        field_name = _OPTION_KEYS.get(key)
        if field_name is None:
            if log is not None:
                log.warning(f"Unknown export option '{key}' ignored")
            continue
        values[field_name] = value
    return ExportSettings(**values)


class ExportSession:
    """
    One material export run.

    A material is translated at most once per session, whether it is reached
    directly or through any number of multi-material groups. Single-threaded:
    the exported-id set is the one piece of shared mutable state.
    """

    def __init__(self, graph: SceneGraph, settings: Optional[ExportSettings] = None,
                 log: Optional[ExportLogger] = None):
        self.graph = graph
        self.settings = settings or ExportSettings()
        self.log = log or ExportLogger()
        self.scene = BabylonScene(output_path=self.settings.output_path)
        self.translator = MaterialTranslator(graph, self.settings, self.scene, self.log)
        self._exported: Set[str] = set()

    def is_exported(self, node: ShadingNode) -> bool:
        return node.uuid in self._exported

    def export_material(self, node: ShadingNode) -> Optional[Material]:
        """Translate a material unless this session already handled it."""
        if node.uuid in self._exported:
            return self.scene.find_material(node.uuid)
        self._exported.add(node.uuid)
        return self.translator.export_material(node)

    def export_materials(self, nodes: Iterable[ShadingNode]) -> int:
        """Export every node; returns how many records were produced."""
        return sum(1 for node in nodes if self.export_material(node) is not None)

    def export_multi_material(self, materials: Sequence[ShadingNode]) -> Optional[MultiMaterial]:
        """
        Export a multi-material group and any sub-material not exported yet.

        Member ids keep the given order, which face subsets index into; the
        group id and name are order independent. An empty group is skipped.
        """
        if not materials:
            self.log.warning("Multi-material without sub-materials will not be exported", 1)
            return None

        group_id = compute_identity(materials)
        existing = next((m for m in self.scene.multi_materials_list if m.id == group_id), None)
        if existing is not None:
            return existing

        multi_material = MultiMaterial(
            id=group_id,
            name=compute_name(materials),
            materials=[node.uuid for node in materials],
        )
        self.log.message(f"Exporting multi-material {multi_material.name}", 1)
        for sub_material in materials:
            self.export_material(sub_material)

        self.scene.multi_materials_list.append(multi_material)
        return multi_material

    def finish(self) -> BabylonScene:
        """Close the session, reporting a summary, and return the output scene."""
        self.log.message(
            f"Exported {len(self.scene.materials_list)} material(s), "
            f"{len(self.scene.multi_materials_list)} multi-material(s), "
            f"{self.log.warning_count} warning(s), {self.log.error_count} error(s)")
        self._exported.clear()
        return self.scene
