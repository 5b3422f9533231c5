"""Convert exported records into JSON-ready dictionaries."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import IntEnum
from typing import Any, Dict

from ..data.babylon_material import BabylonScene, Material, MultiMaterial, TextureReference

# Fields kept in memory only
_SKIPPED_FIELDS = frozenset({"bitmap", "original_path"})


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _convert(value: Any) -> Any:
    if isinstance(value, IntEnum):
        return int(value)
    if isinstance(value, TextureReference):
        return texture_to_dict(value)
    if is_dataclass(value):
        return _record_to_dict(value)
    if isinstance(value, (tuple, list)):
        return [_convert(v) for v in value]
    return value


def _record_to_dict(record) -> Dict[str, Any]:
    """Dataclass fields in camelCase; None values are omitted."""
    result: Dict[str, Any] = {}
    for f in fields(record):
        if f.name in _SKIPPED_FIELDS:
            continue
        value = getattr(record, f.name)
        if value is None:
            continue
        result[camel_case(f.name)] = _convert(value)
    return result


def texture_to_dict(texture: TextureReference) -> Dict[str, Any]:
    """Texture fields with its UV transform flattened in."""
    result = _record_to_dict(texture)
    result.update(result.pop("uv"))
    return result


def material_to_dict(material: Material) -> Dict[str, Any]:
    result = _record_to_dict(material)
    if material.custom_type is not None:
        result["customType"] = material.custom_type
    return result


def multi_material_to_dict(multi_material: MultiMaterial) -> Dict[str, Any]:
    return _record_to_dict(multi_material)


def scene_materials_to_dict(scene: BabylonScene) -> Dict[str, Any]:
    return {
        "materials": [material_to_dict(m) for m in scene.materials_list],
        "multiMaterials": [multi_material_to_dict(m) for m in scene.multi_materials_list],
    }
