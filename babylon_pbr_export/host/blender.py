"""SceneGraph adapter over Blender material node trees."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..core.types import ShaderType, TextureNodeType
from .graph import ShadingNode

if TYPE_CHECKING:
    import bpy

UNKNOWN_TYPE_ID = 0

_SHADER_TYPES = {
    'BSDF_PRINCIPLED': ShaderType.AI_STANDARD_SURFACE,
    'EMISSION': ShaderType.AI_FLAT,
    'BSDF_DIFFUSE': ShaderType.MAYA_LAMBERT,
}

# Exporter attribute -> Principled BSDF socket names (tried in order, handles
# the Blender 4.0 renames) or a constant when Blender has no such input.
_PRINCIPLED_ATTRIBUTES: Dict[str, Any] = {
    "base": 1.0,
    "baseColor": ('Base Color',),
    "opacity": ('Alpha',),
    "metalness": ('Metallic',),
    "specularRoughness": ('Roughness',),
    "emission": ('Emission Strength',),
    "emissionColor": ('Emission Color', 'Emission'),
    "normalCamera": ('Normal',),
    "coat": ('Coat Weight', 'Clearcoat'),
    "coatRoughness": ('Coat Roughness', 'Clearcoat Roughness'),
    "coatColor": ('Coat Tint',),
    "coatIOR": ('Coat IOR',),
    "coatNormal": ('Coat Normal', 'Clearcoat Normal'),
}

_EMISSION_ATTRIBUTES: Dict[str, Any] = {
    "color": ('Color',),
}

_DIFFUSE_ATTRIBUTES: Dict[str, Any] = {
    "color": ('Color',),
    "diffuse": 1.0,
    "transparency": (0.0, 0.0, 0.0),
    "incandescence": (0.0, 0.0, 0.0),
}

_ATTRIBUTE_TABLES = {
    'BSDF_PRINCIPLED': _PRINCIPLED_ATTRIBUTES,
    'EMISSION': _EMISSION_ATTRIBUTES,
    'BSDF_DIFFUSE': _DIFFUSE_ATTRIBUTES,
}

# Used when an older Blender lacks the socket
_SOCKET_FALLBACKS: Dict[str, Any] = {
    "coatColor": (1.0, 1.0, 1.0),
    "coatIOR": 1.5,
}

# Exporter attributes read as a color from a scalar socket
_SCALAR_AS_COLOR = frozenset({"opacity"})

# Nodes a texture connection is followed through
_PASS_THROUGH_NODES = {
    'NORMAL_MAP': 'Color',
    'BUMP': 'Height',
    'SEPRGB': 'Image',
    'SEPARATE_COLOR': 'Color',
}

_TEXTURE_ATTRIBUTES = frozenset({
    "fileTextureName", "offsetU", "offsetV", "repeatU", "repeatV", "rotateFrame",
    "wrapU", "wrapV", "mirrorU", "mirrorV",
})


def _abspath(path: str) -> str:
    import bpy
    return bpy.path.abspath(path)


def _get_input(node, *names):
    """Get a node input by trying multiple names."""
    for name in names:
        inp = node.inputs.get(name)
        if inp is not None:
            return inp
    return None


def _socket_names(entry) -> Optional[Tuple[str, ...]]:
    """Socket names of an attribute table entry, None for a constant."""
    if isinstance(entry, tuple) and entry and isinstance(entry[0], str):
        return entry
    return None


def _linked_node(socket):
    if socket is None or not socket.is_linked:
        return None
    return socket.links[0].from_node


class BlenderSceneGraph:
    """
    Exposes Blender materials through the SceneGraph queries.

    The Principled BSDF stands in for the standard surface, Emission for the
    flat shader and Diffuse BSDF for a Lambert. Image Texture nodes are file
    textures; their placement comes from a Mapping node on the Vector input
    and their UV set from a UV Map node further upstream.
    """

    def __init__(
        self,
        materials: Iterable["bpy.types.Material"],
        meshes: Optional[Iterable["bpy.types.Mesh"]] = None,
        path_resolver: Callable[[str], str] = _abspath,
    ):
        self._meshes = meshes
        self._abspath = path_resolver
        self._objects: Dict[str, Any] = {}  # uuid -> material shader node or texture node
        self._materials: List[ShadingNode] = []
        self._material_names: Dict[str, str] = {}  # uuid -> owning material name
        for material in materials:
            handle = self._register_material(material)
            if handle is not None:
                self._materials.append(handle)

    @property
    def material_nodes(self) -> Sequence[ShadingNode]:
        return list(self._materials)

    # -- registration -----------------------------------------------------------

    def _register_material(self, material) -> Optional[ShadingNode]:
        if material is None or not material.use_nodes or not material.node_tree:
            return None
        shader = self._find_surface_shader(material.node_tree)
        if shader is None:
            return None
        uuid = material.name_full
        self._objects[uuid] = shader
        self._material_names[uuid] = material.name
        return ShadingNode(uuid=uuid, name=material.name,
                           type_id=int(_SHADER_TYPES.get(shader.type, UNKNOWN_TYPE_ID)))

    def _find_surface_shader(self, node_tree):
        """Shader linked to the material output, else the first Principled BSDF."""
        for node in node_tree.nodes:
            if node.type == 'OUTPUT_MATERIAL':
                shader = _linked_node(node.inputs.get('Surface'))
                if shader is not None:
                    return shader
        for node in node_tree.nodes:
            if node.type == 'BSDF_PRINCIPLED':
                return node
        return None

    def _node_handle(self, owner_uuid: str, node) -> ShadingNode:
        uuid = f"{owner_uuid}/{node.name}"
        self._objects[uuid] = node
        self._material_names[uuid] = self._material_names[owner_uuid]
        type_id = TextureNodeType.MAYA_FILE if node.type == 'TEX_IMAGE' else UNKNOWN_TYPE_ID
        return ShadingNode(uuid=uuid, name=node.name, type_id=int(type_id))

    # -- SceneGraph ---------------------------------------------------------------

    def _table(self, node: ShadingNode) -> Dict[str, Any]:
        return _ATTRIBUTE_TABLES.get(self._objects[node.uuid].type, {})

    def _socket(self, node: ShadingNode, name: str):
        names = _socket_names(self._table(node).get(name))
        if names is None:
            return None
        return _get_input(self._objects[node.uuid], *names)

    def has_attribute(self, node: ShadingNode, name: str) -> bool:
        blender_node = self._objects.get(node.uuid)
        if blender_node is None:
            return False
        if blender_node.type == 'TEX_IMAGE':
            return name in _TEXTURE_ATTRIBUTES
        table = self._table(node)
        if name not in table:
            return False
        if _socket_names(table[name]) is None:
            return True
        return self._socket(node, name) is not None or name in _SOCKET_FALLBACKS

    def get_attribute_value(self, node: ShadingNode, name: str) -> Any:
        blender_node = self._objects[node.uuid]
        if blender_node.type == 'TEX_IMAGE':
            return self._texture_attribute(blender_node, name)

        if not self.has_attribute(node, name):
            raise KeyError(f"{node.name} has no attribute {name}")
        entry = self._table(node)[name]
        if _socket_names(entry) is None:
            return entry
        socket = self._socket(node, name)
        if socket is None:
            return _SOCKET_FALLBACKS[name]

        value = socket.default_value
        if name in _SCALAR_AS_COLOR:
            return (float(value),) * 3
        if isinstance(value, (int, float)):
            return float(value)
        return tuple(float(c) for c in value[:3])

    def get_attribute_children(self, node: ShadingNode, name: str) -> Sequence[str]:
        # Blender sockets are never split per channel
        return ()

    def is_attribute_connected(self, node: ShadingNode, name: str) -> bool:
        socket = self._socket(node, name)
        return socket is not None and socket.is_linked

    def resolve_connection_source(self, node: ShadingNode, name: str) -> Optional[ShadingNode]:
        source = _linked_node(self._socket(node, name))
        while source is not None and source.type in _PASS_THROUGH_NODES:
            upstream = _linked_node(source.inputs.get(_PASS_THROUGH_NODES[source.type]))
            if upstream is None:
                break
            source = upstream
        if source is None:
            return None
        return self._node_handle(node.uuid, source)

    def query_uv_set_linkage(self, texture_node: ShadingNode) -> Set[int]:
        uv_map = self._upstream(self._objects[texture_node.uuid], 'UVMAP')
        if uv_map is None or not uv_map.uv_map:
            return set()

        material_name = self._material_names[texture_node.uuid]
        indices = set()
        for mesh in self._consuming_meshes(material_name):
            names = [layer.name for layer in mesh.uv_layers]
            if uv_map.uv_map in names:
                indices.add(names.index(uv_map.uv_map))
        return indices

    # -- helpers ------------------------------------------------------------------

    def _consuming_meshes(self, material_name: str):
        meshes = self._meshes
        if meshes is None:
            import bpy
            meshes = bpy.data.meshes
        return [mesh for mesh in meshes
                if any(m is not None and m.name == material_name for m in mesh.materials)]

    def _upstream(self, texture, node_type: str):
        """Walk the Vector input chain of an image texture to a node of node_type."""
        node = _linked_node(texture.inputs.get('Vector'))
        while node is not None:
            if node.type == node_type:
                return node
            node = _linked_node(node.inputs.get('Vector'))
        return None

    def _texture_attribute(self, texture, name: str) -> Any:
        if name == "fileTextureName":
            image = texture.image
            if image is None or not image.filepath:
                return ""
            return os.path.normpath(self._abspath(image.filepath))

        extension = getattr(texture, 'extension', 'REPEAT')
        if name in ("wrapU", "wrapV"):
            return extension == 'REPEAT'
        if name in ("mirrorU", "mirrorV"):
            return extension == 'MIRROR'

        mapping = self._upstream(texture, 'MAPPING')
        location = self._mapping_value(mapping, 'Location', (0.0, 0.0, 0.0))
        scale = self._mapping_value(mapping, 'Scale', (1.0, 1.0, 1.0))
        rotation = self._mapping_value(mapping, 'Rotation', (0.0, 0.0, 0.0))
        values = {
            "offsetU": location[0],
            "offsetV": location[1],
            "repeatU": scale[0],
            "repeatV": scale[1],
            "rotateFrame": rotation[2],
        }
        if name not in values:
            raise KeyError(f"{texture.name} has no attribute {name}")
        return float(values[name])

    @staticmethod
    def _mapping_value(mapping, socket_name: str, default: Tuple[float, float, float]):
        if mapping is None:
            return default
        socket = mapping.inputs.get(socket_name)
        if socket is None:
            return default
        return tuple(socket.default_value)
