# helpers.py
import os
import shutil
import tempfile
import unittest

import numpy as np
from PIL import Image

from babylon_pbr_export.core.logging import ExportLogger
from babylon_pbr_export.core.types import ExportSettings, ShaderType, TextureNodeType
from babylon_pbr_export.host.memory import MemorySceneGraph

STANDARD_SURFACE_SCALARS = {
    "base": 1.0,
    "metalness": 0.2,
    "specularRoughness": 0.5,
    "emission": 0.0,
    "coat": 0.0,
    "coatRoughness": 0.1,
    "coatIOR": 1.5,
}

STANDARD_SURFACE_COLORS = {
    "baseColor": (0.8, 0.8, 0.8),
    "opacity": (1.0, 1.0, 1.0),
    "emissionColor": (1.0, 1.0, 1.0),
    "coatColor": (1.0, 1.0, 1.0),
}


def add_color(graph, node, name, value):
    """Add a compound color attribute split in R/G/B children."""
    graph.add_compound(node, name, {f"{name}R": value[0], f"{name}G": value[1], f"{name}B": value[2]})


def add_standard_surface(graph, name, uuid=None, **values):
    node = graph.add_node(name, ShaderType.AI_STANDARD_SURFACE, uuid=uuid)
    for attr, default in STANDARD_SURFACE_SCALARS.items():
        graph.set_attribute(node, attr, values.get(attr, default))
    for attr, default in STANDARD_SURFACE_COLORS.items():
        add_color(graph, node, attr, values.get(attr, default))
    graph.set_attribute(node, "normalCamera", (0.0, 0.0, 0.0))
    graph.set_attribute(node, "coatNormal", (0.0, 0.0, 0.0))
    return node


def add_file_texture(graph, name, path, type_id=TextureNodeType.MAYA_FILE, uuid=None, **attributes):
    path_attribute = "filename" if type_id == TextureNodeType.AI_IMAGE else "fileTextureName"
    values = {path_attribute: path}
    if type_id == TextureNodeType.MAYA_FILE:
        values.update({
            "offsetU": 0.0, "offsetV": 0.0, "repeatU": 1.0, "repeatV": 1.0, "rotateFrame": 0.0,
            "wrapU": True, "wrapV": True, "mirrorU": False, "mirrorV": False,
        })
    values.update(attributes)
    return graph.add_node(name, type_id, values, uuid=uuid)


def write_image(path, size=4, rgba=(255, 255, 255, 255), height=None):
    Image.new("RGBA", (size, height or size), rgba).save(path)
    return path


def write_pixels(path, pixels):
    Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path)
    return path


class ExportTestBase(unittest.TestCase):
    """Temporary directory, in-memory graph and logger for every test."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp(prefix="babylon_pbr_export_")
        self.addCleanup(shutil.rmtree, self.temp_dir, ignore_errors=True)
        self.graph = MemorySceneGraph()
        self.log = ExportLogger()
        self.settings = ExportSettings(write_textures=False)

    def path(self, *parts):
        return os.path.join(self.temp_dir, *parts)

    def assertLogged(self, level, fragment):
        messages = self.log.messages_at(level)
        self.assertTrue(any(fragment in msg for msg in messages),
                        f"No {level} message containing '{fragment}' in {messages}")
