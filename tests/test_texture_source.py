from babylon_pbr_export.core.errors import UnsupportedInputError
from babylon_pbr_export.core.types import TextureNodeType
from babylon_pbr_export.materials.texture_source import image_extension, locate_source

from helpers import ExportTestBase, add_file_texture


class TextureSourceTest(ExportTestBase):

    def test_maya_file_path(self):
        node = add_file_texture(self.graph, "file1", "/textures/wood.jpg")
        self.assertEqual(locate_source(self.graph, node), "/textures/wood.jpg")

    def test_ai_image_path(self):
        node = add_file_texture(self.graph, "aiImage1", "/textures/wood.tga",
                                type_id=TextureNodeType.AI_IMAGE)
        self.assertEqual(locate_source(self.graph, node), "/textures/wood.tga")

    def test_file_existence_is_not_checked(self):
        node = add_file_texture(self.graph, "file1", self.path("missing.png"))
        self.assertEqual(locate_source(self.graph, node), self.path("missing.png"))

    def test_unsupported_node_type(self):
        node = self.graph.add_node("ramp1", 0x52525052, {"fileTextureName": "/t/a.png"})
        with self.assertRaises(UnsupportedInputError):
            locate_source(self.graph, node)

    def test_missing_path_attribute(self):
        node = self.graph.add_node("file1", TextureNodeType.MAYA_FILE, {"filename": "/t/a.png"})
        with self.assertRaises(UnsupportedInputError):
            locate_source(self.graph, node)

    def test_blank_path(self):
        node = add_file_texture(self.graph, "file1", "   ")
        with self.assertRaises(UnsupportedInputError):
            locate_source(self.graph, node)

    def test_format_allow_list(self):
        for path in ("/t/a.exr", "/t/a.tif", "/t/noextension", "/t/a.PNG"):
            node = add_file_texture(self.graph, f"file_{path}", path)
            with self.assertRaises(UnsupportedInputError, msg=path):
                locate_source(self.graph, node)

    def test_image_extension(self):
        self.assertEqual(image_extension("/a/b/c.jpeg"), "jpeg")
        self.assertEqual(image_extension("/a/b/c.JPG"), "JPG")
        self.assertEqual(image_extension("/a/b/c"), "")
