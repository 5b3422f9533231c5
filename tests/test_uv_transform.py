from babylon_pbr_export.core.types import AddressMode, TextureNodeType
from babylon_pbr_export.materials.uv_transform import coordinates_index, extract_uv

from helpers import ExportTestBase, add_file_texture


class CoordinatesIndexTest(ExportTestBase):

    def test_no_linkage_uses_first_set(self):
        self.assertEqual(coordinates_index(set(), self.log), 0)

    def test_primary_set(self):
        self.assertEqual(coordinates_index({0}, self.log), 0)

    def test_any_other_set_maps_to_second_channel(self):
        self.assertEqual(coordinates_index({3}, self.log), 1)
        self.assertEqual(coordinates_index({1, 2}, self.log), 1)
        self.assertEqual(self.log.warning_count, 0)

    def test_mixed_linkage_warns(self):
        self.assertEqual(coordinates_index({0, 2}, self.log), 0)
        self.assertEqual(self.log.warning_count, 1)
        self.assertLogged("WARNING", "more than one UV set")

    def test_mixed_linkage_majority_non_zero(self):
        self.assertEqual(coordinates_index({0, 2, 3}, self.log), 1)
        self.assertEqual(self.log.warning_count, 1)


class ExtractUVTest(ExportTestBase):

    def test_reads_placement(self):
        node = add_file_texture(self.graph, "file1", "/t/a.png", offsetU=0.25, offsetV=0.5,
                                repeatU=2.0, repeatV=3.0)
        self.graph.link_uv_sets(node, [2])
        uv = extract_uv(self.graph, node, self.log)
        self.assertEqual((uv.u_offset, uv.v_offset, uv.u_scale, uv.v_scale), (0.25, 0.5, 2.0, 3.0))
        self.assertEqual((uv.u_ang, uv.v_ang, uv.w_ang), (0.0, 0.0, 0.0))
        self.assertEqual(uv.coordinates_index, 1)
        self.assertEqual(self.log.warning_count, 0)

    def test_rotation_with_tiling_warns(self):
        node = add_file_texture(self.graph, "file1", "/t/a.png", rotateFrame=45.0, repeatU=2.0)
        uv = extract_uv(self.graph, node, self.log)
        self.assertEqual(uv.w_ang, 45.0)
        self.assertLogged("WARNING", "rotation and tiling")

    def test_rotation_alone_does_not_warn(self):
        node = add_file_texture(self.graph, "file1", "/t/a.png", rotateFrame=45.0)
        extract_uv(self.graph, node, self.log)
        self.assertEqual(self.log.warning_count, 0)

    def test_wrap_modes(self):
        node = add_file_texture(self.graph, "file1", "/t/a.png", mirrorU=True, wrapU=True,
                                mirrorV=False, wrapV=False)
        uv = extract_uv(self.graph, node, self.log)
        self.assertEqual(uv.wrap_u, AddressMode.MIRROR)
        self.assertEqual(uv.wrap_v, AddressMode.CLAMP)

        node = add_file_texture(self.graph, "file2", "/t/b.png")
        uv = extract_uv(self.graph, node, self.log)
        self.assertEqual((uv.wrap_u, uv.wrap_v), (AddressMode.WRAP, AddressMode.WRAP))

    def test_ai_image_without_placement_uses_identity(self):
        node = add_file_texture(self.graph, "aiImage1", "/t/a.png", type_id=TextureNodeType.AI_IMAGE)
        uv = extract_uv(self.graph, node, self.log)
        self.assertEqual((uv.u_offset, uv.v_offset, uv.u_scale, uv.v_scale), (0.0, 0.0, 1.0, 1.0))
        self.assertEqual(uv.wrap_u, AddressMode.WRAP)
