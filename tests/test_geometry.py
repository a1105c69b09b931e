"""Tests for geometry buffers, primitives and the scene graph."""

import numpy as np
import pytest

from py_cosmogen.core.geometry import (
    Geometry,
    LevelOfDetail,
    SceneNode,
    build_lod,
    cylinder,
    displace_radially,
    dodecahedron,
    icosphere,
    point_cloud,
    polar_disk,
    ring,
    sphere_segments,
    uv_sphere,
)
from py_cosmogen.core.noise import LatticeValueNoise, SineHashNoise


class TestPrimitives:
    """Test primitive vertex and face counts."""

    def test_uv_sphere_counts(self):
        sphere = uv_sphere(1.0, 8, 4)
        assert sphere.vertex_count == 26
        assert sphere.face_count == 48

    def test_uv_sphere_radius(self):
        sphere = uv_sphere(2.5, 16, 8)
        np.testing.assert_allclose(np.linalg.norm(sphere.vertices, axis=1), 2.5, rtol=1e-6)

    @pytest.mark.parametrize("subdivisions,vertices,faces", [(0, 12, 20), (1, 42, 80), (2, 162, 320)])
    def test_icosphere_counts(self, subdivisions, vertices, faces):
        sphere = icosphere(1.0, subdivisions)
        assert sphere.vertex_count == vertices
        assert sphere.face_count == faces

    def test_icosphere_on_sphere(self):
        sphere = icosphere(3.0, 2)
        np.testing.assert_allclose(np.linalg.norm(sphere.vertices, axis=1), 3.0, rtol=1e-5)

    def test_dodecahedron(self):
        shape = dodecahedron(1.0)
        assert shape.vertex_count == 20
        assert shape.face_count == 36
        np.testing.assert_allclose(np.linalg.norm(shape.vertices, axis=1), 1.0, rtol=1e-5)

    def test_dodecahedron_faces_outward(self):
        shape = dodecahedron(1.0)
        vertices = shape.vertices.astype(np.float64)
        a, b, c = (vertices[shape.faces[:, i]] for i in range(3))
        normals = np.cross(b - a, c - a)
        assert np.all(np.einsum("ij,ij->i", normals, a) > 0)

    def test_ring(self):
        annulus = ring(1.0, 2.0, 32)
        assert annulus.vertex_count == 64
        assert annulus.face_count == 64
        radii = np.linalg.norm(annulus.vertices, axis=1)
        assert radii.min() == pytest.approx(1.0, rel=1e-6)
        assert radii.max() == pytest.approx(2.0, rel=1e-6)

    def test_cylinder(self):
        tube = cylinder(0.5, 1.0, 2.0, 8)
        assert tube.vertex_count == 16
        assert tube.face_count == 16
        assert tube.vertices[:, 1].max() == pytest.approx(1.0)

    def test_polar_disk(self):
        disk = polar_disk(1.0, rings=4, segments=12)
        assert disk.vertex_count == 1 + 4 * 12
        assert disk.face_count == 12 + 2 * 3 * 12

    def test_point_cloud(self):
        cloud = point_cloud(np.zeros((5, 3)))
        assert cloud.is_points
        assert cloud.vertex_count == 5

    def test_sphere_segments_clamped(self):
        assert sphere_segments(0) == sphere_segments(1) == (24, 12)
        assert sphere_segments(9) == (72, 36)


class TestDisplacement:
    """Test noise displacement."""

    def test_displacement_bounded(self):
        sphere = icosphere(1.0, 2)
        displaced, values = displace_radially(sphere, LatticeValueNoise(3), amplitude=0.1)
        radii = np.linalg.norm(displaced.vertices, axis=1)
        assert len(values) == sphere.vertex_count
        assert np.all(radii >= 0.9 - 1e-5)
        assert np.all(radii <= 1.1 + 1e-5)
        np.testing.assert_array_equal(displaced.faces, sphere.faces)

    def test_displacement_deterministic(self):
        sphere = icosphere(1.0, 1)
        first, _ = displace_radially(sphere, LatticeValueNoise(8), 0.05)
        second, _ = displace_radially(sphere, LatticeValueNoise(8), 0.05)
        np.testing.assert_array_equal(first.vertices, second.vertices)

    def test_sine_hash_noise(self):
        sphere = icosphere(1.0, 2)
        values = SineHashNoise(12345).sample(sphere.vertices)
        assert np.all(values >= -1.0) and np.all(values <= 1.0)
        np.testing.assert_array_equal(values, SineHashNoise(12345).sample(sphere.vertices))
        assert SineHashNoise(12345)(*sphere.vertices[0]) == pytest.approx(values[0])
        displaced, _ = displace_radially(sphere, SineHashNoise(12345), amplitude=0.1)
        assert np.all(np.linalg.norm(displaced.vertices, axis=1) <= 1.1 + 1e-5)


class TestGeometryLifecycle:
    """Test buffer freezing and disposal."""

    def test_freeze_makes_read_only(self):
        geometry = uv_sphere(1.0, 8, 4).freeze()
        with pytest.raises(ValueError):
            geometry.vertices[0, 0] = 5.0

    def test_dispose_runs_hooks_once(self):
        calls = []
        geometry = icosphere(1.0, 0)
        geometry.on_release(calls.append)
        geometry.dispose()
        geometry.dispose()
        assert calls == [geometry]
        assert geometry.disposed
        assert geometry.vertex_count == 0

    def test_normals_unit_length(self):
        normals = icosphere(2.0, 1).normals
        np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, rtol=1e-5)

    def test_transformed_copy(self):
        geometry = Geometry(np.array([[1.0, 1.0, 1.0]]))
        moved = geometry.transformed(scale=(2.0, 1.0, 1.0), offset=(0.0, 1.0, 0.0))
        np.testing.assert_allclose(moved.vertices, [[2.0, 2.0, 1.0]])
        np.testing.assert_allclose(geometry.vertices, [[1.0, 1.0, 1.0]])


class TestLevelOfDetail:
    """Test LOD tier selection."""

    @pytest.fixture
    def lod(self):
        return build_lod(lambda tier: icosphere(1.0, 2 - tier), scale=3.0)

    def test_tier_distances(self, lod):
        assert [distance for distance, _ in lod.levels] == [0.0, 30.0, 90.0]

    def test_select(self, lod):
        assert lod.select(0.0).face_count == 320
        assert lod.select(29.9).face_count == 320
        assert lod.select(30.0).face_count == 80
        assert lod.select(1000.0).face_count == 20

    def test_select_tier_clamped(self, lod):
        assert lod.select_tier(-1) is lod.geometries[0]
        assert lod.select_tier(10) is lod.geometries[-1]

    def test_requires_zero_tier(self):
        with pytest.raises(ValueError):
            LevelOfDetail([(5.0, icosphere(1.0, 0))])
        with pytest.raises(ValueError):
            LevelOfDetail([])


class TestSceneNode:
    """Test the scene graph."""

    def test_polygon_count_with_instances(self):
        root = SceneNode("root", geometry=icosphere(1.0, 0))
        root.add(SceneNode("trees", geometry=icosphere(0.1, 0), instances=np.zeros((4, 3))))
        assert root.polygon_count() == 20 + 20 * 4
        assert root.vertex_count() == 12 + 12 * 4

    def test_find_and_walk(self):
        root = SceneNode("root")
        child = root.add(SceneNode("child"))
        child.add(SceneNode("leaf"))
        assert [node.name for node in root.walk()] == ["root", "child", "leaf"]
        assert root.find("leaf") is child.children[0]
        assert root.find("missing") is None

    def test_dispose_releases_lod_geometry(self):
        lod = build_lod(lambda tier: icosphere(1.0, 1 - min(tier, 1)))
        root = SceneNode("root", geometry=lod.select_tier(0), lod=lod)
        geometries = list(root.geometries())
        assert len(geometries) == 3
        root.dispose()
        assert all(geometry.disposed for geometry in geometries)
