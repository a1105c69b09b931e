"""
Geometry buffers, scene graph and mesh primitives.

This module implements:
- Geometry: vertex/face/color buffers with explicit disposal hooks
- SceneNode: a small scene graph handed to the host renderer
- LevelOfDetail: distance-selected simplification tiers
- Primitive builders (UV sphere, icosphere, polyhedra, rings, cylinders,
  polar disks, point clouds) and noise displacement
"""

import math
import numpy as np
import structlog
from dataclasses import dataclass, field
from scipy.spatial import ConvexHull
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .noise import NoiseFunction, fractal_noise

logger = structlog.get_logger()

Vector3 = Tuple[float, float, float]

# Camera distances (in display radii) at which each LOD tier starts
LOD_DISTANCES = (0.0, 10.0, 30.0)


@dataclass
class Material:
    """Surface appearance for a node."""

    color: int = 0xFFFFFF  # Base color 0xRRGGBB
    opacity: float = 1.0  # 1 is opaque
    emissive: float = 0.0  # Self-illumination strength
    vertex_colors: bool = False  # Use per-vertex colors instead of color
    flat_shading: bool = False  # Faceted low-poly look
    double_sided: bool = False  # Render back faces (shells seen from inside)
    additive: bool = False  # Additive blending for glows
    point_size: float = 0.0  # Sprite size for point clouds


class Geometry:
    """
    Vertex, face and color buffers for one mesh.

    Faces are (M, 3) vertex indices; a geometry with no faces is a point
    cloud. After dispose() the buffers are released and every registered
    release hook has run once.
    """

    def __init__(
        self,
        vertices: np.ndarray,
        faces: Optional[np.ndarray] = None,
        colors: Optional[np.ndarray] = None,
    ):
        self.vertices = np.asarray(vertices, dtype=np.float32).reshape(-1, 3)
        if faces is None:
            faces = np.zeros((0, 3), dtype=np.int32)
        self.faces = np.asarray(faces, dtype=np.int32).reshape(-1, 3)
        self.colors = None if colors is None else np.asarray(colors, dtype=np.float32).reshape(-1, 3)
        self.disposed = False
        self._release_hooks: List[Callable[["Geometry"], None]] = []
        self._normals: Optional[np.ndarray] = None

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def is_points(self) -> bool:
        return self.face_count == 0

    @property
    def normals(self) -> np.ndarray:
        """Area-weighted vertex normals, computed on first access."""
        if self._normals is None:
            self._normals = compute_vertex_normals(self.vertices, self.faces)
        return self._normals

    def on_release(self, hook: Callable[["Geometry"], None]) -> None:
        """Register a callback run when the buffers are released."""
        self._release_hooks.append(hook)

    def freeze(self) -> "Geometry":
        """Make the buffers read-only so shared handles cannot mutate them."""
        for array in (self.vertices, self.faces, self.colors):
            if array is not None:
                array.setflags(write=False)
        return self

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        for hook in self._release_hooks:
            hook(self)
        self._release_hooks.clear()
        self.vertices = np.zeros((0, 3), dtype=np.float32)
        self.faces = np.zeros((0, 3), dtype=np.int32)
        self.colors = None
        self._normals = None

    def transformed(
        self, scale: Vector3 = (1.0, 1.0, 1.0), offset: Vector3 = (0.0, 0.0, 0.0)
    ) -> "Geometry":
        """Copy with vertices scaled per axis then offset."""
        vertices = self.vertices.astype(np.float64) * np.asarray(scale) + np.asarray(offset)
        return Geometry(vertices, self.faces.copy(), None if self.colors is None else self.colors.copy())

    def with_colors(self, colors: np.ndarray) -> "Geometry":
        return Geometry(self.vertices.copy(), self.faces.copy(), colors)


def compute_vertex_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Area-weighted vertex normals; point clouds get radial normals."""
    vertices = np.asarray(vertices, dtype=np.float64)
    normals = np.zeros_like(vertices)
    if len(faces):
        a, b, c = (vertices[faces[:, i]] for i in range(3))
        face_normals = np.cross(b - a, c - a)
        for i in range(3):
            np.add.at(normals, faces[:, i], face_normals)
    else:
        normals = vertices.copy()
    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    lengths[lengths == 0] = 1.0
    return (normals / lengths).astype(np.float32)


class LevelOfDetail:
    """
    Simplification tiers selected by camera distance.

    Tier 0 is full detail and is used at distance 0.
    """

    def __init__(self, levels: Sequence[Tuple[float, Geometry]]):
        if not levels:
            raise ValueError("At least one LOD level is required")
        self.levels = sorted(levels, key=lambda level: level[0])
        if self.levels[0][0] > 0:
            raise ValueError("The first LOD level must start at distance 0")

    def __len__(self) -> int:
        return len(self.levels)

    def select(self, distance: float) -> Geometry:
        selected = self.levels[0][1]
        for threshold, geometry in self.levels:
            if distance >= threshold:
                selected = geometry
        return selected

    def select_tier(self, tier: int) -> Geometry:
        """Geometry for a tier index, clamped to the available tiers."""
        return self.levels[min(max(tier, 0), len(self.levels) - 1)][1]

    @property
    def geometries(self) -> List[Geometry]:
        return [geometry for _, geometry in self.levels]

    def dispose(self) -> None:
        for geometry in self.geometries:
            geometry.dispose()


def build_lod(
    factory: Callable[[int], Geometry],
    scale: float = 1.0,
    distances: Sequence[float] = LOD_DISTANCES,
) -> LevelOfDetail:
    """
    Build LOD tiers with a factory taking the tier index (0 = full detail).

    Args:
        factory: Builds the geometry for a tier
        scale: Display radius multiplying the tier distances
        distances: Tier start distances in display radii

    Returns:
        LevelOfDetail with one tier per distance
    """
    return LevelOfDetail([(d * scale, factory(tier)) for tier, d in enumerate(distances)])


@dataclass(eq=False)
class SceneNode:
    """Node of the renderable scene graph."""

    name: str
    geometry: Optional[Geometry] = None
    material: Optional[Material] = None
    position: Vector3 = (0.0, 0.0, 0.0)
    rotation: Vector3 = (0.0, 0.0, 0.0)  # Euler angles in radians
    scale: Vector3 = (1.0, 1.0, 1.0)
    instances: Optional[np.ndarray] = None  # (K, 3) offsets for instanced drawing
    lod: Optional[LevelOfDetail] = None
    children: List["SceneNode"] = field(default_factory=list)
    user_data: Dict[str, object] = field(default_factory=dict)

    def add(self, child: "SceneNode") -> "SceneNode":
        self.children.append(child)
        return child

    def walk(self) -> Iterator["SceneNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, name: str) -> Optional["SceneNode"]:
        for node in self.walk():
            if node.name == name:
                return node
        return None

    def geometries(self) -> Iterator[Geometry]:
        seen = set()
        for node in self.walk():
            candidates = [node.geometry] if node.geometry is not None else []
            if node.lod is not None:
                candidates.extend(node.lod.geometries)
            for geometry in candidates:
                if id(geometry) not in seen:
                    seen.add(id(geometry))
                    yield geometry

    def polygon_count(self) -> int:
        """Triangles drawn at full detail, counting every instance."""
        total = 0
        for node in self.walk():
            if node.geometry is None:
                continue
            copies = len(node.instances) if node.instances is not None else 1
            total += node.geometry.face_count * copies
        return total

    def vertex_count(self) -> int:
        total = 0
        for node in self.walk():
            if node.geometry is None:
                continue
            copies = len(node.instances) if node.instances is not None else 1
            total += node.geometry.vertex_count * copies
        return total

    def freeze(self) -> "SceneNode":
        for geometry in self.geometries():
            geometry.freeze()
        return self

    def dispose(self) -> None:
        for geometry in self.geometries():
            geometry.dispose()


# Primitive builders


def uv_sphere(radius: float, width_segments: int = 32, height_segments: int = 16) -> Geometry:
    """Latitude/longitude sphere with shared pole vertices."""
    width_segments = max(3, int(width_segments))
    height_segments = max(2, int(height_segments))

    vertices = [(0.0, radius, 0.0)]
    for row in range(1, height_segments):
        phi = math.pi * row / height_segments
        for col in range(width_segments):
            theta = 2.0 * math.pi * col / width_segments
            vertices.append(
                (radius * math.sin(phi) * math.cos(theta), radius * math.cos(phi), radius * math.sin(phi) * math.sin(theta))
            )
    vertices.append((0.0, -radius, 0.0))
    south = len(vertices) - 1

    def ring_index(row: int, col: int) -> int:
        return 1 + (row - 1) * width_segments + (col % width_segments)

    faces = []
    for col in range(width_segments):
        faces.append((0, ring_index(1, col + 1), ring_index(1, col)))
    for row in range(1, height_segments - 1):
        for col in range(width_segments):
            a, b = ring_index(row, col), ring_index(row, col + 1)
            c, d = ring_index(row + 1, col), ring_index(row + 1, col + 1)
            faces.append((a, b, d))
            faces.append((a, d, c))
    last = height_segments - 1
    for col in range(width_segments):
        faces.append((south, ring_index(last, col), ring_index(last, col + 1)))
    return Geometry(np.array(vertices), np.array(faces))


_ICOSAHEDRON_FACES = (
    (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
    (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
    (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
    (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
)


def subdivide(geometry: Geometry, levels: int, radius: Optional[float] = None) -> Geometry:
    """
    Midpoint-subdivide every triangle ``levels`` times.

    Each pass splits a triangle into four. Shared edges share their midpoint
    vertex. When ``radius`` is given, new vertices are projected onto the
    sphere of that radius.
    """
    vertices = [np.array(v, dtype=np.float64) for v in geometry.vertices]
    faces = [tuple(int(i) for i in face) for face in geometry.faces]

    for _ in range(max(0, int(levels))):
        cache: Dict[Tuple[int, int], int] = {}

        def midpoint(a: int, b: int) -> int:
            key = (a, b) if a < b else (b, a)
            if key not in cache:
                mid = (vertices[a] + vertices[b]) / 2.0
                if radius is not None:
                    mid = mid / np.linalg.norm(mid) * radius
                vertices.append(mid)
                cache[key] = len(vertices) - 1
            return cache[key]

        refined = []
        for a, b, c in faces:
            ab, bc, ca = midpoint(a, b), midpoint(b, c), midpoint(c, a)
            refined.extend([(a, ab, ca), (b, bc, ab), (c, ca, bc), (ab, bc, ca)])
        faces = refined

    return Geometry(np.array(vertices), np.array(faces))


def icosphere(radius: float, subdivisions: int = 2) -> Geometry:
    """Subdivided icosahedron projected onto a sphere."""
    t = (1.0 + math.sqrt(5.0)) / 2.0
    points = np.array(
        [
            (-1, t, 0), (1, t, 0), (-1, -t, 0), (1, -t, 0),
            (0, -1, t), (0, 1, t), (0, -1, -t), (0, 1, -t),
            (t, 0, -1), (t, 0, 1), (-t, 0, -1), (-t, 0, 1),
        ],
        dtype=np.float64,
    )
    points *= radius / np.linalg.norm(points, axis=1, keepdims=True)
    return subdivide(Geometry(points, np.array(_ICOSAHEDRON_FACES)), subdivisions, radius)


def convex_polyhedron(points: np.ndarray) -> Geometry:
    """Convex hull of points as an outward-facing triangle mesh."""
    points = np.asarray(points, dtype=np.float64)
    hull = ConvexHull(points)
    used = np.unique(hull.simplices)
    remap = np.full(len(points), -1, dtype=np.int64)
    remap[used] = np.arange(len(used))
    vertices = points[used]
    faces = remap[hull.simplices]

    # Qhull does not guarantee winding; point every face away from the centroid
    center = vertices.mean(axis=0)
    a, b, c = (vertices[faces[:, i]] for i in range(3))
    outward = np.einsum("ij,ij->i", np.cross(b - a, c - a), a - center) < 0
    faces[outward] = faces[outward][:, [0, 2, 1]]
    return Geometry(vertices, faces)


def dodecahedron(radius: float, subdivisions: int = 0) -> Geometry:
    """Regular dodecahedron, triangulated and optionally subdivided."""
    phi = (1.0 + math.sqrt(5.0)) / 2.0
    inv = 1.0 / phi
    points = [(x, y, z) for x in (-1, 1) for y in (-1, 1) for z in (-1, 1)]
    for a in (-inv, inv):
        for b in (-phi, phi):
            points.extend([(0, a, b), (a, b, 0), (b, 0, a)])
    points = np.array(points, dtype=np.float64)
    points *= radius / np.linalg.norm(points[0])
    return subdivide(convex_polyhedron(points), subdivisions)


def ring(inner: float, outer: float, segments: int = 64) -> Geometry:
    """Flat annulus in the xz plane."""
    segments = max(3, int(segments))
    angles = np.linspace(0.0, 2.0 * math.pi, segments, endpoint=False)
    circle = np.stack([np.cos(angles), np.zeros(segments), np.sin(angles)], axis=1)
    vertices = np.concatenate([circle * inner, circle * outer])
    faces = []
    for i in range(segments):
        j = (i + 1) % segments
        faces.append((i, j, segments + j))
        faces.append((i, segments + j, segments + i))
    return Geometry(vertices, np.array(faces))


def cylinder(radius_top: float, radius_bottom: float, height: float, segments: int = 16) -> Geometry:
    """Open-ended cylinder or cone along the y axis, centered at the origin."""
    segments = max(3, int(segments))
    angles = np.linspace(0.0, 2.0 * math.pi, segments, endpoint=False)
    circle = np.stack([np.cos(angles), np.zeros(segments), np.sin(angles)], axis=1)
    top = circle * radius_top + np.array([0.0, height / 2.0, 0.0])
    bottom = circle * radius_bottom - np.array([0.0, height / 2.0, 0.0])
    vertices = np.concatenate([top, bottom])
    faces = []
    for i in range(segments):
        j = (i + 1) % segments
        faces.append((i, segments + i, segments + j))
        faces.append((i, segments + j, j))
    return Geometry(vertices, np.array(faces))


def polar_disk(radius: float, rings: int = 16, segments: int = 48) -> Geometry:
    """Disk in the xz plane built from concentric rings around a center vertex."""
    rings = max(1, int(rings))
    segments = max(3, int(segments))
    vertices = [(0.0, 0.0, 0.0)]
    for r in range(1, rings + 1):
        distance = radius * r / rings
        for s in range(segments):
            angle = 2.0 * math.pi * s / segments
            vertices.append((distance * math.cos(angle), 0.0, distance * math.sin(angle)))

    def index(r: int, s: int) -> int:
        return 1 + (r - 1) * segments + (s % segments)

    faces = [(0, index(1, s + 1), index(1, s)) for s in range(segments)]
    for r in range(1, rings):
        for s in range(segments):
            a, b = index(r, s), index(r, s + 1)
            c, d = index(r + 1, s), index(r + 1, s + 1)
            faces.append((a, d, b))
            faces.append((a, c, d))
    return Geometry(np.array(vertices), np.array(faces))


def point_cloud(points: np.ndarray, colors: Optional[np.ndarray] = None) -> Geometry:
    return Geometry(points, None, colors)


def displace_radially(
    geometry: Geometry,
    noise: NoiseFunction,
    amplitude: float,
    frequency: float = 1.0,
    octaves: int = 3,
) -> Tuple[Geometry, np.ndarray]:
    """
    Push vertices along their radial direction by fractal noise.

    Args:
        geometry: Source geometry centered on the origin
        noise: Noise source
        amplitude: Displacement as a fraction of each vertex's radius
        frequency: Noise frequency on the unit sphere
        octaves: Fractal octaves

    Returns:
        Tuple of (displaced geometry, per-vertex noise values in [-1, 1])
    """
    vertices = geometry.vertices.astype(np.float64)
    lengths = np.linalg.norm(vertices, axis=1, keepdims=True)
    lengths[lengths == 0] = 1.0
    directions = vertices / lengths
    values = fractal_noise(noise, directions, octaves=octaves, frequency=frequency)
    displaced = vertices * (1.0 + amplitude * values)[:, None]
    return Geometry(displaced, geometry.faces.copy(), geometry.colors), values


def sphere_segments(detail_level: int) -> Tuple[int, int]:
    """UV sphere (width, height) segments for a detail level 1..5."""
    width = 12 + 12 * max(1, min(int(detail_level), 5))
    return width, width // 2
