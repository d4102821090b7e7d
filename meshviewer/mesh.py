"""Triangle meshes read from Wavefront OBJ files, with normals and tangents."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import numpy as np

_log = logging.getLogger(__name__)
_EPSILON = float(np.finfo(np.float32).eps)

Index = tuple[int, int, int]  # (vertex, normal, texcoord); -1 when absent


class ModelLoadError(RuntimeError):
    """Raised when a model file cannot be read or parsed."""


def _f32(values: Sequence[float]) -> tuple[float, ...]:
    return tuple(np.asarray(values, dtype=np.float32).tolist())


@dataclass(frozen=True, eq=False)
class Vertex:
    """A mesh vertex; equality ignores the tangent and allows float epsilon."""

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    normal: tuple[float, float, float] = (0.0, 0.0, 0.0)
    tex_coord: tuple[float, float] = (0.0, 0.0)
    tangent: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)

    def _key(self) -> tuple[float, ...]:
        return (*self.position, *self.normal, *self.tex_coord)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vertex):
            return NotImplemented
        return all(abs(a - b) < _EPSILON for a, b in zip(self._key(), other._key()))

    def __hash__(self) -> int:
        return hash((tuple(self.position), tuple(self.normal), tuple(self.tex_coord)))


@dataclass
class Material:
    """Surface properties read from an MTL file."""

    name: str = ""
    ambient: tuple[float, float, float] = (0.0, 0.0, 0.0)
    diffuse: tuple[float, float, float] = (0.0, 0.0, 0.0)
    specular: tuple[float, float, float] = (0.0, 0.0, 0.0)
    shininess: float = 1.0
    diffuse_texname: str = ""
    normal_texname: str = ""
    bump_texname: str = ""


@dataclass
class ObjData:
    """Raw attributes and faces of a parsed OBJ file."""

    positions: list[tuple[float, float, float]] = field(default_factory=list)
    normals: list[tuple[float, float, float]] = field(default_factory=list)
    tex_coords: list[tuple[float, float]] = field(default_factory=list)
    shapes: list[list[Index]] = field(default_factory=list)
    materials: list[Material] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _floats(tokens: Sequence[str], count: int, lineno: int) -> tuple[float, ...]:
    try:
        values = [float(token) for token in tokens[:count]]
    except ValueError as exc:
        raise ModelLoadError(f"line {lineno}: invalid number ({exc})") from exc
    values.extend([0.0] * (count - len(values)))
    return tuple(values)


def _texture_name(rest: str) -> str:
    # Texture options precede the file name, which comes last.
    tokens = rest.split()
    return tokens[-1] if tokens else ""


def parse_mtl(text: str) -> list[Material]:
    """Parse the text of an MTL file into its materials, in file order."""
    materials: list[Material] = []
    current: Material | None = None
    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        keyword, _, rest = line.partition(" ")
        rest = rest.strip()
        if keyword == "newmtl":
            current = Material(name=rest)
            materials.append(current)
            continue
        if current is None:
            continue
        tokens = rest.split()
        if keyword == "Ka":
            current.ambient = _floats(tokens, 3, lineno)
        elif keyword == "Kd":
            current.diffuse = _floats(tokens, 3, lineno)
        elif keyword == "Ks":
            current.specular = _floats(tokens, 3, lineno)
        elif keyword == "Ns":
            current.shininess = _floats(tokens, 1, lineno)[0]
        elif keyword == "map_Kd":
            current.diffuse_texname = _texture_name(rest)
        elif keyword == "norm":
            current.normal_texname = _texture_name(rest)
        elif keyword in ("map_Bump", "map_bump", "bump"):
            current.bump_texname = _texture_name(rest)
    return materials


def _parse_face_vertex(token: str, data: ObjData, lineno: int) -> Index:
    parts = token.split("/")

    def resolve(text: str, count: int) -> int:
        try:
            value = int(text)
        except ValueError as exc:
            raise ModelLoadError(f"line {lineno}: invalid index '{text}'") from exc
        if value == 0:
            raise ModelLoadError(f"line {lineno}: index 0 is not allowed")
        return value - 1 if value > 0 else count + value

    vertex = resolve(parts[0], len(data.positions))
    texcoord = (
        resolve(parts[1], len(data.tex_coords)) if len(parts) > 1 and parts[1] else -1
    )
    normal = resolve(parts[2], len(data.normals)) if len(parts) > 2 and parts[2] else -1
    return vertex, normal, texcoord


def _validate(data: ObjData) -> None:
    limits = (len(data.positions), len(data.normals), len(data.tex_coords))
    names = ("vertex", "normal", "texcoord")
    for shape in data.shapes:
        for index in shape:
            for name, value, limit in zip(names, index, limits):
                optional = name != "vertex"
                if optional and value == -1:
                    continue
                if not 0 <= value < limit:
                    raise ModelLoadError(f"{name} index {value + 1} out of range")


def parse_obj(text: str, mtl_search_path: str | os.PathLike[str] = ".") -> ObjData:
    """Parse OBJ text; polygons are fan-triangulated, MTL files read from the search path."""
    data = ObjData()
    current: list[Index] = []
    for lineno, raw in enumerate(text.splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        keyword, _, rest = line.partition(" ")
        tokens = rest.split()
        if keyword == "v":
            data.positions.append(_floats(tokens, 3, lineno))
        elif keyword == "vn":
            data.normals.append(_floats(tokens, 3, lineno))
        elif keyword == "vt":
            data.tex_coords.append(_floats(tokens, 2, lineno))
        elif keyword == "f":
            polygon = [_parse_face_vertex(token, data, lineno) for token in tokens]
            if len(polygon) < 3:
                continue
            first = polygon[0]
            for second, third in zip(polygon[1:], polygon[2:]):
                current.extend((first, second, third))
        elif keyword in ("o", "g"):
            if current:
                data.shapes.append(current)
                current = []
        elif keyword == "mtllib":
            for name in tokens:
                mtl_path = Path(mtl_search_path) / name
                try:
                    mtl_text = mtl_path.read_text(encoding="utf-8", errors="replace")
                except OSError:
                    data.warnings.append(f"Material file [ {name} ] not found.")
                    continue
                data.materials.extend(parse_mtl(mtl_text))
    if current:
        data.shapes.append(current)
    _validate(data)
    return data


class Model:
    """An indexed triangle mesh with material properties and texture paths."""

    def __init__(self) -> None:
        self.positions = np.zeros((0, 3), dtype=np.float32)
        self.normals = np.zeros((0, 3), dtype=np.float32)
        self.tex_coords = np.zeros((0, 2), dtype=np.float32)
        self.tangents = np.zeros((0, 4), dtype=np.float32)
        self.indices = np.zeros(0, dtype=np.uint32)

        self.ka: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
        self.kd: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
        self.ks: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
        self.shininess = 0.0

        self.diffuse_texture: Path | None = None
        self.normal_texture: Path | None = None
        self.cube_texture: tuple[Path, ...] | None = None

        self.has_normals = False
        self.has_tex_coords = False

    @property
    def is_uv_mapped(self) -> bool:
        return self.has_tex_coords

    @property
    def vertices(self) -> list[Vertex]:
        return [
            Vertex(tuple(p), tuple(n), tuple(t), tuple(g))
            for p, n, t, g in zip(
                self.positions.tolist(),
                self.normals.tolist(),
                self.tex_coords.tolist(),
                self.tangents.tolist(),
            )
        ]

    def load_from_file(
        self, path: str | os.PathLike[str], standardize: bool = True
    ) -> None:
        """Load the mesh and its first material from an OBJ file."""
        path = Path(path)
        base_path = path.parent
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise ModelLoadError(
                f"Failed to load model {path} (Cannot open file [{path}])"
            ) from exc
        try:
            data = parse_obj(text, base_path)
        except ModelLoadError as exc:
            raise ModelLoadError(f"Failed to load model {path} ({exc})") from exc

        for warning in data.warnings:
            _log.warning("%s", warning)

        lookup: dict[Vertex, int] = {}
        vertices: list[Vertex] = []
        indices: list[int] = []
        has_normals = has_tex_coords = False
        for shape in data.shapes:
            for vertex_index, normal_index, texcoord_index in shape:
                normal: Sequence[float] = (0.0, 0.0, 0.0)
                if normal_index >= 0:
                    has_normals = True
                    normal = data.normals[normal_index]
                tex_coord: Sequence[float] = (0.0, 0.0)
                if texcoord_index >= 0:
                    has_tex_coords = True
                    tex_coord = data.tex_coords[texcoord_index]
                vertex = Vertex(
                    _f32(data.positions[vertex_index]), _f32(normal), _f32(tex_coord)
                )
                index = lookup.setdefault(vertex, len(vertices))
                if index == len(vertices):
                    vertices.append(vertex)
                indices.append(index)

        self.positions = np.array([v.position for v in vertices], dtype=np.float32).reshape(-1, 3)
        self.normals = np.array([v.normal for v in vertices], dtype=np.float32).reshape(-1, 3)
        self.tex_coords = np.array([v.tex_coord for v in vertices], dtype=np.float32).reshape(-1, 2)
        self.tangents = np.zeros((len(vertices), 4), dtype=np.float32)
        self.indices = np.array(indices, dtype=np.uint32)
        self.has_normals = has_normals
        self.has_tex_coords = has_tex_coords

        if data.materials:
            material = data.materials[0]
            self.ka = (*material.ambient, 1.0)
            self.kd = (*material.diffuse, 1.0)
            self.ks = (*material.specular, 1.0)
            self.shininess = material.shininess
            if material.diffuse_texname:
                self.load_diffuse_texture(base_path / material.diffuse_texname)
            if material.normal_texname:
                self.load_normal_texture(base_path / material.normal_texname)
            elif material.bump_texname:
                self.load_normal_texture(base_path / material.bump_texname)
        else:
            self.ka = (0.1, 0.1, 0.1, 1.0)
            self.kd = (0.7, 0.7, 0.7, 1.0)
            self.ks = (1.0, 1.0, 1.0, 1.0)
            self.shininess = 25.0

        if standardize:
            self.standardize()
        if not self.has_normals:
            self.compute_normals()
        if self.has_tex_coords:
            self.compute_tangents()

    def load_diffuse_texture(self, path: str | os.PathLike[str]) -> None:
        """Use the image at ``path`` as diffuse map, if it exists."""
        path = Path(path)
        if path.exists():
            self.diffuse_texture = path

    def load_normal_texture(self, path: str | os.PathLike[str]) -> None:
        """Use the image at ``path`` as normal map, if it exists."""
        path = Path(path)
        if path.exists():
            self.normal_texture = path

    def load_cube_texture(self, path: str | os.PathLike[str]) -> None:
        """Use the six cube-map faces whose names follow the ``path`` prefix."""
        prefix = os.fspath(path)
        if not Path(prefix).exists():
            return
        faces = ("posx", "negx", "posy", "negy", "posz", "negz")
        self.cube_texture = tuple(Path(f"{prefix}{face}.jpg") for face in faces)

    def _triangles(self) -> np.ndarray:
        return self.indices.astype(np.intp).reshape(-1, 3)

    def compute_normals(self) -> None:
        """Set each vertex normal to the normalized sum of its face normals."""
        triangles = self._triangles()
        a, b, c = (self.positions[column] for column in triangles.T)
        face_normals = np.cross(b - a, c - b)
        normals = np.zeros_like(self.positions)
        for column in triangles.T:
            np.add.at(normals, column, face_normals)
        with np.errstate(divide="ignore", invalid="ignore"):
            normals = normals / np.linalg.norm(normals, axis=1, keepdims=True)
        self.normals = normals.astype(np.float32)
        self.has_normals = True

    def compute_tangents(self) -> None:
        """Compute per-vertex tangents with handedness in the w component."""
        triangles = self._triangles()
        i1, i2, i3 = triangles.T
        p1, p2, p3 = self.positions[i1], self.positions[i2], self.positions[i3]
        uv1, uv2, uv3 = self.tex_coords[i1], self.tex_coords[i2], self.tex_coords[i3]

        e1, e2 = p2 - p1, p3 - p1
        d1, d2 = uv2 - uv1, uv3 - uv1
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            inv = np.float32(1.0) / (d1[:, 0] * d2[:, 1] - d2[:, 0] * d1[:, 1])
            m00 = (d2[:, 1] * inv)[:, None]
            m01 = (-d1[:, 1] * inv)[:, None]
            m10 = (-d2[:, 0] * inv)[:, None]
            m11 = (d1[:, 0] * inv)[:, None]
            face_tangents = m00 * e1 + m01 * e2
            face_bitangents = m10 * e1 + m11 * e2

        tangents = self.tangents[:, :3].copy()
        bitangents = np.zeros_like(self.positions)
        for column in triangles.T:
            np.add.at(tangents, column, face_tangents)
            np.add.at(bitangents, column, face_bitangents)

        n = self.normals
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            orthogonal = tangents - n * np.sum(n * tangents, axis=1, keepdims=True)
            orthogonal = orthogonal / np.linalg.norm(orthogonal, axis=1, keepdims=True)
            handedness = np.sum(np.cross(n, tangents) * bitangents, axis=1)
        w = np.where(handedness < 0.0, -1.0, 1.0)
        self.tangents = np.column_stack([orthogonal, w]).astype(np.float32)

    def standardize(self) -> None:
        """Center the mesh at the origin and scale its bounding-box diagonal to 2."""
        if len(self.positions) == 0:
            return
        low = self.positions.min(axis=0)
        high = self.positions.max(axis=0)
        center = (low + high) / np.float32(2.0)
        with np.errstate(divide="ignore", invalid="ignore"):
            scaling = np.float32(2.0) / np.linalg.norm(high - low)
            self.positions = ((self.positions - center) * scaling).astype(np.float32)

    def num_triangles(self) -> int:
        return len(self.indices) // 3

    def index_count(self, num_triangles: int = -1) -> int:
        """Number of indices drawn for ``num_triangles`` (all when negative)."""
        return len(self.indices) if num_triangles < 0 else num_triangles * 3