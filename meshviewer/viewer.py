"""Interactive state of the model viewer: camera, trackballs, shaders and lighting."""

from __future__ import annotations

import enum
import math
import os
from pathlib import Path
from typing import Sequence

import numpy as np

from meshviewer.mesh import Model
from meshviewer.trackball import TrackBall

SHADER_NAMES: tuple[str, ...] = (
    "cubereflect",
    "cuberefract",
    "normalmapping",
    "texture",
    "blinnphong",
    "phong",
    "gouraud",
    "normal",
    "depth",
)
SKY_SHADER_NAME = "skybox"

# Two triangles per cube face, seen from inside.
SKY_POSITIONS = np.array(
    [
        # Front
        (-1, -1, +1), (+1, -1, +1), (+1, +1, +1),
        (-1, -1, +1), (+1, +1, +1), (-1, +1, +1),
        # Back
        (+1, -1, -1), (-1, -1, -1), (-1, +1, -1),
        (+1, -1, -1), (-1, +1, -1), (+1, +1, -1),
        # Right
        (+1, -1, -1), (+1, +1, -1), (+1, +1, +1),
        (+1, -1, -1), (+1, +1, +1), (+1, -1, +1),
        # Left
        (-1, -1, +1), (-1, +1, +1), (-1, +1, -1),
        (-1, -1, +1), (-1, +1, -1), (-1, -1, -1),
        # Top
        (-1, +1, +1), (+1, +1, +1), (+1, +1, -1),
        (-1, +1, +1), (+1, +1, -1), (-1, +1, -1),
        # Bottom
        (-1, -1, -1), (+1, -1, -1), (+1, -1, +1),
        (-1, -1, -1), (+1, -1, +1), (-1, -1, +1),
    ],
    dtype=np.float32,
)

_ZOOM_MIN = -1.5
_ZOOM_MAX = 1.0
_FOVY_DEGREES = 45.0
_NEAR = 0.1
_FAR = 5.0


class Projection(enum.Enum):
    PERSPECTIVE = "Perspective"
    ORTHOGRAPHIC = "Orthographic"


class MappingMode(enum.IntEnum):
    TRIPLANAR = 0
    CYLINDRICAL = 1
    SPHERICAL = 2
    FROM_MESH = 3


def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """Right-handed perspective projection to clip space with depth in [-1, 1]."""
    f = 1.0 / math.tan(fovy / 2.0)
    result = np.zeros((4, 4))
    result[0, 0] = f / aspect
    result[1, 1] = f
    result[2, 2] = -(far + near) / (far - near)
    result[2, 3] = -2.0 * far * near / (far - near)
    result[3, 2] = -1.0
    return result


def ortho(
    left: float, right: float, bottom: float, top: float, near: float, far: float
) -> np.ndarray:
    """Right-handed orthographic projection with depth in [-1, 1]."""
    result = np.identity(4)
    result[0, 0] = 2.0 / (right - left)
    result[1, 1] = 2.0 / (top - bottom)
    result[2, 2] = -2.0 / (far - near)
    result[0, 3] = -(right + left) / (right - left)
    result[1, 3] = -(top + bottom) / (top - bottom)
    result[2, 3] = -(far + near) / (far - near)
    return result


def look_at(
    eye: Sequence[float], center: Sequence[float], up: Sequence[float]
) -> np.ndarray:
    """Right-handed view matrix looking from ``eye`` towards ``center``."""
    eye_v = np.asarray(eye, dtype=float)
    forward = np.asarray(center, dtype=float) - eye_v
    forward /= np.linalg.norm(forward)
    side = np.cross(forward, np.asarray(up, dtype=float))
    side /= np.linalg.norm(side)
    upward = np.cross(side, forward)
    result = np.identity(4)
    result[0, :3] = side
    result[1, :3] = upward
    result[2, :3] = -forward
    result[0, 3] = -side @ eye_v
    result[1, 3] = -upward @ eye_v
    result[2, 3] = forward @ eye_v
    return result


def normal_matrix(model_view: np.ndarray) -> np.ndarray:
    """Inverse transpose of the upper-left 3x3 block of ``model_view``."""
    block = np.asarray(model_view, dtype=float)[:3, :3]
    return np.linalg.inv(block).T


class ViewerState:
    """Everything the viewer draws from, updated by input and UI choices."""

    def __init__(
        self,
        assets_path: str | os.PathLike[str] = ".",
        model_trackball: TrackBall | None = None,
        light_trackball: TrackBall | None = None,
    ) -> None:
        self.assets_path = Path(assets_path)
        self.viewport_width = 0
        self.viewport_height = 0

        self.model = Model()
        self.triangles_to_draw = 0

        self.trackball_model = model_trackball if model_trackball is not None else TrackBall()
        self.trackball_light = light_trackball if light_trackball is not None else TrackBall()
        self.zoom = 0.0

        self.eye_position = np.zeros(3)
        self.model_matrix = np.identity(4)
        self.view_matrix = np.identity(4)
        self.proj_matrix = np.identity(4)
        self.projection = Projection.PERSPECTIVE

        self.shader_names = SHADER_NAMES
        self.current_program_index = 0
        self.mapping_mode = MappingMode.TRIPLANAR
        self.face_culling = False
        self.front_face_cw = False

        self.light_dir = np.array([-1.0, -1.0, -1.0, 0.0])
        self.light_ambient = np.ones(4)
        self.light_diffuse = np.ones(4)
        self.light_specular = np.ones(4)
        self.ka = np.zeros(4)
        self.kd = np.zeros(4)
        self.ks = np.zeros(4)
        self.shininess = 0.0

        # Initial spin of the model
        self.trackball_model.axis = np.ones(3) / math.sqrt(3.0)
        self.trackball_model.velocity = 0.0001

    def handle_mouse_motion(self, position: Sequence[float]) -> None:
        self.trackball_model.mouse_move(position)
        self.trackball_light.mouse_move(position)

    def handle_mouse_button(
        self, button: str, pressed: bool, position: Sequence[float]
    ) -> None:
        """Left button drags the model, right button drags the light."""
        trackball = {"left": self.trackball_model, "right": self.trackball_light}.get(button)
        if trackball is None:
            return
        if pressed:
            trackball.mouse_press(position)
        else:
            trackball.mouse_release(position)

    def handle_mouse_wheel(self, y: float) -> None:
        """Zoom the camera in or out by one step."""
        self.zoom += (1.0 if y > 0 else -1.0) / 5.0
        self.zoom = min(max(self.zoom, _ZOOM_MIN), _ZOOM_MAX)

    def resize(self, width: int, height: int) -> None:
        self.viewport_width = width
        self.viewport_height = height
        self.trackball_model.resize_viewport(width, height)
        self.trackball_light.resize_viewport(width, height)
        if height > 0:
            self.set_projection(self.projection)

    def load_model(self, path: str | os.PathLike[str]) -> None:
        """Load a mesh with the default textures and adopt its material.

        The mapping mode becomes "from mesh" when the mesh has texture
        coordinates and triplanar otherwise.
        """
        maps = self.assets_path / "maps"
        self.model.load_diffuse_texture(maps / "pattern.png")
        self.model.load_normal_texture(maps / "pattern_normal.png")
        self.model.load_from_file(path)
        self.triangles_to_draw = self.model.num_triangles()

        self.ka = np.array(self.model.ka, dtype=float)
        self.kd = np.array(self.model.kd, dtype=float)
        self.ks = np.array(self.model.ks, dtype=float)
        self.shininess = float(self.model.shininess)

        self.mapping_mode = (
            MappingMode.FROM_MESH if self.model.is_uv_mapped else MappingMode.TRIPLANAR
        )

    def load_cube_texture(self) -> None:
        """Load the environment cube map from the assets directory."""
        self.model.load_cube_texture(f"{self.assets_path / 'maps' / 'cube'}{os.sep}")

    def update(self) -> None:
        """Refresh the model and view matrices from the trackball and zoom."""
        self.model_matrix = self.trackball_model.rotation()
        self.eye_position = np.array([0.0, 0.0, 2.0 + self.zoom])
        self.view_matrix = look_at(self.eye_position, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0))

    def set_projection(self, projection: Projection) -> None:
        """Choose the projection and rebuild it for the current aspect ratio."""
        self.projection = Projection(projection)
        aspect = float(self.viewport_width) / float(self.viewport_height)
        if self.projection is Projection.PERSPECTIVE:
            self.proj_matrix = perspective(math.radians(_FOVY_DEGREES), aspect, _NEAR, _FAR)
        else:
            self.proj_matrix = ortho(-aspect, aspect, -1.0, 1.0, _NEAR, _FAR)

    def select_shader(self, index: int) -> None:
        if not 0 <= index < len(self.shader_names):
            raise IndexError(f"no shader at index {index}")
        self.current_program_index = index

    @property
    def shader_name(self) -> str:
        return self.shader_names[self.current_program_index]

    def mapping_mode_names(self) -> list[str]:
        """Names of the UV mapping modes the current mesh allows."""
        names = ["Triplanar", "Cylindrical", "Spherical"]
        if self.model.is_uv_mapped:
            names.append("From mesh")
        return names

    def uniforms(self) -> dict[str, object]:
        """Values of the shader uniforms for the current frame."""
        light_rotation = self.trackball_light.rotation()
        model_view = self.view_matrix @ self.model_matrix
        return {
            "viewMatrix": self.view_matrix.copy(),
            "projMatrix": self.proj_matrix.copy(),
            "modelMatrix": self.model_matrix.copy(),
            "normalMatrix": normal_matrix(model_view),
            "diffuseTex": 0,
            "normalTex": 1,
            "cubeTex": 2,
            "mappingMode": int(self.mapping_mode),
            "texMatrix": light_rotation[:3, :3].T.copy(),
            "lightDirWorldSpace": light_rotation @ self.light_dir,
            "Ia": self.light_ambient.copy(),
            "Id": self.light_diffuse.copy(),
            "Is": self.light_specular.copy(),
            "shininess": self.shininess,
            "Ka": self.ka.copy(),
            "Kd": self.kd.copy(),
            "Ks": self.ks.copy(),
        }

    def draws_skybox(self) -> bool:
        """The skybox is drawn with the reflection and refraction shaders."""
        return self.current_program_index in (0, 1)

    def shows_light_window(self) -> bool:
        """Light and material controls apply to the lit shaders only."""
        return 1 < self.current_program_index < 6