"""Virtual trackball that turns mouse drags into 3D rotations."""

from __future__ import annotations

import math
import time
from typing import Callable, Sequence

import numpy as np

EPSILON = float(np.finfo(np.float32).eps)


class ElapsedTimer:
    """Measures seconds since construction or since the last restart."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._start = clock()

    def restart(self) -> float:
        """Return the seconds elapsed so far and start counting again."""
        now = self._clock()
        elapsed = now - self._start
        self._start = now
        return elapsed

    def elapsed(self) -> float:
        """Return the seconds elapsed since the last restart."""
        return self._clock() - self._start


def rotation_matrix(angle: float, axis: Sequence[float]) -> np.ndarray:
    """Return the 4x4 homogeneous matrix rotating by ``angle`` radians about ``axis``."""
    k = np.asarray(axis, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        k = k / np.linalg.norm(k)
    x, y, z = k
    c, s = math.cos(angle), math.sin(angle)
    skew = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])
    result = np.identity(4)
    result[:3, :3] = c * np.identity(3) + s * skew + (1.0 - c) * np.outer(k, k)
    return result


class TrackBall:
    """Maps mouse drags on a viewport to rotations on a unit hemisphere.

    While the mouse is released the trackball keeps spinning about its last
    axis at its last angular velocity (radians per millisecond).
    """

    def __init__(self, timer: ElapsedTimer | None = None) -> None:
        self.max_velocity = math.radians(720.0 / 1000.0)
        self.axis = np.ones(3)
        self.velocity = 0.0
        self.tracking = False
        self._rotation = np.identity(4)
        self._last_position = np.zeros(3)
        self._timer = timer if timer is not None else ElapsedTimer()
        self._viewport_width = 0.0
        self._viewport_height = 0.0

    def mouse_move(self, position: Sequence[float]) -> None:
        """Rotate according to the drag from the previous mouse position."""
        if not self.tracking:
            return

        msecs = self._timer.restart() * 1000.0

        current = self._project(position)
        if np.all(np.abs(self._last_position - current) < EPSILON):
            return

        axis = np.cross(self._last_position, current)
        angle = float(np.linalg.norm(axis))
        with np.errstate(divide="ignore", invalid="ignore"):
            self.axis = axis / angle

        self.velocity = min(max(angle / (msecs + EPSILON), 0.0), self.max_velocity)
        self._rotation = rotation_matrix(angle, self.axis) @ self._rotation
        self._last_position = current

    def mouse_press(self, position: Sequence[float]) -> None:
        """Start tracking a drag at ``position``."""
        self._rotation = self.rotation()
        self.tracking = True
        self._timer.restart()
        self._last_position = self._project(position)
        self.velocity = 0.0

    def mouse_release(self, position: Sequence[float]) -> None:
        """Finish the drag at ``position``."""
        self.mouse_move(position)
        self.tracking = False

    def resize_viewport(self, width: int, height: int) -> None:
        self._viewport_width = float(width)
        self._viewport_height = float(height)

    def rotation(self) -> np.ndarray:
        """Return the current 4x4 rotation matrix."""
        if self.tracking:
            return self._rotation.copy()
        angle = self.velocity * self._timer.elapsed() * 1000.0
        return rotation_matrix(angle, self.axis) @ self._rotation

    def _project(self, position: Sequence[float]) -> np.ndarray:
        px, py = float(position[0]), float(position[1])
        v = np.array(
            [
                2.0 * px / self._viewport_width - 1.0,
                1.0 - 2.0 * py / self._viewport_height,
                0.0,
            ]
        )
        squared_length = float(v @ v)
        if squared_length >= 1.0:
            return v / math.sqrt(squared_length)
        v[2] = math.sqrt(1.0 - squared_length)
        return v