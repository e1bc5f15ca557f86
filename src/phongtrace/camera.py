from dataclasses import dataclass as py_dataclass, field
from datetime import datetime

import jax.numpy as jnp
from flax.struct import dataclass
from jaxtyping import Float, Array
from loguru import logger

from .config import IMG_WIDTH, IMG_HEIGHT, IMG_SIZE, CAMERA_WARN_MS
from .lighting import LightSource
from .types import Vec3, Mat3
from .vector import vec3, unit_vector, cross, magnitude, apply_matrix, matrix_mul

LOOK_AT = (0.0, 0.0, 0.0)
WORLD_UP = (0.0, 1.0, 0.0)
PARALLEL_EPS = 1e-6

ScreenArr = Float[Array, "h w 3"]  # noqa: F722


def horizontal_rotation_matrix(degrees: float) -> Mat3:
    """
    Rotation about the world Y axis.
    """
    rad = jnp.deg2rad(degrees)
    return jnp.array([
        [jnp.cos(rad), 0.0, -jnp.sin(rad)],
        [0.0, 1.0, 0.0],
        [jnp.sin(rad), 0.0, jnp.cos(rad)],
    ], dtype=jnp.float32)


def vertical_rotation_matrix(degrees: float) -> Mat3:
    """
    Rotation about the world X axis.
    """
    rad = jnp.deg2rad(degrees)
    return jnp.array([
        [1.0, 0.0, 0.0],
        [0.0, jnp.cos(rad), jnp.sin(rad)],
        [0.0, -jnp.sin(rad), jnp.cos(rad)],
    ], dtype=jnp.float32)


@py_dataclass
class CameraParams:
    view_reference_point: tuple = (0.0, 0.0, -float(IMG_SIZE))
    approx_view_up_vector: tuple = WORLD_UP
    focal_length: float = 100.0
    img_width: int = IMG_WIDTH
    img_height: int = IMG_HEIGHT
    scale: float = 1.0
    fov: float = 45.0
    ambient_coefficient: float = 0.3
    light_source: LightSource = field(default_factory=LightSource)


@dataclass
class CameraSnapshot:
    """
    Everything a render worker needs from the camera for one frame. It is
    created on the control thread and never written afterwards, so workers
    share it without locking.
    """
    screen_origin: ScreenArr     # unrotated pixel points, shape (H, W, 3)
    screen_direction: ScreenArr  # unrotated pixel directions, shape (H, W, 3)
    rotation: Mat3
    light_position: Vec3
    light_colour: Vec3
    ambient_coefficient: float

    @property
    def img_height(self) -> int:
        return self.screen_origin.shape[0]

    @property
    def img_width(self) -> int:
        return self.screen_origin.shape[1]

    def light_source(self) -> LightSource:
        return LightSource(self.light_position, self.light_colour)

    def project_rows(self, start: int, end: int) -> tuple[ScreenArr, ScreenArr]:
        """
        World space (origin, direction) of every pixel in rows [start, end),
        each of shape (end - start, W, 3).
        """
        origin = apply_matrix(self.rotation, self.screen_origin[start:end])
        direction = apply_matrix(self.rotation, self.screen_direction[start:end])
        return origin, direction


class Camera:
    def __init__(self, params: CameraParams | None = None):
        """
        Perspective camera orbiting the look-at point (the world origin).

        The stored view reference point never moves. Orbiting only changes the
        horizontal/vertical rotation angles, and the effective position is
        always `rotation_matrix() * base view reference point`, so thousands
        of small orbits cannot accumulate drift.
        """
        if params is None:
            params = CameraParams()
        if params.img_width < 1 or params.img_height < 1:
            raise ValueError(f"image size must be positive, got {params.img_width}x{params.img_height}")

        self.look_at = vec3(LOOK_AT)
        self.base_view_reference_point = vec3(params.view_reference_point)
        self.focal_length = float(params.focal_length)
        self.fov = float(params.fov)
        self.scale = float(params.scale)
        self.img_width = int(params.img_width)
        self.img_height = int(params.img_height)
        self.light_source = params.light_source
        self.ambient_coefficient = 0.0
        self.set_ambient_coefficient(params.ambient_coefficient)

        self.h_rotation = 0.0
        self.v_rotation = 0.0

        self._initial_up = vec3(params.approx_view_up_vector)
        self.view_up_vector = self._initial_up
        self._adjust_view()

        # The screen table lives in the unrotated frame, so it is built from
        # the basis at zero rotation.
        self._base_basis = (self.view_plane_normal, self.view_right_vector, self.view_up_vector)
        self.screen_origin: ScreenArr = None
        self.screen_direction: ScreenArr = None
        self._setup_screen()

    # Basis accessors

    @property
    def vrp(self) -> Vec3:
        return apply_matrix(self.rotation_matrix(), self.base_view_reference_point)

    @property
    def vpn(self) -> Vec3:
        return self.view_plane_normal

    @property
    def vuv(self) -> Vec3:
        return self.view_up_vector

    @property
    def vrv(self) -> Vec3:
        return self.view_right_vector

    # Orbit

    def rotation_matrix(self) -> Mat3:
        """
        The vertical rotation followed by the horizontal one.
        """
        return matrix_mul(
            horizontal_rotation_matrix(self.h_rotation),
            vertical_rotation_matrix(self.v_rotation),
        )

    def orbit_horizontal(self, degrees: float):
        self.h_rotation = (self.h_rotation + degrees % 360.0) % 360.0
        self._timed_adjust_view()

    def orbit_vertical(self, degrees: float):
        self.v_rotation = min(max(self.v_rotation + degrees, -90.0), 90.0)
        self._timed_adjust_view()

    def reset_horizontal(self):
        self.h_rotation = 0.0
        self._timed_adjust_view()

    def reset_vertical(self):
        self.v_rotation = 0.0
        self.view_up_vector = vec3(WORLD_UP)
        self._timed_adjust_view()

    def reset_both(self):
        self.h_rotation = 0.0
        self.v_rotation = 0.0
        self.view_up_vector = vec3(WORLD_UP)
        self._timed_adjust_view()

    def set_ambient_coefficient(self, v: float):
        self.ambient_coefficient = min(max(float(v), 0.0), 1.0)

    def _timed_adjust_view(self):
        start_time = datetime.now()
        self._adjust_view()
        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        if elapsed_ms > CAMERA_WARN_MS:
            logger.warning(f"Camera setup time: {elapsed_ms:.1f}ms")
        else:
            logger.debug(f"Camera setup time: {elapsed_ms:.1f}ms")

    def _adjust_view(self):
        # Order matters: the up vector is both an input and an output, so it
        # is refreshed last.
        self.view_plane_normal = unit_vector(self.look_at - self.vrp)

        right = cross(self.view_plane_normal, self.view_up_vector)
        if float(magnitude(right)) < PARALLEL_EPS:
            # Looking straight along the previous up vector, e.g. a single
            # jump to a pole. Use the rotated initial up vector instead.
            approx_up = apply_matrix(self.rotation_matrix(), self._initial_up)
            right = cross(self.view_plane_normal, approx_up)
        self.view_right_vector = unit_vector(right)

        self.view_up_vector = unit_vector(cross(self.view_right_vector, self.view_plane_normal))

    # Screen table

    def resize(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"image size must be positive, got {width}x{height}")
        self.img_width = int(width)
        self.img_height = int(height)
        self._setup_screen()

    def set_focal_length(self, focal_length: float):
        self.focal_length = float(focal_length)
        self._setup_screen()

    def set_fov(self, fov: float):
        self.fov = float(fov)
        self._setup_screen()

    def aspect_ratio(self) -> float:
        return self.img_width / self.img_height

    def half_view(self) -> tuple[float, float]:
        """
        (half_width, half_height) of the view plane.
        """
        aspect = self.aspect_ratio()
        half_view = float(jnp.tan(jnp.deg2rad(self.fov) / 2.0)) * self.focal_length
        if aspect >= 1.0:
            return half_view, half_view / aspect
        return half_view * aspect, half_view

    def pixel_size(self) -> float:
        half_width, _ = self.half_view()
        return (half_width * 2.0) / self.img_width

    def _setup_screen(self):
        vpn, vrv, vuv = self._base_basis
        vrp = self.base_view_reference_point
        screen_center = vrp + vpn * self.focal_length  # shape (3,)

        width = self.img_width
        height = self.img_height
        step = self.scale * self.pixel_size()

        # Offsets are measured from the far edge so that +x reads right and
        # +y reads up in the final image.
        i = jnp.arange(width, dtype=jnp.float32)   # shape (W,)
        j = jnp.arange(height, dtype=jnp.float32)  # shape (H,)
        u = ((width - i) - width / 2.0) * step     # shape (W,)
        v = ((height - j) - height / 2.0) * step   # shape (H,)

        self.screen_origin = (
            screen_center[None, None, :]
            + vrv[None, None, :] * u[None, :, None]   # (1, W, 1) * (3,) -> (1, W, 3)
            + vuv[None, None, :] * v[:, None, None]   # (H, 1, 1) * (3,) -> (H, 1, 3)
        )  # => shape (H, W, 3)
        self.screen_direction = unit_vector(self.screen_origin - vrp[None, None, :])  # shape (H, W, 3)
        logger.debug(f"Screen table rebuilt for {width}x{height} pixels")

    # Projection

    def project(self, i: int, j: int, rotation_matrix: Mat3) -> tuple[Vec3, Vec3]:
        """
        World space (origin, direction) of the ray through pixel column `i`,
        row `j`.
        """
        if not (0 <= i < self.img_width and 0 <= j < self.img_height):
            raise IndexError(f"pixel ({i}, {j}) outside {self.img_width}x{self.img_height} image")
        origin = apply_matrix(rotation_matrix, self.screen_origin[j, i])
        direction = apply_matrix(rotation_matrix, self.screen_direction[j, i])
        return origin, direction

    def snapshot(self) -> CameraSnapshot:
        return CameraSnapshot(
            screen_origin=self.screen_origin,
            screen_direction=self.screen_direction,
            rotation=self.rotation_matrix(),
            light_position=self.light_source.position,
            light_colour=self.light_source.colour,
            ambient_coefficient=self.ambient_coefficient,
        )
