from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Iterable

import jax.numpy as jnp
import numpy as np
from PIL import Image
from loguru import logger

from .camera import Camera, CameraSnapshot
from .config import RenderConfig, RENDER_WARN_MS
from .lighting import LightSource, Intersection, shade_record
from .material import Material
from .types import Vec3, Vec3arr


class Ray:
    def __init__(self, origin: Vec3arr, direction: Vec3arr):
        """
        Ray class to represent N rays in 3D space.

        Parameters:
            - origin: The starting point of the rays, shape (N, 3).
            - direction: The direction of the rays, shape (N, 3). It should be
              normalized.
        """
        self.origin = jnp.asarray(origin, dtype=jnp.float32)
        self.direction = jnp.asarray(direction, dtype=jnp.float32)

        # Distance from the ray origin to the closest intersection found so far.
        #
        # Conventions:
        #   - t is never smaller than 0. (It is a ray, not a line.)
        #   - t > 0 & t < inf: The ray intersects an object.
        #   - t = inf: The ray does not intersect any object.
        self.t = jnp.full(self.direction.shape[0], jnp.inf, dtype=jnp.float32)  # shape (N,)

    @staticmethod
    def single(origin: Vec3, direction: Vec3) -> "Ray":
        return Ray(
            origin=jnp.asarray(origin, dtype=jnp.float32)[None, :],
            direction=jnp.asarray(direction, dtype=jnp.float32)[None, :],
        )

    def __len__(self):
        return self.origin.shape[0]

    def end_point(self, offset: float = 0) -> Vec3arr:
        """
        Calculate the end point of the ray.
        """
        return self.origin + self.direction * (self.t + offset)[:, None]

    def point(self, t: float) -> Vec3arr:
        return self.origin + self.direction * t


class HitRecord:
    def __init__(self, ray: Ray):
        """
        What the closest hit of every ray looks like, filled in by
        Hitable.hit() one shape at a time.
        """
        n = len(ray)
        self.ray = ray  # N rays
        self.normal_vector = jnp.zeros((n, 3), dtype=jnp.float32)  # shape (N, 3)
        self.base_colour = jnp.zeros((n, 3), dtype=jnp.float32)  # shape (N, 3)
        self.specular_k = jnp.zeros((n, 3), dtype=jnp.float32)  # shape (N, 3)
        self.specular_exponent = jnp.ones((n,), dtype=jnp.float32)  # shape (N,)
        self.inside = jnp.zeros((n,), dtype=jnp.bool_)  # shape (N,)

    def __len__(self):
        return len(self.ray)


class Hitable:
    def hit(self, record: HitRecord):
        """
        For every ray of the record that hits this shape strictly closer than
        the ray's current t, write the hit into the record.
        """
        raise NotImplementedError("hit() method not implemented in base class")

    def intersect(self, ray: Ray, light_source: LightSource) -> Intersection | None:
        raise NotImplementedError("intersect() method not implemented in base class")

    def surface_normal(self, point: Vec3) -> Vec3:
        raise NotImplementedError("surface_normal() method not implemented in base class")

    def material(self) -> Material:
        raise NotImplementedError("material() method not implemented in base class")


class RaytraceRenderer:
    def __init__(self, cam: Camera, config: RenderConfig | None = None):
        self.cam = cam
        self.config = config if config is not None else RenderConfig()
        self.hitable_objects: list[Hitable] = []

    def new_buffer(self) -> np.ndarray:
        cam = self.cam
        buffer = np.zeros((cam.img_height, cam.img_width, self.config.channels), dtype=np.uint8)
        if self.config.channels == 4:
            buffer[..., 3] = 255
        return buffer

    def _row_chunks(self, height: int) -> Iterable[tuple[int, int]]:
        step = self.config.rows_per_chunk
        for start in range(0, height, step):
            yield start, min(start + step, height)

    def _render_rows(self, snapshot: CameraSnapshot, start: int, end: int) -> np.ndarray:
        """
        Trace and shade rows [start, end). Only reads shared state.
        """
        origin, direction = snapshot.project_rows(start, end)  # shape (R, W, 3)
        rows, width = origin.shape[0], origin.shape[1]

        ray = Ray(
            origin=origin.reshape(-1, 3),
            direction=direction.reshape(-1, 3),
        )
        record = HitRecord(ray)
        for obj in self.hitable_objects:
            obj.hit(record)

        colour = shade_record(
            record,
            light_source=snapshot.light_source(),
            ambient_coefficient=snapshot.ambient_coefficient,
            background=self.config.background,
        )  # shape (R * W, 3)
        colour = np.asarray(colour).reshape(rows, width, 3)
        if self.config.channels == 4:
            alpha = np.full((rows, width, 1), 255, dtype=np.uint8)
            colour = np.concatenate([colour, alpha], axis=-1)
        return colour

    def render(self, buffer: np.ndarray | None = None) -> np.ndarray:
        """
        Render one frame into `buffer` (height, width, channels), row-major
        from the top. A fresh buffer is created when none is given.
        """
        cam = self.cam
        if buffer is None:
            buffer = self.new_buffer()
        expected_shape = (cam.img_height, cam.img_width, self.config.channels)
        if buffer.shape != expected_shape:
            raise ValueError(f"buffer shape {buffer.shape} does not match {expected_shape}")

        start_time = datetime.now()

        # The camera is frozen for this frame, workers only see the snapshot.
        snapshot = cam.snapshot()
        chunks = list(self._row_chunks(cam.img_height))

        with ThreadPoolExecutor(max_workers=self.config.num_workers) as pool:
            futures = [
                (start, end, pool.submit(self._render_rows, snapshot, start, end))
                for start, end in chunks
            ]
            for start, end, future in futures:
                block = future.result()
                rows = buffer[start:end]
                changed = np.any(rows != block, axis=-1)  # shape (R, W)
                rows[changed] = block[changed]

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        if elapsed_ms > RENDER_WARN_MS:
            logger.warning(f"Render time: {elapsed_ms:.1f}ms")
        else:
            logger.info(f"Render time: {elapsed_ms:.1f}ms")
        return buffer

    def render_image(self) -> Image.Image:
        return to_image(self.render())


def render(
        buffer: np.ndarray,
        camera: Camera,
        shapes: Iterable[Hitable],
        config: RenderConfig | None = None,
    ) -> np.ndarray:
    """
    Render `shapes` as seen by `camera` into `buffer`.
    """
    if config is None:
        config = RenderConfig(channels=buffer.shape[-1])
    renderer = RaytraceRenderer(camera, config)
    renderer.hitable_objects.extend(shapes)
    return renderer.render(buffer)


def to_image(buffer: np.ndarray) -> Image.Image:
    # uint8 (H, W, 3) and (H, W, 4) arrays map to RGB and RGBA images
    return Image.fromarray(np.ascontiguousarray(buffer))


def write_image(buffer: np.ndarray, path: str | Path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    to_image(buffer).save(path, format="PNG")
    logger.info(f"Image written to {path}")
