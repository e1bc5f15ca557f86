from enum import Enum

import numpy as np
from loguru import logger

from .camera import Camera
from .config import RenderConfig
from .material import ColourChannel, ZIMA_BLUE, BURNT_ORANGE
from .objects import Sphere
from .raytrace import RaytraceRenderer
from .vector import vec3, colour_channel


class Axis(Enum):
    X = 0
    Y = 1
    Z = 2


class RotationAxis(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"


def default_shapes() -> list[Sphere]:
    return [
        Sphere.default(),
        Sphere.default_with_pos(vec3(100.0, 100.0, 200.0)),
        Sphere.default_with_pos(vec3(200.0, 200.0, 400.0)),
        Sphere.new_with_colour(vec3(-150.0, -50.0, 200.0), 50.0, ZIMA_BLUE),
        Sphere.new_with_colour(vec3(34.0, 100.0, -150.0), 50.0, BURNT_ORANGE),
    ]


class Scene:
    def __init__(
            self,
            camera: Camera | None = None,
            shapes: list[Sphere] | None = None,
            config: RenderConfig | None = None,
        ):
        """
        The mutable scene and the frame it was last rendered to.

        Every mutation runs synchronously on the caller's thread and is
        followed by a full render, so a render never observes a half-applied
        change.
        """
        self.camera = camera if camera is not None else Camera()
        self.shapes = shapes if shapes is not None else default_shapes()
        self.renderer = RaytraceRenderer(self.camera, config)
        self.renderer.hitable_objects = self.shapes
        self.buffer = self.renderer.new_buffer()

    def _shape(self, index: int) -> Sphere:
        if not 0 <= index < len(self.shapes):
            raise IndexError(f"no shape at index {index}, the scene has {len(self.shapes)}")
        return self.shapes[index]

    def render(self) -> np.ndarray:
        return self.renderer.render(self.buffer)

    # Shapes

    def set_shape_position(self, index: int, axis: Axis, value: float) -> np.ndarray:
        shape = self._shape(index)
        setter = {Axis.X: shape.set_x, Axis.Y: shape.set_y, Axis.Z: shape.set_z}[axis]
        setter(value)
        return self.render()

    def adjust_radius(self, index: int, delta: float) -> np.ndarray:
        shape = self._shape(index)
        shape.adjust_radius(delta)
        if shape.radius <= 0:
            logger.debug(f"Shape {index} has radius {shape.radius} and is no longer visible")
        return self.render()

    def set_shape_colour_channel(self, index: int, channel: ColourChannel, value: float) -> np.ndarray:
        shape = self._shape(index)
        shape.set_colour_channel(channel, value)
        logger.debug(
            f"Shape {index} {channel.name.lower()} channel set to "
            f"{float(colour_channel(shape.material().colour(), channel)):.3f}"
        )
        return self.render()

    # Light

    def set_light_position(self, axis: Axis, value: float) -> np.ndarray:
        light = self.camera.light_source
        setter = {Axis.X: light.set_x, Axis.Y: light.set_y, Axis.Z: light.set_z}[axis]
        setter(value)
        return self.render()

    def set_light_colour_channel(self, channel: ColourChannel, value: float) -> np.ndarray:
        self.camera.light_source.set_colour_channel(channel, value)
        return self.render()

    # Camera

    def orbit_horizontal(self, degrees: float) -> np.ndarray:
        self.camera.orbit_horizontal(degrees)
        return self.render()

    def orbit_vertical(self, degrees: float) -> np.ndarray:
        self.camera.orbit_vertical(degrees)
        return self.render()

    def reset_camera(self, axis: RotationAxis) -> np.ndarray:
        if axis is RotationAxis.HORIZONTAL:
            self.camera.reset_horizontal()
        elif axis is RotationAxis.VERTICAL:
            self.camera.reset_vertical()
        else:
            self.camera.reset_both()
        return self.render()

    def set_ambient(self, v: float) -> np.ndarray:
        self.camera.set_ambient_coefficient(v)
        return self.render()
