import jax
import jax.numpy as jnp
from flax.struct import dataclass
from loguru import logger

from .material import ColourChannel, channel_fraction
from .types import Vec3, Vec3arr, FloatArr, BoolArr, PixelColour, PixelArr
from .vector import vec3, unit_vector, dot, to_pixel_colour, saturating_add, saturating_scale


class LightSource:
    def __init__(self, position: Vec3 | list = (-250.0, -250.0, -100.0), colour: Vec3 | list = (1.0, 1.0, 1.0)):
        """
        A point light.

        Parameters:
            - position: Position of the light in world space.
            - colour: Colour of the light, 0.0 - 1.0 per channel.
        """
        self.position = vec3(position)
        self.colour = vec3(colour)

    def set_x(self, v: float):
        self.position = self.position.at[0].set(v)

    def set_y(self, v: float):
        self.position = self.position.at[1].set(v)

    def set_z(self, v: float):
        self.position = self.position.at[2].set(v)

    def set_colour_channel(self, channel: ColourChannel, value: float):
        self.colour = self.colour.at[channel.value].set(channel_fraction(value))

    def copy(self) -> "LightSource":
        return LightSource(self.position, self.colour)

    def __repr__(self):
        return f"LightSource(position={self.position.tolist()}, colour={self.colour.tolist()})"


@dataclass
class _PhongInput:
    # parameters for N shaded points
    point: Vec3arr          # hit points, shape (N, 3)
    normal: Vec3arr         # unit surface normals, shape (N, 3)
    origin: Vec3arr         # ray origins (eye side), shape (N, 3)
    base_colour: Vec3arr    # shape (N, 3)
    specular_k: Vec3arr     # shape (N, 3)
    specular_exponent: FloatArr  # shape (N,)
    inside: BoolArr         # shape (N,)

    # shared by all points
    light_position: Vec3
    light_colour: Vec3
    ambient_coefficient: float


@jax.jit
def _phong_jit(input: _PhongInput) -> PixelArr:
    logger.debug(f"JIT cache miss, compile phong shading for {input.point.shape[0]} points")

    light_colour = input.light_colour[None, :]  # shape (1, 3)

    direction_l = unit_vector(input.light_position[None, :] - input.point)  # shape (N, 3)
    n_l_dot = dot(input.normal, direction_l)  # shape (N,)
    n_l_clamped = jnp.clip(n_l_dot, 0.0, 1.0)[:, None]  # shape (N, 1)

    diffuse = to_pixel_colour(light_colour * input.base_colour * n_l_clamped)  # shape (N, 3)

    ambient_k = input.base_colour * input.ambient_coefficient
    ambient = to_pixel_colour(light_colour * ambient_k)  # shape (N, 3)
    # A hit from inside the shape only gets half the ambient light
    ambient = jnp.where(input.inside[:, None], saturating_scale(ambient, 0.5), ambient)

    reflected = unit_vector(2.0 * n_l_dot[:, None] * input.normal - direction_l)  # shape (N, 3)
    view = unit_vector(input.origin - input.point)  # shape (N, 3)
    alignment = dot(reflected, view)  # shape (N,)
    lit = (n_l_dot >= 0) & (alignment >= 0)  # shape (N,)
    highlight = jnp.where(lit, alignment, 0.0) ** input.specular_exponent  # shape (N,)
    specular = to_pixel_colour(input.specular_k * light_colour * highlight[:, None])
    specular = jnp.where(lit[:, None], specular, 0)

    return saturating_add(diffuse, ambient, specular)


def phong(
        point: Vec3arr,
        normal: Vec3arr,
        origin: Vec3arr,
        base_colour: Vec3arr,
        specular_k: Vec3arr,
        specular_exponent: FloatArr,
        inside: BoolArr,
        light_source: LightSource,
        ambient_coefficient: float,
    ) -> PixelArr:
    """
    Phong colour (ambient + diffuse + specular) of N surface points lit by a
    single point light. Each channel of the sum saturates at 255.
    """
    return _phong_jit(_PhongInput(
        point=point,
        normal=normal,
        origin=origin,
        base_colour=base_colour,
        specular_k=specular_k,
        specular_exponent=jnp.asarray(specular_exponent, dtype=jnp.float32),
        inside=jnp.asarray(inside, dtype=jnp.bool_),
        light_position=light_source.position,
        light_colour=light_source.colour,
        ambient_coefficient=jnp.float32(ambient_coefficient),
    ))


def shade_record(record, light_source: LightSource, ambient_coefficient: float, background: PixelColour) -> PixelArr:
    """
    Colour every ray of a HitRecord: Phong for rays that hit a shape, the
    background colour for the rest.
    """
    ray = record.ray
    hit_mask = ray.t < jnp.inf  # shape (N,)

    # Keep the points of missed rays finite so they cannot poison the kernel
    point = jnp.where(hit_mask[:, None], ray.end_point(), 0.0)  # shape (N, 3)
    colour = phong(
        point=point,
        normal=record.normal_vector,
        origin=ray.origin,
        base_colour=record.base_colour,
        specular_k=record.specular_k,
        specular_exponent=record.specular_exponent,
        inside=record.inside,
        light_source=light_source,
        ambient_coefficient=ambient_coefficient,
    )
    background = jnp.asarray(background, dtype=jnp.uint8)
    return jnp.where(hit_mask[:, None], colour, background[None, :])


class Intersection:
    def __init__(self, t: float, point: Vec3, shape, ray, light_source: LightSource, is_inside: bool):
        """
        A single ray/shape hit, alive only while one pixel is shaded.

        Parameters:
            - t: Distance along the ray.
            - point: The hit point.
            - shape: The shape that was hit.
            - ray: The (single) ray that hit it.
            - light_source: Copy of the scene's light.
            - is_inside: Whether the ray started inside the shape.
        """
        self.t = t
        self.point = point
        self.shape = shape
        self.ray = ray
        self.light_source = light_source
        self.is_inside = is_inside

    def surface_normal(self) -> Vec3:
        return self.shape.surface_normal(self.point)

    def phong(self, ambient_coefficient: float) -> PixelColour:
        material = self.shape.material()
        colour = phong(
            point=self.point[None, :],
            normal=self.surface_normal()[None, :],
            origin=self.ray.origin[:1],
            base_colour=material.diffuse_k()[None, :],
            specular_k=material.specular_k()[None, :],
            specular_exponent=jnp.array([material.specular_exponent]),
            inside=jnp.array([self.is_inside]),
            light_source=self.light_source,
            ambient_coefficient=ambient_coefficient,
        )
        return colour[0]
