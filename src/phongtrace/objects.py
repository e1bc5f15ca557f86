import jax
import jax.numpy as jnp
from jaxtyping import Array, Bool
from flax.struct import dataclass
from loguru import logger

from .lighting import LightSource, Intersection
from .material import Material, ColourChannel
from .raytrace import Ray, HitRecord, Hitable
from .types import Vec3, Vec3arr, FloatArr, PixelColour
from .vector import vec3, unit_vector, dot

DEFAULT_RADIUS = 100.0


class Sphere(Hitable):
    def __init__(self, center: Vec3 | list, radius: float, material: Material | None = None):
        """
        A sphere.

        A radius that drops to zero or below (e.g. after repeated
        adjust_radius() calls) is kept as is, such a sphere is never hit.
        """
        self.center = vec3(center)
        self.radius = float(radius)
        self._material = material if material is not None else Material()

    @staticmethod
    def default() -> "Sphere":
        return Sphere(vec3(0.0, 0.0, 0.0), DEFAULT_RADIUS)

    @staticmethod
    def default_with_pos(center: Vec3 | list) -> "Sphere":
        return Sphere(center, DEFAULT_RADIUS)

    @staticmethod
    def new_with_colour(center: Vec3 | list, radius: float, colour: PixelColour | tuple) -> "Sphere":
        return Sphere(center, radius, Material.from_pixel_colour(colour))

    def set_x(self, v: float):
        self.center = self.center.at[0].set(v)

    def set_y(self, v: float):
        self.center = self.center.at[1].set(v)

    def set_z(self, v: float):
        self.center = self.center.at[2].set(v)

    def adjust_radius(self, delta: float):
        self.radius += delta

    def set_colour_channel(self, channel: ColourChannel, value: float):
        self._material.set_colour_channel(channel, value)

    def material(self) -> Material:
        return self._material.copy()

    def surface_normal(self, point: Vec3 | Vec3arr) -> Vec3 | Vec3arr:
        return unit_vector(point - self.center)

    @dataclass
    class _HitInput:
        # parameter for N rays
        O: Vec3arr  # origins, shape (N, 3)
        D: Vec3arr  # directions, shape (N, 3)
        ray_t: FloatArr  # distance to the closest hit so far, shape (N,)

        # parameters of the sphere
        center: Vec3
        radius: float

    @dataclass
    class _HitOutput:
        mask: Bool[Array, "N"]    # shape (N,)  # noqa: F821
        t: FloatArr               # shape (N,)
        inside: Bool[Array, "N"]  # shape (N,)  # noqa: F821

    @staticmethod
    @jax.jit
    def _hit_jit(input: "_HitInput") -> _HitOutput:
        logger.debug(f"JIT cache miss, compile sphere hit for {input.O.shape[0]} rays")

        O = input.O
        D = input.D
        radius = input.radius

        # a t^2 + b t + c = 0
        V = O - input.center[None, :]  # shape (N, 3)
        a = dot(D, D)                  # shape (N,)
        b = 2.0 * dot(V, D)            # shape (N,)
        c = dot(V, V) - radius * radius
        discriminant = b * b - 4.0 * a * c  # shape (N,)

        sqrt_disc = jnp.sqrt(jnp.maximum(discriminant, 0.0))
        t_near = (-b - sqrt_disc) / (2.0 * a)
        t_far = (-b + sqrt_disc) / (2.0 * a)
        t_single = -b / (2.0 * a)

        tangent = discriminant == 0
        # Both roots in front: the nearer one is on the outer surface.
        # Only the far root in front: the ray starts inside the sphere.
        both_ahead = t_near > 0
        only_far_ahead = (t_near <= 0) & (t_far > 0)

        t = jnp.where(
            tangent,
            t_single,
            jnp.where(both_ahead, t_near, jnp.where(only_far_ahead, t_far, jnp.inf)),
        )  # shape (N,)
        inside = ~tangent & only_far_ahead

        valid_hits = (
            (discriminant >= 0) &  # the ray meets the sphere at all
            (a > 0) &              # degenerate zero-length direction
            (radius > 0) &         # a shrunk sphere is never hit
            (t > 0) & (t != jnp.inf)
        )
        t = jnp.where(valid_hits, t, jnp.inf)

        # Only hits strictly closer than what was already found count, so on
        # a tie the first shape wins.
        mask = (t != jnp.inf) & (t < input.ray_t)  # shape (N,)

        return Sphere._HitOutput(mask=mask, t=t, inside=inside & mask)

    def _solve(self, ray: Ray) -> _HitOutput:
        return Sphere._hit_jit(Sphere._HitInput(
            O=ray.origin,          # shape (N, 3), N is the number of rays
            D=ray.direction,       # shape (N, 3)
            ray_t=ray.t,           # shape (N,)
            center=self.center,
            radius=jnp.float32(self.radius),
        ))

    def hit(self, record: HitRecord):
        """
        Hit test for the sphere.

        If there is an intersection and the distance is less than ray.t,
        update ray.t to the distance and record the surface at the hit point.
        """
        ray = record.ray
        output = self._solve(ray)

        ray_idx = jnp.where(output.mask)[0]  # shape (K,), K is the number of rays that actually hit
        if ray_idx.shape[0] == 0:
            return
        t = output.t[ray_idx]  # shape (K,)

        hit_points = ray.origin[ray_idx] + ray.direction[ray_idx] * t[:, None]  # shape (K, 3)
        normals = self.surface_normal(hit_points)  # shape (K, 3)

        material = self._material
        # Write information back into the record
        ray.t = ray.t.at[ray_idx].set(t)
        record.normal_vector = record.normal_vector.at[ray_idx].set(normals)
        record.base_colour = record.base_colour.at[ray_idx].set(material.diffuse_k())
        record.specular_k = record.specular_k.at[ray_idx].set(material.specular_k())
        record.specular_exponent = record.specular_exponent.at[ray_idx].set(material.specular_exponent)
        record.inside = record.inside.at[ray_idx].set(output.inside[ray_idx])

    def intersect(self, ray: Ray, light_source: LightSource) -> Intersection | None:
        """
        Closest intersection of a single ray with the sphere, if any.
        """
        if len(ray) != 1:
            raise ValueError(f"intersect() takes a single ray, got {len(ray)}")

        output = self._solve(Ray(ray.origin, ray.direction))
        if not bool(output.mask[0]):
            return None

        t = float(output.t[0])
        return Intersection(
            t=t,
            point=ray.point(t)[0],
            shape=self,
            ray=ray,
            light_source=light_source.copy(),
            is_inside=bool(output.inside[0]),
        )

    def __repr__(self):
        return f"Sphere(center={self.center.tolist()}, radius={self.radius}, material={self._material!r})"
