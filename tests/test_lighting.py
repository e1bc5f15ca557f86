"""Tests for the Phong lighting evaluation."""

import jax.numpy as jnp
import pytest

from phongtrace.lighting import LightSource, phong
from phongtrace.material import Material
from phongtrace.objects import Sphere
from phongtrace.raytrace import Ray
from phongtrace.vector import vec3

ORANGE = (1.0, 0.5, 0.0)


def shade(light_position, ambient, specular_coefficient=0.0, origin=(0, 0, -5), light_colour=(1, 1, 1)):
    sphere = Sphere(vec3(0, 0, 0), 1.0, Material(vec3(ORANGE), specular_coefficient=specular_coefficient))
    light = LightSource(position=vec3(light_position), colour=vec3(light_colour))
    hit = sphere.intersect(Ray.single(vec3(origin), vec3(0, 0, 1)), light)
    assert hit is not None
    return hit.phong(ambient).tolist()


class TestPhong:
    def test_diffuse_only_light_head_on(self):
        assert shade((0, 0, -10), ambient=0.0) == [255, 127, 0]

    def test_specular_adds_and_saturates(self):
        # light and eye on the same axis, so the reflection points at the eye
        assert shade((0, 0, -10), ambient=0.0, specular_coefficient=1.0) == [255, 254, 0]

    def test_light_behind_surface_leaves_ambient(self):
        assert shade((0, 0, 10), ambient=0.5, specular_coefficient=1.0) == [127, 63, 0]

    def test_inside_hit_halves_ambient(self):
        assert shade((0, 0, -10), ambient=0.5, origin=(0, 0, 0)) == [63, 31, 0]

    def test_grazing_light_contributes_nothing(self):
        assert shade((10, 0, -1), ambient=0.0, specular_coefficient=1.0) == [0, 0, 0]

    def test_light_colour_filters_channels(self):
        assert shade((0, 0, -10), ambient=0.0, light_colour=(0, 1, 1)) == [0, 127, 0]

    def test_ambient_plus_diffuse(self):
        assert shade((0, 0, -10), ambient=0.5) == [255, 127 + 63, 0]

    def test_batched_phong_matches_single(self):
        light = LightSource(position=vec3(0, 0, -10))
        colour = phong(
            point=jnp.array([[0.0, 0, -1], [0.0, 0, -1]]),
            normal=jnp.array([[0.0, 0, -1], [0.0, 0, -1]]),
            origin=jnp.array([[0.0, 0, -5], [0.0, 0, -5]]),
            base_colour=jnp.array([ORANGE, ORANGE]),
            specular_k=jnp.zeros((2, 3)),
            specular_exponent=jnp.array([20.0, 20.0]),
            inside=jnp.array([False, True]),
            light_source=light,
            ambient_coefficient=0.5,
        )
        assert colour.dtype == jnp.uint8
        assert colour.tolist() == [[255, 190, 0], [255, 127 + 31, 0]]

    @pytest.mark.parametrize("ambient", [0.0, 0.25, 1.0])
    def test_channels_never_wrap(self, ambient):
        colour = shade((0, 0, -10), ambient=ambient, specular_coefficient=1.0)
        assert all(0 <= c <= 255 for c in colour)
        assert colour[0] == 255
