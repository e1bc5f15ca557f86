"""Tests for Material and LightSource."""

import jax.numpy as jnp
import numpy as np
import pytest

from phongtrace.lighting import LightSource
from phongtrace.material import Material, ColourChannel, BURGUNDY, ZIMA_BLUE
from phongtrace.vector import vec3, to_light_colour


class TestMaterial:
    def test_default_is_burgundy(self):
        np.testing.assert_allclose(Material().colour(), to_light_colour(BURGUNDY))

    def test_from_pixel_colour(self):
        material = Material.from_pixel_colour(ZIMA_BLUE)
        np.testing.assert_allclose(material.colour(), np.array(ZIMA_BLUE) / 255.0, rtol=1e-6)

    def test_ambient_k_scales_base_colour(self):
        material = Material(vec3(1.0, 0.5, 0.0))
        np.testing.assert_allclose(material.ambient_k(0.3), [0.3, 0.15, 0.0], rtol=1e-6)

    def test_specular_k_defaults_to_base_colour(self):
        material = Material(vec3(1.0, 0.5, 0.25))
        np.testing.assert_allclose(material.specular_k(), material.colour())

    def test_specular_coefficient_zero_disables_specular(self):
        material = Material(vec3(1.0, 0.5, 0.25), specular_coefficient=0.0)
        np.testing.assert_allclose(material.specular_k(), [0.0, 0.0, 0.0])

    def test_set_colour_channel_leaves_other_channels(self):
        material = Material(vec3(0.2, 0.4, 0.6))
        material.set_colour_channel(ColourChannel.GREEN, 255)
        np.testing.assert_allclose(material.colour(), [0.2, 1.0, 0.6], rtol=1e-6)

    def test_derived_coefficients_follow_channel_edits(self):
        material = Material(vec3(0.0, 0.0, 0.0))
        material.set_colour_channel(ColourChannel.RED, 255)
        np.testing.assert_allclose(material.diffuse_k(), [1.0, 0.0, 0.0])
        np.testing.assert_allclose(material.ambient_k(0.5), [0.5, 0.0, 0.0])
        np.testing.assert_allclose(material.specular_k(), [1.0, 0.0, 0.0])

    @pytest.mark.parametrize("value, expected", [(-20, 0.0), (300, 1.0), (51, 0.2)])
    def test_set_colour_channel_clamps(self, value, expected):
        material = Material()
        material.set_colour_channel(ColourChannel.BLUE, value)
        assert float(material.colour()[2]) == pytest.approx(expected, rel=1e-6)

    def test_set_colour(self):
        material = Material()
        material.set_colour((255, 0, 51))
        np.testing.assert_allclose(material.colour(), [1.0, 0.0, 0.2], rtol=1e-6)

    def test_copy_is_independent(self):
        material = Material(vec3(0.1, 0.2, 0.3))
        copy = material.copy()
        copy.set_colour_channel(ColourChannel.RED, 255)
        assert float(material.colour()[0]) == pytest.approx(0.1)


class TestLightSource:
    def test_defaults(self):
        light = LightSource()
        assert light.position.tolist() == [-250.0, -250.0, -100.0]
        assert light.colour.tolist() == [1.0, 1.0, 1.0]

    def test_set_position_components(self):
        light = LightSource()
        light.set_x(1.0)
        light.set_y(2.0)
        light.set_z(3.0)
        assert light.position.tolist() == [1.0, 2.0, 3.0]

    def test_set_colour_channel(self):
        light = LightSource()
        light.set_colour_channel(ColourChannel.GREEN, 0)
        assert jnp.array_equal(light.colour, vec3(1.0, 0.0, 1.0))
