import jax.numpy as jnp

from .types import Vec3, PixelColour
from .vector import ColourChannel, to_light_colour


# Colours
ZIMA_BLUE = (26, 179, 249)
BURGUNDY = (128, 0, 32)
BURNT_ORANGE = (204, 85, 0)

DEFAULT_SPECULAR_COEFFICIENT = 1.0
DEFAULT_SPECULAR_EXPONENT = 20.0


def channel_fraction(value: float) -> float:
    """
    Map a 0 - 255 channel value to 0.0 - 1.0, clamping out of range input.
    """
    return min(max(float(value), 0.0), 255.0) / 255.0


class Material:
    def __init__(
            self,
            colour: Vec3 | list | tuple = None,
            specular_coefficient: float = DEFAULT_SPECULAR_COEFFICIENT,
            specular_exponent: float = DEFAULT_SPECULAR_EXPONENT,
        ):
        """
        Surface response of a shape.

        Parameters:
            - colour: Base (diffuse) colour, 0.0 - 1.0 per channel. Defaults to
              burgundy.
            - specular_coefficient: Scales the base colour into the specular
              reflectance. 0 turns the highlight off.
            - specular_exponent: Shininess, the power the reflection/view
              alignment is raised to.

        The ambient and specular reflectances are always derived from the
        current base colour, they are never stored.
        """
        if colour is None:
            colour = to_light_colour(BURGUNDY)
        self._colour = jnp.asarray(colour, dtype=jnp.float32)
        self.specular_coefficient = specular_coefficient
        self.specular_exponent = specular_exponent

    @staticmethod
    def from_pixel_colour(pixel: PixelColour | tuple, **kwargs) -> "Material":
        return Material(jnp.array([channel_fraction(c) for c in pixel], dtype=jnp.float32), **kwargs)

    def colour(self) -> Vec3:
        return self._colour

    def diffuse_k(self) -> Vec3:
        return self._colour

    def ambient_k(self, ambient_coefficient: float) -> Vec3:
        return self._colour * ambient_coefficient

    def specular_k(self) -> Vec3:
        return self._colour * self.specular_coefficient

    def set_colour(self, pixel: PixelColour | tuple):
        self._colour = jnp.array([channel_fraction(c) for c in pixel], dtype=jnp.float32)

    def set_colour_channel(self, channel: ColourChannel, value: float):
        self._colour = self._colour.at[channel.value].set(channel_fraction(value))

    def copy(self) -> "Material":
        return Material(self._colour, self.specular_coefficient, self.specular_exponent)

    def __repr__(self):
        return (
            f"Material(colour={self._colour.tolist()}, "
            f"specular_coefficient={self.specular_coefficient}, "
            f"specular_exponent={self.specular_exponent})"
        )
