from enum import Enum

import jax.numpy as jnp

from .types import Vec3, Vec3arr, FloatArr, Mat3, PixelColour, PixelArr


def vec3(x, y=None, z=None) -> Vec3:
    """
    Build a float32 vector from three numbers or from any (..., 3) sequence.
    """
    if y is None and z is None:
        return jnp.asarray(x, dtype=jnp.float32)
    return jnp.array([x, y, z], dtype=jnp.float32)


def magnitude(v: Vec3 | Vec3arr) -> float | FloatArr:
    """
    sqrt(x^2 + y^2 + z^2), computed over the last axis.
    """
    return jnp.linalg.norm(v, axis=-1)


def unit_vector(v: Vec3 | Vec3arr) -> Vec3 | Vec3arr:
    """
    Normalize a vector or an array of vectors.

    A vector of magnitude exactly zero is returned unchanged instead of being
    divided by zero.
    """
    norm = jnp.linalg.norm(v, axis=-1, keepdims=True)
    safe_norm = jnp.where(norm == 0, 1.0, norm)
    return jnp.where(norm == 0, v, v / safe_norm)


def dot(a: Vec3 | Vec3arr, b: Vec3 | Vec3arr) -> float | FloatArr:
    return jnp.sum(a * b, axis=-1)


def cross(a: Vec3 | Vec3arr, b: Vec3 | Vec3arr) -> Vec3 | Vec3arr:
    return jnp.cross(a, b)


def identity_matrix() -> Mat3:
    return jnp.eye(3, dtype=jnp.float32)


def apply_matrix(matrix: Mat3, v: Vec3 | Vec3arr) -> Vec3 | Vec3arr:
    """
    Apply a 3x3 matrix to a vector or an array of vectors.

    Row k of `matrix` holds the k-th basis column vector, so the result is
        matrix[0] * v.x + matrix[1] * v.y + matrix[2] * v.z
    which, for a (N, 3) batch, is just `v @ matrix`.
    """
    return v @ matrix


def matrix_mul(left: Mat3, right: Mat3) -> Mat3:
    """
    Compose two matrices: every basis column of `right` is sent through
    `left`, so apply_matrix(matrix_mul(L, R), v) == L(R(v)).
    """
    return apply_matrix(left, right)


# Colours
#
# Pixel colours are uint8 triples (0 - 255), light colours are float32
# triples (0.0 - 1.0). Arithmetic on pixel colours saturates at 0 and 255
# instead of wrapping.


class ColourChannel(Enum):
    RED = 0
    GREEN = 1
    BLUE = 2


def colour_channel(colour: Vec3 | Vec3arr | PixelColour | PixelArr, channel: ColourChannel):
    """
    One channel of a colour, or of every colour in a batch.
    """
    return colour[..., channel.value]


def to_light_colour(pixel: PixelColour | PixelArr | tuple) -> Vec3 | Vec3arr:
    return jnp.asarray(pixel, dtype=jnp.float32) / 255.0


def to_pixel_colour(light: Vec3 | Vec3arr) -> PixelColour | PixelArr:
    """
    Convert a 0.0 - 1.0 colour to 0 - 255 channels, truncating the fraction.
    """
    scaled = jnp.clip(jnp.asarray(light, dtype=jnp.float32) * 255.0, 0, 255)
    return scaled.astype(jnp.uint8)


def saturating_add(*colours: PixelColour | PixelArr) -> PixelColour | PixelArr:
    total = sum(jnp.asarray(c, dtype=jnp.int32) for c in colours)
    return jnp.clip(total, 0, 255).astype(jnp.uint8)


def saturating_scale(colour: PixelColour | PixelArr, k: float) -> PixelColour | PixelArr:
    scaled = jnp.asarray(colour, dtype=jnp.float32) * k
    return jnp.clip(scaled, 0, 255).astype(jnp.uint8)
