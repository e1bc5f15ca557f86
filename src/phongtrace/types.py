from jaxtyping import Float, Array, Bool, UInt8

Vec3 = Float[Array, "3"]
Vec3arr = Float[Array, "n 3"]
FloatArr = Float[Array, "n"]
BoolArr = Bool[Array, "n"]
Mat3 = Float[Array, "3 3"]  # noqa: F722
PixelColour = UInt8[Array, "3"]
PixelArr = UInt8[Array, "n 3"]  # noqa: F722
