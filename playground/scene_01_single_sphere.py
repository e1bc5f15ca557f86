import os

from phongtrace.camera import Camera, CameraParams
from phongtrace.config import RenderConfig, configure_logging
from phongtrace.lighting import LightSource
from phongtrace.objects import Sphere
from phongtrace.raytrace import RaytraceRenderer
from phongtrace.material import BURNT_ORANGE

configure_logging("INFO")

cam = Camera(CameraParams(
    view_reference_point=(0, 0, -1000),
    focal_length=100,
    img_width=640,
    img_height=480,
    fov=45,
    light_source=LightSource(position=[-250, 250, -400]),
))

renderer = RaytraceRenderer(
    cam=cam,
    config=RenderConfig(num_workers=8, rows_per_chunk=40, channels=3),
)

sph1 = Sphere.new_with_colour(center=[0, 0, 0], radius=150, colour=BURNT_ORANGE)
renderer.hitable_objects.append(sph1)

img = renderer.render_image()
os.makedirs("output", exist_ok=True)
img.save("output/01_single_sphere.png")
img.show()
