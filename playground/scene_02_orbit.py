from phongtrace.config import RenderConfig, configure_logging
from phongtrace.raytrace import write_image
from phongtrace.scene import Scene, RotationAxis

configure_logging("INFO")

# The five sphere demo scene, orbited a full turn around the look-at point
scene = Scene(config=RenderConfig(num_workers=10, rows_per_chunk=50))
scene.orbit_vertical(20)

for frame in range(36):
    buffer = scene.orbit_horizontal(10)
    write_image(buffer, f"output/02_orbit/frame_{frame:03d}.png")

buffer = scene.reset_camera(RotationAxis.BOTH)
write_image(buffer, "output/02_orbit/reset.png")
