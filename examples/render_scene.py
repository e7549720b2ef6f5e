#!/usr/bin/env python3
"""Render a scene of spheres to a PPM image.

By default this renders the three spheres scene (a glass, a diffuse and a
metal sphere on a large ground sphere) and streams the PPM image to
stdout, with scanline progress on stderr.

Usage:
    python -m examples.render_scene [options] > image.ppm

Options:
    --width WIDTH           Image width in pixels (default: scene camera)
    --aspect-ratio RATIO    Width over height (default: scene camera)
    --samples SAMPLES       Samples per pixel (default: scene camera)
    --max-depth DEPTH       Maximum ray bounces (default: scene camera)
    --scene FILE            JSON scene file instead of the three spheres scene
    --defocus               Use the depth-of-field view of the three spheres scene
    --output OUTPUT         PPM output path (default: stdout)
    --png PNG               Also save the image as PNG
    --seed SEED             Random seed (default: 0)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_scene --width 200 --samples 20 --output spheres.ppm
"""

from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene of spheres to a PPM image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: scene camera)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=None,
        help="Image width divided by height (default: scene camera)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=None,
        help="Number of samples per pixel (default: scene camera)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum number of ray bounces (default: scene camera)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: the three spheres scene)",
    )
    parser.add_argument(
        "--defocus",
        action="store_true",
        help="Render the three spheres scene with depth of field",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="PPM output file path (default: stdout)",
    )
    parser.add_argument(
        "--png",
        type=str,
        default=None,
        help="Also save the image as PNG to this path",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def build_scene(args: argparse.Namespace):
    """Create the world and camera selected by the arguments.

    Returns:
        Tuple of (world, camera).
    """
    # Lazy imports to allow Taichi initialization first
    from pathtrace.camera.camera import Camera
    from pathtrace.scene.manager import HittableList, load_scene_file
    from pathtrace.scene.presets import create_three_spheres_scene

    if args.scene is not None:
        data = load_scene_file(args.scene)
        world = HittableList()
        world.from_dict(data)
        camera = Camera.from_dict(data.get("camera", {}))
    else:
        world, camera = create_three_spheres_scene(defocus=args.defocus)

    if args.width is not None:
        camera.image_width = args.width
    if args.aspect_ratio is not None:
        camera.aspect_ratio = args.aspect_ratio
    if args.samples is not None:
        camera.samples_per_pixel = args.samples
    if args.max_depth is not None:
        camera.max_depth = args.max_depth

    return world, camera


def render_scene(args: argparse.Namespace) -> None:
    """Render the selected scene and write the requested outputs."""
    from pathtrace.core.integrator import render
    from pathtrace.output.png import save_png
    from pathtrace.output.ppm import write_ppm

    world, camera = build_scene(args)
    log = io.StringIO() if args.quiet else sys.stderr

    if not args.quiet:
        print(
            f"Rendering {len(world)} spheres at {camera.image_width}x{camera.image_height}, "
            f"{camera.samples_per_pixel} spp, max depth {camera.max_depth}",
            file=sys.stderr,
        )

    if args.png is None:
        if args.output is None:
            render(camera, world, output=sys.stdout, log=log)
        else:
            with open(args.output, "w", encoding="ascii") as f:
                render(camera, world, output=f, log=log)
        return

    # PNG requested: render to an array once and write both formats from it
    from pathtrace.core.integrator import render_image

    image = render_image(camera, world)
    if args.output is None:
        write_ppm(sys.stdout, image)
        sys.stdout.flush()
    else:
        with open(args.output, "w", encoding="ascii") as f:
            write_ppm(f, image)

    png_path = save_png(image, args.png)
    if not args.quiet:
        print(f"Saved to: {Path(png_path).absolute()}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    ti.init(arch=ti.cpu, random_seed=args.seed)

    try:
        render_scene(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
