"""Command-line entry point: render a sphere scene to a PPM image.

Usage:
    rayweekend [options]
    python -m rayweekend [options]

Options:
    --width WIDTH           Image width in pixels (default: 1200)
    --aspect-ratio RATIO    Width / height (default: 1.5)
    --samples SAMPLES       Samples per pixel (default: 500)
    --max-depth DEPTH       Maximum ray bounces (default: 50)
    --seed SEED             Random seed for a reproducible render
    --output OUTPUT         Output path, "-" for stdout (default: image.ppm)
    --arch {cpu,gpu}        Taichi backend, gpu means CUDA (default: cpu)
    --scene {random,ground} Scene to render (default: random)
    --quiet                 Suppress progress output
    --verbose               Show Taichi's own log messages

Progress goes to stderr, the image to the output path, so stdout carries
nothing but image bytes when --output is "-".

Example:
    rayweekend --width 400 --samples 50 --seed 7 --output spheres.ppm
"""

from __future__ import annotations

import argparse
import contextlib
import sys
import time
from typing import TextIO

import numpy as np

from rayweekend.output.ppm import save_ppm, write_ppm
from rayweekend.settings import RenderSettings

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="rayweekend",
        description="Render a scene of spheres to a plain-text PPM image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Image width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=3.0 / 2.0,
        help="Image width divided by height (default: 1.5)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=500,
        help="Number of samples per pixel (default: 500)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum number of ray bounces (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible render (default: random)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help='Output file path, or "-" for stdout (default: image.ppm)',
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend; gpu selects CUDA and falls back to cpu when unavailable "
        "(default: cpu)",
    )
    parser.add_argument(
        "--scene",
        choices=["random", "ground"],
        default="random",
        help="Scene to render (default: random)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show Taichi log messages",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    """Build validated RenderSettings from parsed arguments.

    Raises:
        ValueError: If any setting is out of range.
    """
    return RenderSettings(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        random_seed=args.seed,
    )


def resolve_seed(seed: int | None) -> int:
    """Return the given seed, or draw a fresh one when it is None."""
    if seed is not None:
        return seed
    return int(np.random.default_rng().integers(0, 2**31 - 1))


def select_arch(arch: str):
    """Map an --arch choice to a Taichi backend.

    Rendering runs in double precision, and CUDA is the only GPU backend that
    supports f64 on every device, so "gpu" selects CUDA.
    """
    import taichi as ti

    if arch == "gpu":
        return ti.cuda
    if arch == "cpu":
        return ti.cpu
    raise ValueError(f"Unknown arch: {arch}")


def initialize_taichi(arch: str, seed: int, verbose: bool = False, quiet: bool = False) -> None:
    """Initialize Taichi in double precision with the given kernel RNG seed.

    Taichi prints a banner to stdout on import; it is redirected to stderr so
    the image stream stays clean.
    """
    with contextlib.redirect_stdout(sys.stderr):
        import taichi as ti

        log_level = ti.INFO if verbose else ti.WARN
        ti.init(arch=select_arch(arch), default_fp=ti.f64, random_seed=seed, log_level=log_level)

        # Taichi falls back to the CPU when the requested backend is unavailable
        backend = "CUDA" if ti.lang.impl.current_cfg().arch == ti.cuda else "CPU"
        if not quiet:
            print(f"Using {backend} backend", file=sys.stderr)


def render_scene(
    settings: RenderSettings,
    scene_name: str = "random",
    quiet: bool = False,
    status: TextIO | None = None,
):
    """Build the scene, render it and return the image.

    Taichi must already be initialized.

    Args:
        settings: The RenderSettings to render with.
        scene_name: Key into the scene factories ("random" or "ground").
        quiet: If True, suppress progress output.
        status: Stream for progress lines (default: stderr).

    Returns:
        The image as a (height, width, 3) uint8 array.
    """
    # Lazy imports to allow Taichi initialization first
    from rayweekend.camera.thin_lens import setup_camera
    from rayweekend.core.renderer import ScanlineRenderer
    from rayweekend.scene.random_scene import create_ground_scene, create_random_scene

    status = sys.stderr if status is None else status

    if not quiet:
        print(
            f"Creating {scene_name} scene "
            f"({settings.image_width}x{settings.image_height})...",
            file=status,
        )

    if scene_name == "random":
        scene, camera = create_random_scene(settings.create_scene_rng(), settings.aspect_ratio)
    elif scene_name == "ground":
        scene, camera = create_ground_scene(settings.aspect_ratio)
    else:
        raise ValueError(f"Unknown scene: {scene_name}")

    setup_camera(camera)
    renderer = ScanlineRenderer(settings)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} spheres at "
            f"{settings.samples_per_pixel} samples per pixel...",
            file=status,
        )

    def progress_callback(remaining: int, total: int) -> None:
        if not quiet:
            print(f"Scan lines remaining: {remaining}", file=status, flush=True)

    image = renderer.render(callback=progress_callback)

    if not quiet:
        print("Done.", file=status)

    return image


def write_image(image, output: str, stdout: TextIO | None = None) -> None:
    """Write the image to a file path, or to stdout when output is "-"."""
    if output == "-":
        stream = sys.stdout if stdout is None else stdout
        write_ppm(image, stream)
        stream.flush()
    else:
        save_ppm(image, output)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = settings_from_args(args)
        seed = resolve_seed(settings.random_seed)
        initialize_taichi(args.arch, seed, verbose=args.verbose, quiet=args.quiet)

        start_time = time.time()
        image = render_scene(settings, scene_name=args.scene, quiet=args.quiet)
        write_image(image, args.output)

        if not args.quiet:
            if args.output != "-":
                print(f"Saved to: {args.output}", file=sys.stderr)
            print(f"Total time: {time.time() - start_time:.2f}s", file=sys.stderr)
        return EXIT_OK
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
