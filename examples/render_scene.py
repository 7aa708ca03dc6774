#!/usr/bin/env python3
"""Render the default scene (or a scene loaded from JSON).

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH           Image width in pixels (default: 640)
    --height HEIGHT         Image height in pixels (default: 480)
    --depth DEPTH           Recursion budget for primary rays (default: 5)
    --flags FLAG [FLAG...]  Trace flags to enable (default: all but refraction)
    --specular MODEL        Specular model: legacy or phong (default: legacy)
    --reflection MODEL      Reflection model: legacy or mirror (default: legacy)
    --attenuation           Apply light attenuation
    --config PATH           JSON tracer configuration (overrides the above)
    --scene PATH            JSON scene produced by SceneManager.to_dict()
    --output OUTPUT         Output file path (default: render.png)
    --gamma GAMMA           Output gamma (default: 2.2)
    --cpu                   Force the CPU backend
    --show                  Open a preview window after rendering
    --verbose               Log at DEBUG level

Example:
    python -m examples.render_scene --width 320 --height 240 --flags ambient diffuse_and_spec
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

import taichi as ti

logger = logging.getLogger("render_scene")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the default ray tracing scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width (default: 640)")
    parser.add_argument("--height", type=int, default=480, help="Image height (default: 480)")
    parser.add_argument(
        "--depth",
        type=int,
        default=5,
        help="Recursion budget for primary rays (default: 5)",
    )
    parser.add_argument(
        "--flags",
        nargs="+",
        default=None,
        metavar="FLAG",
        help="Trace flags: ambient, diffuse_and_spec, shadow, reflection, refraction",
    )
    parser.add_argument(
        "--specular",
        choices=["legacy", "phong"],
        default="legacy",
        help="Specular model (default: legacy)",
    )
    parser.add_argument(
        "--reflection",
        choices=["legacy", "mirror"],
        default="legacy",
        help="Reflection direction model (default: legacy)",
    )
    parser.add_argument("--attenuation", action="store_true", help="Apply light attenuation")
    parser.add_argument("--config", type=Path, default=None, help="JSON tracer configuration")
    parser.add_argument("--scene", type=Path, default=None, help="JSON scene description")
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument("--gamma", type=float, default=2.2, help="Output gamma (default: 2.2)")
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--show", action="store_true", help="Open a preview window")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace):
    """Build a TracerConfig from a JSON file or the command-line switches."""
    from tinyray.core.config import DEFAULT_TRACE_FLAGS, TracerConfig

    if args.config is not None:
        data = json.loads(args.config.read_text())
        data.setdefault("width", args.width)
        data.setdefault("height", args.height)
        return TracerConfig.from_dict(data)

    return TracerConfig(
        trace_flags=args.flags if args.flags is not None else DEFAULT_TRACE_FLAGS,
        max_depth=args.depth,
        specular_model=args.specular,
        reflection_model=args.reflection,
        apply_attenuation=args.attenuation,
        width=args.width,
        height=args.height,
    )


def render_scene(args: argparse.Namespace) -> Path:
    """Render the requested scene and save it as a PNG.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from tinyray.core.framebuffer import Framebuffer
    from tinyray.core.renderer import RayTracer
    from tinyray.preview.display import show_preview
    from tinyray.preview.export import save_png
    from tinyray.scene.default_scene import create_default_scene
    from tinyray.scene.manager import SceneManager

    config = build_config(args)

    if args.scene is not None:
        scene = SceneManager()
        scene.from_dict(json.loads(args.scene.read_text()))
    else:
        scene = create_default_scene(aspect_ratio=args.width / args.height)

    framebuffer = Framebuffer(args.width, args.height)
    start_time = time.time()
    RayTracer(config).render(scene, framebuffer)

    output_file = Path(args.output)
    save_png(framebuffer, output_file, gamma=args.gamma)
    logger.info("Saved to %s (%.2fs total)", output_file.absolute(), time.time() - start_time)

    if args.show:
        show_preview(framebuffer, gamma=args.gamma)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Taichi falls back to CPU itself when no GPU backend is available
    ti.init(arch=ti.cpu if args.cpu else ti.gpu)

    try:
        render_scene(args)
        return 0
    except (ValueError, OSError) as e:
        logger.error("Render failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
