"""
Render a Buddhabrot image.

Run:
    python scripts/render_buddhabrot.py --config configs/buddhabrot.yaml
    python scripts/render_buddhabrot.py --size 512 --iterations 2000 --samples 10 --output output/small.png

Modes:
    mono -> one sampling pass into a Scalar histogram
    rgb  -> three passes (one iteration limit per channel) fused into Rgb
"""

import argparse
import os
import sys
import time
import traceback
from pathlib import Path

# Ensure repository root is on sys.path so `from buddhabrot...` works when
# running this script directly.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from buddhabrot.color import ColorChannel, Scalar
from buddhabrot.config import RenderConfig, load_config
from buddhabrot.fileio import save
from buddhabrot.image import Image
from buddhabrot.postprocess import apply_pipeline, fuse_channels, normalize
from buddhabrot.progress import ProgressCounter
from buddhabrot.sampler import sample
from buddhabrot.symmetry import apply_symmetry
from buddhabrot.utils import parse_size, set_verbose

CHANNELS = (ColorChannel.RED, ColorChannel.GREEN, ColorChannel.BLUE)


def build_parser():
    parser = argparse.ArgumentParser(description="Monte Carlo Buddhabrot renderer")
    parser.add_argument("--config", type=str, help="Path to a YAML render config")
    parser.add_argument("--size", type=str, help="Image size, e.g. 1024 or 1024x768")
    parser.add_argument("--iterations", type=int, nargs="+",
                        help="Iteration limit (one value, or three for --mode rgb)")
    parser.add_argument("--samples", type=int, help="Samples per pixel")
    parser.add_argument("--workers", type=int, help="Worker threads (default: all cores)")
    parser.add_argument("--batch-size", type=int, dest="batch_size")
    parser.add_argument("--progress-update", type=int, dest="progress_update")
    parser.add_argument("--seed", type=int)
    parser.add_argument("--mode", choices=["mono", "rgb"])
    parser.add_argument("--symmetry", choices=["none", "reflect", "rotate"])
    parser.add_argument("--normalize", action=argparse.BooleanOptionalAction, default=None,
                        help="Normalize the float output (--no-normalize overrides the config)")
    parser.add_argument("--exposure", type=float, help="Exposure in stops")
    parser.add_argument("--gamma", type=float)
    parser.add_argument("--black-point", type=float, dest="black_point")
    parser.add_argument("--colormap", type=str, help="matplotlib colormap for mono renders")
    parser.add_argument("--output", type=str, help="Raster output path (png, jpg, ...)")
    parser.add_argument("--float-output", type=str, dest="float_output",
                        help="Float output path (.npy), written before tone mapping")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def resolve_config(args) -> RenderConfig:
    cfg = load_config(args.config) if args.config else RenderConfig()

    overrides = {
        "samples": args.samples,
        "workers": args.workers,
        "batch_size": args.batch_size,
        "progress_update": args.progress_update,
        "seed": args.seed,
        "mode": args.mode,
        "symmetry": args.symmetry,
        "normalize": args.normalize,
        "exposure": args.exposure,
        "gamma": args.gamma,
        "black_point": args.black_point,
        "colormap": args.colormap,
        "output": args.output,
        "float_output": args.float_output,
    }
    if args.size:
        overrides["width"], overrides["height"] = parse_size(args.size)
    if args.iterations:
        overrides["iterations"] = args.iterations if len(args.iterations) > 1 else args.iterations[0]
    return cfg.with_overrides(**overrides)


def render(cfg: RenderConfig, show_progress: bool = True) -> Image:
    """Run every sampling pass the config asks for and return the raw histogram."""
    size = cfg.width * cfg.height
    images = []
    for i, n in enumerate(cfg.passes):
        channel = CHANNELS[i]
        print(f"[run] pass {i + 1}/{len(cfg.passes)}: n={n}, channel={channel.value}")
        im = Image(size, cfg.width, Scalar)
        counter = ProgressCounter(size * cfg.samples)
        sample(
            im, n, cfg.samples,
            progress_update=cfg.progress_update,
            channel=channel,
            workers=cfg.workers,
            batch_size=cfg.batch_size,
            seed=None if cfg.seed is None else cfg.seed + i,
            counter=counter,
            show_progress=show_progress,
        )
        images.append(im)

    if len(images) == 3:
        return fuse_channels(*images)
    return images[0]


def main(argv=None):
    args = build_parser().parse_args(argv)
    set_verbose(args.verbose)

    if args.config and not Path(args.config).exists():
        print(f"Error: Config file not found: {args.config}")
        return 1

    try:
        cfg = resolve_config(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print("=" * 60)
    print("BUDDHABROT RENDER")
    print("=" * 60)
    print(f"Size: {cfg.width}x{cfg.height} | Mode: {cfg.mode} | Iterations: {cfg.passes} | Samples: {cfg.samples}")

    try:
        start = time.time()
        image = render(cfg, show_progress=not args.no_progress)
        print(f"[run] sampling finished in {time.time() - start:.2f}s")

        image = apply_symmetry(image, cfg.symmetry)
        if cfg.normalize:
            image = normalize(image)

        if cfg.float_output:
            path = save(image, cfg.float_output)
            print(f"[run] float data saved to {path}")

        if cfg.output:
            cmap = cfg.colormap if image.color is Scalar else None
            toned = apply_pipeline(
                image,
                # raw counts are far outside [0, 1]; 8-bit output is always normalized
                normalize_first=not cfg.normalize,
                exposure_stops=cfg.exposure,
                gamma_value=cfg.gamma,
                black=cfg.black_point,
                clamp_output=cfg.clamp,
                cmap=cmap,
            )
            path = save(toned, cfg.output)
            print(f"[run] image saved to {path}")
    except Exception:
        traceback.print_exc()
        return 1

    print("[run] done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
