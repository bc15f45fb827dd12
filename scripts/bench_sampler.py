"""
Time the sampling engine on a small image.

Run:
    python scripts/bench_sampler.py
    python scripts/bench_sampler.py --size 256 --iterations 10000 --samples 20 --repeat 10
"""

import argparse
import os
import sys
import time

import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from buddhabrot.color import Rgb
from buddhabrot.image import Image
from buddhabrot.sampler import sample
from buddhabrot.utils import parse_size


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--size", type=str, default="256")
    parser.add_argument("--iterations", type=int, default=10000)
    parser.add_argument("--samples", type=int, default=20)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--repeat", type=int, default=10)
    args = parser.parse_args()

    width, height = parse_size(args.size)
    print(f"[bench] {width}x{height}, n={args.iterations}, m={args.samples}, repeat={args.repeat}")

    timings = []
    for i in range(args.repeat):
        im = Image.with_shape(width, height, Rgb)
        start = time.perf_counter()
        sample(im, args.iterations, args.samples, workers=args.workers)
        timings.append(time.perf_counter() - start)
        print(f"[bench] run {i + 1}: {timings[-1]:.3f}s, mass={im.total().r:.0f}")

    timings = np.array(timings)
    trials = width * height * args.samples
    print(f"[bench] mean {timings.mean():.3f}s +/- {timings.std():.3f}s "
          f"({trials / timings.mean():.0f} trials/s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
