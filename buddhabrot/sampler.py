"""
Monte Carlo sampling engine for the Buddhabrot.

Each trial draws a seed c uniformly from [-2, 2]^2, iterates z -> z^2 + c
from z_0 = c, and if the orbit escapes (|z_k| > 2 for some k < n) plots the
k points z_0 .. z_{k-1} that came before the escape. Bounded orbits plot
nothing.

Work is split across a fixed pool of worker threads. Every worker fills a
private Image and merges it into the shared Image exactly once, under a
lock, when its share of trials is done.
"""

from __future__ import annotations

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass
from typing import List, Tuple, Union

import numpy as np

from buddhabrot.color import Color, ColorChannel
from buddhabrot.complex import Complex
from buddhabrot.image import Image
from buddhabrot.progress import ProgressCounter, ProgressMonitor
from buddhabrot.utils import log

ESCAPE_RADIUS = 2.0
DEFAULT_BATCH_SIZE = 8192
DEFAULT_PROGRESS_UPDATE = 8192


@dataclass(frozen=True)
class Escaped:
    """Orbit left the radius-2 disk; `points` are the iterates before that."""

    points: Tuple[Complex, ...]

    @property
    def steps(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class Bounded:
    """Orbit stayed within radius 2 for every allowed step."""


Trajectory = Union[Escaped, Bounded]


def trajectory(c, n: int) -> Trajectory:
    """
    Iterate z_{k+1} = z_k^2 + c from z_0 = c for at most n steps.

    The escape test is strict: |z_k| == 2 does not escape.
    """
    if not isinstance(c, Complex):
        c = Complex(c.real, c.imag)

    z = c
    points: List[Complex] = []
    for _ in range(n):
        if z.abs() > ESCAPE_RADIUS:
            return Escaped(tuple(points))
        points.append(z)
        z = z * z + c
    return Bounded()


def pixel_coords(z: Complex, width: int, height: int):
    """Map points of [-2, 2]^2 onto pixel columns/rows (arrays in, arrays out)."""
    p = z * 0.25 + 0.5
    x = np.floor(p.re * width).astype(np.int64)
    y = np.floor(p.im * height).astype(np.int64)
    return x, y


def to_pixel(z, width: int, height: int) -> Tuple[int, int]:
    if not isinstance(z, Complex):
        z = Complex(z.real, z.imag)
    x, y = pixel_coords(z, width, height)
    return int(x), int(y)


def in_main_bulbs(c: Complex) -> np.ndarray:
    """
    True where c lies in the main cardioid, the period-2 bulb, or the small
    disk around the origin. Those seeds are bounded, so they can skip the
    iteration entirely.
    """
    re, im = c.re, c.im
    im2 = im * im
    inside = re * re + im2 < 0.0625
    inside |= (re + 1.0) * (re + 1.0) + im2 < 0.0625
    ct_re = re - 0.25
    ct_abs = np.hypot(ct_re, im)
    inside |= (re > -0.75) & (re < 0.5) & (ct_abs < 0.5 * (1.0 - ct_re / np.maximum(ct_abs, 1e-14)))
    return inside


def _compress(keep: np.ndarray, *parts: Complex):
    return [z.map(lambda a: a[keep]) for z in parts]


def escape_steps(c: Complex, n: int) -> np.ndarray:
    """
    Vectorised escape test for a 1-D batch of seeds.

    Returns, per seed, the step k at which |z_k| first exceeds 2, or -1 if
    the orbit stays bounded for all n steps. Agrees with `trajectory`:
    an escaped seed has a trajectory of exactly k points.
    """
    steps = np.full(np.shape(c.re), -1, dtype=np.int64)
    idx = np.flatnonzero(~in_main_bulbs(c))
    z = cc = c.map(lambda a: a[idx])

    for k in range(n):
        if idx.size == 0:
            break
        escaped = z.abs() > ESCAPE_RADIUS
        if escaped.any():
            steps[idx[escaped]] = k
            keep = ~escaped
            idx = idx[keep]
            z, cc = _compress(keep, z, cc)
        if k + 1 < n:
            z = z * z + cc
    return steps


def accumulate_batch(image: Image, c: Complex, n: int, unit: Color) -> int:
    """
    Plot the trajectories of every escaping seed in `c` into `image`.

    Points that map outside the window are dropped. Returns the number of
    points that landed in the image.
    """
    width, height = image.width, image.height
    steps = escape_steps(c, n)
    live = steps > 0
    remaining = steps[live]
    z = cc = c.map(lambda a: a[live])

    flat = []
    j = 0
    while remaining.size:
        x, y = pixel_coords(z, width, height)
        inside = (x >= 0) & (x < width) & (y >= 0) & (y < height)
        flat.append(y[inside] * width + x[inside])

        j += 1
        keep = remaining > j
        if not keep.all():
            remaining = remaining[keep]
            if remaining.size == 0:
                break
            z, cc = _compress(keep, z, cc)
        z = z * z + cc

    if not flat:
        return 0
    flat = np.concatenate(flat)
    image.add_indices(flat, unit)
    return int(flat.size)


def split_trials(total: int, parts: int) -> List[int]:
    """Even split; the first `total % parts` shares take one extra trial."""
    base, extra = divmod(total, parts)
    return [base + (1 if i < extra else 0) for i in range(parts)]


def _run_worker(
    shared: Image,
    lock: threading.Lock,
    n: int,
    trials: int,
    unit: Color,
    rng: np.random.Generator,
    batch_size: int,
    progress_update: int,
    counter: ProgressCounter,
    dtype,
) -> int:
    private = Image(shared.size, shared.width, shared.color)

    done = 0
    reported = 0
    while done < trials:
        next_report = reported + progress_update
        count = min(batch_size, trials - done, next_report - done)
        re = rng.random(count, dtype=dtype) * 4 - 2
        im = rng.random(count, dtype=dtype) * 4 - 2
        accumulate_batch(private, Complex(re, im), n, unit)
        done += count
        if done >= next_report or done == trials:
            counter.increment(done - reported)
            reported = done

    with lock:
        shared.merge(private)
    return done


def sample(
    image: Image,
    n: int,
    m: int,
    progress_update: int = DEFAULT_PROGRESS_UPDATE,
    channel: ColorChannel = ColorChannel.RED,
    workers: int = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    seed=None,
    counter: ProgressCounter = None,
    show_progress: bool = False,
    dtype=np.float64,
) -> Image:
    """
    Accumulate image.size * m Buddhabrot trials into `image`, in place.

    n               -> max iteration steps before a seed counts as bounded
    m               -> samples per pixel
    progress_update -> trials between progress reports from a worker
    channel         -> which Color.one(channel) each plotted point adds
    workers         -> pool size; defaults to os.cpu_count()
    seed            -> optional entropy for the per-worker generators
    counter         -> caller-owned ProgressCounter to report into

    Blocks until every worker has run all of its trials and merged. The
    first worker exception is re-raised here after the pool is joined.
    """
    if n < 1:
        raise ValueError(f"Iteration limit must be >= 1, got {n}")
    if m < 0:
        raise ValueError(f"Sample multiplier must be >= 0, got {m}")
    if progress_update < 1:
        raise ValueError(f"progress_update must be >= 1, got {progress_update}")
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    if workers is None:
        workers = os.cpu_count() or 1
    if workers < 1:
        raise ValueError(f"Worker count must be >= 1, got {workers}")
    unit = image.color.one(channel)

    total = image.size * m
    shares = split_trials(total, workers)
    rngs = [np.random.default_rng(s) for s in np.random.SeedSequence(seed).spawn(workers)]
    if counter is None:
        counter = ProgressCounter(total)
    lock = threading.Lock()

    log(f"[sample] {image.width}x{image.height} {image.color.__name__}, "
        f"n={n}, m={m}, trials={total}, workers={workers}, channel={channel.value}")
    start = time.time()

    monitor = ProgressMonitor(counter) if show_progress else nullcontext()
    with monitor:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(_run_worker, image, lock, n, share, unit, rng,
                            batch_size, progress_update, counter, dtype)
                for share, rng in zip(shares, rngs)
            ]
            for future in futures:
                future.result()

    log(f"[sample] done in {time.time() - start:.2f}s")
    return image
