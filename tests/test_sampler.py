import numpy as np
import pytest
from pathlib import Path
import sys

# Add repo root to path
ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from buddhabrot import sampler
from buddhabrot.color import ColorChannel, Rgb, Rgba, Scalar
from buddhabrot.image import Image
from buddhabrot.progress import ProgressCounter
from buddhabrot.sampler import sample, split_trials


def test_split_trials():
    assert split_trials(10, 4) == [3, 3, 2, 2]
    assert split_trials(8, 4) == [2, 2, 2, 2]
    assert split_trials(2, 4) == [1, 1, 0, 0]
    assert sum(split_trials(1234567, 7)) == 1234567


def test_sample_fills_image_in_place():
    im = Image(256, 16, Scalar)
    out = sample(im, 30, 8, workers=2, seed=1)
    assert out is im

    arr = im.to_array()
    assert arr.sum() > 0
    # unit contributions only
    np.testing.assert_array_equal(arr, np.round(arr))


def test_every_trial_is_counted():
    im = Image(64, 8, Scalar)
    counter = ProgressCounter(64 * 5)
    sample(im, 20, 5, progress_update=7, workers=3, batch_size=16, counter=counter, seed=2)
    assert counter.value == 64 * 5


def test_zero_samples_leave_image_empty():
    im = Image(64, 8, Scalar)
    counter = ProgressCounter()
    sample(im, 20, 0, workers=2, counter=counter)
    assert im.total() == Scalar(0.0)
    assert counter.value == 0


def test_same_seed_same_worker_count_is_repeatable():
    a = Image(256, 16, Scalar)
    b = Image(256, 16, Scalar)
    sample(a, 40, 4, workers=3, seed=11)
    sample(b, 40, 4, workers=3, seed=11)
    np.testing.assert_array_equal(a.to_array(), b.to_array())


def test_worker_count_does_not_change_expected_mass():
    """P=1 and P=4 sample the same distribution; totals agree statistically."""
    one = Image(1024, 32, Scalar)
    four = Image(1024, 32, Scalar)
    sample(one, 50, 20, workers=1, seed=5)
    sample(four, 50, 20, workers=4, seed=6)

    mass_one = one.total().value
    mass_four = four.total().value
    assert mass_one > 0
    assert abs(mass_one - mass_four) / mass_one < 0.1


def test_channel_selects_component():
    im = Image(256, 16, Rgb)
    sample(im, 30, 4, channel=ColorChannel.GREEN, workers=2, seed=3)
    total = im.total()
    assert total.r == 0.0
    assert total.b == 0.0
    assert total.g > 0.0


def test_accumulates_onto_existing_content():
    im = Image(64, 8, Scalar)
    im.set((0, 0), Scalar(1000.0))
    sample(im, 20, 2, workers=2, seed=4)
    assert im.get((0, 0)).value >= 1000.0


def test_rgba_alpha_channel():
    im = Image(64, 8, Rgba)
    sample(im, 20, 4, channel=ColorChannel.ALPHA, workers=1, seed=8)
    total = im.total()
    assert (total.r, total.g, total.b) == (0.0, 0.0, 0.0)
    assert total.a > 0.0


@pytest.mark.parametrize("kwargs", [
    dict(n=0, m=1),
    dict(n=10, m=-1),
    dict(n=10, m=1, progress_update=0),
    dict(n=10, m=1, workers=0),
    dict(n=10, m=1, batch_size=0),
])
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        sample(Image(16, 4), **kwargs)


def test_channel_missing_from_color(monkeypatch):
    called = []
    monkeypatch.setattr(sampler, "_run_worker", lambda *a: called.append(a))
    with pytest.raises(ValueError):
        sample(Image(16, 4, Rgb), 10, 1, channel=ColorChannel.ALPHA)
    # rejected before any worker started
    assert called == []


def test_worker_failure_propagates(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("worker fault")

    monkeypatch.setattr(sampler, "accumulate_batch", boom)
    im = Image(64, 8, Scalar)
    with pytest.raises(RuntimeError, match="worker fault"):
        sample(im, 10, 1, workers=2)
    # nothing merged
    assert im.total() == Scalar(0.0)


def test_float32_sampling():
    im = Image(256, 16, Scalar)
    sample(im, 30, 4, workers=2, seed=9, dtype=np.float32)
    assert im.total().value > 0


def test_show_progress_runs_monitor():
    im = Image(64, 8, Scalar)
    counter = ProgressCounter(64 * 2)
    sample(im, 10, 2, workers=2, counter=counter, show_progress=True)
    assert counter.value == 128
