"""Streaming mean / min / max / sigma over a scalar volume.

The volume is cut into slabs along axis 0 (same slab scheme as the rest of
the package).  Each slab is reduced to a ``Partial`` holding count, mean,
sum of squared deviations (M2), min and max.  Partials are combined with
the pairwise update of Chan, Golub & LeVeque, which is associative and
avoids the cancellation of the naive E[x^2] - E[x]^2 form.

Slabs may be reduced on a thread pool; numpy releases the GIL inside the
reductions.  Partials are always merged in slab order so the result is
bit-identical whatever the worker count.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from imagecompare.exceptions import EmptyVolume
from imagecompare.utils import DEFAULT_SLAB_SIZE, iter_slabs


@dataclass(frozen=True)
class StatisticsSummary:
    mean: float
    minimum: float
    maximum: float
    sigma: float

    def as_dict(self):
        return {
            "mean": self.mean,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "sigma": self.sigma,
        }


@dataclass(frozen=True)
class Partial:
    """Mergeable running statistics for a block of samples."""

    count: int
    mean: float
    m2: float
    minimum: float
    maximum: float

    @classmethod
    def of(cls, values):
        """Reduce a non-empty array of samples."""
        values = np.asarray(values, dtype=np.float64).ravel()
        mean = float(values.mean())
        dev = values - mean
        return cls(
            count=int(values.size),
            mean=mean,
            m2=float(np.sum(dev * dev)),
            minimum=float(values.min()),
            maximum=float(values.max()),
        )

    def merge(self, other):
        """Combine two partials (Chan et al. parallel variance update)."""
        n = self.count + other.count
        delta = other.mean - self.mean
        mean = self.mean + delta * (other.count / n)
        m2 = self.m2 + other.m2 + delta * delta * (self.count * other.count / n)
        return Partial(
            count=n,
            mean=mean,
            m2=m2,
            # NaN in either operand propagates, as in ndarray.min/max.
            minimum=float(np.minimum(self.minimum, other.minimum)),
            maximum=float(np.maximum(self.maximum, other.maximum)),
        )

    def finish(self):
        sigma = math.sqrt(max(self.m2, 0.0) / self.count)
        return StatisticsSummary(
            mean=self.mean, minimum=self.minimum,
            maximum=self.maximum, sigma=sigma,
        )


def _reduce_slab(data, bounds):
    i_start, i_end = bounds
    return Partial.of(data[i_start:i_end])


def summarize(volume, slab_size=DEFAULT_SLAB_SIZE, workers=None):
    """Compute the StatisticsSummary of every voxel in *volume*.

    Parameters
    ----------
    volume : ScalarVolume
    slab_size : int
        Number of axis-0 slices reduced per task.
    workers : int or None
        Threads used for slab reduction.  None or 1 runs inline.

    Raises
    ------
    EmptyVolume
        If any axis of the extent is zero.
    """
    if volume.n_voxels == 0:
        raise EmptyVolume(volume.extent)

    data = volume.data
    slabs = list(iter_slabs(data.shape[0], slab_size))

    if workers is None or workers <= 1 or len(slabs) == 1:
        partials = [_reduce_slab(data, b) for b in slabs]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            partials = list(pool.map(lambda b: _reduce_slab(data, b), slabs))

    total = partials[0]
    for p in partials[1:]:
        total = total.merge(p)
    return total.finish()
