"""Tests for imagecompare/stats.py: slab-merged mean/min/max/sigma."""

import numpy as np
import pytest

from imagecompare.exceptions import EmptyVolume
from imagecompare.stats import Partial, summarize
from imagecompare.volumes import ScalarVolume


class TestSummarize:
    def test_matches_numpy(self, make_random_volume):
        vol = make_random_volume((17, 6, 5), seed=7)
        s = summarize(vol, slab_size=4)
        np.testing.assert_allclose(s.mean, vol.data.mean(), rtol=1e-12)
        np.testing.assert_allclose(s.sigma, vol.data.std(), rtol=1e-12)
        assert s.minimum == vol.data.min()
        assert s.maximum == vol.data.max()

    def test_constant(self, make_volume):
        s = summarize(make_volume((2, 2, 2), 2.0))
        assert (s.mean, s.minimum, s.maximum, s.sigma) == (2.0, 2.0, 2.0, 0.0)

    def test_population_sigma(self):
        vol = ScalarVolume(np.array([0.0, 2.0]).reshape(2, 1, 1))
        s = summarize(vol, slab_size=1)
        assert s.sigma == pytest.approx(1.0)

    @pytest.mark.parametrize("slab_size", [1, 2, 3, 5, 32])
    def test_slab_size_independent(self, make_random_volume, slab_size):
        vol = make_random_volume((11, 4, 3), seed=11)
        ref = summarize(vol, slab_size=11)
        s = summarize(vol, slab_size=slab_size)
        assert s.minimum == ref.minimum
        assert s.maximum == ref.maximum
        assert s.mean == pytest.approx(ref.mean, rel=1e-12, abs=1e-12)
        assert s.sigma == pytest.approx(ref.sigma, rel=1e-12)

    @pytest.mark.parametrize("workers", [2, 4, 8])
    def test_workers_bit_identical(self, make_random_volume, workers):
        vol = make_random_volume((40, 8, 8), seed=5)
        assert summarize(vol, slab_size=3, workers=workers) == \
            summarize(vol, slab_size=3, workers=1)

    def test_large_offset_stable(self):
        # Naive E[x^2] - E[x]^2 loses all precision here.
        rng = np.random.default_rng(0)
        data = 1e9 + rng.normal(scale=1e-3, size=(20, 10, 10))
        s = summarize(ScalarVolume(data), slab_size=3)
        np.testing.assert_allclose(s.sigma, data.std(), rtol=1e-4)

    @pytest.mark.parametrize("shape", [(0, 10, 10), (10, 0, 10), (10, 10, 0)])
    def test_empty_volume(self, shape):
        with pytest.raises(EmptyVolume) as exc:
            summarize(ScalarVolume(np.zeros(shape)))
        assert exc.value.extent == shape

    @pytest.mark.parametrize("slab_size", [1, 2, 4])
    @pytest.mark.parametrize("workers", [1, 3])
    def test_nan_in_later_slab_propagates(self, slab_size, workers):
        data = np.zeros((4, 2, 2))
        data[3, 0, 0] = np.nan
        s = summarize(ScalarVolume(data), slab_size=slab_size, workers=workers)
        assert np.isnan(s.maximum)
        assert np.isnan(s.minimum)
        assert np.isnan(s.mean)

    def test_as_dict(self, make_volume):
        d = summarize(make_volume((1, 1, 1), 3.0)).as_dict()
        assert d == {"mean": 3.0, "minimum": 3.0, "maximum": 3.0, "sigma": 0.0}


class TestPartialMerge:
    def test_nan_second_operand(self):
        clean = Partial.of(np.zeros(3))
        dirty = Partial.of(np.array([0.0, np.nan]))
        for merged in (clean.merge(dirty), dirty.merge(clean)):
            assert np.isnan(merged.minimum)
            assert np.isnan(merged.maximum)

    def test_associative(self):
        rng = np.random.default_rng(2)
        x, y, z = (rng.normal(size=n) for n in (5, 9, 3))
        px, py, pz = Partial.of(x), Partial.of(y), Partial.of(z)
        left = px.merge(py).merge(pz).finish()
        right = px.merge(py.merge(pz)).finish()
        assert left.mean == pytest.approx(right.mean, rel=1e-12)
        assert left.sigma == pytest.approx(right.sigma, rel=1e-12)

    def test_commutative(self):
        rng = np.random.default_rng(3)
        px, py = Partial.of(rng.normal(size=7)), Partial.of(rng.normal(size=4))
        a, b = px.merge(py).finish(), py.merge(px).finish()
        assert a.mean == pytest.approx(b.mean, rel=1e-12)
        assert a.sigma == pytest.approx(b.sigma, rel=1e-12)
        assert (a.minimum, a.maximum) == (b.minimum, b.maximum)

    def test_merge_equals_whole(self):
        data = np.arange(10, dtype=np.float64)
        merged = Partial.of(data[:3]).merge(Partial.of(data[3:])).finish()
        assert merged.mean == pytest.approx(4.5)
        assert merged.sigma == pytest.approx(data.std())
