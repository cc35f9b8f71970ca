"""Shared fixtures for the test suite."""

import nibabel as nib
import numpy as np
import pytest

from imagecompare.volumes import LabelVolume, ScalarVolume


def _make_volume(shape=(4, 4, 4), value=0.0, affine=None):
    """Constant ScalarVolume of the given shape."""
    return ScalarVolume(np.full(shape, value, dtype=np.float64), affine)


def _make_random_volume(shape=(6, 5, 4), seed=0, scale=10.0):
    rng = np.random.default_rng(seed)
    return ScalarVolume(rng.normal(scale=scale, size=shape))


def _make_labels(shape=(4, 4, 4), regions=None):
    """LabelVolume of zeros with (index, label) regions painted in, in order."""
    data = np.zeros(shape, dtype=np.uint16)
    for idx, lab in regions or ():
        data[idx] = lab
    return LabelVolume(data)


def _write_nifti(path, data, affine=None, dtype=None):
    """Save *data* as NIfTI at *path* and return the path."""
    data = np.asarray(data)
    if dtype is not None:
        data = data.astype(dtype)
    img = nib.Nifti1Image(data, affine if affine is not None else np.eye(4))
    nib.save(img, str(path))
    return path


@pytest.fixture
def make_volume():
    """Factory fixture that returns the _make_volume helper."""
    return _make_volume


@pytest.fixture
def make_random_volume():
    return _make_random_volume


@pytest.fixture
def make_labels():
    return _make_labels


@pytest.fixture
def write_nifti():
    return _write_nifti
