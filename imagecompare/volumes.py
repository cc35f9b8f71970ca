"""Immutable 3-D volumes consumed and produced by the pipeline.

Both volume types wrap a read-only numpy array plus the voxel-to-world
affine of the file they came from.  The affine is carried only so that
derived images can be written back in the same space; it never takes part
in a comparison.
"""

from dataclasses import InitVar, dataclass

import numpy as np

from imagecompare.exceptions import InvalidConfiguration


def _frozen_array(data, dtype, copy=True):
    """Return a C-contiguous, non-writeable array of *data*.

    With copy=False an array the caller owns is frozen in place.
    """
    if copy:
        arr = np.array(data, dtype=dtype, copy=True, order="C")
    else:
        arr = np.ascontiguousarray(data, dtype=dtype)
    if arr.ndim != 3:
        raise InvalidConfiguration(
            f"Expected a 3-D volume, got {arr.ndim}-D data of shape {arr.shape}"
        )
    arr.setflags(write=False)
    return arr


def _frozen_affine(affine):
    if affine is None:
        return None
    if (isinstance(affine, np.ndarray) and affine.dtype == np.float64
            and affine.shape == (4, 4) and affine.base is None
            and not affine.flags.writeable):
        return affine
    aff = np.array(affine, dtype=np.float64, copy=True)
    if aff.shape != (4, 4):
        raise InvalidConfiguration(f"Affine must be 4x4, got {aff.shape}")
    aff.setflags(write=False)
    return aff


@dataclass(frozen=True, eq=False)
class ScalarVolume:
    """3-D grid of float samples."""

    data: np.ndarray
    affine: np.ndarray | None = None
    owned: InitVar[bool] = False

    def __post_init__(self, owned):
        object.__setattr__(self, "data",
                           _frozen_array(self.data, np.float64, copy=not owned))
        object.__setattr__(self, "affine", _frozen_affine(self.affine))

    @property
    def extent(self):
        return tuple(int(n) for n in self.data.shape)

    @property
    def n_voxels(self):
        return int(self.data.size)

    def congruent_with(self, other):
        """True when *other* has the same extent (spacing is ignored)."""
        return self.extent == other.extent

    def derive(self, data):
        """New volume on this volume's grid that takes ownership of *data*.

        *data* is frozen in place, not copied; callers pass a freshly
        computed array they no longer write to.
        """
        return ScalarVolume(data, self.affine, owned=True)


@dataclass(frozen=True, eq=False)
class LabelVolume:
    """3-D grid of non-negative integer labels."""

    data: np.ndarray
    affine: np.ndarray | None = None

    def __post_init__(self):
        raw = np.asarray(self.data)
        if raw.dtype.kind == "f":
            if not np.all(np.isfinite(raw)) or not np.array_equal(raw, np.round(raw)):
                raise InvalidConfiguration("Label volume contains non-integer values")
        elif raw.dtype.kind not in "iub":
            raise InvalidConfiguration(
                f"Label volume must hold integers, got dtype {raw.dtype}"
            )
        labels = _frozen_array(raw, np.int64)
        if labels.size and labels.min() < 0:
            raise InvalidConfiguration(
                f"Label volume contains negative label {int(labels.min())}"
            )
        object.__setattr__(self, "data", labels)
        object.__setattr__(self, "affine", _frozen_affine(self.affine))

    @property
    def extent(self):
        return tuple(int(n) for n in self.data.shape)

    def congruent_with(self, other):
        return self.extent == other.extent
