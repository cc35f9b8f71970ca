"""Label-driven masking of scalar volumes.

One function covers both semantics:

  INCLUSIVE  keep voxels whose label == target, fill the rest
  EXCLUSIVE  fill voxels whose label == target, keep the rest

The orchestrator applies the same (target, fill, mode) to image A and
image B, so the same voxel positions are replaced in both.
"""

import enum

import numpy as np

from imagecompare.geometry import check_congruent


class MaskMode(enum.Enum):
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


def selection(labels, target_label, mode):
    """Boolean array, True where the source value survives masking."""
    match = labels.data == int(target_label)
    if mode is MaskMode.INCLUSIVE:
        return match
    if mode is MaskMode.EXCLUSIVE:
        return ~match
    raise TypeError(f"mode must be a MaskMode, got {mode!r}")


def mask(volume, labels, target_label=0, fill_value=0.0,
         mode=MaskMode.INCLUSIVE):
    """Return a new volume with unselected voxels set to *fill_value*.

    Parameters
    ----------
    volume : ScalarVolume
    labels : LabelVolume
        Must be congruent with *volume* (GeometryMismatch otherwise).
    target_label : int
    fill_value : float
    mode : MaskMode

    Returns
    -------
    ScalarVolume on the same grid as *volume*.
    """
    check_congruent(volume, labels, "image", "mask")
    keep = selection(labels, target_label, mode)
    out = np.where(keep, volume.data, np.float64(fill_value))
    return volume.derive(out)
