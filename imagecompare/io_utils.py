"""NIfTI loading and saving via nibabel.

Loaders return immutable volumes carrying the file's affine; the writer
stores float32 data with that affine (identity when the volume has none).
"""

import sys
from pathlib import Path

import nibabel as nib
import numpy as np
from nibabel.filebasedimages import ImageFileError

from imagecompare.exceptions import InvalidConfiguration
from imagecompare.volumes import LabelVolume, ScalarVolume


def _load(path, what):
    path = Path(path)
    print(f"Loading {what}: {path}", file=sys.stderr)
    try:
        img = nib.load(str(path))
    except FileNotFoundError:
        raise InvalidConfiguration(f"{what} not found: {path}") from None
    except ImageFileError as e:
        raise InvalidConfiguration(f"{what} is not a readable image: {path} ({e})") from e
    if len(img.shape) != 3:
        raise InvalidConfiguration(
            f"{what} must be 3-D, got shape {tuple(img.shape)}: {path}"
        )
    return img


def load_scalar_volume(path, what="image"):
    """Load a 3-D scalar image as a ScalarVolume (float64 samples)."""
    img = _load(path, what)
    data = img.get_fdata(dtype=np.float64)
    return ScalarVolume(data, img.affine)


def load_label_volume(path, what="mask"):
    """Load a 3-D label image as a LabelVolume.

    Scaled or float-typed files are accepted as long as every value is a
    non-negative integer.
    """
    img = _load(path, what)
    data = np.asarray(img.dataobj)
    if data.dtype.kind == "f":
        rounded = np.round(data)
        if not np.array_equal(rounded, data):
            raise InvalidConfiguration(f"{what} contains non-integer labels: {path}")
        data = rounded.astype(np.int64)
    return LabelVolume(data, img.affine)


def save_volume(volume, path, what="image"):
    """Write *volume* to *path* as float32 NIfTI, creating parent dirs."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    affine = volume.affine if volume.affine is not None else np.eye(4)
    img = nib.Nifti1Image(volume.data.astype(np.float32), np.array(affine))
    img.header.set_data_dtype(np.float32)
    nib.save(img, str(path))
    print(f"Saved {what}: {path}  shape={volume.extent}", file=sys.stderr)
    return path
