"""Extent checks that gate every numerical stage."""

from imagecompare.exceptions import GeometryMismatch


def check_congruent(first, second, first_name="image A", second_name="image B"):
    """Raise GeometryMismatch unless *first* and *second* share an extent."""
    if not first.congruent_with(second):
        raise GeometryMismatch(first_name, second_name,
                               first.extent, second.extent)


def validate_geometry(image_a, image_b, labels=None):
    """Confirm A, B (and the label mask, if given) have identical extents.

    Only the number of samples per axis is compared.  Spacing, origin and
    orientation are not looked at: the pipeline pairs voxels by index.
    """
    check_congruent(image_a, image_b, "image A", "image B")
    if labels is not None:
        check_congruent(image_a, labels, "image A", "mask")
        check_congruent(image_b, labels, "image B", "mask")
