"""Voxel-wise regression comparison of 3-D scalar images."""

from imagecompare.difference import difference
from imagecompare.exceptions import (
    EmptyVolume,
    GeometryMismatch,
    ImageCompareError,
    InvalidConfiguration,
)
from imagecompare.geometry import validate_geometry
from imagecompare.masking import MaskMode, mask
from imagecompare.pipeline import ComparisonResult, MaskSpec, compare_many, run
from imagecompare.stats import StatisticsSummary, summarize
from imagecompare.tolerance import ToleranceSpec, Verdict, Violation, evaluate
from imagecompare.volumes import LabelVolume, ScalarVolume

__version__ = "0.1.0"
