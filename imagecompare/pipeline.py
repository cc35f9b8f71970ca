"""Comparison pipeline: geometry -> mask -> difference -> statistics -> verdict.

Every call is an independent transaction over its inputs.  Structural
errors (GeometryMismatch, EmptyVolume) propagate immediately and no
partial verdict is produced.  Exceeding a tolerance is not an error; it
yields a Verdict with ``passed=False``.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from imagecompare.difference import difference
from imagecompare.geometry import validate_geometry
from imagecompare.masking import MaskMode, mask
from imagecompare.profiling import stage_timer
from imagecompare.stats import summarize
from imagecompare.tolerance import ToleranceSpec, Verdict, evaluate
from imagecompare.utils import DEFAULT_SLAB_SIZE
from imagecompare.volumes import LabelVolume, ScalarVolume


@dataclass(frozen=True)
class MaskSpec:
    """Label mask plus the single (target, fill, mode) shared by A and B."""

    labels: LabelVolume
    target_label: int = 0
    fill_value: float = 0.0
    mode: MaskMode = MaskMode.INCLUSIVE


@dataclass(frozen=True)
class ComparisonResult:
    """Verdict plus the derived volumes a caller may want to save.

    ``masked_a`` / ``masked_b`` are None when no mask was applied.
    """

    verdict: Verdict
    difference: ScalarVolume
    masked_a: ScalarVolume | None = None
    masked_b: ScalarVolume | None = None

    @property
    def passed(self):
        return self.verdict.passed


def run(image_a, image_b, mask_spec=None, tolerance=None, *,
        workers=None, slab_size=DEFAULT_SLAB_SIZE, timing=False):
    """Compare two volumes and evaluate the difference against tolerances.

    Parameters
    ----------
    image_a, image_b : ScalarVolume
        Reference and candidate.  Must be congruent.
    mask_spec : MaskSpec or None
        When given, both images are masked identically before differencing.
        When None the original images are differenced unmodified.
    tolerance : ToleranceSpec or None
        Ceilings; None means all zero.
    workers, slab_size :
        Passed to the statistics pass.
    timing : bool
        Report per-stage wall time / RSS on stderr.

    Returns
    -------
    ComparisonResult
    """
    if tolerance is None:
        tolerance = ToleranceSpec()
    stage = stage_timer(timing)

    labels = mask_spec.labels if mask_spec is not None else None
    with stage("geometry"):
        validate_geometry(image_a, image_b, labels)

    masked_a = masked_b = None
    if mask_spec is not None:
        with stage("mask"):
            masked_a = mask(image_a, mask_spec.labels, mask_spec.target_label,
                            mask_spec.fill_value, mask_spec.mode)
            masked_b = mask(image_b, mask_spec.labels, mask_spec.target_label,
                            mask_spec.fill_value, mask_spec.mode)
        lhs, rhs = masked_a, masked_b
    else:
        lhs, rhs = image_a, image_b

    with stage("difference"):
        diff = difference(lhs, rhs)

    with stage("statistics"):
        summary = summarize(diff, slab_size=slab_size, workers=workers)

    verdict = evaluate(summary, tolerance)
    return ComparisonResult(verdict=verdict, difference=diff,
                            masked_a=masked_a, masked_b=masked_b)


def compare_many(pairs, mask_spec=None, tolerance=None, max_workers=None):
    """Run independent comparisons concurrently.

    *pairs* is an iterable of (image_a, image_b).  Results come back in
    input order; the first structural error raised by any pair propagates.
    """
    pairs = list(pairs)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(run, a, b, mask_spec, tolerance)
                   for a, b in pairs]
        return [f.result() for f in futures]
