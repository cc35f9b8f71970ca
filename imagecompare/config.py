"""Resolved run options for the command-line comparison."""

from dataclasses import dataclass, field
from pathlib import Path

from imagecompare.exceptions import InvalidConfiguration
from imagecompare.masking import MaskMode
from imagecompare.tolerance import ToleranceSpec
from imagecompare.utils import DEFAULT_SLAB_SIZE


@dataclass(frozen=True)
class CompareConfig:
    image_a: Path
    image_b: Path
    mask: Path | None = None
    mask_mode: MaskMode = MaskMode.INCLUSIVE
    mask_label: int = 0
    mask_value: float = 0.0
    tolerance: ToleranceSpec = field(default_factory=ToleranceSpec)
    masked_a_out: Path | None = None
    masked_b_out: Path | None = None
    difference_out: Path | None = None
    report: Path | None = None
    workers: int = 1
    slab_size: int = DEFAULT_SLAB_SIZE
    verbose: bool = False


def _opt_path(value):
    return Path(value) if value is not None else None


def config_from_args(args):
    """Build a CompareConfig from a parsed argparse namespace.

    Raises InvalidConfiguration for option combinations that cannot run,
    before any image is read.
    """
    if args.outside and args.mask is None:
        raise InvalidConfiguration(
            "Outside mask switch should be used together with a mask image"
        )
    if args.mask_label < 0:
        raise InvalidConfiguration(
            f"--mask_label must be non-negative, got {args.mask_label}"
        )
    if args.workers < 1:
        raise InvalidConfiguration(f"--workers must be >= 1, got {args.workers}")
    if args.slab_size < 1:
        raise InvalidConfiguration(
            f"--slab-size must be >= 1, got {args.slab_size}"
        )

    return CompareConfig(
        image_a=Path(args.imageA),
        image_b=Path(args.imageB),
        mask=_opt_path(args.mask),
        mask_mode=MaskMode.EXCLUSIVE if args.outside else MaskMode.INCLUSIVE,
        mask_label=args.mask_label,
        mask_value=args.mask_value,
        tolerance=ToleranceSpec(
            max_ceiling=args.maxTolerance,
            min_ceiling=args.minTolerance,
            mean_ceiling=args.meanTolerance,
            sigma_ceiling=args.sigmaTolerance,
        ),
        masked_a_out=_opt_path(args.maskedA),
        masked_b_out=_opt_path(args.maskedB),
        difference_out=_opt_path(args.differenceImage),
        report=_opt_path(args.report),
        workers=args.workers,
        slab_size=args.slab_size,
        verbose=args.verbose,
    )
