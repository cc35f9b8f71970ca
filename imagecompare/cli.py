"""Command-line regression check for two 3-D images.

Prints difference statistics to stdout and exits non-zero when the images
do not match within tolerance, the grids disagree, or the options are
invalid.

Usage:
    python -m imagecompare -a reference.nii.gz -b candidate.nii.gz \\
        -k labels.nii.gz -l 3 -o -M 0.5 -e 0.01 -s 0.05 -m 0.0
"""

import argparse
import json
import sys
from datetime import datetime, timezone

from imagecompare.config import config_from_args
from imagecompare.exceptions import ImageCompareError
from imagecompare.io_utils import load_label_volume, load_scalar_volume, save_volume
from imagecompare.pipeline import MaskSpec, run
from imagecompare.profiling import stage_timer
from imagecompare.utils import DEFAULT_SLAB_SIZE

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

# (stdout label, summary attribute)
STAT_LINES = [
    ("Mean difference:", "mean"),
    ("Max. difference:", "maximum"),
    ("Min. difference:", "minimum"),
    ("Sigma difference:", "sigma"),
]


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------
def build_parser():
    parser = argparse.ArgumentParser(
        prog="imagecompare",
        description="Compare two 3-D images voxel by voxel against tolerances.",
    )
    parser.add_argument("-a", "--imageA", required=True, help="Input image A")
    parser.add_argument("-b", "--imageB", required=True, help="Input image B")
    parser.add_argument("-k", "--mask", default=None, help="Label mask image")
    parser.add_argument("-o", "--outside", action="store_true",
                        help="Mask operates outside (keep voxels whose label "
                             "differs from --mask_label)")
    parser.add_argument("-l", "--mask_label", type=int, default=0,
                        help="Label to consider for masking (default 0)")
    parser.add_argument("-u", "--mask_value", type=float, default=0.0,
                        help="Value to replace masked voxels (default 0)")

    tol = parser.add_argument_group("tolerances")
    tol.add_argument("-M", "--maxTolerance", type=float, default=0.0,
                     help="Maximum max difference allowed")
    tol.add_argument("-m", "--minTolerance", type=float, default=0.0,
                     help="Maximum min difference allowed")
    tol.add_argument("-e", "--meanTolerance", type=float, default=0.0,
                     help="Maximum mean difference allowed")
    tol.add_argument("-s", "--sigmaTolerance", type=float, default=0.0,
                     help="Maximum sigma of the difference allowed")

    out = parser.add_argument_group("outputs")
    out.add_argument("-A", "--maskedA", default=None,
                     help="Write masked image A (needs --mask)")
    out.add_argument("-B", "--maskedB", default=None,
                     help="Write masked image B (needs --mask)")
    out.add_argument("-d", "--differenceImage", default=None,
                     help="Write the absolute difference image")
    out.add_argument("--report", default=None,
                     help="Write a JSON report of the comparison")

    run_opts = parser.add_argument_group("execution")
    run_opts.add_argument("--workers", type=int, default=1,
                          help="Threads for the statistics pass (default 1)")
    run_opts.add_argument("--slab-size", type=int, default=DEFAULT_SLAB_SIZE,
                          help=f"Slices per statistics slab (default {DEFAULT_SLAB_SIZE})")
    run_opts.add_argument("--verbose", action="store_true",
                          help="Report per-stage time and memory on stderr")
    return parser


def parse_args(argv=None):
    """Parse CLI arguments into a namespace."""
    return build_parser().parse_args(argv)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------
def print_statistics(summary, stream=None):
    stream = stream if stream is not None else sys.stdout
    for label, attr in STAT_LINES:
        print(f"{label}{getattr(summary, attr):g}", file=stream)


def print_violations(verdict, stream=None):
    stream = stream if stream is not None else sys.stderr
    for v in verdict.violations:
        print(f"FAIL: {v.describe()}", file=stream)
    if verdict.violations:
        print("One or more of the measured statistics are higher than "
              "tolerance values", file=stream)


def build_report(config, result=None, error=None):
    """Build the JSON report dict for one comparison."""
    report = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "inputs": {
            "image_a": str(config.image_a),
            "image_b": str(config.image_b),
            "mask": str(config.mask) if config.mask is not None else None,
        },
        "mask": {
            "mode": config.mask_mode.value,
            "label": config.mask_label,
            "value": config.mask_value,
        } if config.mask is not None else None,
        "tolerances": {
            "max": config.tolerance.max_ceiling,
            "min": config.tolerance.min_ceiling,
            "mean": config.tolerance.mean_ceiling,
            "sigma": config.tolerance.sigma_ceiling,
        },
    }
    if error is not None:
        report["overall_status"] = "ERROR"
        report["error"] = {"type": type(error).__name__, "message": str(error)}
        return report

    verdict = result.verdict
    report["overall_status"] = "PASS" if verdict.passed else "FAIL"
    report["statistics"] = verdict.summary.as_dict()
    report["violations"] = [
        {"statistic": v.statistic, "observed": v.observed, "ceiling": v.ceiling}
        for v in verdict.violations
    ]
    return report


def write_report(path, report):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(report, f, indent=2)
    print(f"Saved report: {path}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def compare(config):
    """Load inputs, run the pipeline, and save any requested derived images."""
    stage = stage_timer(config.verbose)

    with stage("load"):
        image_a = load_scalar_volume(config.image_a, "image A")
        image_b = load_scalar_volume(config.image_b, "image B")
        mask_spec = None
        if config.mask is not None:
            mask_spec = MaskSpec(
                labels=load_label_volume(config.mask, "mask"),
                target_label=config.mask_label,
                fill_value=config.mask_value,
                mode=config.mask_mode,
            )

    result = run(image_a, image_b, mask_spec, config.tolerance,
                 workers=config.workers, slab_size=config.slab_size,
                 timing=config.verbose)

    with stage("save"):
        if mask_spec is not None:
            if config.masked_a_out is not None:
                save_volume(result.masked_a, config.masked_a_out, "masked image A")
            if config.masked_b_out is not None:
                save_volume(result.masked_b, config.masked_b_out, "masked image B")
        elif config.masked_a_out is not None or config.masked_b_out is not None:
            print("WARNING: --maskedA/--maskedB ignored without --mask",
                  file=sys.stderr)
        if config.difference_out is not None:
            save_volume(result.difference, config.difference_out,
                        "difference image")
    return result


def main(argv=None):
    """Run one comparison; return the process exit code."""
    args = parse_args(argv)
    try:
        config = config_from_args(args)
    except ImageCompareError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        with stage_timer(config.verbose)("total"):
            result = compare(config)
    except ImageCompareError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        if config.report is not None:
            write_report(config.report, build_report(config, error=e))
        return EXIT_FAILURE

    print_statistics(result.verdict.summary)
    print_violations(result.verdict)
    if config.report is not None:
        write_report(config.report, build_report(config, result))

    return EXIT_SUCCESS if result.passed else EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
