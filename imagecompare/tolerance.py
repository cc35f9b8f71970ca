"""Tolerance ceilings and the pass/fail verdict."""

import math
from dataclasses import dataclass, field

from imagecompare.stats import StatisticsSummary


# Statistic name -> (summary attribute, ceiling attribute), in report order.
STATISTICS = {
    "mean":  ("mean", "mean_ceiling"),
    "max":   ("maximum", "max_ceiling"),
    "min":   ("minimum", "min_ceiling"),
    "sigma": ("sigma", "sigma_ceiling"),
}


@dataclass(frozen=True)
class ToleranceSpec:
    """Upper bounds for each difference statistic.  All default to 0."""

    max_ceiling: float = 0.0
    min_ceiling: float = 0.0
    mean_ceiling: float = 0.0
    sigma_ceiling: float = 0.0


@dataclass(frozen=True)
class Violation:
    statistic: str
    observed: float
    ceiling: float

    def describe(self):
        return (f"{self.statistic} difference {self.observed:g} "
                f"exceeds tolerance {self.ceiling:g}")


@dataclass(frozen=True)
class Verdict:
    passed: bool
    summary: StatisticsSummary
    violations: tuple = field(default_factory=tuple)

    def violated(self):
        """Names of the statistics that exceeded their ceiling."""
        return {v.statistic for v in self.violations}


def _exceeds(observed, ceiling):
    # NaN never compares greater, so it would otherwise pass silently.
    return math.isnan(observed) or observed > ceiling


def evaluate(summary, tolerance):
    """Compare every statistic against its ceiling.

    A statistic violates when it is strictly greater than its ceiling.
    All four are checked; the verdict lists each one that failed.
    """
    violations = []
    for name, (stat_attr, ceil_attr) in STATISTICS.items():
        observed = getattr(summary, stat_attr)
        ceiling = getattr(tolerance, ceil_attr)
        if _exceeds(observed, ceiling):
            violations.append(Violation(name, observed, ceiling))
    return Verdict(passed=not violations, summary=summary,
                   violations=tuple(violations))
