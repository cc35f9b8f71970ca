"""Per-stage wall time and resident memory, printed to stderr.

    with step("difference"):
        diff = difference(a, b)

prints

    [difference] 0.3s | RSS 812 MB (+128 MB)

Nested steps are indented.  Output goes to stderr so that the statistics
on stdout stay machine-readable.
"""

import resource
import sys
import threading
import time
from contextlib import contextmanager, nullcontext

_local = threading.local()


def _rss_mb():
    """Current RSS in MB; falls back to the peak on non-Linux hosts."""
    try:
        with open("/proc/self/status") as f:
            for line in f:
                if line.startswith("VmRSS:"):
                    return int(line.split()[1]) / 1024
    except (OSError, ValueError):
        pass
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss / 1024


def _fmt_mb(mb, signed=False):
    sign = "+" if signed and mb >= 0 else ""
    if abs(mb) >= 1024:
        return f"{sign}{mb / 1024:.2f} GB"
    return f"{sign}{mb:.0f} MB"


@contextmanager
def step(name, stream=None):
    """Time the enclosed block and report it on exit."""
    stream = stream if stream is not None else sys.stderr
    depth = getattr(_local, "depth", 0)
    _local.depth = depth + 1
    rss_start = _rss_mb()
    t_start = time.monotonic()
    try:
        yield
    finally:
        elapsed = time.monotonic() - t_start
        rss_end = _rss_mb()
        _local.depth = depth
        print(f"{'  ' * depth}[{name}] {elapsed:.1f}s"
              f" | RSS {_fmt_mb(rss_end)} ({_fmt_mb(rss_end - rss_start, True)})",
              file=stream)


def stage_timer(enabled):
    """Return ``step`` when timing is enabled, else a no-op factory."""
    if enabled:
        return step
    return lambda name: nullcontext()
