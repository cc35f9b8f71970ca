"""Shared helpers: slab iteration used by the statistics pass."""

DEFAULT_SLAB_SIZE = 32


def iter_slabs(n, slab_size=DEFAULT_SLAB_SIZE):
    """Yield (start, end) index pairs covering range(n) in slab_size steps."""
    if slab_size < 1:
        raise ValueError(f"slab_size must be >= 1, got {slab_size}")
    for i_start in range(0, n, slab_size):
        yield i_start, min(i_start + slab_size, n)
