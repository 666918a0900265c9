"""Fixed-size memory pools with bitmap headers and size-prefixed blocks."""

__version__ = "0.1.0"
__all__ = ["sizes", "pool", "global_pool"]