"""Utility modules for the synthetic expression mixtures package."""

from .seed import RandomSource, ensure_rng, get_rng

__all__ = [
    "get_rng",
    "ensure_rng",
    "RandomSource",
]
