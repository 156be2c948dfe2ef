"""
Reproducibility utilities for deterministic execution.

Random draws are made from explicitly passed RandomState handles so that
runs never depend on (or disturb) NumPy's global random state.
"""

from typing import Optional, Union

import numpy as np

RandomSource = Union[None, int, np.random.RandomState]


def get_rng(seed: Optional[int], module_name: str = "") -> np.random.RandomState:
    """Get a module-specific random state for isolated reproducibility.

    Creates a deterministic offset from the module name to ensure different
    modules get different but reproducible random sequences.

    Args:
        seed: Base seed (None for random)
        module_name: Module identifier for offset calculation

    Returns:
        NumPy RandomState instance
    """
    if seed is None:
        return np.random.RandomState()

    # Create deterministic offset from module name
    offset = sum(ord(c) for c in module_name) % 1000
    return np.random.RandomState(seed + offset)


def ensure_rng(rng: RandomSource) -> np.random.RandomState:
    """Return ``rng`` as a RandomState, seeding a fresh one from an int or None."""
    if isinstance(rng, np.random.RandomState):
        return rng
    return np.random.RandomState(rng)
