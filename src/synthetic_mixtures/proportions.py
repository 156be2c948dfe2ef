"""
Mixture proportion sampling.

Each synthetic sample receives a composition vector drawn from a symmetric
Dirichlet distribution (all concentrations equal to 1), i.e. uniformly over
the simplex of cell-type fractions.
"""

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .errors import ValidationError
from .utils.seed import RandomSource, ensure_rng

logger = logging.getLogger(__name__)


def sample_ids(n_samples: int, id_prefix: str = "proportion_") -> list:
    """Sequential 1-based synthetic sample identifiers."""
    return [f"{id_prefix}{i}" for i in range(1, n_samples + 1)]


def sample_proportions(
    n_classes: int,
    n_samples: int,
    rng: RandomSource = None,
    cell_types: Optional[Sequence[str]] = None,
    id_prefix: str = "proportion_",
) -> pd.DataFrame:
    """
    Draw per-sample mixture fractions.

    Args:
        n_classes: Number of cell types to mix
        n_samples: Number of synthetic samples
        rng: RandomState, seed or None
        cell_types: Optional column names, in the order used downstream
        id_prefix: Prefix of the row identifiers

    Returns:
        DataFrame (samples x cell types); every row sums to 1

    Raises:
        ValidationError: If sizes are not positive or names do not match n_classes
    """
    if n_classes < 1:
        raise ValidationError(
            f"Need at least one cell type to sample proportions, got {n_classes}",
            field="n_classes",
        )
    if n_samples < 1:
        raise ValidationError(
            f"Need at least one synthetic sample, got {n_samples}",
            field="dataset.samples",
            suggestions=["Set dataset.samples to a positive integer"],
        )

    if cell_types is None:
        columns = [f"class_{i}" for i in range(1, n_classes + 1)]
    else:
        columns = [str(c) for c in cell_types]
        if len(columns) != n_classes:
            raise ValidationError(
                f"Got {len(columns)} cell type names for {n_classes} classes",
                field="cell_types",
            )

    rng = ensure_rng(rng)
    fractions = rng.dirichlet(np.ones(n_classes), size=n_samples)

    logger.debug(f"Sampled proportions for {n_samples} samples over {n_classes} cell types")

    return pd.DataFrame(fractions, index=sample_ids(n_samples, id_prefix), columns=columns)
