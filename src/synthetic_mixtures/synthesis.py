"""
Noise-injected linear mixing of cell-type signatures.

Each synthetic sample is the proportion-weighted sum of the aggregated
signatures. When noise is enabled a single noise vector (one draw per gene)
is added to the finished sample column. Values are never clamped, so noise
can push expression below zero.
"""

import logging
from typing import Callable, Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from .config import NoiseConfig, NoiseMethod, validate_noise_config
from .errors import ValidationError
from .utils.seed import RandomSource, ensure_rng

logger = logging.getLogger(__name__)


def make_noise_sampler(
    noise: NoiseConfig, rng: np.random.RandomState
) -> Callable[[int], np.ndarray]:
    """
    Build a function drawing ``n`` independent noise values.

    Raises:
        ConfigurationError: If the method or its parameters are invalid
    """
    validate_noise_config(noise)
    method = NoiseMethod(noise.method)

    if method == NoiseMethod.NORMAL:
        return lambda n: rng.normal(noise.mean, noise.std, size=n)
    return lambda n: rng.uniform(noise.min, noise.max, size=n)


def _check_alignment(signatures: pd.DataFrame, proportions: pd.DataFrame) -> None:
    n_types = signatures.shape[1]
    if proportions.shape[1] != n_types:
        raise ValidationError(
            f"Proportion table has {proportions.shape[1]} cell type columns, "
            f"signatures have {n_types}",
            field="proportions",
        )

    prop_cols = [str(c) for c in proportions.columns]
    sig_cols = [str(c) for c in signatures.columns]
    unnamed = [f"class_{i}" for i in range(1, n_types + 1)]
    if prop_cols != unnamed and prop_cols != sig_cols:
        raise ValidationError(
            "Proportion columns do not match signature columns in order: "
            f"{prop_cols} vs {sig_cols}",
            field="proportions",
            suggestions=["Sample proportions with cell_types=list(signatures.columns)"],
        )


def synthesize_mixtures(
    signatures: pd.DataFrame,
    proportions: pd.DataFrame,
    noise: Optional[NoiseConfig] = None,
    rng: RandomSource = None,
    show_progress: bool = False,
) -> pd.DataFrame:
    """
    Mix aggregated signatures into synthetic bulk samples.

    Args:
        signatures: Aggregated signatures (genes x cell types)
        proportions: Proportion table (samples x cell types), same column order
        noise: Noise settings; None disables noise
        rng: RandomState, seed or None
        show_progress: Show a tqdm progress bar over samples

    Returns:
        DataFrame (genes x synthetic samples)

    Raises:
        ConfigurationError: If the noise method or parameters are invalid
        ValidationError: If proportions and signatures do not line up
    """
    _check_alignment(signatures, proportions)

    rng = ensure_rng(rng)
    add_noise = False
    draw_noise = None
    if noise is not None:
        draw_noise = make_noise_sampler(noise, rng)
        add_noise = bool(noise.noise)

    sig = np.asarray(signatures.values, dtype=float)
    props = np.asarray(proportions.values, dtype=float)
    n_genes, n_types = sig.shape
    n_samples = props.shape[0]

    mixed = np.zeros((n_genes, n_samples), dtype=float)
    for s in tqdm(range(n_samples), desc="Mixing samples", disable=not show_progress):
        column = np.zeros(n_genes, dtype=float)
        for c in range(n_types):
            column += sig[:, c] * props[s, c]
        if add_noise:
            column += draw_noise(n_genes)
        mixed[:, s] = column

    logger.info(
        f"Synthesized {n_samples} samples x {n_genes} genes "
        f"({'with ' + noise.method + ' noise' if add_noise else 'no noise'})"
    )

    return pd.DataFrame(mixed, index=signatures.index, columns=proportions.index)
