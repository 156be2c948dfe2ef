"""
Pytest configuration and shared fixtures for synthetic_mixtures tests.
"""

import numpy as np
import pandas as pd
import pytest

from synthetic_mixtures.config import MixtureConfig, NoiseConfig
from synthetic_mixtures.expression import ExpressionSet


@pytest.fixture
def base_exprs():
    """5 genes x 5 samples with integer values."""
    values = np.array(
        [
            [1.0, 3.0, 10.0, 4.0, 6.0],
            [2.0, 4.0, 20.0, 8.0, 2.0],
            [0.0, 2.0, 5.0, 1.0, 1.0],
            [7.0, 9.0, 0.0, 3.0, 5.0],
            [5.0, 5.0, 5.0, 5.0, 5.0],
        ]
    )
    genes = [f"GENE{i}" for i in range(1, 6)]
    samples = [f"S{i}" for i in range(1, 6)]
    return pd.DataFrame(values, index=genes, columns=samples)


@pytest.fixture
def base_phenotypes(base_exprs):
    """Three cell types with 2 + 1 + 2 samples, interleaved."""
    return pd.DataFrame(
        {
            "cell type": ["B cells", "T cells", "NK cells", "B cells", "T cells"],
            "donor": ["d1", "d1", "d2", "d2", "d3"],
        },
        index=base_exprs.columns,
    )


@pytest.fixture
def base_eset(base_exprs, base_phenotypes):
    """Labeled base expression set with feature metadata."""
    fdata = pd.DataFrame({"symbol": [g.lower() for g in base_exprs.index]}, index=base_exprs.index)
    return ExpressionSet(
        exprs=base_exprs,
        phenotype_data=base_phenotypes,
        feature_data=fdata,
        experiment_data={"title": "test reference"},
        annotation={"platform": "test"},
    )


@pytest.fixture
def quiet_config(tmp_path):
    """Noise-free config with 4 synthetic samples and mean aggregation."""
    config = MixtureConfig(seed=7, verbose=False, expression_method="mean")
    config.dataset.samples = 4
    config.noise = NoiseConfig(noise=False)
    config.file.output_dir = str(tmp_path / "out")
    return config


@pytest.fixture
def expression_files(tmp_path, base_exprs, base_phenotypes):
    """Write the base set as CSV files and return their paths."""
    expr_path = tmp_path / "reference.csv"
    pheno_path = tmp_path / "phenotypes.csv"
    base_exprs.to_csv(expr_path, index_label="gene")
    # Shuffle rows to check reordering on load
    base_phenotypes.iloc[::-1].to_csv(pheno_path, index_label="sample")
    return expr_path, pheno_path
