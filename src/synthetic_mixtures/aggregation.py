"""
Cell-type indexing and signature aggregation.

A labeled expression matrix is partitioned by cell type and each group of
replicate columns is collapsed into one signature column. Cell types are
always ordered by first occurrence in the label sequence; that order is the
one the proportion table and the composition labels use as well.
"""

import logging
from typing import Dict, Iterable, List, Union

import numpy as np
import pandas as pd

from .config import AggregationMethod, parse_aggregation_method
from .errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

CellTypeIndex = Dict[str, List[int]]


def partition_labels(labels: Iterable) -> CellTypeIndex:
    """
    Group 0-based column positions by label.

    Keys appear in order of first occurrence; positions are ascending.

    >>> partition_labels(["A", "B", "A"])
    {'A': [0, 2], 'B': [1]}
    """
    index: CellTypeIndex = {}
    for position, label in enumerate(labels):
        index.setdefault(str(label), []).append(position)
    return index


def index_cell_types(phenotype_data: pd.DataFrame, cell_type_column: str) -> CellTypeIndex:
    """
    Partition the samples of a phenotype table by cell type.

    Args:
        phenotype_data: Per-sample metadata, rows aligned with matrix columns
        cell_type_column: Name of the label column

    Returns:
        Mapping of cell type to the column positions carrying it

    Raises:
        ConfigurationError: If the label column does not exist
        ValidationError: If any sample has no label
    """
    if cell_type_column not in phenotype_data.columns:
        available = [str(c) for c in phenotype_data.columns]
        raise ConfigurationError(
            f"Cell type column '{cell_type_column}' not found in phenotype data",
            field="column.cell_type",
            suggestions=[
                f"Use one of the available columns: {', '.join(available) or '(none)'}",
                "Set column.cell_type in your config file",
            ],
        )

    labels = phenotype_data[cell_type_column]
    missing = labels.isna()
    if missing.any():
        unlabeled = [str(s) for s in phenotype_data.index[missing.values]]
        raise ValidationError(
            f"{len(unlabeled)} sample(s) have no value in column '{cell_type_column}': "
            f"{', '.join(unlabeled)}",
            field="column.cell_type",
            suggestions=["Label every sample with a cell type or drop unlabeled samples"],
        )

    index = partition_labels(labels.tolist())
    logger.info(f"Identified {len(index)} cell types in column '{cell_type_column}'")
    return index


def aggregate_signatures(
    exprs: pd.DataFrame,
    index: CellTypeIndex,
    method: Union[str, AggregationMethod] = AggregationMethod.MEAN,
) -> pd.DataFrame:
    """
    Collapse each cell type's replicate columns into one signature.

    Args:
        exprs: Expression matrix (genes x samples)
        index: Cell type to column positions, as returned by index_cell_types
        method: "sum" or "mean"

    Returns:
        DataFrame (genes x cell types), columns in ``index`` order

    Raises:
        ConfigurationError: If method is not supported
        ValidationError: If an index entry is empty or out of range
    """
    method = parse_aggregation_method(method)
    values = np.asarray(exprs.values, dtype=float)
    n_columns = values.shape[1]

    signatures = np.empty((values.shape[0], len(index)), dtype=float)
    for j, (cell_type, positions) in enumerate(index.items()):
        if not positions:
            raise ValidationError(f"Cell type '{cell_type}' has no samples", field="index")
        if min(positions) < 0 or max(positions) >= n_columns:
            raise ValidationError(
                f"Cell type '{cell_type}' references columns outside a matrix "
                f"with {n_columns} samples",
                field="index",
            )

        block = values[:, positions]
        if method == AggregationMethod.SUM:
            signatures[:, j] = block.sum(axis=1)
        else:
            signatures[:, j] = block.mean(axis=1)

    logger.info(f"Aggregated {n_columns} samples into {len(index)} signatures ({method.value})")

    return pd.DataFrame(signatures, index=exprs.index, columns=list(index.keys()))
