"""
Expression sets: a genes x samples matrix with its sample and feature metadata.

Provides the in-memory container consumed and produced by the mixture
pipeline, plain CSV/TSV loading and saving for command-line use, and a
random generator for smoke tests without real data.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from .errors import ValidationError
from .utils.seed import RandomSource, ensure_rng

logger = logging.getLogger(__name__)


@dataclass
class ExpressionSet:
    """
    Expression matrix with per-sample and per-gene metadata.

    Attributes:
        exprs: Expression values (genes x samples)
        phenotype_data: Sample metadata, one row per column of ``exprs``
        feature_data: Optional gene metadata, one row per row of ``exprs``
        experiment_data: Free-form experiment description
        annotation: Free-form annotation (platform, organism, ...)
    """

    exprs: pd.DataFrame
    phenotype_data: pd.DataFrame
    feature_data: Optional[pd.DataFrame] = None
    experiment_data: Dict[str, Any] = field(default_factory=dict)
    annotation: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        n_genes, n_samples = self.exprs.shape
        if len(self.phenotype_data) != n_samples:
            raise ValidationError(
                f"Phenotype data has {len(self.phenotype_data)} rows "
                f"but the matrix has {n_samples} samples",
                field="phenotype_data",
            )
        if self.feature_data is not None and len(self.feature_data) != n_genes:
            raise ValidationError(
                f"Feature data has {len(self.feature_data)} rows "
                f"but the matrix has {n_genes} genes",
                field="feature_data",
            )

    @property
    def shape(self):
        return self.exprs.shape

    @property
    def sample_names(self):
        return list(self.exprs.columns)

    @property
    def feature_names(self):
        return list(self.exprs.index)


def _separator(path: Path) -> str:
    return "\t" if path.suffix in (".tsv", ".txt") else ","


def _read_table(path: str, kind: str) -> pd.DataFrame:
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"{kind.capitalize()} file not found: {path}")

    df = pd.read_csv(file_path, sep=_separator(file_path), index_col=0)
    if df.empty and kind == "expression":
        raise ValidationError(f"Expression file is empty: {path}", field="expression")
    df.index = df.index.astype(str)
    return df


def load_expression_set(
    expression_path: str,
    phenotype_path: str,
    feature_path: Optional[str] = None,
) -> ExpressionSet:
    """
    Load an expression set from delimited text files.

    The expression file holds genes as rows with gene ids in the first
    column; the phenotype file holds one row per sample with sample ids in
    the first column. Phenotype rows are reordered to the matrix columns.

    Args:
        expression_path: CSV/TSV expression matrix (genes x samples)
        phenotype_path: CSV/TSV sample metadata
        feature_path: Optional CSV/TSV gene metadata (gene ids first)

    Returns:
        ExpressionSet

    Raises:
        FileNotFoundError: If a file does not exist
        ValidationError: If samples or genes cannot be matched up
    """
    exprs = _read_table(expression_path, "expression")
    exprs.columns = exprs.columns.astype(str)
    exprs = exprs.apply(pd.to_numeric, errors="coerce")
    n_missing = int(exprs.isna().sum().sum())
    if n_missing:
        logger.warning(f"[Expression] {n_missing} non-numeric values replaced with 0")
        exprs = exprs.fillna(0.0)

    pdata = _read_table(phenotype_path, "phenotype")
    missing = [s for s in exprs.columns if s not in pdata.index]
    if missing:
        raise ValidationError(
            f"{len(missing)} samples have no phenotype row: {', '.join(missing[:5])}",
            field="phenotype_data",
            suggestions=[
                "Put sample ids in the first column of the phenotype file",
                "Check the ids match the expression file's column headers",
            ],
        )
    pdata = pdata.loc[list(exprs.columns)]

    fdata = None
    if feature_path:
        fdata = _read_table(feature_path, "feature")
        absent = [g for g in exprs.index if g not in fdata.index]
        if absent:
            raise ValidationError(
                f"{len(absent)} genes have no feature row: {', '.join(absent[:5])}",
                field="feature_data",
            )
        fdata = fdata.loc[list(exprs.index)]

    logger.info(
        f"[Expression] Loaded {exprs.shape[0]} genes x {exprs.shape[1]} samples "
        f"from {expression_path}"
    )

    return ExpressionSet(
        exprs=exprs,
        phenotype_data=pdata,
        feature_data=fdata,
        experiment_data={"source": str(expression_path)},
    )


def save_expression_set(
    eset: ExpressionSet,
    directory: str,
    feature_id_column: str = "feature id",
) -> Dict[str, Path]:
    """
    Write an expression set as CSV files into ``directory``.

    Returns:
        Mapping of table name to written path
    """
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        "expression": out_dir / "expression.csv",
        "phenotypes": out_dir / "phenotypes.csv",
    }
    for path in paths.values():
        if path.exists():
            logger.warning(f"Overwriting existing file: {path}")

    eset.exprs.to_csv(paths["expression"], index_label=feature_id_column)
    eset.phenotype_data.to_csv(paths["phenotypes"], index_label="sample")

    if eset.feature_data is not None:
        paths["features"] = out_dir / "features.csv"
        eset.feature_data.to_csv(paths["features"], index_label=feature_id_column)

    logger.info(f"Saved expression set to: {out_dir}")
    return paths


def generate_random_expression_set(
    n_genes: int,
    n_samples: int,
    cell_type_column: str = "cell type",
    rng: RandomSource = None,
) -> ExpressionSet:
    """
    Generate an expression set with standard-normal values.

    Every sample gets its own cell type (``cell_type_1`` ... ``cell_type_n``),
    so the set can be fed straight into the mixture pipeline.
    """
    for field_name, value in (("dataset.base_genes", n_genes), ("dataset.base_samples", n_samples)):
        if value < 1:
            raise ValidationError(
                f"Random expression set needs at least one gene and one sample, "
                f"got {n_genes} x {n_samples}",
                field=field_name,
            )

    rng = ensure_rng(rng)
    genes = [f"gene_{i}" for i in range(1, n_genes + 1)]
    samples = [f"sample_{i}" for i in range(1, n_samples + 1)]

    exprs = pd.DataFrame(rng.randn(n_genes, n_samples), index=genes, columns=samples)
    pdata = pd.DataFrame(
        {cell_type_column: [f"cell_type_{i}" for i in range(1, n_samples + 1)]},
        index=samples,
    )
    fdata = pd.DataFrame({"feature_name": genes}, index=genes)

    logger.debug(f"Generated random expression set: {n_genes} genes x {n_samples} samples")

    return ExpressionSet(
        exprs=exprs,
        phenotype_data=pdata,
        feature_data=fdata,
        experiment_data={"source": "random"},
    )
