"""
Mixture Pipeline Orchestrator

Generates synthetic bulk-expression datasets from a labeled base expression
set: sample proportions, aggregate cell-type signatures, mix them with
additive noise, and label each synthetic sample with its composition.
"""

import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import yaml

from .aggregation import aggregate_signatures, index_cell_types
from .config import MixtureConfig, validate_config
from .descriptor import build_descriptor, new_dataset_id, write_descriptor
from .expression import (
    ExpressionSet,
    generate_random_expression_set,
    load_expression_set,
    save_expression_set,
)
from .labels import compose_labels
from .proportions import sample_proportions
from .synthesis import synthesize_mixtures
from .utils.seed import RandomSource, ensure_rng, get_rng

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "synthetic_mixtures"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class SyntheticExpressionSet:
    """
    A generated dataset with its ground truth.

    Attributes:
        exprs: Synthetic expression values (genes x synthetic samples)
        labels: Composition label per synthetic sample
        proportions: True fractions (synthetic samples x cell types)
        feature_data: Gene metadata passed through from the base set
        experiment_data: Experiment description passed through from the base set
        annotation: Annotation passed through from the base set
        dataset_id: Identifier used in the descriptor and output paths
    """

    exprs: pd.DataFrame
    labels: pd.Series
    proportions: pd.DataFrame
    feature_data: Optional[pd.DataFrame] = None
    experiment_data: Dict[str, Any] = field(default_factory=dict)
    annotation: Dict[str, Any] = field(default_factory=dict)
    dataset_id: str = ""

    @property
    def cell_types(self) -> List[str]:
        return [str(c) for c in self.proportions.columns]

    def phenotype_data(
        self, label_column: str = "cell type", proportion_prefix: str = "proportion"
    ) -> pd.DataFrame:
        """Per-sample table: the composition label and one column per cell-type fraction."""
        pdata = pd.DataFrame({label_column: self.labels}, index=self.exprs.columns)
        for cell_type in self.proportions.columns:
            pdata[f"{proportion_prefix} {cell_type}"] = self.proportions[cell_type]
        return pdata

    def to_expression_set(
        self, label_column: str = "cell type", proportion_prefix: str = "proportion"
    ) -> ExpressionSet:
        return ExpressionSet(
            exprs=self.exprs,
            phenotype_data=self.phenotype_data(label_column, proportion_prefix),
            feature_data=self.feature_data,
            experiment_data=self.experiment_data,
            annotation=self.annotation,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataset_id": self.dataset_id,
            "n_genes": int(self.exprs.shape[0]),
            "n_samples": int(self.exprs.shape[1]),
            "cell_types": self.cell_types,
            "mean_proportions": {
                str(k): round(float(v), 4) for k, v in self.proportions.mean().items()
            },
        }


def generate_synthetic_mixtures(
    base: ExpressionSet,
    config: MixtureConfig,
    rng: RandomSource = None,
    dataset_id: str = "",
    show_progress: bool = False,
) -> SyntheticExpressionSet:
    """
    Generate one synthetic mixture dataset from a labeled base set.

    Steps:
    1. Identify the cell types (and their count) in ``column.cell_type``
    2. Sample ``dataset.samples`` proportion vectors over those cell types
    3. Aggregate each cell type's samples with ``expression_method``
    4. Mix signatures by proportion and add noise
    5. Compose one label per synthetic sample

    Args:
        base: Labeled base expression set (left unmodified)
        config: MixtureConfig
        rng: RandomState, seed or None; falls back to ``config.seed``
        dataset_id: Identifier stored on the result
        show_progress: Show a progress bar while mixing

    Returns:
        SyntheticExpressionSet

    Raises:
        ConfigurationError: For unsupported methods or a missing label column
        ValidationError: If intermediate tables do not line up
    """
    validate_config(config)
    rng = ensure_rng(config.seed if rng is None else rng)

    index = index_cell_types(base.phenotype_data, config.column.cell_type)
    cell_types = list(index.keys())

    proportions = sample_proportions(
        len(cell_types),
        config.dataset.samples,
        rng=rng,
        cell_types=cell_types,
        id_prefix=config.prefix.sample_id,
    )

    signatures = aggregate_signatures(base.exprs, index, config.expression_method)

    exprs = synthesize_mixtures(
        signatures, proportions, noise=config.noise, rng=rng, show_progress=show_progress
    )

    labels = compose_labels(
        proportions,
        cell_separator=config.format.cell_separator,
        value_separator=config.format.value_separator,
        value_unit=config.format.value_unit,
    )

    return SyntheticExpressionSet(
        exprs=exprs,
        labels=labels,
        proportions=proportions,
        feature_data=base.feature_data,
        experiment_data=base.experiment_data,
        annotation=base.annotation,
        dataset_id=dataset_id,
    )


def generate_random_mixtures(
    config: MixtureConfig,
    rng: RandomSource = None,
    dataset_id: str = "",
) -> SyntheticExpressionSet:
    """Generate mixtures from a random base set sized by ``dataset.base_genes/base_samples``."""
    validate_config(config)
    rng = ensure_rng(config.seed if rng is None else rng)
    base = generate_random_expression_set(
        config.dataset.base_genes,
        config.dataset.base_samples,
        cell_type_column=config.column.cell_type,
        rng=rng,
    )
    return generate_synthetic_mixtures(base, config, rng=rng, dataset_id=dataset_id)


class MixturePipeline:
    """
    End-to-end generation of synthetic mixture datasets.

    1. Validates configuration and sets up output and logging
    2. Loads a base expression set (or generates a random one)
    3. Generates ``num_datasets`` synthetic datasets
    4. Writes each dataset, the descriptor and run metadata
    """

    def __init__(
        self,
        config: MixtureConfig,
        expression_path: Optional[str] = None,
        phenotype_path: Optional[str] = None,
        feature_path: Optional[str] = None,
    ):
        """Initialize the pipeline with configuration and optional input files."""
        self.config = config
        self.expression_path = expression_path
        self.phenotype_path = phenotype_path
        self.feature_path = feature_path
        self.output_dir = Path(config.file.output_dir)
        self.rng = None
        self._log_handler: Optional[logging.FileHandler] = None
        self._previous_level = logging.NOTSET

        self.base: Optional[ExpressionSet] = None
        self.results: List[SyntheticExpressionSet] = []
        self.descriptor: Dict[str, Dict[str, Any]] = {}

        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None

    def setup(self) -> None:
        """Validate configuration, set up output directory, logging and RNG."""
        validate_config(self.config)

        self.output_dir.mkdir(parents=True, exist_ok=True)

        level = logging.INFO if self.config.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )

        # One log file per run, detached again in teardown_logging()
        self.teardown_logging()
        self._log_handler = logging.FileHandler(self.output_dir / "pipeline.log")
        self._log_handler.setLevel(level)
        self._log_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        self._previous_level = package_logger.level
        package_logger.setLevel(level)
        package_logger.addHandler(self._log_handler)

        self.rng = get_rng(self.config.seed, "mixtures")
        if self.config.seed is not None:
            logger.info(f"Set random seed: {self.config.seed}")

        logger.info(f"Output directory: {self.output_dir}")

    def load_data(self) -> None:
        """Load the base expression set, or generate a random one without inputs."""
        if self.expression_path:
            if not self.phenotype_path:
                raise FileNotFoundError(
                    "A phenotype file is required with an expression file\n\n"
                    "Expected: CSV/TSV with sample ids in the first column and a "
                    f"'{self.config.column.cell_type}' column"
                )
            logger.info("Loading base expression set...")
            self.base = load_expression_set(
                self.expression_path, self.phenotype_path, self.feature_path
            )
        else:
            logger.info(
                f"No input data given; generating random base set "
                f"({self.config.dataset.base_genes} genes x "
                f"{self.config.dataset.base_samples} samples)"
            )
            self.base = generate_random_expression_set(
                self.config.dataset.base_genes,
                self.config.dataset.base_samples,
                cell_type_column=self.config.column.cell_type,
                rng=self.rng,
            )

    def generate(self) -> None:
        """Generate the configured number of synthetic datasets."""
        self.results = []
        for i in range(self.config.num_datasets):
            dataset_id = new_dataset_id(self.config)
            logger.info(
                f"Generating dataset {i + 1}/{self.config.num_datasets}: {dataset_id}"
            )
            result = generate_synthetic_mixtures(
                self.base,
                self.config,
                rng=self.rng,
                dataset_id=dataset_id,
                show_progress=self.config.verbose,
            )
            self.results.append(result)

        self.descriptor = build_descriptor(self.config, [r.dataset_id for r in self.results])

    def generate_outputs(self) -> None:
        """Write datasets, descriptor and run metadata."""
        logger.info("Generating outputs...")

        for result in self.results:
            eset = result.to_expression_set(
                label_column=self.config.column.cell_type,
                proportion_prefix=self.config.column.proportion,
            )
            save_expression_set(
                eset,
                str(self.output_dir / result.dataset_id),
                feature_id_column=self.config.column.feature_id,
            )

        if self.config.file.generate_datasets_descriptor_file:
            write_descriptor(
                self.descriptor, str(self.output_dir / self.config.file.datasets_descriptor_file)
            )

        self._save_metadata()
        logger.info(f"All outputs saved to: {self.output_dir}")

    def _save_metadata(self) -> None:
        """Save run metadata for reproducibility."""
        metadata = {
            "timestamp": datetime.now().isoformat(),
            "random_seed": self.config.seed,
            "input_files": {
                "expression": self.expression_path,
                "phenotypes": self.phenotype_path,
                "features": self.feature_path,
            },
            "datasets": [r.to_dict() for r in self.results],
            "config": self.config.to_dict(),
            "runtime_seconds": (
                (self.end_time - self.start_time).total_seconds()
                if self.end_time and self.start_time
                else None
            ),
        }

        yaml_path = self.output_dir / "run_metadata.yaml"
        with open(yaml_path, "w") as f:
            yaml.dump(metadata, f, default_flow_style=False)
        logger.info(f"Saved metadata: {yaml_path}")

    def run(self) -> List[SyntheticExpressionSet]:
        """Execute the full pipeline."""
        self.start_time = datetime.now()

        logger.info("=" * 60)
        logger.info("Synthetic Expression Mixtures")
        logger.info("=" * 60)

        try:
            self.setup()
            self.load_data()
            self.generate()

            self.end_time = datetime.now()
            self.generate_outputs()

            runtime = (self.end_time - self.start_time).total_seconds()
            logger.info("=" * 60)
            logger.info(f"Pipeline completed successfully in {runtime:.1f} seconds")
            logger.info(f"Outputs: {self.output_dir}")
            logger.info("=" * 60)

        except Exception as e:
            logger.error(f"Pipeline failed: {e}")
            raise

        finally:
            self.teardown_logging()

        return self.results

    def teardown_logging(self) -> None:
        """Detach and close this run's log file handler."""
        if self._log_handler is None:
            return
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        package_logger.removeHandler(self._log_handler)
        package_logger.setLevel(self._previous_level)
        self._log_handler.close()
        self._log_handler = None
