"""
Synthetic Expression Mixtures

Generates labeled synthetic bulk-expression datasets by mixing per-cell-type
reference signatures with randomly sampled proportions, for benchmarking
deconvolution algorithms.
"""

__version__ = "0.1.0"

from .aggregation import CellTypeIndex, aggregate_signatures, index_cell_types, partition_labels
from .config import (
    AggregationMethod,
    ColumnConfig,
    DatasetConfig,
    FileConfig,
    FormatConfig,
    MixtureConfig,
    NoiseConfig,
    NoiseMethod,
    OntologyConfig,
    PrefixConfig,
    load_config,
    validate_config,
)
from .descriptor import build_descriptor, write_descriptor
from .errors import ConfigurationError, ValidationError
from .expression import (
    ExpressionSet,
    generate_random_expression_set,
    load_expression_set,
    save_expression_set,
)
from .labels import compose_label, compose_labels
from .pipeline import (
    MixturePipeline,
    SyntheticExpressionSet,
    generate_random_mixtures,
    generate_synthetic_mixtures,
)
from .proportions import sample_proportions
from .synthesis import synthesize_mixtures

__all__ = [
    "__version__",
    # Errors
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "MixtureConfig",
    "FileConfig",
    "FormatConfig",
    "DatasetConfig",
    "OntologyConfig",
    "PrefixConfig",
    "ColumnConfig",
    "NoiseConfig",
    "AggregationMethod",
    "NoiseMethod",
    "load_config",
    "validate_config",
    # Expression sets
    "ExpressionSet",
    "load_expression_set",
    "save_expression_set",
    "generate_random_expression_set",
    # Mixture generation
    "sample_proportions",
    "CellTypeIndex",
    "partition_labels",
    "index_cell_types",
    "aggregate_signatures",
    "synthesize_mixtures",
    "compose_label",
    "compose_labels",
    "SyntheticExpressionSet",
    "generate_synthetic_mixtures",
    "generate_random_mixtures",
    "MixturePipeline",
    # Descriptor
    "build_descriptor",
    "write_descriptor",
]
