"""
Configuration loading and validation.

The configuration is a tree of dataclasses mirroring the YAML layout. Every
field has a default, so a missing file or a partial file is always usable;
unknown keys are reported and ignored.
"""

import logging
import numbers
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class AggregationMethod(Enum):
    """Reduction used to collapse a cell type's replicate samples."""

    SUM = "sum"
    MEAN = "mean"


class NoiseMethod(Enum):
    """Distribution of the additive per-gene noise."""

    NORMAL = "normal"
    UNIFORM = "uniform"


def _parse_enum(enum_cls, value, field_name: str):
    """Coerce a string (or enum member) to ``enum_cls``, raising ConfigurationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = [m.value for m in enum_cls]
        raise ConfigurationError(
            f"Unsupported {field_name}: {value!r}",
            field=field_name,
            suggestions=[f"Use one of: {', '.join(valid)}"],
        ) from None


def parse_aggregation_method(value: Union[str, AggregationMethod]) -> AggregationMethod:
    return _parse_enum(AggregationMethod, value, "expression_method")


def parse_noise_method(value: Union[str, NoiseMethod]) -> NoiseMethod:
    return _parse_enum(NoiseMethod, value, "noise.method")


@dataclass
class FileConfig:
    """Output locations."""

    output_dir: str = "/data/synthetic"
    datasets_descriptor_file: str = "datasets.yaml"
    generate_datasets_descriptor_file: bool = True


@dataclass
class FormatConfig:
    """Separators used when rendering composition labels."""

    value_unit: str = "%"
    cell_separator: str = ";"
    value_separator: str = "="


@dataclass
class DatasetConfig:
    """
    Size and naming of the generated datasets.

    Attributes:
        name_template: Dataset title; ``N`` and ``BASE_ESET_ID`` are substituted
        base_eset_id: Identifier of the base expression set
        samples: Number of synthetic samples per dataset
        base_genes: Genes in the random base set (no input data)
        base_samples: Samples in the random base set (no input data)
    """

    name_template: str = "Synthetic dataset of N samples. Derived from BASE_ESET_ID"
    base_eset_id: str = ""
    samples: int = 1000
    base_genes: int = 100
    base_samples: int = 10


@dataclass
class OntologyConfig:
    """Ontology describing the mixed labels, written into the descriptor."""

    ontology_id: str = "CL"
    ontology_name: str = "cell type"


@dataclass
class PrefixConfig:
    """Identifier prefixes for datasets and synthetic samples."""

    base: str = "SD"
    sample_id: str = "proportion_"


@dataclass
class ColumnConfig:
    """Names of metadata columns read from and written to phenotype tables."""

    cell_type: str = "cell type"
    proportion: str = "proportion"
    feature_id: str = "feature id"


@dataclass
class NoiseConfig:
    """Additive noise settings; ``noise`` toggles it on or off."""

    noise: bool = True
    method: str = "normal"
    mean: float = 0.0
    std: float = 0.1
    min: float = 0.0
    max: float = 1.0


_SECTIONS = {
    "file": FileConfig,
    "format": FormatConfig,
    "dataset": DatasetConfig,
    "ontology": OntologyConfig,
    "prefix": PrefixConfig,
    "column": ColumnConfig,
    "noise": NoiseConfig,
}


def _known_keys(cls) -> List[str]:
    return [f.name for f in fields(cls)]


def _warn_unknown(data: Dict[str, Any], cls, section: str) -> None:
    known = set(_known_keys(cls))
    for key in data:
        if key not in known:
            where = f"{section}.{key}" if section else key
            logger.warning(f"[Config] Ignoring unknown option: {where}")


def _section_from_dict(cls, data: Optional[Dict[str, Any]], section: str):
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config section '{section}' must be a mapping, got {type(data).__name__}",
            field=section,
            suggestions=[f"Write '{section}:' followed by indented key: value pairs"],
        )
    _warn_unknown(data, cls, section)
    known = set(_known_keys(cls))
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class MixtureConfig:
    """Configuration for synthetic mixture generation."""

    seed: Optional[int] = 42
    verbose: bool = True
    num_datasets: int = 1
    expression_method: str = "mean"
    file: FileConfig = field(default_factory=FileConfig)
    format: FormatConfig = field(default_factory=FormatConfig)
    dataset: DatasetConfig = field(default_factory=DatasetConfig)
    ontology: OntologyConfig = field(default_factory=OntologyConfig)
    prefix: PrefixConfig = field(default_factory=PrefixConfig)
    column: ColumnConfig = field(default_factory=ColumnConfig)
    noise: NoiseConfig = field(default_factory=NoiseConfig)

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> "MixtureConfig":
        """Build a configuration from a (possibly partial) nested dictionary."""
        config_dict = config_dict or {}
        _warn_unknown(config_dict, cls, "")

        kwargs: Dict[str, Any] = {}
        for name in ("seed", "verbose", "num_datasets", "expression_method"):
            if name in config_dict:
                kwargs[name] = config_dict[name]
        for section, section_cls in _SECTIONS.items():
            kwargs[section] = _section_from_dict(section_cls, config_dict.get(section), section)

        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_path: Optional[str]) -> "MixtureConfig":
        """Load configuration from a YAML file; an empty path yields the defaults."""
        if not yaml_path:
            logger.debug("No configuration file provided. Using default configuration.")
            return cls()
        return cls.from_dict(load_config(yaml_path))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ConfigurationError: If the file is empty or not a mapping
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ConfigurationError(
            "Config file is empty or invalid",
            suggestions=["Check the file contains valid YAML", "Ensure proper indentation"],
        )
    if not isinstance(config, dict):
        raise ConfigurationError(
            "Config file must contain a mapping at the top level",
            suggestions=["Use 'key: value' pairs, e.g. expression_method: mean"],
        )

    return config


def validate_config(config: MixtureConfig) -> bool:
    """
    Validate a mixture configuration.

    Args:
        config: MixtureConfig to check

    Returns:
        True if valid

    Raises:
        ConfigurationError: If configuration is invalid
    """
    parse_aggregation_method(config.expression_method)
    parse_noise_method(config.noise.method)

    seed = config.seed
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ConfigurationError(
            f"Invalid seed value: {seed} (must be an integer)",
            field="seed",
            suggestions=["Use an integer value like: seed: 42", "Use seed: null for a random run"],
        )

    for field_name, value in (
        ("num_datasets", config.num_datasets),
        ("dataset.samples", config.dataset.samples),
        ("dataset.base_genes", config.dataset.base_genes),
        ("dataset.base_samples", config.dataset.base_samples),
    ):
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise ConfigurationError(
                f"Invalid {field_name}: {value} (must be a positive integer)",
                field=field_name,
                suggestions=[f"Use a positive integer, e.g., {field_name.split('.')[-1]}: 100"],
            )

    if not config.column.cell_type:
        raise ConfigurationError(
            "column.cell_type must name the phenotype column holding cell types",
            field="column.cell_type",
            suggestions=["Set it to the label column of your phenotype table, e.g. 'cell type'"],
        )

    validate_noise_config(config.noise)
    return True


def validate_noise_config(noise: NoiseConfig) -> None:
    """Validate the distribution parameters of the noise section."""
    parse_noise_method(noise.method)

    for name in ("mean", "std", "min", "max"):
        value = getattr(noise, name)
        if not isinstance(value, numbers.Real) or isinstance(value, bool):
            raise ConfigurationError(
                f"Invalid noise.{name}: {value!r} (must be a number)",
                field=f"noise.{name}",
                suggestions=[f"Use a numeric value, e.g., {name}: 0.1"],
            )

    if noise.std < 0:
        raise ConfigurationError(
            f"Invalid noise.std: {noise.std} (must be non-negative)",
            field="noise.std",
            suggestions=["Use a non-negative number, e.g., std: 0.1"],
        )
    if noise.min > noise.max:
        raise ConfigurationError(
            f"noise.min ({noise.min}) must be <= noise.max ({noise.max})",
            field="noise.min",
            suggestions=["Swap the bounds or widen the interval"],
        )
