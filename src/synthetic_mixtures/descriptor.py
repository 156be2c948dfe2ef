"""
Dataset descriptor (manifest) for generated synthetic datasets.
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import MixtureConfig

logger = logging.getLogger(__name__)


def new_dataset_id(config: MixtureConfig) -> str:
    return f"{config.prefix.base}_{uuid.uuid4()}"


def dataset_title(config: MixtureConfig) -> str:
    """Fill ``N`` and ``BASE_ESET_ID`` in the configured name template."""
    title = re.sub(r"\bN\b", str(config.dataset.samples), config.dataset.name_template)
    return title.replace("BASE_ESET_ID", config.dataset.base_eset_id)


def build_descriptor(
    config: MixtureConfig, dataset_ids: Optional[List[str]] = None
) -> Dict[str, Dict[str, Any]]:
    """
    Describe generated datasets.

    Args:
        config: Configuration the datasets were generated with
        dataset_ids: Ids of the datasets; one new id is created if omitted

    Returns:
        Mapping of dataset id to its title, id, series and ontology
    """
    if not dataset_ids:
        dataset_ids = [new_dataset_id(config)]

    title = dataset_title(config)
    descriptor = {}
    for dataset_id in dataset_ids:
        descriptor[dataset_id] = {
            "id": dataset_id,
            "title": title,
            "series": [{"id": dataset_id, "platform": "synthetic", "type": "expression"}],
            "ontology": {
                "id": config.ontology.ontology_id,
                "name": config.ontology.ontology_name,
            },
        }
    return descriptor


def write_descriptor(descriptor: Dict[str, Dict[str, Any]], path: str) -> Path:
    """Write a descriptor as YAML, creating parent directories."""
    out_path = Path(path)
    if out_path.exists():
        logger.warning(f"Overwriting existing descriptor file: {out_path}")
    else:
        out_path.parent.mkdir(parents=True, exist_ok=True)

    with open(out_path, "w") as f:
        yaml.dump(descriptor, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved descriptor to: {out_path}")
    return out_path
