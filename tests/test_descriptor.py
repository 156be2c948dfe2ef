"""
Tests for dataset descriptor generation.
"""

import logging

import yaml

from synthetic_mixtures.config import MixtureConfig
from synthetic_mixtures.descriptor import (
    build_descriptor,
    dataset_title,
    new_dataset_id,
    write_descriptor,
)


class TestDatasetIds:
    """Tests for dataset identifiers and titles."""

    def test_id_prefix(self):
        """Test ids start with the configured prefix."""
        config = MixtureConfig()
        config.prefix.base = "SYN"

        assert new_dataset_id(config).startswith("SYN_")

    def test_ids_unique(self):
        """Test every call creates a new id."""
        config = MixtureConfig()

        assert new_dataset_id(config) != new_dataset_id(config)

    def test_title_substitution(self):
        """Test N and BASE_ESET_ID are filled in."""
        config = MixtureConfig()
        config.dataset.samples = 250
        config.dataset.base_eset_id = "GSE1234"

        assert dataset_title(config) == "Synthetic dataset of 250 samples. Derived from GSE1234"

    def test_title_without_placeholders(self):
        """Test templates without placeholders are kept verbatim."""
        config = MixtureConfig()
        config.dataset.name_template = "Benchmark mixtures"

        assert dataset_title(config) == "Benchmark mixtures"


class TestBuildDescriptor:
    """Tests for build_descriptor."""

    def test_structure(self):
        """Test each entry has id, title, series and ontology."""
        config = MixtureConfig()

        descriptor = build_descriptor(config, ["SD_a"])

        entry = descriptor["SD_a"]
        assert entry["id"] == "SD_a"
        assert entry["series"] == [{"id": "SD_a", "platform": "synthetic", "type": "expression"}]
        assert entry["ontology"] == {"id": "CL", "name": "cell type"}

    def test_multiple_datasets(self):
        """Test one entry per dataset id."""
        descriptor = build_descriptor(MixtureConfig(), ["SD_a", "SD_b"])

        assert list(descriptor) == ["SD_a", "SD_b"]

    def test_generates_id_when_missing(self):
        """Test a fresh id is created when none are given."""
        descriptor = build_descriptor(MixtureConfig())

        assert len(descriptor) == 1
        assert next(iter(descriptor)).startswith("SD_")


class TestWriteDescriptor:
    """Tests for write_descriptor."""

    def test_write_and_read(self, tmp_path):
        """Test the descriptor is written as YAML."""
        descriptor = build_descriptor(MixtureConfig(), ["SD_a"])
        path = write_descriptor(descriptor, str(tmp_path / "nested" / "datasets.yaml"))

        with open(path) as f:
            loaded = yaml.safe_load(f)
        assert loaded == descriptor

    def test_overwrite_warns(self, tmp_path, caplog):
        """Test overwriting an existing descriptor logs a warning."""
        path = tmp_path / "datasets.yaml"
        path.write_text("old: true\n")

        with caplog.at_level(logging.WARNING):
            write_descriptor(build_descriptor(MixtureConfig(), ["SD_a"]), str(path))

        assert "Overwriting" in caplog.text
