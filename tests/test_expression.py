"""
Tests for expression set containers, loading and saving.
"""

import numpy as np
import pandas as pd
import pytest

from synthetic_mixtures.errors import ValidationError
from synthetic_mixtures.expression import (
    ExpressionSet,
    generate_random_expression_set,
    load_expression_set,
    save_expression_set,
)


class TestExpressionSet:
    """Tests for the ExpressionSet container."""

    def test_shape_and_names(self, base_eset):
        """Test convenience accessors."""
        assert base_eset.shape == (5, 5)
        assert base_eset.sample_names == ["S1", "S2", "S3", "S4", "S5"]
        assert base_eset.feature_names[0] == "GENE1"

    def test_label_length_mismatch(self, base_exprs, base_phenotypes):
        """Test phenotype rows must match matrix columns."""
        with pytest.raises(ValidationError, match="Phenotype data"):
            ExpressionSet(exprs=base_exprs, phenotype_data=base_phenotypes.iloc[:3])

    def test_feature_length_mismatch(self, base_exprs, base_phenotypes):
        """Test feature rows must match matrix rows."""
        fdata = pd.DataFrame({"symbol": ["a", "b"]}, index=["GENE1", "GENE2"])

        with pytest.raises(ValidationError, match="Feature data"):
            ExpressionSet(exprs=base_exprs, phenotype_data=base_phenotypes, feature_data=fdata)


class TestLoadExpressionSet:
    """Tests for load_expression_set."""

    def test_load_csv(self, expression_files, base_exprs):
        """Test loading genes-as-rows CSV with phenotypes."""
        expr_path, pheno_path = expression_files

        eset = load_expression_set(str(expr_path), str(pheno_path))

        assert eset.shape == (5, 5)
        np.testing.assert_allclose(eset.exprs.values, base_exprs.values)

    def test_phenotypes_reordered(self, expression_files):
        """Test phenotype rows follow the matrix column order."""
        expr_path, pheno_path = expression_files

        eset = load_expression_set(str(expr_path), str(pheno_path))

        assert list(eset.phenotype_data.index) == list(eset.exprs.columns)
        assert eset.phenotype_data.loc["S3", "cell type"] == "NK cells"

    def test_load_tsv(self, tmp_path, base_exprs, base_phenotypes):
        """Test tab-separated files are detected by extension."""
        expr_path = tmp_path / "reference.tsv"
        pheno_path = tmp_path / "phenotypes.tsv"
        base_exprs.to_csv(expr_path, sep="\t")
        base_phenotypes.to_csv(pheno_path, sep="\t")

        eset = load_expression_set(str(expr_path), str(pheno_path))

        assert eset.shape == (5, 5)

    def test_load_features(self, tmp_path, expression_files, base_exprs):
        """Test optional feature metadata is aligned to genes."""
        expr_path, pheno_path = expression_files
        feature_path = tmp_path / "features.csv"
        fdata = pd.DataFrame({"symbol": list("edcba")}, index=list(base_exprs.index)[::-1])
        fdata.to_csv(feature_path)

        eset = load_expression_set(str(expr_path), str(pheno_path), str(feature_path))

        assert list(eset.feature_data.index) == list(base_exprs.index)
        assert eset.feature_data.loc["GENE1", "symbol"] == "a"

    def test_missing_file(self, tmp_path, expression_files):
        """Test a missing expression file raises FileNotFoundError."""
        _, pheno_path = expression_files

        with pytest.raises(FileNotFoundError):
            load_expression_set(str(tmp_path / "missing.csv"), str(pheno_path))

    def test_sample_without_phenotype(self, tmp_path, expression_files, base_phenotypes):
        """Test samples missing from the phenotype table are rejected."""
        expr_path, _ = expression_files
        pheno_path = tmp_path / "partial.csv"
        base_phenotypes.iloc[:3].to_csv(pheno_path)

        with pytest.raises(ValidationError, match="no phenotype row"):
            load_expression_set(str(expr_path), str(pheno_path))


class TestSaveExpressionSet:
    """Tests for save_expression_set."""

    def test_writes_tables(self, tmp_path, base_eset):
        """Test expression, phenotype and feature tables are written."""
        paths = save_expression_set(base_eset, str(tmp_path / "out"))

        assert paths["expression"].exists()
        assert paths["phenotypes"].exists()
        assert paths["features"].exists()

    def test_roundtrip_through_loader(self, tmp_path, base_eset):
        """Test saved files load back into an equivalent set."""
        paths = save_expression_set(base_eset, str(tmp_path / "out"))

        eset = load_expression_set(
            str(paths["expression"]), str(paths["phenotypes"]), str(paths["features"])
        )

        np.testing.assert_allclose(eset.exprs.values, base_eset.exprs.values)
        assert list(eset.phenotype_data["cell type"]) == list(
            base_eset.phenotype_data["cell type"]
        )

    def test_no_feature_file_without_features(self, tmp_path, base_exprs, base_phenotypes):
        """Test features.csv is skipped when there is no feature data."""
        eset = ExpressionSet(exprs=base_exprs, phenotype_data=base_phenotypes)

        paths = save_expression_set(eset, str(tmp_path / "out"))

        assert "features" not in paths


class TestRandomExpressionSet:
    """Tests for generate_random_expression_set."""

    def test_shape_and_names(self):
        """Test sequential gene, sample and cell type names."""
        eset = generate_random_expression_set(6, 3, rng=0)

        assert eset.shape == (6, 3)
        assert eset.feature_names[0] == "gene_1"
        assert eset.sample_names == ["sample_1", "sample_2", "sample_3"]
        assert list(eset.phenotype_data["cell type"]) == [
            "cell_type_1",
            "cell_type_2",
            "cell_type_3",
        ]

    def test_custom_label_column(self):
        """Test the cell type column name is configurable."""
        eset = generate_random_expression_set(2, 2, cell_type_column="celltype", rng=0)

        assert "celltype" in eset.phenotype_data.columns

    def test_reproducible(self):
        """Test the same seed gives the same matrix."""
        a = generate_random_expression_set(4, 4, rng=9)
        b = generate_random_expression_set(4, 4, rng=9)

        np.testing.assert_array_equal(a.exprs.values, b.exprs.values)

    def test_invalid_size(self):
        """Test empty sizes are rejected."""
        with pytest.raises(ValidationError):
            generate_random_expression_set(0, 3)

    def test_invalid_size_names_field(self):
        """Test the error names the dimension that is empty."""
        with pytest.raises(ValidationError) as excinfo:
            generate_random_expression_set(3, 0)

        assert excinfo.value.field == "dataset.base_samples"
