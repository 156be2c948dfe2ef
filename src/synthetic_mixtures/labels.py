"""
Composition labels for synthetic samples.

A label lists every cell type with its fraction, e.g. ``B cells=0.25%;T cells=0.75%``.
The unit suffix is appended to the raw fraction; values are not scaled to
percentages.
"""

from typing import Sequence

import pandas as pd

from .errors import ValidationError


def format_component(
    cell_type: str, proportion: float, value_separator: str = "=", value_unit: str = "%"
) -> str:
    return f"{cell_type}{value_separator}{float(proportion)}{value_unit}"


def compose_label(
    cell_types: Sequence[str],
    proportions: Sequence[float],
    cell_separator: str = ";",
    value_separator: str = "=",
    value_unit: str = "%",
) -> str:
    """
    Render one sample's composition.

    Args:
        cell_types: Cell type names, in table order
        proportions: Fractions, parallel to ``cell_types``
        cell_separator: Separator between cell types
        value_separator: Separator between a cell type and its value
        value_unit: Suffix appended to each value

    Returns:
        Label string

    Raises:
        ValidationError: If the two sequences differ in length
    """
    cell_types = list(cell_types)
    proportions = list(proportions)
    if len(cell_types) != len(proportions):
        raise ValidationError(
            f"Got {len(cell_types)} cell types but {len(proportions)} proportions",
            field="proportions",
        )

    return cell_separator.join(
        format_component(t, p, value_separator=value_separator, value_unit=value_unit)
        for t, p in zip(cell_types, proportions)
    )


def compose_labels(
    proportions: pd.DataFrame,
    cell_separator: str = ";",
    value_separator: str = "=",
    value_unit: str = "%",
) -> pd.Series:
    """One label per row of a proportion table, indexed like the table."""
    cell_types = [str(c) for c in proportions.columns]
    labels = [
        compose_label(
            cell_types,
            row,
            cell_separator=cell_separator,
            value_separator=value_separator,
            value_unit=value_unit,
        )
        for row in proportions.itertuples(index=False, name=None)
    ]
    return pd.Series(labels, index=proportions.index, name="composition")
