"""
Command-line interface for Synthetic Expression Mixtures.

Usage:
    python -m synthetic_mixtures --config configs/example.yaml -e exprs.csv -p pheno.csv
    synthetic-mixtures --samples 50 --output outputs/random_run
"""

import sys
from typing import Optional

import click

from . import __version__
from .config import MixtureConfig
from .errors import ConfigurationError, ValidationError
from .pipeline import MixturePipeline


@click.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    default=None,
    help="Path to YAML configuration file (defaults are used if omitted)",
)
@click.option(
    "--expression",
    "-e",
    type=click.Path(exists=True),
    default=None,
    help="Base expression matrix (CSV/TSV, genes as rows). Random data if omitted",
)
@click.option(
    "--phenotypes",
    "-p",
    type=click.Path(exists=True),
    default=None,
    help="Sample metadata with the cell type column (CSV/TSV)",
)
@click.option(
    "--features",
    "-f",
    type=click.Path(exists=True),
    default=None,
    help="Optional gene metadata (CSV/TSV)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Override output directory from config",
)
@click.option(
    "--samples",
    "-n",
    type=int,
    default=None,
    help="Override number of synthetic samples from config",
)
@click.option(
    "--seed",
    "-s",
    type=int,
    default=None,
    help="Override random seed from config",
)
@click.option(
    "--verbose/--quiet",
    "-v/-q",
    default=True,
    help="Enable/disable verbose output",
)
@click.version_option(version=__version__, prog_name="synthetic-expression-mixtures")
def main(
    config: Optional[str],
    expression: Optional[str],
    phenotypes: Optional[str],
    features: Optional[str],
    output: Optional[str],
    samples: Optional[int],
    seed: Optional[int],
    verbose: bool,
) -> None:
    """
    Synthetic Expression Mixtures - Deconvolution Benchmark Generator

    Mix per-cell-type expression signatures with random proportions into
    labeled synthetic bulk samples.

    Example:
        python -m synthetic_mixtures -c config.yaml -e exprs.csv -p pheno.csv
    """
    click.echo(f"Synthetic Expression Mixtures v{__version__}")
    click.echo("=" * 50)

    try:
        if config:
            click.echo(f"Loading config: {config}")
        mixture_config = MixtureConfig.from_yaml(config)

        # Apply overrides
        if output:
            mixture_config.file.output_dir = output
        if samples is not None:
            mixture_config.dataset.samples = samples
        if seed is not None:
            mixture_config.seed = seed
        mixture_config.verbose = verbose

        pipeline = MixturePipeline(
            mixture_config,
            expression_path=expression,
            phenotype_path=phenotypes,
            feature_path=features,
        )
        results = pipeline.run()

        click.echo("")
        click.echo(f"Generated {len(results)} dataset(s) successfully!")
        click.echo(f"Results: {mixture_config.file.output_dir}")

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except (ConfigurationError, ValidationError) as e:
        click.echo(f"Invalid input: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Pipeline failed: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
