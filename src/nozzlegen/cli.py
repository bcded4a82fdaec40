"""
Command-line interface for nozzlegen.

Commands:
- cases: List the preset cases
- build: Run the pipeline for a preset or a YAML case file

Usage:
    nozzlegen cases
    nozzlegen build base_case
    nozzlegen build --config my_case.yaml -o nozzle.step
"""

from pathlib import Path

import click

from . import __version__
from .cases import Case, case_parameters
from .config import CaseConfig
from .errors import NozzleError
from .nozzle import NozzlePipeline, NozzleResult


def _format_tuple(values) -> str:
    """Format a tuple of floats for display."""
    return f"({values[0]:.3f}, {values[1]:.3f}, {values[2]:.3f})"


@click.group()
@click.version_option(version=__version__)
def cli():
    """nozzlegen - pressure vessel nozzle geometry."""
    pass


@cli.command()
def cases():
    """List the preset cases."""
    for case in Case:
        click.echo(case.value)


@cli.command()
@click.argument("case", required=False)
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="YAML case file (may name a preset to start from).",
)
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    help="Write all solids to this STEP file.",
)
def build(case: str | None, config_path: Path | None, output: Path | None):
    """
    Build the nozzle for CASE or for a YAML case file.
    """
    if case is None and config_path is None:
        raise click.UsageError("Give a CASE name or --config FILE.")

    try:
        if config_path is not None:
            config = CaseConfig.from_yaml(config_path)
            if case is not None:
                config.preset = case
            params = config.to_parameters()
        else:
            params = case_parameters(case)
        result = NozzlePipeline().run(params)
    except NozzleError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None

    _print_summary(result)

    if output is not None:
        result.export(output)
        click.echo(f"\nSTEP written to: {output}")


def _print_summary(result: NozzleResult) -> None:
    click.echo("-" * 50)
    click.echo(f"Shell volume: {result.shell.Volume():.4f}")
    click.echo(f"Neck volume:  {result.neck.Volume():.4f}")
    click.echo(f"Pad volume:   {result.pad.Volume():.4f}")
    click.echo(f"Welds:        {len(result.welds)}")
    if result.center is not None:
        click.echo(f"Cut center:   {_format_tuple(result.center)}")
    click.echo("-" * 50)


if __name__ == "__main__":
    cli()
