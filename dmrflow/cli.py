"""
Command-line interface for DMRFlow
"""

import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__, check_dependencies, get_info
from .config import Config, get_default_config, load_config, save_config
from .core import DMRAnalysis
from .utils import InvalidInput, setup_logging, validate_input_files


class CLIContext:
    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[Config] = None
        self.verbose: bool = False
        self.quiet: bool = False


@click.group()
@click.version_option(__version__)
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="Configuration file path"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode (minimal output)")
@click.pass_context
def main(ctx, config, verbose, quiet):
    """
    DMRFlow: differentially methylated region calling

    Rolls per-site differential methylation statistics up into contiguous
    regions, annotates them with overlapping features and exports CSV/BED.
    """
    cli_ctx = CLIContext()
    cli_ctx.verbose = verbose
    cli_ctx.quiet = quiet

    log_level = "DEBUG" if verbose else "WARNING" if quiet else "INFO"
    setup_logging(level=log_level)

    if config:
        cli_ctx.config_file = Path(config)
        try:
            cli_ctx.config = load_config(cli_ctx.config_file)
        except (ValueError, TypeError) as e:
            click.echo(f"Error loading configuration: {e}", err=True)
            sys.exit(1)

    ctx.obj = cli_ctx


@main.command()
def info():
    """Show DMRFlow package information"""

    info_data = get_info()

    click.echo("=" * 50)
    click.echo(f"DMRFlow v{info_data['version']}")
    click.echo("=" * 50)
    click.echo(f"Description: {info_data['description']}")
    click.echo(f"Python version: {info_data['python_version']}")
    click.echo()

    click.echo("Available modules:")
    for module in info_data["modules"]:
        click.echo(f"  - {module}")


@main.command()
@click.argument("output_file", type=click.Path())
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(output_file, force):
    """Write a default configuration file (YAML, or JSON for *.json)"""

    output_path = Path(output_file)

    if output_path.exists() and not force:
        if not click.confirm(f"File {output_path} already exists. Overwrite?"):
            click.echo("Configuration initialization cancelled.")
            return

    save_config(get_default_config(), output_path)

    click.echo(f"Configuration file created: {output_path}")
    click.echo("Edit this file to customize your analysis parameters.")


@main.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate_config(config_file):
    """Validate a DMRFlow configuration file"""

    from .config import validate_config as validate_config_func

    try:
        config = load_config(config_file)
    except (ValueError, TypeError) as e:
        click.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Configuration loaded successfully: {config_file}")

    issues = validate_config_func(config) + validate_input_files(config)

    if not issues:
        click.echo("✓ Configuration is valid")
    else:
        click.echo("Configuration issues found:")
        for issue in issues:
            click.echo(f"  ✗ {issue}")
        sys.exit(1)


@main.command()
@click.option(
    "--stats",
    type=click.Path(exists=True),
    help="Per-site statistics table (CSV/TSV)",
)
@click.option(
    "--manifest",
    type=click.Path(exists=True),
    help="Probe manifest with site coordinates",
)
@click.option(
    "--features",
    type=click.Path(exists=True),
    help="Feature annotation (BED or CSV/TSV)",
)
@click.option("--cutoff", type=float, help="Site significance cutoff in (0, 1]")
@click.option("--max-gap", type=int, help="Maximum gap between member sites (bp)")
@click.option("--min-sites", type=int, help="Minimum member sites per region")
@click.option("--min-effect", type=float, help="Minimum |aggregated effect|")
@click.option(
    "--score-method",
    type=click.Choice(["stouffer", "fisher", "min_p"]),
    help="Score combination rule",
)
@click.option("--jobs", "-j", type=int, help="Parallel workers across chromosomes")
@click.option("--output", "-o", type=click.Path(), help="Output directory")
@click.pass_context
def call(
    ctx,
    stats,
    manifest,
    features,
    cutoff,
    max_gap,
    min_sites,
    min_effect,
    score_method,
    jobs,
    output,
):
    """Call differentially methylated regions"""

    cli_ctx = ctx.obj
    config = cli_ctx.config if cli_ctx.config is not None else get_default_config()

    overrides = {
        "significance_cutoff": cutoff,
        "max_gap": max_gap,
        "min_sites": min_sites,
        "min_effect": min_effect,
        "score_method": score_method,
        "n_jobs": jobs,
    }
    config.regions.update({k: v for k, v in overrides.items() if v is not None})

    if output:
        config.output_dir = str(output)

    if stats is None and not config.sites.get("stats_file"):
        click.echo(
            "Error: No site statistics given. Use --stats or sites.stats_file",
            err=True,
        )
        sys.exit(1)

    try:
        analysis = DMRAnalysis(config)
        analysis.run_full_pipeline(stats=stats, manifest=manifest, features=features)
    except (InvalidInput, FileNotFoundError) as e:
        click.echo(f"Region calling failed: {e}", err=True)
        if cli_ctx.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    calling = analysis.results["call_regions"]
    summary = calling.summary()

    click.echo(
        f"Called {summary['n_regions']} regions from "
        f"{summary['n_significant_sites']} significant of {summary['n_sites']} sites"
    )
    click.echo(f"  hyper: {summary['n_hyper']}")
    click.echo(f"  hypo: {summary['n_hypo']}")
    click.echo(f"  mixed: {summary['n_mixed']}")

    for name, path in analysis.results.get("export", {}).items():
        click.echo(f"  {name}: {path}")


@main.command()
def check_env():
    """Check DMRFlow environment and dependencies"""

    click.echo("Checking DMRFlow environment...")
    click.echo()

    deps = check_dependencies()

    click.echo("Python dependencies:")
    all_good = True
    for dep, available in deps.items():
        status = "✓" if available else "✗"
        click.echo(f"  {status} {dep}")
        if not available:
            all_good = False

    click.echo()

    if all_good:
        click.echo("✓ Environment check passed!")
    else:
        click.echo("✗ Environment check failed. Please install missing dependencies.")
        click.echo("  - Python packages: pip install dmrflow")
        sys.exit(1)


if __name__ == "__main__":
    main()
