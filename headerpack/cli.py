#!/usr/bin/env python3

import sys
from pathlib import Path

import click

from headerpack.config import CONFIG_FILE_NAME, PackConfig
from headerpack.console import Console
from headerpack.errors import HeaderpackError
from headerpack.pipeline import pack

EXIT_FAILURE = 1
EXIT_UNHANDLED = 2


def run(config_path: Path, console: Console, dry_run: bool) -> int:
    try:
        config = PackConfig.load_from_file(config_path)
    except HeaderpackError as e:
        console.error(e.message)
        return EXIT_FAILURE
    console.detail(f"Loaded config file: {config.model_dump_json(by_alias=True)}")

    result = pack(config, console=console, dry_run=dry_run)
    if not result.ok:
        console.error(result.message)
        return EXIT_FAILURE

    if dry_run:
        console.print("Emission order:")
        for i, name in enumerate(result.files, 1):
            console.print(f"{i:3d}. {name}", markup=False)
        return 0

    console.success(
        f'in {result.elapsed_ms} milliseconds. Output: "{result.output_path}"'
    )
    return 0


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help=f"Configuration file (default: nearest {CONFIG_FILE_NAME} in this or a parent directory)",
)
@click.option("--verbose", is_flag=True, help="Print additional information on the packing process")
@click.option("--dry-run", is_flag=True, help="Print the emission order without writing the output")
def main(config_path: Path | None, verbose: bool, dry_run: bool):
    """Merge a tree of included headers into a single header file."""
    console = Console(verbose=verbose)
    console.setup_logging()
    console.detail("--verbose: Printing additional information on single header packing process")

    if config_path is None:
        # Not found anywhere: the error names the working directory copy
        config_path = PackConfig.find_config(Path.cwd()) or Path.cwd() / CONFIG_FILE_NAME

    try:
        code = run(config_path, console, dry_run)
    except Exception as e:
        console.error(f'An unhandled exception occurred!\nMessage: "{e}"')
        console.print_exception()
        code = EXIT_UNHANDLED
    sys.exit(code)


if __name__ == "__main__":
    main()
