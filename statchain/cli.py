import json
from typing import Iterable, Optional

import click

from .blocks import Block, format_block
from .chain import BlockChain, new_chain, validate_batch
from .config import Settings
from .exceptions import InvalidInput, StatChainError
from .generator import SampleGenerator
from .importer import SUPPORTED_FORMATS, read_batches
from .metrics import start_metrics_server
from .persistence import BlockLogWriter
from .utils import get_logger

MENU = """Choose an action:
1. Print current block
2. Print chain
3. Print blocks with outliers
4. Import data from an external file
5. Quit"""


def echo_blocks(ctx, blocks: Iterable[Block], title: Optional[str] = None):
    """Print blocks as text, or as JSON records with --json-output."""
    blocks = list(blocks)
    if ctx.obj.get("JSON_OUTPUT"):
        click.echo(json.dumps([b.to_record() for b in blocks], indent=2))
        return
    if title:
        click.echo(title)
    for block in blocks:
        click.echo(format_block(block))


def echo_error(ctx, e: Exception):
    if ctx.obj.get("JSON_OUTPUT"):
        click.echo(json.dumps({"status": "error", "message": str(e), "type": type(e).__name__}, indent=2))
    else:
        click.echo(f"ERROR: {e}", err=True)


def import_into_chain(chain: BlockChain, path: str, fmt: str) -> int:
    """
    Append every batch from a data file; returns the number of blocks added.

    All batches are validated first, so a bad row leaves the chain untouched.
    """
    batches = read_batches(path, fmt)
    for row, batch in enumerate(batches):
        try:
            validate_batch(batch)
        except InvalidInput as e:
            raise InvalidInput(f"Row {row}: {e}") from e
    for batch in batches:
        chain.append(batch)
    return len(batches)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--json-output", "-j", is_flag=True, help="Output blocks and errors in JSON format.")
@click.pass_context
def cli(ctx, verbose, json_output):
    """statchain - append-only chain of sample batches with outlier tracking."""
    ctx.ensure_object(dict)
    settings = Settings()
    ctx.obj["SETTINGS"] = settings
    ctx.obj["VERBOSE"] = verbose
    ctx.obj["JSON_OUTPUT"] = json_output
    get_logger("statchain", "DEBUG" if verbose else settings.log_level)


def _menu_loop(ctx, chain: BlockChain):
    while True:
        click.echo(MENU)
        try:
            choice = click.prompt("", type=int, prompt_suffix="> ")
        except click.Abort:
            return
        if choice == 1:
            echo_blocks(ctx, [chain.last_block()])
        elif choice == 2:
            echo_blocks(ctx, chain.all_blocks(), title="Chain:")
        elif choice == 3:
            echo_blocks(ctx, chain.blocks_with_outliers(), title="Blocks with outliers:")
        elif choice == 4:
            path = click.prompt("Path of the external data file")
            fmt = click.prompt("Data format", type=click.Choice(SUPPORTED_FORMATS), default="csv")
            try:
                added = import_into_chain(chain, path, fmt)
            except StatChainError as e:
                echo_error(ctx, e)
                continue
            click.echo(f"Imported {added} batches.")
        elif choice == 5:
            return
        else:
            click.echo("Invalid choice!")


@cli.command("run")
@click.option("--interval", type=float, help="Seconds between generated batches.")
@click.option("--batch-size", type=int, help="Samples per generated batch.")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Block log file (JSON lines).")
@click.pass_context
def run(ctx, interval, batch_size, log_file):
    """
    Generate batches in the background and browse the chain interactively.

    Example:

        statchain run --interval 5 --batch-size 100
    """
    settings: Settings = ctx.obj["SETTINGS"]
    if settings.metrics_enabled:
        start_metrics_server(settings.metrics_port, settings.metrics_addr)

    writer = BlockLogWriter(log_file or settings.block_log_path)
    with new_chain(settings.stats_workers) as chain:
        chain.subscribe(writer.enqueue)
        writer.start()
        generator = SampleGenerator(
            chain.append,
            interval=interval or settings.generator_interval_seconds,
            batch_size=batch_size or settings.batch_size,
        )
        generator.start()
        try:
            _menu_loop(ctx, chain)
        finally:
            generator.stop()
            writer.stop()


@cli.command("import")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(SUPPORTED_FORMATS),
    default="csv",
    show_default=True,
    help="Format of the data file.",
)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write blocks to this log file.")
@click.pass_context
def import_file(ctx, path, fmt, log_file):
    """
    Append every batch in a CSV or JSON file to a fresh chain and print it.

    Example:

        statchain import samples.csv --format csv
    """
    settings: Settings = ctx.obj["SETTINGS"]
    writer = BlockLogWriter(log_file) if log_file else None
    with new_chain(settings.stats_workers) as chain:
        if writer:
            chain.subscribe(writer.enqueue)
            writer.start()
        try:
            import_into_chain(chain, path, fmt)
        except StatChainError as e:
            echo_error(ctx, e)
            ctx.exit(1)
        finally:
            if writer:
                writer.stop()
        echo_blocks(ctx, chain.all_blocks(), title="Chain:")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
