"""Command-line interface for synext."""
import logging
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple

import click
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from .core.exceptions import SynextError
from .core.extractor import ExtractionCoordinator
from .core.models import CompressionLevel, ExtractionMode, ExtractionResult, TextCounts
from .core.tokenizer import TokenCounter
from .host.clipboard import ClipboardWatcher, copy_to_clipboard
from .host.config_store import ConfigStore, get_config_store
from .host.file_types import detect_workspace_file_types, initialize_file_types
from .utils.console import THEMES, ConsoleManager


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='[%(levelname)s] %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def make_token_counter() -> TokenCounter:
    """Approximate counter unless SYNEXT_TOKEN_ENCODING names a tiktoken encoding."""
    return TokenCounter(os.getenv('SYNEXT_TOKEN_ENCODING') or None)


def open_store(config_file: Optional[str]) -> ConfigStore:
    return ConfigStore(config_file) if config_file else get_config_store()


def print_summary(console: ConsoleManager, result: ExtractionResult) -> None:
    """Print counts and warnings for an extraction to the console."""
    console.print_metric("FILES", result.file_count)
    console.print_metric("TOKENS", result.token_count)
    console.print_metric("CHARS", result.char_count)
    if result.no_matching_files:
        console.print_warning("No files matched the selected file types")
    if result.truncated:
        budgets = ", ".join(sorted(b.value for b in result.budgets_hit))
        console.print_warning(f"Output truncated ({budgets})")
    for warning in result.warnings:
        console.print_warning(str(warning))


@contextmanager
def scan_progress(console: ConsoleManager) -> Iterator[Optional[Callable[[int], None]]]:
    """Live file counter for workspace scans; yields None when output is plain."""
    if not console.use_rich:
        yield None
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed} files"),
        TimeElapsedColumn(),
        console=console.console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning workspace", total=None)
        yield lambda seen: progress.update(task, completed=seen)


@click.group()
@click.option('--config-file', type=click.Path(dir_okay=False), envvar='SYNEXT_CONFIG_FILE',
              help='Settings file (default: ~/.config/synext/settings.json)')
@click.option('--theme', type=click.Choice(sorted(THEMES)), default='manhattan', help='Terminal color theme')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.version_option(package_name='synext')
@click.pass_context
def main(ctx: click.Context, config_file: Optional[str], theme: str, verbose: bool) -> None:
    """Turn files and folders into prompt-ready text with token counts."""
    setup_logging(verbose)
    ctx.obj = {
        'config_file': config_file,
        'console': ConsoleManager(theme=theme),
        'verbose': verbose,
    }


def _run_extraction(ctx: click.Context, paths: Tuple[str, ...], mode: ExtractionMode,
                    compression: Optional[str], file_types: Tuple[str, ...],
                    max_file_bytes: Optional[int], max_total_bytes: Optional[int],
                    copy: bool, output: Optional[str]) -> None:
    console: ConsoleManager = ctx.obj['console']
    store = open_store(ctx.obj['config_file'])

    overrides = {
        'compression_level': compression,
        'max_file_bytes': max_file_bytes,
        'max_total_bytes': max_total_bytes,
    }
    if file_types:
        overrides['file_types'] = file_types

    try:
        if not file_types and not store.exists():
            with scan_progress(console) as progress:
                seeded = initialize_file_types(store, Path.cwd(), progress=progress)
            console.print_info(f"First run: file types {' '.join(seeded) or '(none)'} detected in {Path.cwd()}")
        config = store.extraction_config(**overrides)
        coordinator = ExtractionCoordinator(make_token_counter())
        if copy:
            result = coordinator.extract_and_copy(list(paths), config, copy_to_clipboard, mode)
        else:
            result = coordinator.extract(list(paths), config, mode)
    except (SynextError, ValueError) as e:
        console.print_error(str(e))
        if ctx.obj['verbose']:
            console.print_exception()
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_error("Extraction cancelled")
        sys.exit(130)

    if output:
        try:
            Path(output).write_text(result.combined_text, encoding='utf-8')
        except OSError as e:
            console.print_error(f"Cannot write {output}: {e.strerror or e}")
            sys.exit(1)
        console.print_success(f"Wrote {output}")
    elif copy:
        console.print_success("Copied to clipboard")
    else:
        click.echo(result.combined_text)

    print_summary(console, result)


def _extraction_options(func):
    options = [
        click.argument('paths', nargs=-1, required=True, type=click.Path()),
        click.option('--type', '-t', 'file_types', multiple=True,
                     help='File type to include (repeatable); defaults to stored types'),
        click.option('--max-file-bytes', type=click.IntRange(min=1), help='Per-file byte cap'),
        click.option('--max-total-bytes', type=click.IntRange(min=1), help='Total byte budget'),
        click.option('--copy', '-c', is_flag=True, help='Copy the result to the clipboard'),
        click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write the result to a file'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@main.command()
@_extraction_options
@click.option('--compression', '-z', type=click.Choice([level.value for level in CompressionLevel]),
              help='Compression level; defaults to the stored level')
@click.pass_context
def extract(ctx, paths, file_types, max_file_bytes, max_total_bytes, copy, output, compression):
    """Extract a tree plus file contents for PATHS."""
    _run_extraction(ctx, paths, ExtractionMode.FULL, compression, file_types,
                    max_file_bytes, max_total_bytes, copy, output)


@main.command()
@_extraction_options
@click.pass_context
def tree(ctx, paths, file_types, max_file_bytes, max_total_bytes, copy, output):
    """Render only the directory tree for PATHS."""
    _run_extraction(ctx, paths, ExtractionMode.TREE_ONLY, None, file_types,
                    max_file_bytes, max_total_bytes, copy, output)


@main.command()
@click.argument('source', type=click.File('r', encoding='utf-8'), default='-')
@click.pass_context
def count(ctx, source):
    """Count characters and tokens in SOURCE (a file, or stdin)."""
    console: ConsoleManager = ctx.obj['console']
    counts = make_token_counter().measure(source.read())
    click.echo(f"tokens: {counts.token_count}")
    click.echo(f"chars: {counts.char_count}")
    console.print_metric("TOKENS", counts.token_count)


@main.command('detect-types')
@click.argument('root', type=click.Path(exists=True, file_okay=False), default='.')
@click.option('--save/--no-save', default=True, help='Store the detected types as the allow-list')
@click.pass_context
def detect_types(ctx, root, save):
    """Detect file types present under ROOT."""
    console: ConsoleManager = ctx.obj['console']
    store = open_store(ctx.obj['config_file'])

    with scan_progress(console) as progress:
        if save:
            file_types = initialize_file_types(store, root, force=True, progress=progress)
        else:
            file_types = detect_workspace_file_types(root, progress)

    click.echo(" ".join(file_types))
    console.print_info(f"{len(file_types)} file types found in {root}")


@main.group()
def config():
    """Show or change stored settings."""


@config.command('show')
@click.pass_context
def config_show(ctx):
    """Show stored settings."""
    store = open_store(ctx.obj['config_file'])
    snapshot = store.snapshot()
    click.echo(f"settings: {store.path}")
    click.echo(f"compression: {snapshot['compressionLevel']}")
    click.echo(f"file types: {' '.join(snapshot['fileTypes']) or '(none)'}")
    click.echo(f"clipboard box height: {snapshot['clipboardDataBoxHeight']}")


@config.command('set-compression')
@click.argument('level', type=click.Choice([level.value for level in CompressionLevel]))
@click.pass_context
def config_set_compression(ctx, level):
    """Store the compression level."""
    store = open_store(ctx.obj['config_file'])
    stored = store.set_compression_level(level)
    ctx.obj['console'].print_success(f"Compression level set to {stored.value}")


@config.command('set-types')
@click.argument('file_types', nargs=-1, required=True)
@click.pass_context
def config_set_types(ctx, file_types):
    """Replace the stored file types."""
    store = open_store(ctx.obj['config_file'])
    try:
        stored = store.set_file_types(file_types)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='FILE_TYPES')
    ctx.obj['console'].print_success(f"File types: {' '.join(stored)}")


@config.command('toggle-type')
@click.argument('file_type')
@click.pass_context
def config_toggle_type(ctx, file_type):
    """Add FILE_TYPE if missing, remove it if present."""
    store = open_store(ctx.obj['config_file'])
    try:
        stored = store.toggle_file_type(file_type)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='FILE_TYPE')
    ctx.obj['console'].print_success(f"File types: {' '.join(stored) or '(none)'}")


@main.command('watch-clipboard')
@click.option('--interval', type=click.FloatRange(min=0.05), default=0.8, show_default=True,
              help='Seconds between clipboard polls')
@click.pass_context
def watch_clipboard(ctx, interval):
    """Print live token and character counts for clipboard content."""
    console: ConsoleManager = ctx.obj['console']

    def on_change(content: str, counts: TextCounts) -> None:
        click.echo(f"tokens: {counts.token_count}  chars: {counts.char_count}")

    watcher = ClipboardWatcher(on_change, interval=interval, counter=make_token_counter())
    console.print_info("Watching clipboard, press Ctrl+C to stop")
    watcher.start()
    try:
        while watcher.running:
            time.sleep(interval)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


if __name__ == '__main__':
    main()
