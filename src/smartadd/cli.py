"""Command-line interface for smartadd."""
import asyncio
import os
import signal
import sys
from typing import Awaitable, Callable, Iterable, Optional, Tuple

import click
from rich.markup import escape

from . import __version__
from .ai.adapter.factory import create_adapter
from .ai.config import ProviderCode, get_provider_config_from_env, get_provider_details
from .ai.model_selection import fetch_models_or_fallback, resolve_model_choice
from .core.models import SelectionConfig
from .core.tokenizer import TokenCounter
from .pipeline.direct_add import DirectAddOutcome, DirectAdder
from .pipeline.registrar import ContextBundleRegistrar
from .pipeline.smart_select import OutcomeStatus, SmartSelectOutcome, SmartSelectPipeline, resolve_root
from .utils.cancellation import CancellationToken
from .utils.console import THEMES, ConsoleManager
from .utils.logging_config import configure_cli_logging

EXIT_FAILED = 1
EXIT_ABORTED = 130
MAX_LISTED_WARNINGS = 5

PROVIDER_CHOICE = click.Choice([p.value for p in ProviderCode], case_sensitive=False)


def _install_sigint(loop: asyncio.AbstractEventLoop, token: CancellationToken) -> bool:
    """Route Ctrl-C to the cancellation token while the pipeline runs."""
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError, ValueError):
        return False
    return True


async def _run_pipeline(pipeline: SmartSelectPipeline, criteria: str, root: str,
                        token: CancellationToken, console: ConsoleManager) -> SmartSelectOutcome:
    loop = asyncio.get_running_loop()
    installed = _install_sigint(loop, token)
    try:
        with console.progress("Analyzing files that match your criteria...") as progress:
            return await pipeline.run(criteria, root, token, progress)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


async def _run_direct(add: Awaitable[DirectAddOutcome], token: CancellationToken) -> DirectAddOutcome:
    loop = asyncio.get_running_loop()
    installed = _install_sigint(loop, token)
    try:
        return await add
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _selection_config(exclude_ext: Iterable[str], exclude_dir: Iterable[str],
                      threshold: Optional[int] = None) -> SelectionConfig:
    defaults = SelectionConfig()
    return SelectionConfig(
        excluded_extensions=defaults.excluded_extensions | set(exclude_ext),
        excluded_folders=defaults.excluded_folders | set(exclude_dir),
        file_threshold=threshold if threshold is not None else defaults.file_threshold,
    )


def _write_bundle(console: ConsoleManager, registrar: ContextBundleRegistrar, output: str,
                  criteria: str = "", tree_text: str = "") -> None:
    path = registrar.write(output, criteria=criteria, tree_text=tree_text)
    console.print(f"\n[info]CONTEXT BUNDLE:[/info] [path]{os.path.relpath(path)}[/path]")
    if registrar.token_counter is not None:
        console.print(f"[info]TOTAL TOKENS:[/info] [number]{registrar.total_tokens:,}[/number]")


def _print_warnings(console: ConsoleManager, outcome, debug: bool) -> None:
    warnings = outcome.warnings()
    if not warnings:
        return
    console.print(f"\n[warning]WARNINGS:[/warning] [number]{len(warnings)}[/number]")
    shown = warnings if debug else warnings[:MAX_LISTED_WARNINGS]
    for warning in shown:
        console.print(f"  [dim]>[/dim] {escape(warning)}")
    if len(warnings) > len(shown):
        console.print(f"  [dim]... +{len(warnings) - len(shown)} more[/dim]")


@click.group()
@click.version_option(__version__, prog_name="smartadd")
def main() -> None:
    """Select the files in a workspace that match a description, using an LLM."""


@main.command()
@click.argument('root', required=False, type=click.Path(exists=True))
@click.option('--prompt', '-p', 'criteria', help='Description of the files to add')
@click.option('--provider', type=PROVIDER_CHOICE, help='LLM provider (default: SMARTADD_PROVIDER or openai)')
@click.option('--api-key', help='API key (default: SMARTADD_API_KEY or the provider key variable)')
@click.option('--base-url', help='Base URL, only used with openai-compatible')
@click.option('--model', help='Model name (default: provider default)')
@click.option('--output', '-o', default='smartadd_context.md', show_default=True,
              type=click.Path(dir_okay=False), help='Where to write the context bundle')
@click.option('--threshold', type=click.IntRange(min=0), help='Warn when the workspace has more files than this')
@click.option('--exclude-ext', multiple=True, help='Extra file extension to exclude (repeatable)')
@click.option('--exclude-dir', multiple=True, help='Extra folder name to exclude (repeatable)')
@click.option('--theme', '-t', type=click.Choice(sorted(THEMES)), default='manhattan', help='Terminal color theme')
@click.option('--debug', is_flag=True, help='Verbose logging and full warning lists')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Write JSON logs to this file')
def add(root: Optional[str], criteria: Optional[str], provider: Optional[str], api_key: Optional[str],
        base_url: Optional[str], model: Optional[str], output: str, threshold: Optional[int],
        exclude_ext: Tuple[str, ...], exclude_dir: Tuple[str, ...], theme: str, debug: bool,
        log_file: Optional[str]) -> None:
    """
    Add the files under ROOT that match a description.

    ROOT must be a directory to be scanned; a file or no ROOT means the
    current directory is scanned.

    Examples:

        smartadd add src --prompt "all test files and auth services"

        smartadd add . --provider gemini --model gemini-1.5-pro
    """
    console = ConsoleManager(theme=theme)
    configure_cli_logging(debug=debug, log_file=log_file)

    if criteria is None:
        criteria = click.prompt(
            "Describe the files you want to add", default="", show_default=False
        )
    if not criteria.strip():
        console.print_info("No criteria given, nothing to do")
        return

    try:
        provider_config = get_provider_config_from_env(provider, api_key, base_url, model)
    except ValueError as e:
        console.print_error(str(e))
        sys.exit(EXIT_FAILED)

    config = _selection_config(exclude_ext, exclude_dir, threshold)
    workspace_root = resolve_root([root] if root else [])
    token_counter = TokenCounter(config.token_encoder)
    registrar = ContextBundleRegistrar(workspace_root, config, token_counter)
    pipeline = SmartSelectPipeline(
        create_adapter(provider_config), config, registrar, token_counter=token_counter
    )
    token = CancellationToken()

    console.print(f"[highlight]> WORKSPACE:[/highlight] [path]{escape(workspace_root)}[/path]")
    console.print(f"[info]> MODEL:[/info] {provider_config.details.name} / {provider_config.resolved_model}\n")

    try:
        outcome = asyncio.run(_run_pipeline(pipeline, criteria, workspace_root, token, console))
    except KeyboardInterrupt:
        console.print_warning("Smart selection cancelled")
        sys.exit(EXIT_ABORTED)

    if outcome.over_threshold:
        console.print_warning(
            f"Workspace has {outcome.total_files} files, more than the threshold of {config.file_threshold}"
        )

    if outcome.status == OutcomeStatus.ABORTED:
        console.print_warning(outcome.message)
        sys.exit(EXIT_ABORTED)

    if outcome.status == OutcomeStatus.FAILED:
        console.print_error(outcome.message)
        if debug and outcome.raw_response:
            console.print_panel(outcome.raw_response, title="Model response")
        _print_warnings(console, outcome, debug)
        sys.exit(EXIT_FAILED)

    console.print_success(outcome.headline)
    console.print_panel(f"{outcome.message}\n\n{outcome.tree_text}", title="Smart selection")
    _print_warnings(console, outcome, debug)

    if outcome.registered_count:
        _write_bundle(console, registrar, output, criteria=criteria, tree_text=outcome.tree_text)


def _bundle_options(func):
    """Options shared by the commands that add files without the model."""
    options = [
        click.option('--output', '-o', default='smartadd_context.md', show_default=True,
                     type=click.Path(dir_okay=False), help='Where to write the context bundle'),
        click.option('--exclude-ext', multiple=True, help='Extra file extension to exclude (repeatable)'),
        click.option('--exclude-dir', multiple=True, help='Extra folder name to exclude (repeatable)'),
        click.option('--theme', '-t', type=click.Choice(sorted(THEMES)), default='manhattan',
                     help='Terminal color theme'),
        click.option('--debug', is_flag=True, help='Verbose logging and full warning lists'),
        click.option('--log-file', type=click.Path(dir_okay=False), help='Write JSON logs to this file'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _direct_add(root: str, output: str, exclude_ext: Tuple[str, ...], exclude_dir: Tuple[str, ...],
                theme: str, debug: bool, log_file: Optional[str],
                add: Callable[[DirectAdder, CancellationToken], Awaitable[DirectAddOutcome]]) -> None:
    console = ConsoleManager(theme=theme)
    configure_cli_logging(debug=debug, log_file=log_file)

    config = _selection_config(exclude_ext, exclude_dir)
    registrar = ContextBundleRegistrar(root, config, TokenCounter(config.token_encoder))
    adder = DirectAdder(config, registrar)
    token = CancellationToken()

    try:
        outcome = asyncio.run(_run_direct(add(adder, token), token))
    except KeyboardInterrupt:
        outcome = None
    if outcome is None or outcome.cancelled:
        console.print_warning("Add cancelled")
        sys.exit(EXIT_ABORTED)

    console.print_success(outcome.headline)
    console.print(f"[info]FOLDERS:[/info] [number]{outcome.folder_count}[/number]")
    _print_warnings(console, outcome, debug)

    if outcome.registered_count:
        _write_bundle(console, registrar, output)


@main.command('add-file')
@click.argument('paths', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@_bundle_options
def add_file(paths: Tuple[str, ...], output: str, exclude_ext: Tuple[str, ...],
             exclude_dir: Tuple[str, ...], theme: str, debug: bool, log_file: Optional[str]) -> None:
    """Add one or more files as they are."""
    _direct_add(os.getcwd(), output, exclude_ext, exclude_dir, theme, debug, log_file,
                lambda adder, token: adder.add_files(paths))


@main.command('add-folder')
@click.argument('folder', type=click.Path(exists=True, file_okay=False))
@click.option('--recursive/--no-recursive', default=True, show_default=True,
              help='Include the files in subfolders')
@_bundle_options
def add_folder(folder: str, recursive: bool, output: str, exclude_ext: Tuple[str, ...],
               exclude_dir: Tuple[str, ...], theme: str, debug: bool, log_file: Optional[str]) -> None:
    """Add the files in FOLDER, skipping excluded folders and file types."""
    _direct_add(folder, output, exclude_ext, exclude_dir, theme, debug, log_file,
                lambda adder, token: adder.add_folder(folder, recursive, token))


@main.command('add-selection')
@click.argument('paths', nargs=-1, required=True, type=click.Path(exists=True))
@click.option('--recursive/--no-recursive', default=False, show_default=True,
              help='Include the files in subfolders of selected folders')
@_bundle_options
def add_selection(paths: Tuple[str, ...], recursive: bool, output: str, exclude_ext: Tuple[str, ...],
                  exclude_dir: Tuple[str, ...], theme: str, debug: bool, log_file: Optional[str]) -> None:
    """Add a mix of files and folders."""
    _direct_add(os.getcwd(), output, exclude_ext, exclude_dir, theme, debug, log_file,
                lambda adder, token: adder.add_selection(paths, recursive, token))


@main.command()
@click.option('--provider', type=PROVIDER_CHOICE, help='LLM provider (default: SMARTADD_PROVIDER or openai)')
@click.option('--api-key', help='API key (default: SMARTADD_API_KEY or the provider key variable)')
@click.option('--base-url', help='Base URL, only used with openai-compatible')
@click.option('--pick', is_flag=True, help='Choose a model interactively')
@click.option('--debug', is_flag=True, help='Verbose logging')
def models(provider: Optional[str], api_key: Optional[str], base_url: Optional[str],
           pick: bool, debug: bool) -> None:
    """List the models available to your API key."""
    console = ConsoleManager()
    configure_cli_logging(debug=debug)

    try:
        provider_config = get_provider_config_from_env(provider, api_key, base_url)
    except ValueError as e:
        console.print_error(str(e))
        sys.exit(EXIT_FAILED)

    adapter = create_adapter(provider_config)
    default_model = get_provider_details(provider_config.provider).default_model
    available = asyncio.run(fetch_models_or_fallback(adapter))

    if available:
        console.print(f"[info]{adapter.provider_name} models:[/info]")
        for name in available:
            marker = " [dim](default)[/dim]" if name == default_model else ""
            console.print(f"  [dim]>[/dim] {name}{marker}")
    else:
        console.print_warning(
            f"Could not fetch models from {adapter.provider_name}; pass --model manually "
            f"(default: {default_model})"
        )

    if not pick:
        return

    if available:
        suggested = default_model if default_model in available else available[0]
        choice = click.prompt("Model", type=click.Choice(available), default=suggested)
    else:
        choice = click.prompt("Model name (blank for default)", default="", show_default=False)
    selected = resolve_model_choice(choice, provider_config.provider)
    console.print_success(f"Selected model: {selected}")
    console.print(f"[dim]Set SMARTADD_MODEL={selected} or pass --model {selected}[/dim]")


if __name__ == '__main__':
    main()
