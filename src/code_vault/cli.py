# Code Vault - Personal code snippet vault with similarity search
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
CLI entry point for code-vault.

Usage:
    vault add FILE --title TITLE
    vault analyze FILE
    vault capture FILE [--lines 10-40]
    vault --help
"""

import contextlib
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .config import VaultConfig, load_config
from .language import detect_language, language_from_path
from .models import SnippetValidationError
from .reporter import (
    EXTENSION_FORMAT_MAP,
    OutputFormat,
    report_analysis,
    report_clusters,
    report_snippet,
    report_snippets,
)
from .service import InvalidRequestError, VaultService
from .state import VaultState
from .store import SnippetNotFoundError, SnippetStore, StoreUnavailableError


EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


def merge_config_with_cli(
    config: dict,
    cli_value,
    config_key: str,
    default_value,
):
    """
    Merge config file value with CLI value.

    If CLI value differs from default, use CLI (user explicitly set it).
    Otherwise, use config value if present, else use default.
    """
    if cli_value != default_value:
        return cli_value
    return config.get(config_key, default_value)


def print_progress(current: int, total: int, message: str, width: int = 30):
    """Print a progress bar with message."""
    pct_filled = int(width * current / max(total, 1))
    bar = "=" * pct_filled + ">" + " " * (width - pct_filled - 1) if pct_filled < width else "=" * width
    click.echo(f"\r   [{bar}] {current}/{total} {message[:40]}\033[K", nl=False, err=True)
    if current >= total:
        click.echo(err=True)


@contextlib.contextmanager
def handle_errors():
    """Turn vault exceptions into a stderr message and exit code."""
    try:
        yield
    except (InvalidRequestError, SnippetValidationError) as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(EXIT_INVALID_INPUT)
    except SnippetNotFoundError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(EXIT_FAILURE)
    except StoreUnavailableError as e:
        click.echo(f"❌ Vault unavailable: {e}", err=True)
        sys.exit(EXIT_FAILURE)


class VaultContext:
    """Lazily opened store and service shared by subcommands."""

    def __init__(self, config: VaultConfig):
        self.config = config
        self._service: Optional[VaultService] = None

    @property
    def service(self) -> VaultService:
        if self._service is None:
            with handle_errors():
                store = SnippetStore(self.config.db_path)
            state = VaultState(recent_ttl=self.config.recent_ttl)
            self._service = VaultService(store, state=state, config=self.config)
        return self._service

    def close(self):
        if self._service is not None:
            self._service.state.close()
            self._service.store.close()


pass_vault = click.make_pass_decorator(VaultContext)


def _read_code(source: Optional[str]) -> str:
    """Read code from a file path, or stdin for None / "-"."""
    if source is None or source == "-":
        return click.get_text_stream("stdin").read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def _resolve_format(output: Optional[str], as_json: bool) -> OutputFormat:
    if as_json:
        return OutputFormat.JSON
    if output:
        ext = Path(output).suffix.lower()
        if ext not in EXTENSION_FORMAT_MAP:
            valid_exts = ', '.join(EXTENSION_FORMAT_MAP.keys())
            click.echo(f"❌ Invalid output extension '{ext}'. Valid: {valid_exts}", err=True)
            sys.exit(EXIT_INVALID_INPUT)
        return EXTENSION_FORMAT_MAP[ext]
    return OutputFormat.TEXT


def _emit(text: str, output: Optional[str]):
    if output:
        Path(output).write_text(text)
        click.echo(f"✅ Written to: {output}", err=True)
    else:
        click.echo(text)


def _parse_line_range(value: str) -> Tuple[int, int]:
    try:
        start, _, end = value.partition("-")
        start_line, end_line = int(start), int(end or start)
    except ValueError:
        raise click.BadParameter(f"expected START-END, got {value!r}")
    if start_line < 1 or end_line < start_line:
        raise click.BadParameter(f"invalid line range {value!r}")
    return start_line, end_line


output_option = click.option(
    "-o", "--output",
    type=str,
    default=None,
    help="Output file path (e.g., report.md, data.json)"
)
json_option = click.option("--json", "as_json", is_flag=True, help="Print JSON")


@click.group()
@click.option(
    "--db",
    type=str,
    default=None,
    envvar="CODE_VAULT_DB",
    help="Snippet database file (default: code-vault.db, or db_path from .vaultrc)"
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, db: Optional[str], verbose: bool):
    """
    Personal code snippet vault with similarity search.

    Examples:

      # Save a file as a snippet
      vault add utils/fetch.js --title "API Fetch Wrapper" -t api -t http

      # Find stored snippets similar to some code
      vault analyze new_code.js

      # Capture lines 10-40 of a file, skipping it if already in the vault
      vault capture src/app.py --lines 10-40

      # Group related snippets
      vault clusters -o related.md
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Config values override defaults, explicit CLI args override config
    file_config = load_config(Path.cwd())
    config = VaultConfig.from_mapping(file_config)
    if db:
        config.db_path = db

    vault = VaultContext(config)
    ctx.obj = vault
    ctx.call_on_close(vault.close)


@main.command()
@click.argument("source", required=False)
@click.option("--title", required=True, help="Snippet title")
@click.option("-l", "--language", type=str, default=None, help="Language (default: from extension or guessed)")
@click.option("-d", "--description", type=str, default="", help="Optional description")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable)")
@pass_vault
def add(vault: VaultContext, source: Optional[str], title: str, language: Optional[str], description: str, tags: tuple):
    """Add a snippet from SOURCE (a file, or stdin when omitted)."""
    code = _read_code(source)
    if language is None:
        language = (language_from_path(Path(source)) if source and source != "-" else None) or detect_language(code)

    with handle_errors():
        snippet = vault.service.add(title, code, language, description, list(tags))
    click.echo(f"💾 Saved \"{snippet.title}\" ({snippet.id})")


@main.command(name="list")
@click.option("-s", "--search", type=str, default=None, help="Substring of title, code, description or tag")
@click.option("-l", "--language", type=str, default=None, help="Only this language")
@click.option("-t", "--tag", type=str, default=None, help="Only snippets with this tag")
@click.option(
    "--sort-by",
    type=click.Choice(["created_at", "updated_at", "title", "language"]),
    default="created_at",
    help="Sort column (default: created_at)"
)
@click.option("--order", type=click.Choice(["asc", "desc"]), default="desc", help="Sort order (default: desc)")
@output_option
@json_option
@pass_vault
def list_snippets(vault: VaultContext, search, language, tag, sort_by, order, output, as_json):
    """List stored snippets."""
    output_format = _resolve_format(output, as_json)
    with handle_errors():
        snippets = vault.service.store.list(
            search=search, language=language, tag=tag, sort_by=sort_by, sort_order=order,
        )
    _emit(report_snippets(snippets, output_format), output)


@main.command()
@click.argument("snippet_id")
@output_option
@json_option
@pass_vault
def show(vault: VaultContext, snippet_id: str, output, as_json):
    """Show one snippet."""
    output_format = _resolve_format(output, as_json)
    with handle_errors():
        snippet = vault.service.store.get(snippet_id)
    _emit(report_snippet(snippet, output_format), output)


@main.command()
@click.argument("snippet_id")
@click.option("--code-from", "code_source", type=str, default=None, help="Replace code from file ('-' for stdin)")
@click.option("--title", type=str, default=None)
@click.option("-l", "--language", type=str, default=None)
@click.option("-d", "--description", type=str, default=None)
@click.option("-t", "--tag", "tags", multiple=True, help="Replace tags (repeatable)")
@click.option("--clear-tags", is_flag=True, help="Remove all tags")
@pass_vault
def edit(vault: VaultContext, snippet_id: str, code_source, title, language, description, tags, clear_tags: bool):
    """Edit a snippet. Options not given keep their current value."""
    if clear_tags and tags:
        raise click.UsageError("--clear-tags cannot be combined with --tag")
    with handle_errors():
        current = vault.service.store.get(snippet_id)
        snippet = vault.service.update(
            snippet_id,
            title=title if title is not None else current.title,
            code=_read_code(code_source) if code_source else current.code,
            language=language if language is not None else current.language,
            description=description if description is not None else current.description,
            tags=[] if clear_tags else (list(tags) if tags else current.tags),
        )
    click.echo(f"✏️  Updated \"{snippet.title}\" ({snippet.id})")


@main.command()
@click.argument("snippet_id")
@click.option("-y", "--yes", is_flag=True, help="Don't ask for confirmation")
@pass_vault
def delete(vault: VaultContext, snippet_id: str, yes: bool):
    """Delete a snippet."""
    with handle_errors():
        snippet = vault.service.store.get(snippet_id)
        if not yes and not click.confirm(f"Delete \"{snippet.title}\"?"):
            click.echo("Cancelled.")
            return
        vault.service.delete(snippet_id)
    click.echo(f"🗑️  Deleted \"{snippet.title}\"")


@main.command()
@click.argument("source", required=False)
@click.option("-l", "--language", type=str, default=None, help="Declared language of the code")
@click.option(
    "-t", "--threshold",
    type=float,
    default=0.3,
    help="Minimum similarity to report, 0.0-1.0 (default: 0.3)"
)
@click.option("-n", "--max-results", type=int, default=5, help="Maximum suggestions (default: 5)")
@output_option
@json_option
@pass_vault
def analyze(vault: VaultContext, source, language, threshold, max_results, output, as_json):
    """Rank stored snippets by similarity to SOURCE (file or stdin)."""
    output_format = _resolve_format(output, as_json)
    config = vault.config
    file_config = {"suggestion_threshold": config.suggestion_threshold, "max_suggestions": config.max_suggestions}
    config.suggestion_threshold = merge_config_with_cli(file_config, threshold, "suggestion_threshold", 0.3)
    config.max_suggestions = merge_config_with_cli(file_config, max_results, "max_suggestions", 5)

    code = _read_code(source)
    with handle_errors():
        response = vault.service.analyze(code, language)
    _emit(report_analysis(response, output_format), output)


@main.command()
@click.argument("source", required=False)
@click.option("--title", type=str, default=None, help="Title (default: 'File: NAME' or 'Selection - NAME')")
@click.option("-l", "--language", type=str, default=None, help="Editor language id (default: from extension)")
@click.option("-d", "--description", type=str, default=None)
@click.option("--lines", "line_range", type=str, default=None, help="Capture only lines START-END (1-indexed)")
@pass_vault
def capture(vault: VaultContext, source, title, language, description, line_range):
    """
    Capture SOURCE into the vault unless it is already there.

    Whole files must be longer than 100 characters and selections (--lines)
    longer than 20, like automatic editor captures.
    """
    from .capture import CaptureClient

    service = vault.service
    client = CaptureClient(
        load_corpus=service.store.all,
        save=service.add,
        suggest=service.suggest,
        state=service.state,
        config=vault.config,
    )

    code = _read_code(source)
    file_name = Path(source).name if source and source != "-" else "stdin"
    if language is None:
        language = (language_from_path(Path(source)) if source and source != "-" else None) or detect_language(code)

    if not code.strip():
        click.echo("❌ Code is required", err=True)
        sys.exit(EXIT_INVALID_INPUT)

    with handle_errors():
        if line_range:
            start, end = _parse_line_range(line_range)
            selection = "\n".join(code.split("\n")[start - 1:end])
            if title:
                result = client.capture(selection, language, title, description)
            else:
                result = client.capture_selection(selection, language, file_name)
        elif title:
            result = client.capture(code, language, title, description)
        else:
            result = client.capture_file(code, language, file_name)

    if result.saved:
        click.echo(f"💾 Captured \"{result.snippet.title}\" ({result.snippet.id})")
    elif result.status == "too_short":
        click.echo(f"⏭️  Skipped - too short to capture ({result.detail})")
    else:
        click.echo(f"⏭️  Skipped - already in vault: {result.detail}")


@main.command(name="import")
@click.argument("path", type=click.Path(exists=True, file_okay=False, dir_okay=True))
@click.option("-e", "--exclude", multiple=True, help="Glob patterns to exclude (repeatable)")
@click.option("-f", "--focus", multiple=True, help="Only import matching paths (repeatable)")
@click.option("-l", "--lang", type=str, default=None, help="Only import this language")
@click.option("--min-chars", type=int, default=None, help="Skip files this small (default: 100)")
@click.option("--max-files", type=int, default=500, help="Maximum files to import (default: 500)")
@click.option("-t", "--tag", "tags", multiple=True, help="Tags for imported snippets (default: imported)")
@click.option("-q", "--quiet", is_flag=True, help="No progress bar")
@pass_vault
def import_cmd(vault: VaultContext, path, exclude, focus, lang, min_chars, max_files, tags, quiet):
    """Capture every source file under PATH."""
    from .importer import import_directory

    click.echo(f"📂 Importing {path}...")
    with handle_errors():
        summary = import_directory(
            root_path=Path(path).resolve(),
            service=vault.service,
            exclude_patterns=list(exclude),
            focus_patterns=list(focus),
            forced_language=lang,
            min_chars=min_chars,
            max_files=max_files,
            tags=list(tags) or None,
            on_progress=None if quiet else print_progress,
        )
    click.echo(
        f"✅ Saved {len(summary.saved)} | duplicates {len(summary.duplicates)} | skipped {len(summary.skipped)}"
    )


@main.command()
@click.option(
    "-t", "--threshold",
    type=float,
    default=0.5,
    help="Similarity threshold 0.0-1.0 (default: 0.5)"
)
@click.option(
    "-m", "--min-cluster",
    type=int,
    default=2,
    help="Minimum snippets per cluster (default: 2)"
)
@output_option
@json_option
@pass_vault
def clusters(vault: VaultContext, threshold, min_cluster, output, as_json):
    """Group related snippets in the vault."""
    output_format = _resolve_format(output, as_json)
    config = vault.config
    file_config = {"cluster_threshold": config.cluster_threshold, "min_cluster": config.min_cluster}
    config.cluster_threshold = merge_config_with_cli(file_config, threshold, "cluster_threshold", 0.5)
    config.min_cluster = merge_config_with_cli(file_config, min_cluster, "min_cluster", 2)

    with handle_errors():
        found = vault.service.clusters()

    if not found and output_format != OutputFormat.JSON:
        click.echo("✨ No related snippets found above threshold.")
        return
    _emit(report_clusters(found, config.cluster_threshold, output_format), output)


@main.command()
@pass_vault
def languages(vault: VaultContext):
    """List distinct languages."""
    with handle_errors():
        for language in vault.service.store.languages():
            click.echo(language)


@main.command()
@pass_vault
def tags(vault: VaultContext):
    """List distinct tags."""
    with handle_errors():
        for tag in vault.service.store.tags():
            click.echo(tag)


@main.command()
@pass_vault
def seed(vault: VaultContext):
    """Insert sample snippets into an empty vault."""
    with handle_errors():
        inserted = vault.service.store.seed_samples()
    if inserted:
        click.echo(f"🌱 Inserted {inserted} sample snippets")
    else:
        click.echo("   Vault is not empty, nothing inserted")


@main.command()
@pass_vault
def status(vault: VaultContext):
    """Show vault health."""
    with handle_errors():
        store = vault.service.store
        click.echo("📊 Code Vault status")
        click.echo(f"   Database:  {store.db_path}")
        click.echo(f"   Snippets:  {store.count()}")
        click.echo(f"   Languages: {', '.join(store.languages()) or '-'}")
        click.echo(f"   Tags:      {', '.join(store.tags()) or '-'}")


# Entry point alias for pyproject.toml
cli = main


if __name__ == "__main__":
    main()
