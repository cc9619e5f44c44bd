"""
CLI for translate-i18n-ai.

Provides commands for translating JSON/i18n files and plain text, inspecting
plural rules, and generating a configuration file.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from translate_i18n_ai.config import Settings, create_default_config, load_config
from translate_i18n_ai.errors import BackendError, ConfigurationError, TranslateI18nError
from translate_i18n_ai.i18n.plurals import is_known_locale, normalize_locale, required_categories
from translate_i18n_ai.log import setup_logging
from translate_i18n_ai.translation import I18nTranslator, TranslationResult

app = typer.Typer(
    name="translate-i18n",
    help="AI-powered translation of JSON and i18n resource files.",
    add_completion=False,
)

console = Console()


def get_settings(config_path: Path | None = None) -> Settings:
    """Load settings from config file or defaults."""
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        _fail(e)


def build_translator(settings: Settings) -> I18nTranslator:
    """Create the translator used by the commands."""
    return I18nTranslator.from_settings(settings)


def _fail(error: TranslateI18nError) -> None:
    """Print an error and exit with status 1."""
    code = getattr(error, "code", None)
    suffix = f" [dim]({code})[/dim]" if code else ""
    console.print(f"[red]Error: {escape(str(error))}[/red]{suffix}")
    raise typer.Exit(1) from None


def _split_locales(values: list[str] | None, fallback: list[str]) -> list[str]:
    """Accept ``--to es --to fr`` as well as ``--to es,fr``."""
    if not values:
        return list(fallback)
    locales = []
    for value in values:
        locales.extend(part.strip() for part in value.split(",") if part.strip())
    return locales


def _run(coro: Any) -> TranslationResult:
    try:
        return asyncio.run(coro)
    except (ConfigurationError, BackendError) as e:
        _fail(e)


def _print_report(result: TranslationResult) -> None:
    if result.skipped.count:
        console.print(f"\n[yellow]Skipped {result.skipped.count} key(s):[/yellow]")
        for key in result.skipped.keys[:20]:
            console.print(f"  {escape(key)}")
        if result.skipped.count > 20:
            console.print(f"  ... and {result.skipped.count - 20} more")

    if result.warnings:
        table = Table(title="Warnings")
        table.add_column("Locale", style="cyan")
        table.add_column("Key", style="magenta")
        table.add_column("Message", style="yellow")
        for warning in result.warnings:
            table.add_row(
                warning.locale or "", escape(warning.key_path or ""), escape(warning.message)
            )
        console.print(table)

    info = result.namespace_info
    if info is not None:
        if info.detected:
            names = ", ".join(f"{escape(ns.name)} ({ns.key_count})" for ns in info.namespaces)
            console.print(f"\n[cyan]Namespaces:[/cyan] {names}")
        else:
            console.print("\n[dim]No namespaces detected[/dim]")


@app.command()
def translate(
    input_file: Path = typer.Argument(..., help="JSON file to translate"),
    to: list[str] | None = typer.Option(
        None, "--to", "-t", help="Target locale(s), repeatable or comma-separated"
    ),
    source: str | None = typer.Option(None, "--from", "-f", help="Source locale"),
    output_dir: Path | None = typer.Option(None, "--out", "-o", help="Output directory"),
    skip_key: list[str] | None = typer.Option(
        None, "--skip-key", help="Exact key path to leave untranslated"
    ),
    skip_path: list[str] | None = typer.Option(
        None, "--skip-path", help="Glob pattern to leave untranslated (e.g. 'states.*')"
    ),
    no_placeholders: bool = typer.Option(
        False, "--no-placeholders", help="Do not protect {{...}} and ICU placeholders"
    ),
    no_plurals: bool = typer.Option(False, "--no-plurals", help="Disable plural expansion"),
    i18next: bool = typer.Option(False, "--i18next", help="Report i18next namespaces"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Translate a JSON/i18n file into one file per target locale."""
    settings = get_settings(config)
    setup_logging(settings.logging)

    if not input_file.exists():
        console.print(f"[red]File not found: {input_file}[/red]")
        raise typer.Exit(1)

    try:
        content = json.loads(input_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {input_file}: {e}[/red]")
        raise typer.Exit(1) from None

    targets = _split_locales(to, settings.translation.target_languages)
    out = output_dir or settings.paths.output_dir

    overrides: dict[str, Any] = {}
    if skip_key:
        overrides["skip_keys"] = tuple(settings.defaults.skip_keys) + tuple(skip_key)
    if skip_path:
        overrides["skip_paths"] = tuple(settings.defaults.skip_paths) + tuple(skip_path)
    if no_placeholders:
        overrides["preserve_placeholders"] = False
    if no_plurals:
        overrides["enable_pluralization"] = False
    if i18next:
        overrides["detect_namespaces"] = True

    try:
        translator = build_translator(settings)
    except ConfigurationError as e:
        _fail(e)

    console.print(
        f"[cyan]Translating {input_file.name} "
        f"({source or translator.source_locale} -> {', '.join(targets)})[/cyan]"
    )
    result = _run(
        translator.translate(content, targets, source_language=source, **overrides)
    )

    out.mkdir(parents=True, exist_ok=True)
    table = Table(title="Translated Files")
    table.add_column("Locale", style="cyan")
    table.add_column("File", style="green")
    # Text-mode files come back as original/translated pairs.
    rendered = result.to_dict()
    for locale in result.languages:
        path = out / f"{locale}.json"
        path.write_text(
            json.dumps(rendered[locale], ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
        )
        table.add_row(locale, str(path))
    console.print(table)

    _print_report(result)
    console.print("\n[bold green]Done![/bold green]")


@app.command()
def text(
    texts: list[str] = typer.Argument(..., help="Text(s) to translate"),
    to: list[str] | None = typer.Option(
        None, "--to", "-t", help="Target locale(s), repeatable or comma-separated"
    ),
    source: str | None = typer.Option(None, "--from", "-f", help="Source locale"),
    no_placeholders: bool = typer.Option(
        False, "--no-placeholders", help="Do not protect {{...}} and ICU placeholders"
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Translate plain text into one or more locales."""
    settings = get_settings(config)
    setup_logging(settings.logging)
    targets = _split_locales(to, settings.translation.target_languages)

    try:
        translator = build_translator(settings)
    except ConfigurationError as e:
        _fail(e)

    result = _run(
        translator.translate_text(
            list(texts),
            targets,
            source_language=source,
            preserve_placeholders=not no_placeholders,
        )
    )

    table = Table(title="Translations")
    table.add_column("Locale", style="cyan")
    table.add_column("Original", style="dim")
    table.add_column("Translated", style="green")
    for locale in result.languages:
        for pair in result[locale]:
            table.add_row(locale, escape(pair.original), escape(pair.translated))
    console.print(table)
    _print_report(result)


@app.command()
def plurals(
    locales: list[str] = typer.Argument(..., help="Locale(s) to look up"),
) -> None:
    """Show the CLDR plural categories each locale needs."""
    table = Table(title="Plural Categories")
    table.add_column("Locale", style="cyan")
    table.add_column("Language", style="magenta")
    table.add_column("Categories", style="green")
    for locale in locales:
        categories = ", ".join(required_categories(locale))
        if not is_known_locale(locale):
            categories += " [yellow](default)[/yellow]"
        table.add_row(locale, normalize_locale(locale), categories)
    console.print(table)


@app.command()
def init(
    output_path: Path = typer.Argument(Path("config.yaml"), help="Output path for config file"),
) -> None:
    """Generate a default configuration file."""
    if output_path.exists():
        overwrite = typer.confirm(f"{output_path} already exists. Overwrite?")
        if not overwrite:
            raise typer.Abort()

    create_default_config(output_path)
    console.print(f"[green]Created config file: {output_path}[/green]")
    console.print(
        Panel(
            "Set OPENROUTER_API_KEY (or switch provider to claude-code), then run:\n"
            f"  translate-i18n translate locales/en.json --to es,fr --config {output_path}",
            title="Next steps",
            border_style="blue",
        )
    )


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
