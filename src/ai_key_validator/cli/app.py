"""CLI application entry point."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Annotated

import typer

from ai_key_validator import __version__
from ai_key_validator.core.errors import KeyValidatorError
from ai_key_validator.core.models import (
    BatchOptions,
    ValidationOptions,
    ValidationRequest,
    ValidationResult,
    ValidationStats,
    ValidationStrategy,
)
from ai_key_validator.core.orchestrator import KeyValidator, create_validator
from ai_key_validator.core.secret import ScopedSecret
from ai_key_validator.reporter import ConsoleReporter, JSONReporter
from ai_key_validator.utils.config import Settings, load_config
from ai_key_validator.utils.logging_setup import configure_logging

app = typer.Typer(
    name="ai-key-validator",
    help="AI Key Validator - check AI provider API keys offline and live",
    no_args_is_help=True,
    add_completion=False,
)

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_ERROR = 2

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="TOML configuration file"),
]
OutputOption = Annotated[
    str,
    typer.Option("--output", "-o", help="Output format: table, json"),
]
KeyEnvOption = Annotated[
    str | None,
    typer.Option(
        "--key-env",
        "-e",
        help="Read the key from this environment variable instead of prompting",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", help="Show suggestions, metadata and debug logs"),
]


def _load_settings(config: Path | None, verbose: bool) -> Settings:
    """Load settings and install logging, exiting with code 2 on bad config."""
    try:
        settings = load_config(config)
    except KeyValidatorError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_ERROR) from None

    logging_settings = settings.logging
    if verbose:
        logging_settings = logging_settings.model_copy(update={"level": "DEBUG"})
    configure_logging(logging_settings)
    return settings


def _check_output(output: str) -> str:
    output = output.lower()
    if output not in ("table", "json"):
        typer.echo(f"Invalid output format: {output}", err=True)
        typer.echo("Valid formats: table, json", err=True)
        raise typer.Exit(code=EXIT_ERROR)
    return output


def _read_key(key_env: str | None) -> ScopedSecret:
    """Read a key from the environment or a hidden prompt."""
    if key_env:
        value = os.environ.get(key_env)
        if not value:
            typer.echo(f"Environment variable {key_env} is not set", err=True)
            raise typer.Exit(code=EXIT_ERROR)
    else:
        value = typer.prompt("API key", hide_input=True)
    return ScopedSecret(value.strip())


def _read_batch_file(file_path: Path) -> list[tuple[str, str]]:
    """Read ``provider key`` pairs, ignoring comments and empty lines."""
    entries: list[tuple[str, str]] = []
    for number, line in enumerate(file_path.read_text().splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(None, 1)
        if len(parts) != 2:
            typer.echo(f"{file_path}:{number}: expected 'provider key'", err=True)
            raise typer.Exit(code=EXIT_ERROR)
        entries.append((parts[0], parts[1].strip()))
    return entries


def exit_code_for(results: list[ValidationResult]) -> int:
    """Map results to the process exit code.

    Any error outcome wins over an invalid key; all valid exits 0.
    """
    statuses = {ConsoleReporter.status_of(r) for r in results}
    if "error" in statuses:
        return EXIT_ERROR
    if "invalid" in statuses:
        return EXIT_INVALID
    return EXIT_VALID


def _build_validator(settings: Settings) -> KeyValidator:
    try:
        return create_validator(settings)
    except KeyValidatorError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=EXIT_ERROR) from None


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"AI Key Validator v{__version__}")


@app.command()
def providers(config: ConfigOption = None) -> None:
    """List supported providers and their key formats."""
    settings = _load_settings(config, verbose=False)
    validator = _build_validator(settings)
    ConsoleReporter().print_providers(validator.registry.all())
    typer.echo(f"Total: {len(validator.registry)} providers")


@app.command()
def pattern(
    provider: Annotated[str, typer.Argument(help="Provider id or alias")],
    key_env: KeyEnvOption = None,
    output: OutputOption = "table",
) -> None:
    """Check a key's format without contacting the provider."""
    output = _check_output(output)
    validator = _build_validator(_load_settings(None, verbose=False))

    with _read_key(key_env) as secret:
        label = secret.masked()
        result = validator.validate_pattern(provider, secret)

    if output == "json":
        typer.echo(JSONReporter(tool_version=__version__).pattern_json(result, label))
    else:
        ConsoleReporter().print_pattern(result, label)

    raise typer.Exit(code=EXIT_VALID if result.valid else EXIT_INVALID)


@app.command()
def validate(
    provider: Annotated[str, typer.Argument(help="Provider id or alias")],
    key_env: KeyEnvOption = None,
    strategy: Annotated[
        str,
        typer.Option("--strategy", "-s", help="auto, live or pattern_only"),
    ] = "auto",
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", "-t", help="Request timeout in seconds"),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Skip the cache lookup"),
    ] = False,
    config: ConfigOption = None,
    output: OutputOption = "table",
    verbose: VerboseOption = False,
) -> None:
    """Validate a single key against its provider.

    Examples:
        ai-key-validator validate openai
        ai-key-validator validate anthropic --key-env ANTHROPIC_API_KEY -o json
    """
    output = _check_output(output)
    try:
        chosen = ValidationStrategy(strategy.lower())
    except ValueError:
        typer.echo(f"Invalid strategy: {strategy}", err=True)
        raise typer.Exit(code=EXIT_ERROR) from None

    settings = _load_settings(config, verbose)
    options = ValidationOptions(timeout=timeout, bypass_cache=no_cache, strategy=chosen)

    with _read_key(key_env) as secret:
        label = secret.masked()

        async def run() -> ValidationResult:
            async with _build_validator(settings) as validator:
                return await validator.validate(provider, secret, options)

        result = asyncio.run(run())

    if output == "json":
        typer.echo(JSONReporter(tool_version=__version__).generate_json([result], [label]))
    else:
        ConsoleReporter(verbose=verbose).print_results([result], [label])

    raise typer.Exit(code=exit_code_for([result]))


@app.command()
def batch(
    file: Annotated[
        Path,
        typer.Argument(
            help="File with one 'provider key' pair per line",
            exists=True,
            dir_okay=False,
        ),
    ],
    concurrency: Annotated[
        int | None,
        typer.Option("--concurrency", "-j", min=1, help="Parallel validations"),
    ] = None,
    stop_on_error: Annotated[
        bool,
        typer.Option("--stop-on-error", help="Skip remaining keys after the first failure"),
    ] = False,
    strategy: Annotated[
        str,
        typer.Option("--strategy", "-s", help="auto, live or pattern_only"),
    ] = "auto",
    config: ConfigOption = None,
    output: OutputOption = "table",
    output_file: Annotated[
        Path | None,
        typer.Option("--output-file", "-f", help="Write JSON results to file"),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Validate every key listed in a file."""
    output = _check_output(output)
    try:
        chosen = ValidationStrategy(strategy.lower())
    except ValueError:
        typer.echo(f"Invalid strategy: {strategy}", err=True)
        raise typer.Exit(code=EXIT_ERROR) from None

    settings = _load_settings(config, verbose)
    secrets = [(name, ScopedSecret(key)) for name, key in _read_batch_file(file)]
    labels = [secret.masked() for _, secret in secrets]
    requests = [
        ValidationRequest(provider=name, key=secret, options=ValidationOptions(strategy=chosen))
        for name, secret in secrets
    ]
    reporter = ConsoleReporter(verbose=verbose)

    async def run() -> list[ValidationResult]:
        async with _build_validator(settings) as validator:
            if output != "table":
                return await validator.validate_batch(
                    requests,
                    BatchOptions(concurrency=concurrency, stop_on_error=stop_on_error),
                )
            with reporter.create_progress() as progress:
                task = progress.add_task("Validating keys", total=len(requests))

                def on_progress(completed: int, total: int) -> None:
                    progress.update(task, completed=completed, total=total)

                return await validator.validate_batch(
                    requests,
                    BatchOptions(
                        concurrency=concurrency,
                        stop_on_error=stop_on_error,
                        on_progress=on_progress,
                    ),
                )

    try:
        results = asyncio.run(run())
    finally:
        for _, secret in secrets:
            secret.release()

    json_reporter = JSONReporter(tool_version=__version__)
    if output_file:
        json_reporter.write(results, output_file, labels)
        typer.echo(f"Results written to {output_file}")
    elif output == "json":
        typer.echo(json_reporter.generate_json(results, labels))
    else:
        reporter.print_results(results, labels)
        reporter.print_summary(ValidationStats.from_results(results))

    raise typer.Exit(code=exit_code_for(results))


if __name__ == "__main__":
    app()
