"""CLI entry point for curl-converter."""

import logging
from pathlib import Path

import click

from curl_converter.convert import (
    ConvertOptions,
    ConvertResult,
    convert_curl_to_yaml,
    convert_script_to_yaml,
    convert_yaml_to_curl,
)
from curl_converter.parser.curl import supported_flags
from curl_converter.parser.detect import detect_format


def _convert_options(func):
    """Options shared by every convert subcommand."""
    func = click.option("--debug", is_flag=True, help="Print tokens, AST and IR as JSON to stderr.")(func)
    func = click.option("--batch", is_flag=True, help="Always emit a requests: list.")(func)
    func = click.option("--loss-report/--no-loss-report", default=True, help="Write warnings as YAML comments.")(func)
    func = click.option("--pretty/--compact", default=True, help="Block-style or inline JSON bodies.")(func)
    func = click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Write the result to this file instead of stdout.")(func)
    return func


def _emit(result: ConvertResult, output: Path | None) -> None:
    """Write the result and report warnings on stderr."""
    for warning in result.warnings:
        click.echo(f"Warning: {warning}", err=True)

    if result.debug is not None:
        click.echo(result.debug.model_dump_json(indent=2), err=True)

    if not result.output:
        return

    if output is None:
        click.echo(result.output.rstrip("\n"))
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    text = result.output if result.output.endswith("\n") else result.output + "\n"
    output.write_text(text, encoding="utf-8")
    click.echo(f"Saved to {output}", err=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """curl-converter: translate between curl commands and YAML request files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.group()
def convert():
    """Convert curl commands, shell scripts and YAML request files."""
    pass


@convert.command("curl")
@click.argument("command")
@_convert_options
def convert_curl(command: str, output: Path | None, pretty: bool, loss_report: bool, batch: bool, debug: bool):
    """Convert a curl command string to YAML."""
    options = ConvertOptions(pretty=pretty, loss_report=loss_report, batch=batch, debug=debug)
    _emit(convert_curl_to_yaml(command, options), output)


@convert.command("file")
@click.argument("script_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_convert_options
def convert_file(script_path: Path, output: Path | None, pretty: bool, loss_report: bool, batch: bool, debug: bool):
    """Convert the curl commands in a shell script to YAML."""
    options = ConvertOptions(pretty=pretty, loss_report=loss_report, batch=batch, debug=debug)
    script = script_path.read_text(encoding="utf-8")
    _emit(convert_script_to_yaml(script, options), output)


@convert.command("yaml")
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_convert_options
def convert_yaml(doc_path: Path, output: Path | None, pretty: bool, loss_report: bool, batch: bool, debug: bool):
    """Convert a YAML request file to curl commands."""
    options = ConvertOptions(pretty=pretty, loss_report=loss_report, batch=batch, debug=debug)
    text = doc_path.read_text(encoding="utf-8")
    _emit(convert_yaml_to_curl(text, options), output)


@convert.command("auto")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_convert_options
def convert_auto(path: Path, output: Path | None, pretty: bool, loss_report: bool, batch: bool, debug: bool):
    """Detect the file type and convert in the matching direction."""
    fmt = detect_format(path)
    click.echo(f"Converting {path} (format: {fmt})...", err=True)
    options = ConvertOptions(pretty=pretty, loss_report=loss_report, batch=batch, debug=debug)
    text = path.read_text(encoding="utf-8")
    if fmt == "yaml":
        _emit(convert_yaml_to_curl(text, options), output)
    else:
        _emit(convert_script_to_yaml(text, options), output)


@main.command()
def flags():
    """List the curl flags the parser understands."""
    for flag, arity in supported_flags():
        suffix = " <value>" if arity == "value" else ""
        click.echo(f"{flag}{suffix}")
