"""
esil2ir - ESIL Translator Command-Line Interface
================================================

This module implements the command-line interface for the ESIL translator.
It turns ESIL expressions into three-operand instructions, one per line.

Usage Examples
--------------
Translate expressions given as arguments:
    $ esil2ir "rax,rbx,+=" "0,rcx,="

Translate a file with one expression per line:
    $ esil2ir -f trace.esil

Read expressions from stdin:
    $ r2 -qc 'pie 10~[1]' binary | esil2ir

JSON output with diagnostics:
    $ esil2ir --json "rax,+"

All expressions share one parser, so temporaries keep counting and values
left on the stack by one expression are available to the next.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from esil_ir import __version__
from esil_ir.cli.errors import ExitCode, handle_cli_exception
from esil_ir.config import TranslatorConfig
from esil_ir.parser import ParseResult, ParseStatus
from esil_ir.registers import list_architectures


def _read_expressions(lines) -> list[str]:
    """Non-empty, non-comment lines with surrounding whitespace removed."""
    expressions = []
    for line in lines:
        line = line.strip()
        if line and not line.startswith("#"):
            expressions.append(line)
    return expressions


def _echo_result(result: ParseResult) -> None:
    for inst in result.instructions:
        click.echo(str(inst))
    for diag in result.diagnostics:
        click.echo(str(diag), err=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.CRITICAL,
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument("expressions", nargs=-1)
@click.option(
    "-f", "--file",
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read ESIL expressions from a file, one per line",
)
@click.option(
    "-a", "--arch",
    type=str,
    default=None,
    help="Architecture profile (default: $ESIL_IR_ARCH or x86_64)",
)
@click.option(
    "--default-size",
    type=click.IntRange(min=1),
    default=None,
    help="Width in bits for constants and unknown operands",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Stop at the first translation problem (with --json, nothing is printed)",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Output instructions and diagnostics as JSON",
)
@click.option(
    "--list-arches",
    is_flag=True,
    help="List available architecture profiles and exit",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (translator debug log on stderr)",
)
@click.version_option(version=__version__, prog_name="esil2ir")
def main(
    expressions: tuple[str, ...],
    input_file: Optional[Path],
    arch: Optional[str],
    default_size: Optional[int],
    strict: bool,
    as_json: bool,
    list_arches: bool,
    verbose: bool,
) -> None:
    """
    Translate ESIL expressions into three-operand instructions.

    EXPRESSIONS are comma-separated ESIL strings. Without arguments or
    --file, expressions are read from stdin, one per line. Blank lines
    and lines starting with '#' are skipped.

    \b
    Examples:
        esil2ir "rax,rbx,+="          # tmp_1 = rax + rbx / rax = tmp_1
        esil2ir -f trace.esil --json  # Translate a file to JSON
        esil2ir -a x86_64 --strict "rax,+"
    """
    _configure_logging(verbose)

    if list_arches:
        for name in list_architectures():
            click.echo(name)
        sys.exit(ExitCode.SUCCESS)

    config = TranslatorConfig.from_env()
    if arch is not None:
        config.architecture = arch
    if default_size is not None:
        config.default_size = default_size
    if strict:
        config.strict = True

    if expressions and input_file is not None:
        click.echo("Error: give expressions as arguments or --file, not both", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    try:
        if expressions:
            sources = list(expressions)
        elif input_file is not None:
            sources = _read_expressions(
                input_file.read_text(encoding="utf-8").splitlines()
            )
        else:
            sources = _read_expressions(click.get_text_stream("stdin"))

        if not sources:
            click.echo("Error: no ESIL expressions to translate", err=True)
            sys.exit(ExitCode.INVALID_ARGS)

        parser = config.create_parser()
        if verbose:
            click.echo(
                f"Architecture: {parser.profile.name}, "
                f"default size: {parser.default_size} bits",
                err=True,
            )

        results: list[ParseResult] = []
        for expr in sources:
            result = parser.parse(expr)
            results.append(result)
            # Earlier output must survive a strict-mode error
            if not as_json:
                _echo_result(result)

    except SystemExit:
        raise
    except Exception as e:
        handle_cli_exception(e, verbose)

    if as_json:
        document = {
            "architecture": parser.profile.name,
            "results": [result.to_dict() for result in results],
        }
        click.echo(json.dumps(document, indent=2))

    if any(result.status is ParseStatus.FAILED for result in results):
        sys.exit(ExitCode.TRANSLATION_ERROR)
    sys.exit(ExitCode.SUCCESS)


if __name__ == "__main__":
    main()
