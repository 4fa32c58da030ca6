"""Read -> parse -> eliminate -> render -> format -> write, for one file."""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..analyzer.parser import LanguageParser
from ..config import Config, get_config
from .engine import EliminationEngine
from .formatter import PrettierFormatter, strip_blank_lines
from .report import EliminationReport


@dataclass
class CleanResult:
    """Outcome of cleaning one source text."""

    output: str
    report: EliminationReport
    output_path: Optional[Path] = None
    written: bool = False


def derive_output_path(input_path: str | Path, suffix: str = ".cleaned") -> Path:
    """``dir/name.ext`` -> ``dir/name<suffix>.ext``."""
    input_path = Path(input_path)
    return input_path.with_name(f"{input_path.stem}{suffix}{input_path.suffix}")


def clean_source(
    source: str,
    file_path: str | Path = "input.js",
    config: Optional[Config] = None,
    format_output: Optional[bool] = None,
    until_stable: Optional[bool] = None,
) -> CleanResult:
    """Run the elimination engine over source text.

    Args:
        source: Program text
        file_path: Name used to pick the grammar and prettier parser
        config: Configuration; the global one if omitted
        format_output: Override config.format_output
        until_stable: Override config.until_stable

    Returns:
        CleanResult with the rendered (and possibly formatted) text

    Raises:
        ParseError: If the source does not parse
        FormatterError: If formatting was requested and failed
    """
    config = config or get_config()
    if format_output is None:
        format_output = config.format_output
    if until_stable is None:
        until_stable = config.until_stable

    parser = LanguageParser.from_file_extension(file_path, grammar=config.grammar)
    tree = parser.parse_source(source, path=str(file_path))

    engine = EliminationEngine(until_stable=until_stable, max_passes=config.max_passes)
    report = engine.run(tree)

    output = strip_blank_lines(tree.render())
    if format_output:
        formatter = PrettierFormatter(config.prettier_command, timeout=config.format_timeout)
        output = formatter.format(output, file_path)
    elif not output.endswith('\n'):
        output += '\n'

    return CleanResult(output=output, report=report)


def clean_file(
    input_path: str | Path,
    output_path: Optional[str | Path] = None,
    config: Optional[Config] = None,
    format_output: Optional[bool] = None,
    until_stable: Optional[bool] = None,
    dry_run: bool = False,
) -> CleanResult:
    """Clean one file and write the result next to it.

    Nothing is written unless every step succeeds.

    Args:
        input_path: UTF-8 source file
        output_path: Destination; derived from input_path if omitted
        config: Configuration; the global one if omitted
        format_output: Override config.format_output
        until_stable: Override config.until_stable
        dry_run: Do everything except writing the output

    Raises:
        OSError: If the input cannot be read or the output written
        ParseError: If the source does not parse
        FormatterError: If formatting failed
    """
    config = config or get_config()
    input_path = Path(input_path)
    source = input_path.read_text(encoding='utf-8')

    result = clean_source(
        source,
        file_path=input_path,
        config=config,
        format_output=format_output,
        until_stable=until_stable,
    )

    if output_path is None:
        output_path = derive_output_path(input_path, config.output_suffix)
    result.output_path = Path(output_path)

    if not dry_run:
        result.output_path.write_text(result.output, encoding='utf-8')
        result.written = True
    return result
