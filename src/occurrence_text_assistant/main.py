"""Command line entry point for the occurrence text assistant.

Analyzes a description text (argument, file or stdin) or a whole occurrence
report JSON file and prints the result as JSON on stdout.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from occurrence_text_assistant.assistant import TextAssistant
from occurrence_text_assistant.config import Settings, get_settings
from occurrence_text_assistant.models_api import AnalysisContext
from occurrence_text_assistant.report import OccurrenceReport, prepare_report


def configure_logging(log_level: str = "INFO") -> None:
    """Configure loguru logging with the specified level.

    Args:
        log_level: The logging level to use (DEBUG, INFO, WARNING, ERROR)

    """
    logger.remove()

    format_string = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )

    # stdout carries the JSON result, so logs go to stderr only
    logger.add(
        sys.stderr,
        level=log_level.upper(),
        format=format_string,
    )

    logger.debug(f"Logging configured at level {log_level.upper()}")


async def analyze_description(
    assistant: TextAssistant,
    text: str,
    occurrence_type: str | None = None,
) -> dict[str, Any]:
    """Analyze one description and return the JSON-ready output document."""
    context = AnalysisContext(occurrence_type=occurrence_type)
    analysis = await assistant.analyze_text(text, context)
    return {
        "analysis": analysis.model_dump(mode="json", by_alias=True),
        "suggestions": assistant.generate_suggestions(analysis),
        "correctedText": assistant.apply_corrections(text, analysis),
    }


async def analyze_report_file(
    assistant: TextAssistant,
    report_path: Path,
    apply: bool,
) -> dict[str, Any]:
    """Analyze the description of a report JSON file."""
    with open(report_path, encoding="utf-8") as f:
        report = OccurrenceReport.model_validate(json.load(f))
    submission = await prepare_report(report, assistant, apply=apply)
    return submission.model_dump(mode="json", by_alias=True)


def read_input_text(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    if args.text is not None:
        return args.text
    return sys.stdin.read()


def build_assistant(settings: Settings, args: argparse.Namespace) -> TextAssistant:
    assistant = TextAssistant(settings=settings, api_key=args.api_key)
    if args.no_remote:
        assistant.set_api_key(None)
        settings.openai_api_key = None
        settings.anthropic_api_key = None
        settings.openrouter_api_key = None
    return assistant


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace

    """
    parser = argparse.ArgumentParser(
        description="Quality analysis for occurrence report descriptions",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Description text to analyze (read from stdin when omitted)",
    )
    source.add_argument("--file", type=str, help="Read the description from a file")
    source.add_argument(
        "--report",
        type=str,
        help="Occurrence report JSON file whose 'descricao' field is analyzed",
    )

    parser.add_argument("--tipo", type=str, default=None, help="Occurrence type")
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="LLM API key (defaults to the configured provider key)",
    )
    parser.add_argument(
        "--no-remote",
        action="store_true",
        help="Only run the local analyzers",
    )
    parser.add_argument(
        "--no-apply",
        dest="apply",
        action="store_false",
        help="Keep the original description in the prepared report",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from settings)",
    )

    return parser.parse_args(argv)


async def run(args: argparse.Namespace, settings: Settings) -> dict[str, Any]:
    assistant = build_assistant(settings, args)
    if args.report:
        return await analyze_report_file(assistant, Path(args.report), args.apply)
    return await analyze_description(assistant, read_input_text(args), args.tipo)


def main_entry_point(argv: list[str] | None = None) -> int:
    """Main entry point for the script when run from command line.

    Returns:
        Exit code (0 for success, non-zero for errors)

    """
    try:
        args = parse_arguments(argv)
        settings = get_settings()
        configure_logging(args.log_level or settings.log_level)

        output = asyncio.run(run(args, settings))
        print(json.dumps(output, ensure_ascii=False, indent=2))
        return 0

    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    except (OSError, ValueError) as e:
        logger.error(f"Invalid input or configuration: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main_entry_point())
