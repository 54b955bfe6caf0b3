"""Command-line interface for the impact screening engine.

Provides subcommands for screening submissions, verifying milestones,
asking the support bot, translating text and analysing documents.  Every
subcommand prints its result as JSON on stdout.

Entry point
-----------
The ``main()`` function is registered as a console script in
``pyproject.toml``::

    [project.scripts]
    impact-screening = "impact_screening.cli:main"

Usage examples::

    impact-screening screen-project --input project.json
    impact-screening screen-ngo --input ngo.json --config engine.json
    impact-screening verify-milestone --milestone-id m-1 --input evidence.json
    impact-screening support --message "How do I withdraw funds?" --language en
    impact-screening translate --text "Hola" --target en
    impact-screening analyze-document --url https://x/doc.pdf --type registration
    impact-screening info

Endpoints and cache come from the environment (``VLLM_API_URL``,
``TRANSLATOR_API_URL``, ``ANALYZER_API_URL``, ``OPENAI_API_KEY``,
``REDIS_URL``, ``CACHE_BACKEND``), read from a ``.env`` file when present,
unless ``--config`` names a JSON config file.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from impact_screening.domain.entities import NGOSubmission, ProjectSubmission
from impact_screening.domain.values import EvidenceItem
from impact_screening.infrastructure.config import EngineConfig, load_config_from_json
from impact_screening.services.engine import ScreeningEngine
from impact_screening.services.factory import build_engine

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="impact-screening",
        description=(
            "Impact screening engine -- score projects and NGOs, verify "
            "milestones, and run support, translation and document checks."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Show package version and exit.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON engine config.  Defaults to environment variables.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # -- screening ---------------------------------------------------------
    project_parser = subparsers.add_parser(
        "screen-project",
        help="Screen a project submission.",
        description="Score a project on feasibility, impact, risk, innovation and sustainability.",
    )
    project_parser.add_argument(
        "--input", type=str, required=True, help="Path to the project JSON file."
    )

    ngo_parser = subparsers.add_parser(
        "screen-ngo",
        help="Screen an NGO submission.",
        description="Score an NGO on credibility, impact and compliance.",
    )
    ngo_parser.add_argument("--input", type=str, required=True, help="Path to the NGO JSON file.")

    # -- verify-milestone --------------------------------------------------
    verify_parser = subparsers.add_parser(
        "verify-milestone",
        help="Verify a milestone from its evidence.",
        description="Analyse each evidence item, then ask the verifier for a verdict.",
    )
    verify_parser.add_argument("--milestone-id", type=str, required=True, help="Milestone id.")
    verify_parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Path to a JSON list of evidence items ({type, url, description}).",
    )

    # -- support -----------------------------------------------------------
    support_parser = subparsers.add_parser(
        "support",
        help="Ask the support bot a question.",
    )
    support_parser.add_argument("--message", type=str, required=True, help="The question.")
    support_parser.add_argument(
        "--language", type=str, default="en", help="Language code. (default: en)"
    )
    support_parser.add_argument("--user-id", type=str, default=None, help="Caller id.")

    # -- translate ---------------------------------------------------------
    translate_parser = subparsers.add_parser("translate", help="Translate text.")
    translate_parser.add_argument("--text", type=str, required=True, help="Text to translate.")
    translate_parser.add_argument(
        "--target", type=str, required=True, help="Target language code."
    )
    translate_parser.add_argument(
        "--source", type=str, default=None, help="Source language code. (default: auto)"
    )

    # -- analyze-document --------------------------------------------------
    document_parser = subparsers.add_parser(
        "analyze-document",
        help="Check a document's authenticity and extract its data.",
    )
    document_parser.add_argument("--url", type=str, required=True, help="Document URL.")
    document_parser.add_argument("--type", type=str, required=True, help="Document type.")

    # -- info --------------------------------------------------------------
    subparsers.add_parser(
        "info",
        help="Show version, effective configuration and dependency status.",
    )

    return parser


# =========================================================================
# Helpers
# =========================================================================


def _load_config(args: argparse.Namespace) -> EngineConfig:
    if args.config:
        return load_config_from_json(args.config)
    return EngineConfig.from_env()


def _read_json(path: str) -> Any:
    input_path = Path(path)
    if not input_path.exists():
        raise FileNotFoundError(f"file not found: {input_path}")
    with open(input_path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _run_with_engine(
    args: argparse.Namespace,
    action: Callable[[ScreeningEngine], Awaitable[Any]],
) -> int:
    """Build an engine, run *action* on it, print the result and close it."""
    config = _load_config(args)

    async def runner() -> Any:
        engine = build_engine(config)
        try:
            return await action(engine)
        finally:
            await engine.aclose()

    result = asyncio.run(runner())
    _print_json(result.to_dict())
    return 0


# =========================================================================
# Subcommand handlers
# =========================================================================


def _cmd_screen_project(args: argparse.Namespace) -> int:
    """Handle the ``screen-project`` subcommand."""
    project = ProjectSubmission.from_dict(_read_json(args.input))
    return _run_with_engine(args, lambda engine: engine.screen_project(project))


def _cmd_screen_ngo(args: argparse.Namespace) -> int:
    """Handle the ``screen-ngo`` subcommand."""
    ngo = NGOSubmission.from_dict(_read_json(args.input))
    return _run_with_engine(args, lambda engine: engine.screen_ngo(ngo))


def _cmd_verify_milestone(args: argparse.Namespace) -> int:
    """Handle the ``verify-milestone`` subcommand."""
    data = _read_json(args.input)
    if isinstance(data, dict):
        data = data.get("evidence", [])
    evidence = [EvidenceItem.from_dict(item) for item in data]
    return _run_with_engine(
        args, lambda engine: engine.verify_milestone(args.milestone_id, evidence)
    )


def _cmd_support(args: argparse.Namespace) -> int:
    """Handle the ``support`` subcommand."""
    return _run_with_engine(
        args,
        lambda engine: engine.process_support_message(args.message, args.language, args.user_id),
    )


def _cmd_translate(args: argparse.Namespace) -> int:
    """Handle the ``translate`` subcommand."""
    return _run_with_engine(
        args, lambda engine: engine.translate_text(args.text, args.target, args.source)
    )


def _cmd_analyze_document(args: argparse.Namespace) -> int:
    """Handle the ``analyze-document`` subcommand."""
    return _run_with_engine(args, lambda engine: engine.analyze_document(args.url, args.type))


def _cmd_info(args: argparse.Namespace) -> int:
    """Handle the ``info`` subcommand."""
    from impact_screening import __version__

    config = _load_config(args)
    dependencies = {}
    for pkg in ("httpx", "pydantic", "numpy", "langchain_core", "redis", "dotenv"):
        try:
            mod = __import__(pkg)
            dependencies[pkg] = getattr(mod, "__version__", "installed")
        except ImportError:
            dependencies[pkg] = None

    config_data = config.to_dict()
    if config_data["endpoints"].get("api_key"):
        config_data["endpoints"]["api_key"] = "***"

    _print_json(
        {
            "version": __version__,
            "config": config_data,
            "dependencies": dependencies,
        }
    )
    return 0


# =========================================================================
# Main entry point
# =========================================================================


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.version:
        from impact_screening import __version__

        print(f"impact-screening {__version__}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    load_dotenv()

    handlers: dict[str, Any] = {
        "screen-project": _cmd_screen_project,
        "screen-ngo": _cmd_screen_ngo,
        "verify-milestone": _cmd_verify_milestone,
        "support": _cmd_support,
        "translate": _cmd_translate,
        "analyze-document": _cmd_analyze_document,
        "info": _cmd_info,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        exit_code = handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    except Exception as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)
