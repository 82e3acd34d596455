# eventcatalog_openapi/cli.py
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from eventcatalog_openapi.clients.http_utils import close_http_client
from eventcatalog_openapi.config import Settings, settings
from eventcatalog_openapi.errors import ConfigurationError, GeneratorError
from eventcatalog_openapi.infra.logging import setup_logging
from eventcatalog_openapi.services.generator import GeneratorReport, parse_options, run_generator

logger = logging.getLogger("eventcatalog_openapi.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def load_options_file(path: str) -> Dict[str, Any]:
    file = Path(path)
    if not file.is_file():
        raise ConfigurationError(f"Options file not found: {path}")
    try:
        data = yaml.safe_load(file.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Options file is not valid YAML/JSON: {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file must contain a mapping: {path}")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eventcatalog-openapi",
        description="Generate catalog domains, services and messages from OpenAPI documents.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="process every service listed in the options file")
    run.add_argument("--config", "-c", required=True, help="YAML or JSON generator options")
    run.add_argument("--project-dir", help="catalog root (defaults to $PROJECT_DIR)")
    run.add_argument("--save-parsed-spec-file", dest="save_parsed_spec_file", action="store_true", default=None,
                     help="store the dereferenced document instead of the raw file")
    run.add_argument("--debug", action="store_true", help="verbose logging")
    return parser


def _summarise(report: GeneratorReport) -> None:
    for item in report.processed:
        counts = ", ".join(f"{kind}={len(ids)}" for kind, ids in sorted(item.messages.items())) or "no messages"
        logger.info("%s -> %s v%s (%s; %s)", item.path, item.service_id, item.version,
                    item.outcome.value if item.outcome else "-", counts)
    for item in report.skipped:
        logger.warning("%s skipped: %s", item.path, item.error)


async def _run(args: argparse.Namespace) -> GeneratorReport:
    raw = load_options_file(args.config)
    if args.save_parsed_spec_file is not None:
        raw["saveParsedSpecFile"] = True
    if args.debug:
        raw["debug"] = True
    options = parse_options(raw)

    cfg = Settings(project_dir=args.project_dir) if args.project_dir else settings
    setup_logging(cfg.service_name, level_name=cfg.log_level, debug=options.debug)
    try:
        return await run_generator(options, settings=cfg)
    finally:
        await close_http_client()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.service_name, level_name=settings.log_level, debug=getattr(args, "debug", False))

    try:
        report = asyncio.run(_run(args))
    except ConfigurationError as e:
        logger.error("%s", e)
        return EXIT_CONFIG
    except GeneratorError as e:
        logger.error("%s", e)
        return EXIT_FAILED

    _summarise(report)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
