"""CLI entrypoint for the country selector."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Sequence

from .config import SelectorConfig, load_config
from .errors import ConfigurationError
from .models import LoadState
from .selector import CountrySelector
from .util import setup_logging, write_json
from .validate import format_report_lines, run_validation

LOGGER = logging.getLogger("countryselector.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="countryselector",
        description="Load ISO 3166 countries and their subdivisions.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--config",
            default=None,
            help="Path to YAML config. Defaults to the packaged datasets.",
        )
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    countries_p = subparsers.add_parser("countries", help="List countries with subdivision counts.")
    add_common(countries_p)

    subs_p = subparsers.add_parser("subdivisions", help="Show the subdivisions of one country.")
    add_common(subs_p)
    subs_p.add_argument("--country", required=True, help="Country code, e.g. US.")

    validate_p = subparsers.add_parser("validate", help="Load both datasets and report problems.")
    add_common(validate_p)
    validate_p.add_argument(
        "--report",
        default=None,
        help="Optional path for a JSON validation report.",
    )

    return parser


def _load_and_setup(args: argparse.Namespace) -> SelectorConfig:
    cfg = load_config(args.config) if args.config else SelectorConfig.default()
    setup_logging(cfg.logging.file, verbose=args.verbose, level=cfg.logging.level)
    return cfg


async def _load(cfg: SelectorConfig) -> CountrySelector | None:
    selector = CountrySelector(cfg)
    state = await selector.init()
    if state is LoadState.FAILED:
        LOGGER.error("Loading failed: %s", selector.error().value)
        return None
    return selector


async def _run_countries(cfg: SelectorConfig) -> int:
    selector = await _load(cfg)
    if selector is None:
        return 1
    index = selector.index
    for country in selector.available_countries():
        label = index.label_of(country) or "-"
        count = len(index.subdivisions_of(country))
        print(f"{country.code}\t{country.name}\t{count}\t{label}")
    return 0


async def _run_subdivisions(cfg: SelectorConfig, *, code: str) -> int:
    selector = await _load(cfg)
    if selector is None:
        return 1
    country = selector.find_country(code)
    if country is None:
        LOGGER.error("Unknown country code: %s", code)
        return 1
    selector.set_country(country)
    label = selector.subdivision_label().value
    subdivisions = selector.subdivisions()
    if not subdivisions:
        LOGGER.info("%s has no subdivisions.", country.name)
        return 0
    print(f"{country.name} ({country.code}): {len(subdivisions)} x {label}")
    for subdivision in subdivisions:
        print(f"  {subdivision.code}\t{subdivision.name}")
    return 0


async def _run_validate(cfg: SelectorConfig, *, report_path: Path | None) -> int:
    report = await run_validation(CountrySelector(cfg))
    for line in format_report_lines(report):
        LOGGER.info(line)
    if report_path is not None:
        write_json(report_path, report.to_dict())
        LOGGER.info("Validation report written to %s", report_path)
    return 0 if report.ok else 1


async def _dispatch(args: argparse.Namespace, cfg: SelectorConfig) -> int:
    command = str(args.command)
    if command == "countries":
        return await _run_countries(cfg)
    if command == "subdivisions":
        return await _run_subdivisions(cfg, code=str(args.country))
    if command == "validate":
        report_path = Path(args.report) if args.report else None
        return await _run_validate(cfg, report_path=report_path)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = _load_and_setup(args)
        return asyncio.run(_dispatch(args, cfg))
    except ConfigurationError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
