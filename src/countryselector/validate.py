"""Dataset validation built on a full pipeline run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from .errors import ConfigurationError
from .models import LoadState
from .selector import CountrySelector


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    country_count: int = 0
    subdivision_count: int = 0
    unresolved_codes: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "infos": list(self.infos),
            "country_count": self.country_count,
            "subdivision_count": self.subdivision_count,
            "unresolved_codes": list(self.unresolved_codes),
        }


async def run_validation(selector: CountrySelector) -> ValidationReport:
    """Run the load pipeline once and summarize what it produced."""
    report = ValidationReport()
    try:
        state = await selector.init()
    except ConfigurationError as exc:
        report.add_error(f"Configuration error: {exc}")
        return report

    countries = selector.available_countries()
    report.country_count = len(countries)
    if state is LoadState.FAILED:
        report.add_error(f"Load failed: {selector.error().value}")
        return report

    index = selector.index
    report.subdivision_count = index.subdivision_count
    report.unresolved_codes = index.unresolved_codes
    report.add_info(f"Loaded {report.country_count} countries")
    report.add_info(
        f"Indexed {report.subdivision_count} subdivisions for "
        f"{len(index.subdivisions)} countries"
    )
    if not countries:
        report.add_error("Country dataset is empty")
    if index.unresolved_codes:
        report.add_warning(
            "Subdivision groups reference unknown country codes: "
            + _format_code_list(list(index.unresolved_codes))
        )
    without = [country.code for country in countries if not index.subdivisions_of(country)]
    if without:
        report.add_info(
            f"{len(without)} countries have no subdivisions: {_format_code_list(without)}"
        )
    return report


def format_report_lines(report: ValidationReport) -> Sequence[str]:
    lines: list[str] = []
    for msg in report.infos:
        lines.append(f"[INFO] {msg}")
    for msg in report.warnings:
        lines.append(f"[WARN] {msg}")
    for msg in report.errors:
        lines.append(f"[ERROR] {msg}")
    if report.ok:
        lines.append("[OK] Validation completed with no errors.")
    return lines


def _format_code_list(values: list[str], limit: int = 12) -> str:
    if len(values) <= limit:
        return ", ".join(values)
    return ", ".join(values[:limit]) + f", ... (+{len(values) - limit} more)"
