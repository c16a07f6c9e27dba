"""Typed configuration loader for `selector.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .errors import ConfigurationError
from .reader import RecordReader, create_reader, is_url

PACKAGE_DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_COUNTRIES_RESOURCE = "iso_3166.yaml"
DEFAULT_SUBDIVISIONS_RESOURCE = "iso_3166_2.yaml"

_FORMATS = {"yaml", "xml"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ConfigurationError(f"Expected number for '{field_name}'")


def _resource_from_cfg(value: Any, field_name: str, root_dir: Path) -> str:
    raw = _str(value, field_name)
    if is_url(raw):
        return raw
    p = Path(raw).expanduser()
    return str(p if p.is_absolute() else root_dir / p)


@dataclass(frozen=True, slots=True)
class ResourcesConfig:
    countries: str
    subdivisions: str
    format: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> ResourcesConfig:
        fmt = _str(raw.get("format", "yaml"), "resources.format").casefold()
        if fmt not in _FORMATS:
            raise ConfigurationError(
                "resources.format must be one of: " + ", ".join(sorted(_FORMATS))
            )
        return cls(
            countries=_resource_from_cfg(
                raw.get("countries", str(PACKAGE_DATA_DIR / DEFAULT_COUNTRIES_RESOURCE)),
                "resources.countries",
                root_dir,
            ),
            subdivisions=_resource_from_cfg(
                raw.get("subdivisions", str(PACKAGE_DATA_DIR / DEFAULT_SUBDIVISIONS_RESOURCE)),
                "resources.subdivisions",
                root_dir,
            ),
            format=fmt,
        )

    @classmethod
    def default(cls) -> ResourcesConfig:
        return cls(
            countries=str(PACKAGE_DATA_DIR / DEFAULT_COUNTRIES_RESOURCE),
            subdivisions=str(PACKAGE_DATA_DIR / DEFAULT_SUBDIVISIONS_RESOURCE),
            format="yaml",
        )


@dataclass(frozen=True, slots=True)
class HttpConfig:
    request_timeout_s: float = 30.0
    user_agent: str = "countryselector/0.1"

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> HttpConfig:
        timeout = _float(raw.get("request_timeout_s", 30.0), "http.request_timeout_s")
        if timeout <= 0:
            raise ConfigurationError("http.request_timeout_s must be > 0")
        return cls(
            request_timeout_s=timeout,
            user_agent=_str(raw.get("user_agent", "countryselector/0.1"), "http.user_agent"),
        )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "INFO"
    file: Path | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> LoggingConfig:
        level = _str(raw.get("level", "INFO"), "logging.level").upper()
        if level not in _LOG_LEVELS:
            raise ConfigurationError(
                "logging.level must be one of: " + ", ".join(sorted(_LOG_LEVELS))
            )
        file_raw = raw.get("file")
        log_file: Path | None = None
        if file_raw is not None:
            p = Path(_str(file_raw, "logging.file"))
            log_file = p if p.is_absolute() else root_dir / p
        return cls(level=level, file=log_file)


@dataclass(frozen=True, slots=True)
class SelectorConfig:
    source_path: Path | None
    resources: ResourcesConfig
    http: HttpConfig
    logging: LoggingConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path) -> SelectorConfig:
        root_dir = source_path.parent.resolve()
        return cls(
            source_path=source_path.resolve(),
            resources=ResourcesConfig.from_mapping(
                _mapping(raw.get("resources"), "resources"), root_dir
            ),
            http=HttpConfig.from_mapping(_mapping(raw.get("http"), "http")),
            logging=LoggingConfig.from_mapping(_mapping(raw.get("logging"), "logging"), root_dir),
        )

    @classmethod
    def default(cls) -> SelectorConfig:
        """Configuration pointing at the datasets packaged with the library."""
        return cls(
            source_path=None,
            resources=ResourcesConfig.default(),
            http=HttpConfig(),
            logging=LoggingConfig(),
        )

    def create_reader(self) -> RecordReader:
        return create_reader(
            self.resources.format,
            request_timeout_s=self.http.request_timeout_s,
            user_agent=self.http.user_agent,
        )


def load_config(path: str | Path) -> SelectorConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise ConfigurationError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {cfg_path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Top-level config must be a YAML mapping")
    return SelectorConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
