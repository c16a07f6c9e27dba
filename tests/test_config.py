from pathlib import Path

import pytest
import yaml

from countryselector.config import PACKAGE_DATA_DIR, SelectorConfig, load_config
from countryselector.errors import ConfigurationError
from countryselector.reader import XmlRecordReader, YamlRecordReader


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "selector.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_relative_resources_resolve_against_config_dir(tmp_path):
    path = _write(
        tmp_path,
        {
            "resources": {
                "countries": "data/iso_3166.xml",
                "subdivisions": "data/iso_3166_2.xml",
                "format": "XML",
            },
            "logging": {"level": "debug", "file": "logs/selector.log"},
        },
    )
    cfg = load_config(path)
    assert cfg.resources.countries == str(tmp_path.resolve() / "data" / "iso_3166.xml")
    assert cfg.resources.format == "xml"
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.file == tmp_path.resolve() / "logs" / "selector.log"
    assert isinstance(cfg.create_reader(), XmlRecordReader)


def test_urls_are_kept_verbatim(tmp_path):
    url = "https://example.org/iso_3166.yaml"
    cfg = load_config(_write(tmp_path, {"resources": {"countries": url}}))
    assert cfg.resources.countries == url
    assert cfg.resources.subdivisions == str(PACKAGE_DATA_DIR / "iso_3166_2.yaml")


def test_defaults_point_at_packaged_data():
    cfg = SelectorConfig.default()
    assert Path(cfg.resources.countries).is_file()
    assert Path(cfg.resources.subdivisions).is_file()
    assert cfg.http.request_timeout_s == 30.0
    assert isinstance(cfg.create_reader(), YamlRecordReader)


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "data, message",
    [
        ({"resources": {"format": "csv"}}, "resources.format"),
        ({"http": {"request_timeout_s": 0}}, "request_timeout_s"),
        ({"logging": {"level": "LOUD"}}, "logging.level"),
        ({"resources": ["a", "b"]}, "resources"),
        (["not", "a", "mapping"], "Top-level"),
    ],
)
def test_invalid_values(tmp_path, data, message):
    with pytest.raises(ConfigurationError, match=message):
        load_config(_write(tmp_path, data))
