import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from site_archiver.config import ArchiverConfig, FetcherConfig, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("base_url: http://example.com\noutput_dir: out", ".yaml", None),
        (json.dumps({"base_url": "http://example.com", "output_dir": "out"}), ".json", None),
        ("{}", ".json", ValidationError),
        ("base_url: [unclosed", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("base_url = 'toml'", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, ArchiverConfig)
        assert str(cfg.base_url).rstrip("/") == "http://example.com"
        assert cfg.output_dir == Path("out")


def test_defaults(tmp_path):
    cfg = load_config(base_url="https://site.test", output_dir=tmp_path)
    assert cfg.delay == 5.0
    assert cfg.link_parser == "regex"
    assert cfg.max_pages is None and cfg.max_depth is None
    assert cfg.fetcher == FetcherConfig()
    assert cfg.fetcher.retries == 3
    assert cfg.fetcher.page_load_wait == 5.0
    assert cfg.fetcher.retry_wait == 2.0


def test_overrides_win_and_none_is_ignored(tmp_path):
    cfg_path = write_file(
        tmp_path,
        "base_url: https://file.test\noutput_dir: from-file\ndelay: 2\nfetcher:\n  kind: http\n  retries: 4\n",
        ".yaml",
    )
    cfg = load_config(cfg_path, base_url="https://cli.test", delay=None, fetcher={"retries": 1, "kind": None})
    assert str(cfg.base_url).startswith("https://cli.test")
    assert cfg.output_dir == Path("from-file")
    assert cfg.delay == 2
    assert cfg.fetcher.kind == "http"
    assert cfg.fetcher.retries == 1


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "overrides",
    [
        {"delay": -1},
        {"max_pages": 0},
        {"link_parser": "lxml"},
        {"unknown": 1},
        {"fetcher": {"retries": 0}},
        {"fetcher": {"kind": "ftp"}},
        {"base_url": "ftp://site.test"},
    ],
)
def test_invalid_values_rejected(tmp_path, overrides):
    data = {"base_url": "https://site.test", "output_dir": tmp_path}
    data.update(overrides)
    with pytest.raises(ValidationError):
        load_config(**data)


def test_config_is_frozen(tmp_path):
    cfg = load_config(base_url="https://site.test", output_dir=tmp_path)
    with pytest.raises(ValidationError):
        cfg.delay = 1  # type: ignore[misc]


def test_output_dir_expands_user():
    cfg = load_config(base_url="https://site.test", output_dir="~/archive")
    assert cfg.output_dir == Path("~/archive").expanduser()
