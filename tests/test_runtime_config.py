"""Tests for kite_runtime.config module."""

import os
import sys
import tempfile

import pytest

from kite_runtime.config import get_config, parser_options, _reset_config
from kite_runtime.exceptions import KiteConfigError


def write_config(tmpdir: str, text: str) -> None:
    with open(os.path.join(tmpdir, "kite.config"), "w") as f:
        f.write(text)


def test_default_config_when_no_file():
    _reset_config()
    with tempfile.TemporaryDirectory() as tmpdir:
        config = get_config(config_dir=tmpdir)
    assert config["parser"]["strict_blocks"] is False
    assert config["parser"]["max_depth"] == 100
    assert config["repl"]["prompt"] == ">> "
    assert config["log"]["level"] == "WARNING"


def test_custom_config_overrides_defaults():
    _reset_config()
    with tempfile.TemporaryDirectory() as tmpdir:
        write_config(tmpdir, "parser:\n  strict_blocks: true\nrepl:\n  prompt: 'kite> '\n")
        config = get_config(config_dir=tmpdir)
    assert config["parser"]["strict_blocks"] is True
    assert config["parser"]["max_depth"] == 100
    assert config["repl"]["prompt"] == "kite> "


def test_config_caching():
    _reset_config()
    with tempfile.TemporaryDirectory() as tmpdir:
        c1 = get_config(config_dir=tmpdir)
        c2 = get_config(config_dir=tmpdir)
    assert c1 is c2


def test_reset_config_clears_cache():
    _reset_config()
    with tempfile.TemporaryDirectory() as tmpdir:
        c1 = get_config(config_dir=tmpdir)
        _reset_config()
        c2 = get_config(config_dir=tmpdir)
    assert c1 is not c2


def test_defaults_are_not_mutated_through_cache():
    _reset_config()
    with tempfile.TemporaryDirectory() as tmpdir:
        config = get_config(config_dir=tmpdir)
        config["parser"]["max_depth"] = 5
        _reset_config()
        assert get_config(config_dir=tmpdir)["parser"]["max_depth"] == 100


def test_empty_config_file_uses_defaults():
    _reset_config()
    with tempfile.TemporaryDirectory() as tmpdir:
        write_config(tmpdir, "")
        config = get_config(config_dir=tmpdir)
    assert config["log"]["level"] == "WARNING"


def test_malformed_config_raises():
    _reset_config()
    with tempfile.TemporaryDirectory() as tmpdir:
        write_config(tmpdir, "parser: [unclosed\n")
        with pytest.raises(KiteConfigError, match="invalid kite.config"):
            get_config(config_dir=tmpdir)


def test_parser_options():
    options = parser_options({"parser": {"strict_blocks": True, "max_depth": 12}})
    assert options == {"strict_blocks": True, "max_depth": 12}


def test_parser_options_fill_missing_keys():
    assert parser_options({}) == {"strict_blocks": False, "max_depth": 100}


@pytest.mark.parametrize("value", ["lots", "12", 1.5, True, None])
def test_parser_options_reject_non_integer_depth(value):
    with pytest.raises(KiteConfigError, match="parser.max_depth must be an integer"):
        parser_options({"parser": {"max_depth": value}})


@pytest.mark.parametrize("value", [0, -5, 100_000])
def test_parser_options_reject_depth_out_of_range(value):
    with pytest.raises(KiteConfigError, match="parser.max_depth must be between 1 and"):
        parser_options({"parser": {"max_depth": value}})


def test_depth_ceiling_follows_recursion_limit(monkeypatch):
    monkeypatch.setattr(sys, "getrecursionlimit", lambda: 5000)
    assert parser_options({"parser": {"max_depth": 400}})["max_depth"] == 400
    with pytest.raises(KiteConfigError, match="between 1 and 500"):
        parser_options({"parser": {"max_depth": 501}})


def test_parser_options_reject_non_boolean_strict_blocks():
    with pytest.raises(KiteConfigError, match="parser.strict_blocks must be true or false"):
        parser_options({"parser": {"strict_blocks": "yes"}})


def test_parser_options_reject_non_mapping_section():
    with pytest.raises(KiteConfigError, match="parser: expected a mapping"):
        parser_options({"parser": [1, 2]})


def test_bad_depth_from_config_file():
    _reset_config()
    with tempfile.TemporaryDirectory() as tmpdir:
        write_config(tmpdir, "parser:\n  max_depth: lots\n")
        config = get_config(config_dir=tmpdir)
    with pytest.raises(KiteConfigError):
        parser_options(config)
