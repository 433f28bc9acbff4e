"""Tests for MutexConfig loading and validation."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from fsmutex.config import (
    DEFAULT_MAX_WAIT,
    DEFAULT_POLL_INTERVAL,
    MutexConfig,
    resolve_env_vars,
)
from fsmutex.exceptions import ConfigValidationError


def test_defaults():
    config = MutexConfig()

    assert config.environment == "development"
    assert config.prefix == "fsmutex"
    assert config.max_wait == DEFAULT_MAX_WAIT == 2.0
    assert config.poll_interval == DEFAULT_POLL_INTERVAL == 1.0
    assert config.root_dir == Path(tempfile.gettempdir())
    assert config.lock_directory == Path(tempfile.gettempdir()) / "fsmutex-development"


def test_from_env_reads_fsmutex_variables(tmp_path: Path):
    config = MutexConfig.from_env(
        {
            "FSMUTEX_ENV": "prod",
            "FSMUTEX_ROOT": str(tmp_path),
            "FSMUTEX_PREFIX": "locks",
            "FSMUTEX_MAX_WAIT": "5",
            "FSMUTEX_POLL_INTERVAL": "0.5",
        }
    )

    assert config.lock_directory == tmp_path / "locks-prod"
    assert config.max_wait == 5.0
    assert config.poll_interval == 0.5


def test_from_env_falls_back_to_generic_environment():
    assert MutexConfig.from_env({"ENVIRONMENT": "qa"}).environment == "qa"
    assert MutexConfig.from_env({}).environment == "development"


def test_from_dict_resolves_placeholders(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("LOCK_ROOT", str(tmp_path))
    monkeypatch.delenv("LOCK_ENV", raising=False)

    config = MutexConfig.from_dict(
        {"root_dir": "${LOCK_ROOT}", "environment": "${LOCK_ENV:ci}", "unused": 1}
    )

    assert config.root_dir == tmp_path
    assert config.environment == "ci"


def test_resolve_env_vars_keeps_unknown_placeholders(monkeypatch):
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)

    assert resolve_env_vars(["${NOT_SET_ANYWHERE}"]) == ["${NOT_SET_ANYWHERE}"]


def test_from_yaml_with_mutex_section(tmp_path: Path):
    config_file = tmp_path / "mutex.yaml"
    config_file.write_text(
        "mutex:\n"
        "  environment: staging\n"
        f"  root_dir: {tmp_path}\n"
        "  max_wait: 3\n"
        "  poll_interval: 0.25\n",
        encoding="utf-8",
    )

    config = MutexConfig.from_yaml(config_file)

    assert config.environment == "staging"
    assert config.max_wait == 3.0
    assert config.poll_interval == 0.25
    assert config.lock_directory == tmp_path / "fsmutex-staging"


def test_from_yaml_top_level(tmp_path: Path):
    config_file = tmp_path / "mutex.yaml"
    config_file.write_text("environment: dev2\n", encoding="utf-8")

    assert MutexConfig.from_yaml(config_file).environment == "dev2"


def test_from_yaml_missing_file(tmp_path: Path):
    with pytest.raises(ConfigValidationError) as exc_info:
        MutexConfig.from_yaml(tmp_path / "nope.yaml")

    assert "config_path=" in str(exc_info.value)


def test_from_yaml_empty_file(tmp_path: Path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("", encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        MutexConfig.from_yaml(config_file)


def test_from_yaml_invalid_yaml(tmp_path: Path):
    config_file = tmp_path / "bad.yaml"
    config_file.write_text("mutex: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigValidationError):
        MutexConfig.from_yaml(config_file)


@pytest.mark.parametrize(
    "kwargs,key",
    [
        ({"environment": "a/b"}, "environment"),
        ({"environment": ""}, "environment"),
        ({"prefix": ".."}, "prefix"),
        ({"max_wait": -1}, "max_wait"),
        ({"poll_interval": 0}, "poll_interval"),
        ({"max_wait": "soon"}, "max_wait"),
        ({"max_wait": float("inf")}, "max_wait"),
        ({"max_wait": "nan"}, "max_wait"),
        ({"poll_interval": float("nan")}, "poll_interval"),
        ({"poll_interval": "inf"}, "poll_interval"),
    ],
)
def test_invalid_values_are_rejected(kwargs, key):
    with pytest.raises(ConfigValidationError) as exc_info:
        MutexConfig(**kwargs)

    assert exc_info.value.details["config_key"] == key


def test_from_dict_rejects_non_mapping():
    with pytest.raises(ConfigValidationError):
        MutexConfig.from_dict(["not", "a", "dict"])  # type: ignore[arg-type]


@pytest.mark.parametrize("name", ["FSMUTEX_MAX_WAIT", "FSMUTEX_POLL_INTERVAL"])
@pytest.mark.parametrize("value", ["inf", "-inf", "nan"])
def test_from_env_rejects_non_finite_timings(name, value):
    with pytest.raises(ConfigValidationError):
        MutexConfig.from_env({name: value})
