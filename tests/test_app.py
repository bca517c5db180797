"""
Test Suite: App

Tests for configuration loading and the command line interface.
"""

import dataclasses
import json

import pytest
from typer.testing import CliRunner

from optihub.app.config import (
    AudioPolicyConfig,
    CacheConfig,
    DuplicateConfig,
    OptiHubConfig,
    OwnershipConfig,
)
from optihub.app.main import app

from project_fixtures import build_audio_project, build_ownership_project

runner = CliRunner()


# ============================================================================
# Configuration
# ============================================================================


def test_config_defaults():
    """Test default configuration values."""
    config = OptiHubConfig()

    assert config.cache.ttl_seconds == 300
    assert config.ownership.group_prefix == "Group_"
    assert config.ownership.catch_all_group == "NotInAnchorGroup"
    assert config.ownership.group_for("Main") == "Group_Main"
    assert config.duplicates.epsilon == 1e-4
    assert config.duplicates.match_fields == ("samples", "channels", "frequency")
    assert config.audio == AudioPolicyConfig(0.2, 60.0)
    assert config.log_level == "INFO"


def test_config_round_trip():
    config = OptiHubConfig(
        cache=CacheConfig(ttl_seconds=60),
        ownership=OwnershipConfig(group_prefix="Scene_", include_ungrouped=False),
        duplicates=DuplicateConfig(max_bucket_size=10),
        audio=AudioPolicyConfig.preset("high"),
        log_level="DEBUG",
    )

    assert OptiHubConfig.from_dict(config.to_dict()) == config


def test_config_audio_preset_by_name():
    config = OptiHubConfig.from_dict({"audio": {"preset": "low"}})

    assert config.audio == AudioPolicyConfig(0.1, 30.0)


def test_config_ignores_method_names_and_unknown_keys():
    """Test that keys naming methods or nothing at all are dropped, not passed on."""
    ownership = OwnershipConfig.from_dict({
        "group_prefix": "Scene_",
        "group_for": "x",
        "atlas_folder_for": "y",
        "colour": "blue",
    })

    assert ownership == OwnershipConfig(group_prefix="Scene_")
    assert ownership.group_for("Main") == "Scene_Main"


def test_config_is_immutable():
    config = OptiHubConfig()

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.log_level = "DEBUG"

    changed = config.with_overrides(log_level="DEBUG")
    assert changed.log_level == "DEBUG"
    assert config.log_level == "INFO"


def test_config_load(tmp_path, monkeypatch):
    """Test loading from a path, from $OPTIHUB_CONFIG and from a missing file."""
    path = tmp_path / "optihub.json"
    path.write_text(json.dumps({"cache": {"ttl_seconds": 42}}), encoding="utf-8")

    assert OptiHubConfig.load(path).cache.ttl_seconds == 42
    assert OptiHubConfig.load(tmp_path / "missing.json") == OptiHubConfig()

    monkeypatch.setenv("OPTIHUB_CONFIG", str(path))
    assert OptiHubConfig.load().cache.ttl_seconds == 42

    monkeypatch.delenv("OPTIHUB_CONFIG")
    assert OptiHubConfig.load() == OptiHubConfig()


# ============================================================================
# CLI
# ============================================================================


@pytest.fixture
def ownership_snapshot(tmp_path):
    path = tmp_path / "project.json"
    build_ownership_project().save_snapshot(path)
    return path


@pytest.fixture
def audio_snapshot(tmp_path):
    path = tmp_path / "audio.json"
    build_audio_project().save_snapshot(path)
    return path


def test_cli_queries():
    result = runner.invoke(app, ["queries"])

    assert result.exit_code == 0
    assert "OwnershipClassification" in result.output
    assert "DuplicateAudio" in result.output


def test_cli_missing_snapshot(tmp_path):
    result = runner.invoke(app, ["analyze", str(tmp_path / "nope.json")])

    assert result.exit_code == 1
    assert "Snapshot not found" in result.output


def test_cli_analyze(ownership_snapshot):
    result = runner.invoke(app, ["analyze", str(ownership_snapshot)])

    assert result.exit_code == 0
    assert "MeshesByCompression" in result.output


def test_cli_analyze_single_query(ownership_snapshot):
    result = runner.invoke(app, ["analyze", str(ownership_snapshot), "--query", "AllTextureInfos"])

    assert result.exit_code == 0
    assert "tex_orphan" in result.output

    result = runner.invoke(app, ["analyze", str(ownership_snapshot), "-q", "Nope"])
    assert result.exit_code == 1


def test_cli_ownership_apply_writes_snapshot(ownership_snapshot, tmp_path):
    """Test that --apply regroups and --output persists the updated project."""
    output = tmp_path / "fixed.json"

    result = runner.invoke(app, ["ownership", str(ownership_snapshot), "--apply", "--output", str(output)])

    assert result.exit_code == 0
    assert "tex_orphan" in result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    groups = {e["id"]: e.get("group") for e in data["entities"]}
    assert groups["tex_shared"] == "Group_Level1"
    assert groups["tex_orphan"] == "NotInAnchorGroup"


def test_cli_duplicates_failure_exit_code(tmp_path):
    db = build_audio_project()
    db.lock("clip_b")
    path = db.save_snapshot(tmp_path / "locked.json")

    result = runner.invoke(app, ["duplicates", str(path), "--apply"])

    assert result.exit_code == 1
    assert "clip_a" in result.output


def test_cli_duplicates_apply(audio_snapshot):
    result = runner.invoke(app, ["duplicates", str(audio_snapshot), "--apply"])

    assert result.exit_code == 0
    assert "1 succeeded" in result.output
