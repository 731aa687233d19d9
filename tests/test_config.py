import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError
from droid.config import DEFAULT_CONFIG_PATH, MissionConfig, load_config

def test_defaults():
    cfg = MissionConfig()
    assert cfg.render is False
    assert cfg.stop_at_target is False
    assert cfg.start == (1, 1)
    assert cfg.droid_glyph == "D"

def test_default_file_loads():
    assert DEFAULT_CONFIG_PATH.exists()
    cfg = load_config()
    assert isinstance(cfg, MissionConfig)
    # Cached after first load
    assert load_config() is cfg

def test_load_explicit_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "mission.toml"
        path.write_text(
            "[mission]\n"
            "render = true\n"
            "frame_delay = 0.25\n"
            "stop_at_target = true\n"
            "start = [3, 4]\n",
            encoding="utf-8",
        )
        cfg = load_config(path)

    assert cfg.render is True
    assert cfg.frame_delay == 0.25
    assert cfg.stop_at_target is True
    assert cfg.start == (3, 4)

def test_missing_mission_table_uses_defaults():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "empty.toml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == MissionConfig()

def test_missing_explicit_file():
    with pytest.raises(FileNotFoundError):
        load_config(Path("does/not/exist.toml"))

def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        MissionConfig(frame_delay=-1.0)
    with pytest.raises(ValidationError):
        MissionConfig(droid_glyph="DD")

def test_config_is_frozen():
    cfg = MissionConfig()
    with pytest.raises(ValidationError):
        cfg.render = True
