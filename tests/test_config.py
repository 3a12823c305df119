import os
import sys
import logging

# Make repository root importable
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import yaml

from keyvars.config import (
    DEFAULT_LABELS,
    KEY_CHOICES,
    Config,
    KeySlot,
    build_monitored_keys,
    keys_changed,
    load_config,
    save_config,
)
from keyvars.matcher import MonitoredKeySpec


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


def test_missing_file_creates_default(tmp_path):
    path = tmp_path / "sub" / "config.yaml"

    config = load_config(path)

    assert path.exists()
    assert [slot.label for slot in config.keys] == list(DEFAULT_LABELS)
    assert build_monitored_keys(config) == (MonitoredKeySpec("key1", "Space"),)


def test_default_labels_are_known_choices():
    assert all(label in KEY_CHOICES for label in DEFAULT_LABELS)


def test_enabled_slots_keep_their_position_ids(tmp_path):
    path = write_yaml(tmp_path / "config.yaml", {"keys": [
        {"label": "Control"},
        {"enabled": False, "label": "Alt"},
        {"enabled": True, "label": "CapsLock"},
        {"enabled": True},
    ]})

    specs = build_monitored_keys(load_config(path))

    assert specs == (
        MonitoredKeySpec("key1", "Control"),
        MonitoredKeySpec("key3", "CapsLock"),
        MonitoredKeySpec("key4", "PageUp"),
    )


def test_first_key_is_always_enabled(tmp_path):
    path = write_yaml(tmp_path / "config.yaml", {"keys": [{"enabled": False, "label": "F5"}]})

    config = load_config(path)

    assert config.keys[0] == KeySlot(enabled=True, label="F5")


def test_malformed_entries_fall_back_to_defaults(tmp_path, caplog):
    path = write_yaml(tmp_path / "config.yaml", {"keys": ["Space", {"enabled": True, "label": "Bogus"}]})

    with caplog.at_level(logging.WARNING):
        config = load_config(path)

    assert config.keys[0].label == "Space"
    assert config.keys[1] == KeySlot(enabled=True, label="Bogus")
    assert "malformed" in caplog.text
    assert "Bogus" in caplog.text


def test_extra_keys_are_ignored(tmp_path):
    entries = [{"enabled": True, "label": f"F{n}"} for n in range(1, 9)]
    path = write_yaml(tmp_path / "config.yaml", {"keys": entries})

    config = load_config(path)

    assert len(config.keys) == 6
    assert build_monitored_keys(config)[-1] == MonitoredKeySpec("key6", "F6")


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(path) == Config()


def test_save_and_load(tmp_path):
    path = tmp_path / "config.yaml"
    config = Config()
    config.keys[1] = KeySlot(enabled=True, label="LEFT Control")

    save_config(config, path)

    assert load_config(path) == config


def test_keys_changed():
    old = Config()
    new = Config()
    assert not keys_changed(old, new)
    assert keys_changed(None, new)

    # Relabelling a disabled slot changes nothing
    new.keys[2] = KeySlot(enabled=False, label="Tab")
    assert not keys_changed(old, new)

    new.keys[2] = KeySlot(enabled=True, label="Tab")
    assert keys_changed(old, new)
