import os
import sys

# Make repository root importable
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from keyvars.keynames import normalize_key_name
from keyvars.matcher import MonitoredKeySpec, find_key_spec


def specs(*labels):
    return tuple(MonitoredKeySpec(f"key{i + 1}", label) for i, label in enumerate(labels))


def test_ctrl_matches_control_label():
    configured = specs("Control")
    assert find_key_spec(normalize_key_name("CTRL"), configured) == configured[0]


def test_caps_lock_matches():
    configured = specs("CapsLock")
    assert find_key_spec(normalize_key_name("CAPS LOCK"), configured) == configured[0]


def test_page_down_matches_second_key():
    configured = specs("Space", "PageDown")
    assert find_key_spec(normalize_key_name("pagedown"), configured).id == "key2"


def test_unconfigured_key_is_none():
    assert find_key_spec(normalize_key_name("Q"), specs("Space", "Enter")) is None


def test_case_insensitive_match_wins_over_earlier_loose_match():
    configured = specs("Page Up", "pageup")
    assert find_key_spec("PageUp", configured).id == "key2"


def test_whitespace_insensitive_label():
    assert find_key_spec("PageUp", specs("Page Up")).id == "key1"


def test_directional_label():
    configured = specs("LEFT Control", "RIGHT Control", "Control")
    assert find_key_spec(normalize_key_name("RIGHT CTRL"), configured).id == "key2"
    assert find_key_spec(normalize_key_name("CTRL"), configured).id == "key3"


def test_directional_label_does_not_match_other_side():
    assert find_key_spec(normalize_key_name("LEFT SHIFT"), specs("RIGHT Shift")) is None


def test_legacy_ctrl_label():
    assert find_key_spec("Control", specs("CTRL")).id == "key1"


def test_raw_numpad_name_matches_digit_label():
    assert find_key_spec("NUMPAD 5", specs("5")).id == "key1"


def test_numpad_key_does_not_match_digit_after_normalizing():
    assert find_key_spec(normalize_key_name("NUMPAD 5"), specs("5")) is None
    assert find_key_spec(normalize_key_name("NUMPAD 5"), specs("5", "Numpad5")).id == "key2"


def test_numpad_operator_matches_canonical_label():
    assert find_key_spec(normalize_key_name("NUMPAD ADD"), specs("NumpadAdd")).id == "key1"


def test_raw_caps_lock_label():
    assert find_key_spec("CapsLock", specs("CAPS LOCK")).id == "key1"


def test_empty_spec_list():
    assert find_key_spec("Space", ()) is None
