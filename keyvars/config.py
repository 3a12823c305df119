"""
Configuration loading and management.
"""

import os
import logging
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .matcher import MonitoredKeySpec

log = logging.getLogger(__name__)

MAX_KEYS = 6

# Label used for each slot when none is configured
DEFAULT_LABELS = ('Space', 'Enter', 'Escape', 'PageUp', 'PageDown', 'F1')

# Key choices offered for each slot: canonical label -> display text
KEY_CHOICES = {
    'Backspace': 'Backspace',
    'Tab': 'Tab',
    'Enter': 'Enter',
    'Shift': 'Shift',
    'LEFT Shift': 'Left Shift',
    'RIGHT Shift': 'Right Shift',
    'Control': 'Control',
    'LEFT Control': 'Left Control',
    'RIGHT Control': 'Right Control',
    'Alt': 'Alt',
    'LEFT Alt': 'Left Alt',
    'RIGHT Alt': 'Right Alt',
    'Pause': 'Pause',
    'CapsLock': 'Caps Lock',
    'Escape': 'Escape',
    'Space': 'Space',
    'PageUp': 'Page Up',
    'PageDown': 'Page Down',
    'End': 'End',
    'Home': 'Home',
    'ArrowLeft': 'Left Arrow',
    'ArrowUp': 'Up Arrow',
    'ArrowRight': 'Right Arrow',
    'ArrowDown': 'Down Arrow',
    'PrintScreen': 'Print Screen',
    'Insert': 'Insert',
    'Delete': 'Delete',
}
KEY_CHOICES.update({str(digit): str(digit) for digit in range(10)})
KEY_CHOICES.update({f'Numpad{digit}': f'Numpad {digit}' for digit in range(10)})
KEY_CHOICES.update({
    'NumpadMultiply': 'Numpad *',
    'NumpadAdd': 'Numpad +',
    'NumpadSubtract': 'Numpad -',
    'NumpadDecimal': 'Numpad .',
    'NumpadDivide': 'Numpad /',
    'NumpadEnter': 'Numpad Enter',
})
KEY_CHOICES.update({f'F{n}': f'F{n}' for n in range(1, 13)})
KEY_CHOICES.update({
    'NumLock': 'Num Lock',
    'ScrollLock': 'Scroll Lock',
    'Meta': 'Windows/Meta',
})
KEY_CHOICES.update({chr(c): chr(c) for c in range(ord('A'), ord('Z') + 1)})


@dataclass
class KeySlot:
    """One of the configurable key slots."""
    enabled: bool = False
    label: str = ""


def default_slots() -> List[KeySlot]:
    """Slot 1 enabled, the others disabled, all with their default label."""
    return [KeySlot(enabled=(i == 0), label=label) for i, label in enumerate(DEFAULT_LABELS)]


@dataclass
class Config:
    """Main application configuration."""
    keys: List[KeySlot] = field(default_factory=default_slots)


def get_config_path() -> Path:
    """Get the configuration file path."""
    if os.name == 'nt':  # Windows
        base = Path(os.environ.get('APPDATA', '~'))
    elif os.name == 'posix':
        if 'darwin' in os.uname().sysname.lower():  # macOS
            base = Path.home() / 'Library' / 'Application Support'
        else:  # Linux
            base = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))
    else:
        base = Path.home()

    return base / 'keyvars' / 'config.yaml'


def parse_slots(entries) -> List[KeySlot]:
    """
    Build the six key slots from the 'keys' list of a config file.
    Missing or malformed entries fall back to the slot defaults.
    """
    slots = default_slots()

    if not isinstance(entries, list):
        if entries is not None:
            log.warning(f"Ignoring 'keys' setting, expected a list: {entries!r}")
        return slots

    if len(entries) > MAX_KEYS:
        log.warning(f"Only {MAX_KEYS} keys can be monitored, ignoring {len(entries) - MAX_KEYS}")

    for i, entry in enumerate(entries[:MAX_KEYS]):
        if not isinstance(entry, dict):
            log.warning(f"Skipping malformed key entry {i + 1}: {entry!r}")
            continue

        label = str(entry.get('label') or '').strip() or DEFAULT_LABELS[i]
        if label not in KEY_CHOICES:
            log.warning(f"Key {i + 1} label '{label}' is not a known key name")

        slots[i] = KeySlot(
            # The first key is always monitored
            enabled=True if i == 0 else bool(entry.get('enabled', False)),
            label=label
        )

    return slots


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file."""
    if path is None:
        path = get_config_path()

    if not path.exists():
        return create_default_config(path)

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        log.warning(f"Config file {path} is not a mapping, using defaults")
        data = {}

    return Config(keys=parse_slots(data.get('keys')))


def create_default_config(path: Path) -> Config:
    """Create and save a default configuration."""
    default_yaml = """# KeyVars Configuration

# Up to six keys to monitor. Key 1 is always monitored; keys 2-6 only
# when enabled. Labels use the canonical key names, e.g. Space, PageUp,
# LEFT Control, Numpad5, F1, A.
keys:
  - label: Space
  - enabled: false
    label: Enter
  - enabled: false
    label: Escape
  - enabled: false
    label: PageUp
  - enabled: false
    label: PageDown
  - enabled: false
    label: F1
"""

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        f.write(default_yaml)

    return load_config(path)


def save_config(config: Config, path: Optional[Path] = None):
    """Save configuration to YAML file."""
    if path is None:
        path = get_config_path()

    data = {
        'keys': [
            {'enabled': slot.enabled, 'label': slot.label}
            for slot in config.keys
        ]
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.dump(data, f, default_flow_style=False)


def build_monitored_keys(config: Config) -> Tuple[MonitoredKeySpec, ...]:
    """
    Monitored key specs for the enabled slots, in slot order.
    Ids are tied to the slot position: slot 3 is always 'key3'.
    """
    specs = []
    for i, slot in enumerate(config.keys[:MAX_KEYS]):
        if i > 0 and not slot.enabled:
            continue
        specs.append(MonitoredKeySpec(
            id=f'key{i + 1}',
            label=slot.label or DEFAULT_LABELS[i]
        ))
    return tuple(specs)


def keys_changed(old: Optional[Config], new: Config) -> bool:
    """True when any slot's label or enabled flag differs."""
    if old is None:
        return True
    return build_monitored_keys(old) != build_monitored_keys(new)
