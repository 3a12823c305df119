"""
Matching of canonical key names against the configured monitored keys.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .keynames import CAPS_LOCK_PHRASE, DIRECTION_PREFIXES, NUMPAD_PREFIX

log = logging.getLogger(__name__)

_WHITESPACE = re.compile(r'\s+')


@dataclass(frozen=True)
class MonitoredKeySpec:
    """A configured key to track, e.g. MonitoredKeySpec('key1', 'Space')."""
    id: str
    label: str


def _strip_whitespace(value: str) -> str:
    return _WHITESPACE.sub('', value)


def _matches_loosely(label: str, key_name: str) -> bool:
    """Fallback rules for labels that are not spelled canonically."""
    if label == key_name:
        return True

    # "Page Up" vs "PageUp"
    if _strip_whitespace(label) == _strip_whitespace(key_name):
        return True

    # Direction sensitive labels like "LEFT Control"
    if any(prefix in key_name for prefix in DIRECTION_PREFIXES):
        if label == key_name:
            return True

    # Legacy spelling of the control key
    if (key_name, label) in (('Control', 'CTRL'), ('CTRL', 'Control')):
        return True

    # Raw numpad names against digit or operator labels
    if key_name.startswith(NUMPAD_PREFIX) and label == key_name[len(NUMPAD_PREFIX):]:
        return True

    if (key_name, label) in ((CAPS_LOCK_PHRASE, 'CapsLock'), ('CapsLock', CAPS_LOCK_PHRASE)):
        return True

    return False


def find_key_spec(key_name: str, specs: Sequence[MonitoredKeySpec]) -> Optional[MonitoredKeySpec]:
    """
    Find the monitored key matching a canonical key name.

    A case-insensitive label match anywhere in ``specs`` takes priority.
    Otherwise the first spec accepted by the looser fallback rules is
    returned. Returns None when nothing matches.
    """
    lowered = key_name.lower()
    for spec in specs:
        if spec.label.lower() == lowered:
            return spec

    for spec in specs:
        if _matches_loosely(spec.label, key_name):
            return spec

    log.debug(f"No key config found for: {key_name}. "
              f"Available configs: {[spec.label for spec in specs]}")
    return None
