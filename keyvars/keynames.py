"""
Key name normalization.

Raw names come from the global keyboard hook in upper case with spaces
("PAGE UP", "LEFT CTRL", "NUMPAD 5"), while configured labels use the
canonical spelling ("PageUp", "LEFT Control", "Numpad5"). Everything here
is a pure string transformation.
"""

import logging

log = logging.getLogger(__name__)


# Checked before any prefix stripping, ignoring case.
ARROW_PHRASES = {
    'LEFT ARROW': 'ArrowLeft',
    'RIGHT ARROW': 'ArrowRight',
    'UP ARROW': 'ArrowUp',
    'DOWN ARROW': 'ArrowDown',
}

CAPS_LOCK_PHRASE = 'CAPS LOCK'

# Directional modifiers keep their LEFT/RIGHT qualifier.
# Canonical spellings map to themselves so they survive re-normalization.
DIRECTIONAL_MODIFIERS = {
    'LEFT CTRL': 'LEFT Control',
    'RIGHT CTRL': 'RIGHT Control',
    'LEFT ALT': 'LEFT Alt',
    'RIGHT ALT': 'RIGHT Alt',
    'LEFT SHIFT': 'LEFT Shift',
    'RIGHT SHIFT': 'RIGHT Shift',
    'LEFT Control': 'LEFT Control',
    'RIGHT Control': 'RIGHT Control',
    'LEFT Alt': 'LEFT Alt',
    'RIGHT Alt': 'RIGHT Alt',
    'LEFT Shift': 'LEFT Shift',
    'RIGHT Shift': 'RIGHT Shift',
}

NUMPAD_PREFIX = 'NUMPAD '
DIRECTION_PREFIXES = ('LEFT ', 'RIGHT ')

# Lower-cased, spaces removed
PAGE_KEYS = {
    'pageup': 'PageUp',
    'pagedown': 'PageDown',
}

ARROW_SYNONYMS = {
    'up arrow': 'ArrowUp',
    'down arrow': 'ArrowDown',
    'left arrow': 'ArrowLeft',
    'right arrow': 'ArrowRight',
    'up': 'ArrowUp',
    'down': 'ArrowDown',
    'left': 'ArrowLeft',
    'right': 'ArrowRight',
}

# Case-insensitive lookup (keys are lower case)
SPECIAL_KEYS = {
    'space': 'Space',
    'tab': 'Tab',
    'escape': 'Escape',
    'esc': 'Escape',
    'enter': 'Enter',
    'return': 'Enter',
    'control': 'Control',
    'ctrl': 'Control',
    'alt': 'Alt',
    'shift': 'Shift',
    'meta': 'Meta',
    'win': 'Meta',
    'windows': 'Meta',
    'capslock': 'CapsLock',
    'caps': 'CapsLock',
    'home': 'Home',
    'end': 'End',
    'insert': 'Insert',
    'ins': 'Insert',
    'delete': 'Delete',
    'del': 'Delete',
    'backspace': 'Backspace',
    'back': 'Backspace',
    'arrowup': 'ArrowUp',
    'arrowdown': 'ArrowDown',
    'arrowleft': 'ArrowLeft',
    'arrowright': 'ArrowRight',
    'numlock': 'NumLock',
    'num lock': 'NumLock',
    'scrolllock': 'ScrollLock',
    'scroll lock': 'ScrollLock',
    'printscreen': 'PrintScreen',
    'print screen': 'PrintScreen',
    'prtsc': 'PrintScreen',
    'pause': 'Pause',
    'break': 'Pause',
    'numpad add': 'NumpadAdd',
    'numpad subtract': 'NumpadSubtract',
    'numpad multiply': 'NumpadMultiply',
    'numpad divide': 'NumpadDivide',
    'numpad decimal': 'NumpadDecimal',
    'numpad enter': 'NumpadEnter',
}
SPECIAL_KEYS.update({f'numpad {digit}': f'Numpad{digit}' for digit in range(10)})


def strip_direction(key_name: str) -> str:
    """Remove a leading "LEFT " or "RIGHT " qualifier in any case, if any."""
    for prefix in DIRECTION_PREFIXES:
        if key_name.upper().startswith(prefix) and len(key_name) > len(prefix):
            log.debug(f"Removing {prefix.strip()} prefix from: {key_name}")
            return key_name[len(prefix):]
    return key_name


def normalize_key_name(key_name: str) -> str:
    """
    Translate a raw hook key name into its canonical name.

    Rules are tried in order and the first one that applies wins:

    1. arrow phrases, ignoring case ("LEFT ARROW" -> "ArrowLeft")
    2. "CAPS LOCK" -> "CapsLock"
    3. directional modifiers ("LEFT CTRL" -> "LEFT Control")
    4. numpad names ("NUMPAD 5" -> "Numpad5", "NUMPAD ADD" -> "NumpadAdd")
    5. any other LEFT/RIGHT prefix (any case) is dropped and the rest is
       normalized from rule 1
    6. page up/down, ignoring case and spaces
    7. arrow synonyms, ignoring case
    8. the case-insensitive special key table

    Names matching no rule are returned as they are.
    """
    log.debug(f"Normalizing key name: {key_name}")

    arrow = ARROW_PHRASES.get(key_name.upper())
    if arrow:
        return arrow

    if key_name == CAPS_LOCK_PHRASE:
        return 'CapsLock'

    if key_name in DIRECTIONAL_MODIFIERS:
        return DIRECTIONAL_MODIFIERS[key_name]

    if key_name.startswith(NUMPAD_PREFIX):
        # Operator words get their canonical casing, digits pass through
        return SPECIAL_KEYS.get(key_name.lower(), 'Numpad' + key_name[len(NUMPAD_PREFIX):])

    # Direction is lost for everything not handled above; the remainder
    # goes through all rules again ("LEFT CAPS LOCK" -> "CapsLock")
    stripped = strip_direction(key_name)
    if stripped != key_name:
        return normalize_key_name(stripped)

    lowered = key_name.lower()

    page_key = PAGE_KEYS.get(lowered.replace(' ', ''))
    if page_key:
        return page_key

    if lowered in ARROW_SYNONYMS:
        return ARROW_SYNONYMS[lowered]

    return SPECIAL_KEYS.get(lowered, key_name)
