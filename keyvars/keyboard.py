"""
Global keyboard listening session.

Uses pynput for the OS level keyboard hook. Each hook event is translated
to a raw key name, normalized, matched against the monitored keys and
dispatched synchronously on the hook thread.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .keynames import normalize_key_name
from .matcher import MonitoredKeySpec, find_key_spec
from .state import PRESSED, RELEASED

log = logging.getLogger(__name__)


class HookInitializationError(RuntimeError):
    """The OS keyboard hook could not be acquired."""


@dataclass
class RawKeyEvent:
    """A key transition as reported by the hook."""
    raw_name: str
    pressed: bool


# pynput Key names whose hook spelling is not just the upper-cased name
SPECIAL_KEY_NAMES = {
    'ctrl': 'CTRL',
    'ctrl_l': 'LEFT CTRL',
    'ctrl_r': 'RIGHT CTRL',
    'alt': 'ALT',
    'alt_l': 'LEFT ALT',
    'alt_r': 'RIGHT ALT',
    'alt_gr': 'RIGHT ALT',
    'shift': 'SHIFT',
    'shift_l': 'LEFT SHIFT',
    'shift_r': 'RIGHT SHIFT',
    'cmd': 'META',
    'cmd_l': 'LEFT META',
    'cmd_r': 'RIGHT META',
    'up': 'UP ARROW',
    'down': 'DOWN ARROW',
    'left': 'LEFT ARROW',
    'right': 'RIGHT ARROW',
    'enter': 'RETURN',
    'esc': 'ESCAPE',
    'page_up': 'PAGE UP',
    'page_down': 'PAGE DOWN',
    'caps_lock': 'CAPS LOCK',
    'num_lock': 'NUM LOCK',
    'scroll_lock': 'SCROLL LOCK',
    'print_screen': 'PRINT SCREEN',
}

NUMPAD_OPERATORS = {
    'multiply': 'NUMPAD MULTIPLY',
    'add': 'NUMPAD ADD',
    'subtract': 'NUMPAD SUBTRACT',
    'decimal': 'NUMPAD DECIMAL',
    'divide': 'NUMPAD DIVIDE',
    'enter': 'NUMPAD ENTER',
}

# Virtual key codes of the numpad: Windows VK_NUMPAD* and X11 XK_KP_* keysyms
NUMPAD_VK = {0x60 + digit: f'NUMPAD {digit}' for digit in range(10)}
NUMPAD_VK.update({
    0x6A: NUMPAD_OPERATORS['multiply'],
    0x6B: NUMPAD_OPERATORS['add'],
    0x6D: NUMPAD_OPERATORS['subtract'],
    0x6E: NUMPAD_OPERATORS['decimal'],
    0x6F: NUMPAD_OPERATORS['divide'],
})
NUMPAD_VK.update({0xFFB0 + digit: f'NUMPAD {digit}' for digit in range(10)})
NUMPAD_VK.update({
    0xFFAA: NUMPAD_OPERATORS['multiply'],
    0xFFAB: NUMPAD_OPERATORS['add'],
    0xFFAD: NUMPAD_OPERATORS['subtract'],
    0xFFAE: NUMPAD_OPERATORS['decimal'],
    0xFFAF: NUMPAD_OPERATORS['divide'],
    0xFF8D: NUMPAD_OPERATORS['enter'],
})


def raw_key_name(key) -> Optional[str]:
    """
    Convert a pynput key to the raw name spelling of the global hook.

    Key.ctrl_l -> 'LEFT CTRL', Key.page_up -> 'PAGE UP', KeyCode('a') -> 'A',
    numpad KeyCodes -> 'NUMPAD 5' / 'NUMPAD ADD'. Returns None for keys with
    neither a name, a character nor a known virtual key code.
    """
    name = getattr(key, 'name', None)
    if isinstance(name, str):
        return SPECIAL_KEY_NAMES.get(name, name.upper().replace('_', ' '))

    vk = getattr(key, 'vk', None)
    if vk in NUMPAD_VK:
        return NUMPAD_VK[vk]

    char = getattr(key, 'char', None)
    if char:
        return char.upper()

    if vk is not None:
        return f'VK {vk}'
    return None


def _pynput_listener(on_press, on_release):
    """Create a pynput keyboard listener (not yet started)."""
    # Imported here: pynput raises on import when no backend is usable
    from pynput import keyboard
    return keyboard.Listener(on_press=on_press, on_release=on_release)


class KeyListener:
    """
    One listening session on the global keyboard hook.

    The monitored keys are fixed for the lifetime of the listener; a
    configuration change is handled by stopping this listener and starting
    a new one.
    """

    def __init__(
        self,
        monitored_keys: Sequence[MonitoredKeySpec],
        on_key_event: Callable[[str, int], None],
        listener_factory: Optional[Callable] = None
    ):
        self._monitored_keys = tuple(monitored_keys)
        self._on_key_event = on_key_event
        self._listener_factory = listener_factory or _pynput_listener
        self._listener = None
        self._active = False

    @property
    def monitored_keys(self):
        return self._monitored_keys

    @property
    def is_listening(self) -> bool:
        return self._listener is not None

    def start(self):
        """Acquire the keyboard hook and register the event callbacks."""
        if self._listener is not None:
            log.debug("Key listener already running, restarting")
            self.stop()

        log.info("Monitored keys config:")
        for spec in self._monitored_keys:
            log.info(f"Key ID: {spec.id}, Label: {spec.label}")

        listener = None
        try:
            listener = self._listener_factory(self._on_press, self._on_release)
            log.debug("Keyboard listener created")
            listener.start()
        except Exception as e:
            log.error(f"Failed to initialize key listener: {e}")
            if listener is not None:
                try:
                    listener.stop()
                except Exception as stop_error:
                    log.error(f"Error stopping half-started listener: {stop_error}")
            raise HookInitializationError(str(e)) from e

        self._listener = listener
        self._active = True
        key_names = ', '.join(f"{spec.id}:{spec.label}" for spec in self._monitored_keys)
        log.info(f"Monitoring keys: {key_names}")

    def stop(self):
        """Unregister from the keyboard hook. Errors are logged, not raised."""
        if self._listener is None:
            return

        log.debug("Stopping key listener")
        # Events still in flight on the hook thread are dropped from here on
        self._active = False
        listener = self._listener
        try:
            listener.stop()
            # Wait for a running callback to finish, unless we are inside it
            if hasattr(listener, 'join') and listener is not threading.current_thread():
                listener.join(timeout=1.0)
            log.info("Key listener stopped")
        except Exception as e:
            log.error(f"Error stopping key listener: {e}")
        finally:
            self._listener = None
            self._active = False

    def on_raw_event(self, event: RawKeyEvent) -> Optional[MonitoredKeySpec]:
        """
        Normalize, match and dispatch one raw key event.
        Returns the matched spec, or None when the key is not monitored or
        the listener is not running.
        """
        if not self._active:
            log.debug(f"Listener stopped, dropping key event: {event.raw_name}")
            return None

        key_name = normalize_key_name(event.raw_name)
        log.debug(f"Key event received: {event.raw_name} (normalized: {key_name}), "
                  f"state: {'down' if event.pressed else 'up'}")

        spec = find_key_spec(key_name, self._monitored_keys)
        if spec is None:
            return None

        state = PRESSED if event.pressed else RELEASED
        self._on_key_event(spec.id, state)
        log.info(f"Key {key_name} ({spec.id}) state changed to {state}")
        return spec

    def _handle_hook_key(self, key, pressed: bool):
        # Returning False from a pynput callback stops the listener, so
        # errors end here.
        try:
            raw_name = raw_key_name(key)
            if raw_name is None:
                log.debug(f"Ignoring key without a name: {key}")
                return
            self.on_raw_event(RawKeyEvent(raw_name, pressed))
        except Exception as e:
            log.error(f"Error in key {'press' if pressed else 'release'} handler: {e}")

    def _on_press(self, key):
        self._handle_hook_key(key, True)

    def _on_release(self, key):
        self._handle_hook_key(key, False)
