"""
KeyVars - Main entry point and host controller.
"""

import sys
import logging
import argparse
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import Config, load_config, get_config_path, build_monitored_keys, keys_changed
from .state import KeyStateTable, StateChange
from .keyboard import KeyListener, HookInitializationError

log = logging.getLogger(__name__)

STATUS_OK = 'ok'
STATUS_ERROR = 'error'


class VariablePublisher:
    """
    Receives the variables exposed by KeyVars.

    The default implementation does nothing; hosts override the methods
    they care about.
    """

    def set_variable_definitions(self, definitions: List[Tuple[str, str]]):
        """definitions: list of (variable_id, display_label)"""

    def set_variable_values(self, values: Dict[str, int]):
        """values: variable_id -> 0 or 1"""

    def update_status(self, status: str, message: Optional[str] = None):
        """status: 'ok' or 'error'"""


class ConsolePublisher(VariablePublisher):
    """Logs definitions and status, prints value changes."""

    def __init__(self):
        self._labels: Dict[str, str] = {}

    def set_variable_definitions(self, definitions: List[Tuple[str, str]]):
        self._labels = dict(definitions)
        log.info(f"Setting {len(definitions)} variable definitions")

    def set_variable_values(self, values: Dict[str, int]):
        for key_id, state in values.items():
            print(f"{key_id} ({self._labels.get(key_id, key_id)}) = {state}")
        sys.stdout.flush()

    def update_status(self, status: str, message: Optional[str] = None):
        if status == STATUS_ERROR:
            log.error(f"Status: {status} ({message})")
        else:
            log.info(f"Status: {status}")


class KeyVars:
    """
    Host side controller.

    Turns the configuration into monitored keys, owns the listening session
    and the key state table, and forwards state changes to the publisher.
    """

    def __init__(self, publisher: Optional[VariablePublisher] = None, listener_factory=None):
        self.publisher = publisher or VariablePublisher()
        self.config: Optional[Config] = None
        self.monitored_keys = ()
        self.key_states = KeyStateTable()
        self.key_listener: Optional[KeyListener] = None
        self._listener_factory = listener_factory

        self.key_states.add_listener(self._on_state_change)

    def init(self, config: Config):
        """Start monitoring the keys of a configuration."""
        self.config = config
        self._apply_monitored_keys()

    def config_updated(self, config: Config):
        """Called when the configuration changes; restarts the listener if needed."""
        prev_config = self.config
        self.config = config

        if not keys_changed(prev_config, config):
            log.debug("Monitored keys unchanged, keeping listener")
            return

        log.info("Monitored keys changed, restarting key listener")
        self._apply_monitored_keys()

    def destroy(self):
        """Stop listening."""
        self._stop_listener()
        log.debug("KeyVars destroyed")

    def handle_key_event(self, key_id: str, state: int):
        """Record a key state; changes reach the publisher via the state table."""
        if not self.key_states.set(key_id, state):
            log.debug(f"Ignoring state for unmonitored key id {key_id}")

    def update_variable_definitions(self):
        """Publish one variable per monitored key."""
        log.debug("Updating variable definitions")
        definitions = []
        for spec in self.monitored_keys:
            log.debug(f"Creating variable for key: ID={spec.id}, Label={spec.label}")
            definitions.append((spec.id, spec.label))
        self.publisher.set_variable_definitions(definitions)

    def _apply_monitored_keys(self):
        # The old listener must be gone before the new keys take effect
        self._stop_listener()

        self.monitored_keys = build_monitored_keys(self.config)
        log.info(f"Configured keys: {[(spec.id, spec.label) for spec in self.monitored_keys]}")

        self.update_variable_definitions()
        reset_values = self.key_states.reset(spec.id for spec in self.monitored_keys)
        log.debug(f"Setting reset variable values: {reset_values}")
        self.publisher.set_variable_values(reset_values)

        listener = KeyListener(
            self.monitored_keys,
            self.handle_key_event,
            listener_factory=self._listener_factory
        )
        try:
            listener.start()
        except HookInitializationError as e:
            log.error(f"Failed to start key listener: {e}")
            self.publisher.update_status(STATUS_ERROR, str(e))
            return

        self.key_listener = listener
        log.info("Key listener started successfully")
        self.publisher.update_status(STATUS_OK)

    def _stop_listener(self):
        if self.key_listener:
            self.key_listener.stop()
            self.key_listener = None

    def _on_state_change(self, change: StateChange):
        self.publisher.set_variable_values({change.key_id: change.state})
        log.debug(f"Variable {change.key_id} set to {change.state}")


def _config_mtime(path: Path) -> Optional[float]:
    try:
        return path.stat().st_mtime
    except OSError:
        return None


def run(app: KeyVars, config_path: Path, poll_seconds: float, stop_event: threading.Event):
    """Block until stop_event is set, reloading the config file when it changes."""
    last_mtime = _config_mtime(config_path)
    # A bounded wait keeps Ctrl+C responsive on Windows
    while not stop_event.wait(poll_seconds if poll_seconds > 0 else 1.0):
        if poll_seconds <= 0:
            continue
        mtime = _config_mtime(config_path)
        if mtime is None or mtime == last_mtime:
            continue
        last_mtime = mtime

        log.info("Configuration file changed, reloading...")
        try:
            app.config_updated(load_config(config_path))
        except Exception as e:
            log.error(f"Failed to reload config: {e}")


def main(argv=None):
    """Main entry point."""
    import signal

    parser = argparse.ArgumentParser(
        prog='keyvars',
        description='Expose the pressed state of selected keyboard keys as variables.'
    )
    parser.add_argument('--config', type=Path, default=None,
                        help=f'config file (default: {get_config_path()})')
    parser.add_argument('--poll', type=float, default=1.0,
                        help='seconds between config file checks, 0 to disable reloading')
    parser.add_argument('--quiet', action='store_true', help='log at INFO instead of DEBUG')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.quiet else logging.DEBUG,
        format='%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    config_path = args.config or get_config_path()
    log.info(f"Config file: {config_path}")

    try:
        config = load_config(config_path)
    except Exception as e:
        log.exception(f"Failed to load config: {e}")
        return 1

    app = KeyVars(publisher=ConsolePublisher())
    stop_event = threading.Event()

    def signal_handler(signum, frame):
        log.info(f"Received signal {signum}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    app.init(config)
    print("\nKeyVars started! Press Ctrl+C to quit.\n")
    try:
        run(app, config_path, args.poll, stop_event)
    except KeyboardInterrupt:
        pass
    finally:
        app.destroy()

    return 0


if __name__ == '__main__':
    sys.exit(main())
