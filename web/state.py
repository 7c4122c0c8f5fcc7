"""In-memory application state singleton for the web label designer."""

import sys
import os
import threading
from typing import Any, Callable, Dict, List, Optional

# Add parent directory so we can import shared modules
app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)

from models.record_source import RecordSource
from pipeline.session import LabelSession

OptionsListener = Callable[[Optional[Dict[str, Any]]], None]


class OptionStore:
    """Saved widget options, one value per key.

    Acts as the configuration source (``get_options`` + listeners) and the
    persistence sink (``set_option``) of a label session. Every write
    notifies the listeners with the full option set.
    """

    def __init__(self):
        self._options: Dict[str, Any] = {}
        self._listeners: List[OptionsListener] = []

    def get_options(self) -> Optional[Dict[str, Any]]:
        return dict(self._options) if self._options else None

    def set_option(self, key: str, value: Any) -> None:
        self._options[key] = value
        self._notify()

    def replace(self, options: Optional[Dict[str, Any]]) -> None:
        self._options = dict(options or {})
        self._notify()

    def clear(self) -> None:
        self.replace(None)

    def subscribe(self, listener: OptionsListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        snapshot = self.get_options()
        for listener in list(self._listeners):
            listener(snapshot)


class AppState:
    """Holds all session state: records, saved options, label session."""

    def __init__(self):
        self.store = OptionStore()
        self.records = RecordSource()
        self.csv_filename: str = ""
        self.session = LabelSession(set_option=self.store.set_option)
        self.store.subscribe(self.session.on_options)
        self.lock = threading.Lock()

    def load_records(self, path: str, filename: str = "") -> None:
        self.records.load(path)
        self.csv_filename = filename
        self.session.on_records(self.records.records())


# Module-level singleton
state = AppState()
