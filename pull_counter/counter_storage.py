"""Persist pull counts to a JSON file without blocking the caller."""
import json
import os
import threading
from pathlib import Path
from queue import Queue, Empty
from typing import Callable, Dict, Optional

from .logger import get_logger

logger = get_logger(__name__)


class CounterStorage:
    """
    Stores overlay save data in a JSON file.

    The file holds one serialized payload per overlay name, e.g.
    {"pullcounter": "{\"o1s\": 3}"}. Saves are queued for a writer thread and
    never awaited; loads can run on a background thread.
    """

    def __init__(self, db_path: str, overlay: str = 'pullcounter'):
        """
        Initialize the storage.

        Args:
            db_path: Path to the pullcounts.json file
            overlay: Key the payload is stored under
        """
        self.db_path = Path(db_path)
        self.overlay = overlay
        self.save_queue = Queue()
        self.worker_thread: Optional[threading.Thread] = None
        self.running = False
        self._lock = threading.Lock()

    def start(self) -> None:
        """Start the writer thread."""
        if not self.running:
            self.running = True
            self.worker_thread = threading.Thread(target=self._worker, daemon=True)
            self.worker_thread.start()
            logger.info("Counter storage writer thread started")

    def stop(self) -> None:
        """Write any queued saves and stop the writer thread."""
        if not self.running:
            return
        self.save_queue.put(None)  # Signal to stop
        self.running = False
        if self.worker_thread:
            self.worker_thread.join(timeout=5)
            logger.info("Counter storage writer thread stopped")

    def _worker(self) -> None:
        """Writer thread: write queued payloads in order."""
        while True:
            try:
                payload = self.save_queue.get(timeout=1)
            except Empty:
                if not self.running:
                    break
                continue
            try:
                if payload is None:
                    break
                self._write(payload)
            except Exception as e:
                logger.error(f"Error writing pull counts: {e}", exc_info=True)
            finally:
                self.save_queue.task_done()

    def save_data(self, payload: str) -> None:
        """Queue a payload to be written. Returns immediately."""
        if not self.running:
            self.start()
        self.save_queue.put(payload)
        logger.debug(f"Queued pull count save ({len(payload)} chars)")

    def load_data(self):
        """
        Read the saved payload for this overlay.

        Returns:
            The stored payload (normally a string), or None if there is none
        """
        with self._lock:
            data = self._read_all()
        payload = data.get(self.overlay)
        logger.debug(f"Loaded save data for '{self.overlay}': {'none' if payload is None else 'found'}")
        return payload

    def load_async(self, callback: Callable[[object], None]) -> threading.Thread:
        """
        Read the saved payload on a background thread.

        Args:
            callback: Called with the payload (or None) from the loader thread
        """
        def run():
            callback(self.load_data())

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        return thread

    def _read_all(self) -> Dict:
        if not self.db_path.exists():
            logger.info(f"Pull count file not found at {self.db_path}, starting fresh")
            return {}
        try:
            with open(self.db_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Error loading pull counts from {self.db_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Pull count file {self.db_path} does not hold an object, ignoring it")
            return {}
        return data

    def _write(self, payload: str) -> None:
        with self._lock:
            data = self._read_all()
            data[self.overlay] = payload
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.db_path.with_suffix(self.db_path.suffix + '.tmp')
                with open(tmp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.db_path)
                logger.debug(f"Saved pull counts to {self.db_path}")
            except IOError as e:
                logger.error(f"Error saving pull counts to {self.db_path}: {e}")
