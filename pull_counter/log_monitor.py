"""Monitor the network log directory for new records."""
import time
import threading
from pathlib import Path
from typing import Optional, Callable, List

from .logger import get_logger

logger = get_logger(__name__)

LOG_FILE_GLOB = "Network_*.log"

# ChangeZone and PartyList: the last of each tells a late starter where it is
SESSION_RECORD_TYPES = ("01", "11")
SCAN_BLOCK_SIZE = 64 * 1024


class LogMonitor:
    """Tails the most recently written network log file."""

    def __init__(self, log_directory: str, on_new_lines: Callable[[List[str]], None],
                 poll_interval: float = 1.0):
        """
        Initialize the log monitor.

        Args:
            log_directory: Directory containing network log files
            on_new_lines: Callback called (from the monitor thread) with each
                batch of new lines read in one poll
            poll_interval: Seconds between polls
        """
        self.log_directory = Path(log_directory)
        self.on_new_lines = on_new_lines
        self.poll_interval = poll_interval
        self.active_file: Optional[Path] = None
        self.file_positions: dict = {}
        self.running = False
        self.monitor_thread: Optional[threading.Thread] = None
        self.scan_block_size = SCAN_BLOCK_SIZE

    def start(self) -> None:
        """Start monitoring log files."""
        if self.running:
            return

        self.running = True
        self.monitor_thread = threading.Thread(target=self._monitor_loop, daemon=True)
        self.monitor_thread.start()
        logger.info(f"Log monitor started for directory: {self.log_directory}")

    def stop(self) -> None:
        """Stop monitoring log files."""
        self.running = False
        if self.monitor_thread:
            self.monitor_thread.join(timeout=5)
            logger.info("Log monitor stopped")
        self.file_positions.clear()

    def _get_log_files(self) -> List[Path]:
        if not self.log_directory.exists():
            return []
        return list(self.log_directory.glob(LOG_FILE_GLOB))

    def _get_active_file(self) -> Optional[Path]:
        """Determine which log file is currently active (most recently modified)."""
        log_files = self._get_log_files()
        if not log_files:
            return None
        return max(log_files, key=lambda f: f.stat().st_mtime)

    def check_active_file(self) -> None:
        """
        Switch to the newest log file.

        A file that replaces a previous active file was started during the
        session and is read from its first record. The first file found is
        tailed from its end, after delivering its last zone and party records.
        """
        active_file = self._get_active_file()
        if active_file == self.active_file:
            return

        old_file = self.active_file
        self.active_file = active_file
        if not active_file:
            return
        logger.info(f"Active log file changed: {old_file} -> {active_file}")

        if old_file is not None:
            self.file_positions[active_file] = 0
            logger.info("Starting to monitor from start of new file")
            return

        try:
            end = active_file.stat().st_size
        except OSError as e:
            logger.error(f"Error determining file size for {active_file}: {e}")
            self.file_positions[active_file] = 0
            return
        self.file_positions[active_file] = end
        logger.info(f"Starting to monitor from end of file (position {end})")

        try:
            records = self.find_session_records(active_file, end)
        except OSError as e:
            logger.error(f"Error scanning {active_file} for zone and party: {e}")
            return
        if records:
            logger.info(f"Restoring session from {len(records)} earlier record(s)")
            self.on_new_lines(records)

    def find_session_records(self, filepath: Path, end: int) -> List[str]:
        """
        Find the last ChangeZone and PartyList records before `end`.

        The file is read backwards in blocks and only complete lines count.

        Returns:
            The records found, in file order
        """
        found = {}
        seq = 0
        pos = end
        tail = b''
        skip_last = True  # Text after the last newline may still be written
        with open(filepath, 'rb') as f:
            while pos > 0 and len(found) < len(SESSION_RECORD_TYPES):
                read_size = min(self.scan_block_size, pos)
                pos -= read_size
                f.seek(pos)
                pieces = (f.read(read_size) + tail).split(b'\n')
                # The first piece may start mid-line; keep it for the next block
                tail = pieces.pop(0) if pos > 0 else b''
                if skip_last and pieces:
                    pieces.pop()
                    skip_last = False

                for raw_line in reversed(pieces):
                    seq += 1
                    line = raw_line.decode('utf-8', errors='ignore').rstrip('\r')
                    record_type = line.split('|', 1)[0]
                    if record_type in SESSION_RECORD_TYPES and record_type not in found:
                        found[record_type] = (seq, line)

        return [line for _, line in sorted(found.values(), reverse=True)]

    def _monitor_loop(self) -> None:
        """Main monitoring loop."""
        active_file_check_counter = 0
        while self.running:
            try:
                # Look for a newer file every 10 polls
                active_file_check_counter += 1
                if active_file_check_counter >= 10 or self.active_file is None:
                    active_file_check_counter = 0
                    self.check_active_file()

                if self.active_file and self.active_file.exists():
                    self.read_new_lines(self.active_file)

                time.sleep(self.poll_interval)
            except Exception as e:
                logger.error(f"Error in log monitor loop: {e}", exc_info=True)
                time.sleep(5)

    def read_new_lines(self, filepath: Path) -> List[str]:
        """Read complete new lines from a log file and deliver them as one batch."""
        lines = []
        try:
            current_pos = self.file_positions.get(filepath, 0)
            if filepath.stat().st_size < current_pos:
                # File was truncated or replaced
                logger.info(f"Log file {filepath.name} shrank, rereading from start")
                current_pos = 0
                self.file_positions[filepath] = 0

            with open(filepath, 'rb') as f:
                f.seek(current_pos)
                data = f.read()

            # A partially written last line is left for the next poll
            end = data.rfind(b'\n')
            if end < 0:
                return []
            chunk = data[:end + 1]
            self.file_positions[filepath] = current_pos + len(chunk)

            for raw_line in chunk.decode('utf-8', errors='ignore').splitlines():
                line = raw_line.rstrip('\r\n')
                if line:
                    lines.append(line)
        except (IOError, PermissionError) as e:
            # File might be locked or inaccessible, skip this iteration
            logger.debug(f"Log file temporarily inaccessible: {filepath} - {e}")
            return []

        if lines:
            logger.debug(f"Read {len(lines)} new lines from {filepath.name}")
            self.on_new_lines(lines)
        return lines
