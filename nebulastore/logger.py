"""Per-subsystem leveled logging to a file or the console."""

from __future__ import annotations

import enum
import sys
import threading
from datetime import datetime
from typing import IO, Any

DEFAULT_GATHER_LEVEL = 5

LEVEL_ERROR = -1
LEVEL_WARN = 0
LEVEL_INFO = 1


class SubsysID(enum.IntEnum):
    """Subsystems that carry their own gather level."""

    DEFAULT = 0
    METADATA = 1
    ROCKSDB = 2
    STORAGE = 3
    HTTP_SERVER = 4


_SUBSYS_NAMES = {
    SubsysID.DEFAULT: "_default",
    SubsysID.METADATA: "metadata",
    SubsysID.ROCKSDB: "rocksdb",
    SubsysID.STORAGE: "storage",
    SubsysID.HTTP_SERVER: "http_server",
}

_SUBSYS_GATHER_LEVELS = {subsys: DEFAULT_GATHER_LEVEL for subsys in SubsysID}


def _as_subsys(subsys: Any) -> SubsysID | None:
    try:
        return SubsysID(subsys)
    except ValueError:
        return None


class Logger:
    """Writes log lines filtered by a gather level per subsystem."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._levels: dict[SubsysID, int] = dict(_SUBSYS_GATHER_LEVELS)
        self._file: IO[str] | None = None
        self.default_level = DEFAULT_GATHER_LEVEL

    def init(self, log_file: str | None) -> None:
        """Reset subsystem levels and log to ``log_file``, or the console if empty."""
        with self._lock:
            self._levels = dict(_SUBSYS_GATHER_LEVELS)
            if self._file is not None:
                self._file.close()
                self._file = None
            if log_file:
                try:
                    self._file = open(log_file, "a", encoding="utf-8")
                except OSError:
                    self._file = None

    def close(self) -> None:
        """Close the log file; later lines go to the console."""
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def should_gather(self, subsys: Any, level: int) -> bool:
        known = _as_subsys(subsys)
        if known is None:
            return False
        return level <= self._levels[known]

    def write_log(self, subsys: Any, level: int, message: str) -> None:
        """Write ``timestamp thread [subsystem] level message`` as one line."""
        known = _as_subsys(subsys)
        name = _SUBSYS_NAMES[known] if known is not None else "unknown"
        line = f"{_timestamp()} {threading.get_ident():x} [{name}] {level} {message}"
        with self._lock:
            if self._file is not None:
                self._file.write(line + "\n")
                self._file.flush()
            else:
                stream = sys.stderr if level < 0 else sys.stdout
                print(line, file=stream, flush=True)

    def set_subsys_level(self, subsys: Any, level: int) -> None:
        known = _as_subsys(subsys)
        if known is not None:
            with self._lock:
                self._levels[known] = level

    def get_subsys_level(self, subsys: Any) -> int:
        known = _as_subsys(subsys)
        if known is None:
            return self.default_level
        return self._levels[known]

    def _tagged(self, tag: str, message: str, to_stderr: bool) -> None:
        line = f"[{tag}] {message}"
        with self._lock:
            if self._file is not None:
                self._file.write(line + "\n")
                self._file.flush()
            else:
                print(line, file=sys.stderr if to_stderr else sys.stdout, flush=True)

    def info(self, message: str) -> None:
        self._tagged("INFO", message, False)

    def warn(self, message: str) -> None:
        self._tagged("WARN", message, True)

    def error(self, message: str) -> None:
        self._tagged("ERROR", message, True)

    def debug(self, message: str) -> None:
        self._tagged("DEBUG", message, False)


def _timestamp() -> str:
    now = datetime.now()
    return f"{now:%Y-%m-%d %H:%M:%S}.{now.microsecond:06d}"


_INSTANCE = Logger()


def get_logger() -> Logger:
    """The process-wide logger."""
    return _INSTANCE


class LogEntry:
    """One log line assembled piece by piece and written on commit."""

    def __init__(self, logger: Logger, subsys: SubsysID, level: int) -> None:
        self._logger = logger
        self._subsys = subsys
        self._level = level
        self._enabled = logger.should_gather(subsys, level)
        self._parts: list[str] = []
        self._committed = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def write(self, *parts: Any) -> LogEntry:
        if self._enabled:
            self._parts.extend(str(part) for part in parts)
        return self

    def commit(self) -> None:
        if self._enabled and not self._committed:
            self._logger.write_log(self._subsys, self._level, "".join(self._parts))
        self._committed = True

    def __enter__(self) -> LogEntry:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.commit()


def dout(level: int, subsys: SubsysID = SubsysID.DEFAULT) -> LogEntry:
    """Start a log line on the process-wide logger."""
    return LogEntry(get_logger(), subsys, level)