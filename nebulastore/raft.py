"""Raft consensus data types and the replicated state machine interface."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass, field


class RaftRole(enum.IntEnum):
    FOLLOWER = 0
    CANDIDATE = 1
    LEADER = 2


class CmdType(enum.IntEnum):
    """Kind of metadata command carried by a log entry."""

    NOOP = 0
    CREATE_INODE = 1
    DELETE_INODE = 2
    UPDATE_INODE = 3
    CREATE_DENTRY = 4
    DELETE_DENTRY = 5
    UPDATE_DENTRY = 6


@dataclass
class LogEntry:
    """One replicated log record."""

    index: int
    term: int
    type: CmdType = CmdType.NOOP
    command: bytes = b""


@dataclass
class PersistentState:
    """State kept on stable storage."""

    current_term: int = 0
    voted_for: int = 0


@dataclass
class VolatileState:
    """State kept in memory on every server."""

    commit_index: int = 0
    last_applied: int = 0


@dataclass
class LeaderState:
    """Per-peer replication progress kept by the leader."""

    next_index: dict[int, int] = field(default_factory=dict)
    match_index: dict[int, int] = field(default_factory=dict)


@dataclass
class RaftConfig:
    """Membership and timing of one Raft group; timeouts in milliseconds."""

    group_id: int
    node_id: int
    peers: list[int] = field(default_factory=list)
    election_timeout_min_ms: int = 150
    election_timeout_max_ms: int = 300
    heartbeat_interval_ms: int = 50


@dataclass
class ApplyResult:
    """Outcome of applying one entry: a response, or the error it raised."""

    response: bytes = b""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StateMachine(abc.ABC):
    """The state that committed log entries are applied to."""

    @abc.abstractmethod
    def apply(self, entry: LogEntry) -> ApplyResult:
        """Apply a committed entry."""

    @abc.abstractmethod
    def snapshot(self) -> bytes:
        """Serialize the current state."""

    @abc.abstractmethod
    def restore(self, data: bytes) -> None:
        """Replace the current state with one from :meth:`snapshot`."""

    @abc.abstractmethod
    def last_applied_index(self) -> int:
        """Index of the last entry applied."""