"""
Process Control Block (PCB) and burst sequence model
"""

import re
from copy import deepcopy
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .errors import ProcessValidationError


class ProcessState(Enum):
    """Process lifecycle state"""
    NEW = "NEW"
    READY = "READY"
    RUNNING = "RUNNING"
    WAITING = "WAITING"  # doing I/O
    TERMINATED = "TERMINATED"


class BurstType(Enum):
    """Kind of service a burst demands"""
    CPU = "CPU"
    IO = "IO"


@dataclass
class Burst:
    """A contiguous CPU or I/O demand of fixed duration"""
    burst_type: BurstType
    duration: int
    remaining: int

    @classmethod
    def create(cls, burst_type: BurstType, duration: int) -> "Burst":
        return cls(burst_type, duration, duration)

    @property
    def is_cpu(self) -> bool:
        return self.burst_type == BurstType.CPU

    @property
    def is_io(self) -> bool:
        return self.burst_type == BurstType.IO

    @property
    def is_finished(self) -> bool:
        return self.remaining <= 0

    def advance(self, time_units: int = 1) -> bool:
        """
        Consume burst time

        Returns:
            whether the burst has been fully served
        """
        self.remaining = max(0, self.remaining - time_units)
        return self.is_finished

    def to_dict(self) -> Dict:
        return {
            'type': self.burst_type.value,
            'duration': self.duration,
            'remaining': self.remaining,
        }


# CPU(3) / io( 2 ) tokens, anything in between is ignored
BURST_TOKEN_RE = re.compile(r'(CPU|IO)\s*\(\s*(\d+)\s*\)', re.IGNORECASE)


def parse_burst_pattern(pattern: str) -> List[Burst]:
    """
    Parse a burst pattern such as "CPU(3) -> IO(2) -> CPU(5)"

    Tokens are matched left to right; malformed input yields an empty list,
    which callers treat as a validation error.
    """
    if not pattern:
        return []
    return [Burst.create(BurstType(kind.upper()), int(duration))
            for kind, duration in BURST_TOKEN_RE.findall(pattern)]


def format_burst_pattern(bursts: List[Burst]) -> str:
    """Render bursts back into the canonical "CPU(3) -> IO(2)" notation"""
    return ' -> '.join(f"{b.burst_type.value}({b.duration})" for b in bursts)


class Process:
    """
    Process Control Block (PCB)
    Static definition plus the dynamic scheduling state of one process
    """

    def __init__(self, pid: str, name: str, arrival_time: int, priority: int,
                 bursts: List[Burst], color: str = '', sequence: int = 0):
        """
        Args:
            pid: process id ("P1", "P2", ...)
            name: display name
            arrival_time: tick at which the process becomes READY
            priority: lower value means more urgent
            bursts: ordered CPU/IO bursts, never empty
            color: display colour
            sequence: insertion order, used as the final tie-break
        """
        self.pid = pid
        self.name = name
        self.arrival_time = arrival_time
        self.initial_priority = priority
        self.priority = priority
        self.bursts = bursts
        self.color = color
        self.sequence = sequence

        self.state = ProcessState.NEW
        self.current_burst_index = 0

        # statistics
        self.wait_time = 0
        self.turnaround_time = 0
        self.response_time: Optional[int] = None
        self.start_time: Optional[int] = None
        self.completion_time: Optional[int] = None

        # clock value of the latest READY entry (aging reference)
        self.waiting_since: Optional[int] = None

        # MLFQ level, 0 is the highest
        self.queue_level = 0

        # core bound on arrival, never migrated
        self.assigned_core: Optional[int] = None

    @property
    def current_burst(self) -> Optional[Burst]:
        if self.current_burst_index < len(self.bursts):
            return self.bursts[self.current_burst_index]
        return None

    def get_remaining_time(self) -> float:
        """Remaining time of the current burst - SJF/SRTF metric"""
        burst = self.current_burst
        return burst.remaining if burst is not None else float('inf')

    def get_total_burst_time(self) -> int:
        """Sum of all burst durations (CPU and I/O)"""
        return sum(b.duration for b in self.bursts)

    def get_total_cpu_time(self) -> int:
        return sum(b.duration for b in self.bursts if b.is_cpu)

    def is_cpu_burst(self) -> bool:
        burst = self.current_burst
        return burst is not None and burst.is_cpu

    def is_io_burst(self) -> bool:
        burst = self.current_burst
        return burst is not None and burst.is_io

    def is_completed(self) -> bool:
        return self.current_burst_index >= len(self.bursts)

    def advance_burst(self) -> Optional[Burst]:
        """Move on to the next burst and return it (None once the sequence is exhausted)"""
        self.current_burst_index += 1
        return self.current_burst

    def finish(self, completion_time: int):
        """Mark terminated and derive turnaround/waiting time"""
        self.state = ProcessState.TERMINATED
        self.current_burst_index = len(self.bursts)
        self.completion_time = completion_time
        self.turnaround_time = completion_time - self.arrival_time
        self.wait_time = self.turnaround_time - self.get_total_burst_time()
        self.waiting_since = None

    def to_dict(self) -> Dict:
        return {
            'id': self.pid,
            'name': self.name,
            'arrival_time': self.arrival_time,
            'priority': self.priority,
            'initial_priority': self.initial_priority,
            'bursts': [b.to_dict() for b in self.bursts],
            'burst_pattern': format_burst_pattern(self.bursts),
            'current_burst_index': self.current_burst_index,
            'state': self.state.value,
            'color': self.color,
            'wait_time': self.wait_time,
            'turnaround_time': self.turnaround_time,
            'response_time': self.response_time,
            'start_time': self.start_time,
            'completion_time': self.completion_time,
            'waiting_since': self.waiting_since,
            'queue_level': self.queue_level,
            'assigned_core': self.assigned_core,
        }

    def __repr__(self):
        return f"{self.pid}[{self.state.value}]"

    def __str__(self):
        return f"Process {self.name}: State={self.state.value}, Priority={self.priority}, " \
               f"Remaining={self.get_remaining_time()}"


def create_process_copy(process: Process) -> Process:
    """
    Deep copy of a process
    Lets each algorithm run against its own untouched workload
    """
    return deepcopy(process)


def validate_process_definition(name: str, arrival_time: int, priority: int,
                                bursts: List[Burst]):
    """
    Reject a process definition before it can enter the simulation

    Raises:
        ProcessValidationError: on the first problem found
    """
    if name is None or not str(name).strip():
        raise ProcessValidationError("Process name is required")
    if not isinstance(arrival_time, int) or isinstance(arrival_time, bool) or arrival_time < 0:
        raise ProcessValidationError(
            f"Arrival time must be a non-negative integer: {arrival_time!r}")
    if not isinstance(priority, int) or isinstance(priority, bool) or priority < 0:
        raise ProcessValidationError(f"Priority must be a non-negative integer: {priority!r}")
    if not bursts:
        raise ProcessValidationError(
            "Burst pattern is empty or malformed (expected e.g. CPU(3) -> IO(2) -> CPU(5))")
    if not bursts[0].is_cpu:
        raise ProcessValidationError("Burst pattern must begin with a CPU burst")
    if any(b.duration <= 0 for b in bursts):
        raise ProcessValidationError("All burst durations must be positive")
