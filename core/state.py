"""
Simulation snapshot: cores, I/O device, kernel log and the overall state value
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .config import SimulatorConfig, SimulationStatus
from .metrics import Metrics
from .process import Process, ProcessState


class EventType(Enum):
    """Kernel log event kinds"""
    ARRIVAL = "PROCESS_ARRIVED"
    START = "PROCESS_STARTED"
    PREEMPT = "PROCESS_PREEMPTED"
    COMPLETE = "PROCESS_COMPLETED"
    IO_START = "PROCESS_IO_START"
    IO_COMPLETE = "PROCESS_IO_COMPLETE"
    CONTEXT_SWITCH = "CONTEXT_SWITCH"
    AGING_BOOST = "PRIORITY_AGED"
    DEMOTION = "QUEUE_LEVEL_DEMOTED"
    LOAD_BALANCE = "LOAD_BALANCED"


@dataclass(frozen=True)
class Event:
    """Kernel log record, never mutated once appended"""
    time: int
    event_type: EventType
    message: str
    process_id: Optional[str] = None
    core_id: Optional[int] = None

    def format(self) -> str:
        return f"[T={self.time:3d}] {self.message}"

    def to_dict(self) -> Dict:
        return {
            'timestamp': self.time,
            'type': self.event_type.value,
            'message': self.message,
            'process_id': self.process_id,
            'core_id': self.core_id,
        }


@dataclass
class GanttEntry:
    """Gantt segment; process_id None means the core was idle"""
    process_id: Optional[str]
    process_name: str
    start_time: int
    end_time: int
    color: str

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def is_idle(self) -> bool:
        return self.process_id is None

    def to_dict(self) -> Dict:
        return {
            'process_id': self.process_id,
            'process_name': self.process_name,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'color': self.color,
        }


@dataclass
class CPUCore:
    """One CPU core with its own ready queue"""
    core_id: int
    current_process: Optional[Process] = None
    gantt_history: List[GanttEntry] = field(default_factory=list)
    ready_queue: List[Process] = field(default_factory=list)
    time_quantum_remaining: int = 0

    @property
    def load(self) -> int:
        """Ready queue length plus one when occupied"""
        return len(self.ready_queue) + (1 if self.current_process is not None else 0)

    def to_dict(self) -> Dict:
        return {
            'id': self.core_id,
            'current_process': self.current_process.pid if self.current_process else None,
            'gantt_history': [g.to_dict() for g in self.gantt_history],
            'ready_queue': [p.pid for p in self.ready_queue],
            'time_quantum_remaining': self.time_quantum_remaining,
        }


@dataclass
class IODevice:
    """
    Shared I/O device
    Unbounded: every queued process makes progress on every tick
    """
    device_id: int = 0
    wait_queue: List[Process] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'id': self.device_id,
            'wait_queue': [p.pid for p in self.wait_queue],
        }


def create_initial_cores(count: int) -> List[CPUCore]:
    return [CPUCore(core_id=i) for i in range(count)]


@dataclass
class SchedulerState:
    """
    Complete simulation snapshot
    The tick engine takes one of these and returns the next one
    """
    config: SimulatorConfig = field(default_factory=SimulatorConfig)
    clock: int = 0
    status: SimulationStatus = SimulationStatus.STOPPED
    processes: List[Process] = field(default_factory=list)
    cores: List[CPUCore] = field(default_factory=list)
    io_device: IODevice = field(default_factory=IODevice)
    kernel_log: List[Event] = field(default_factory=list)
    metrics: Metrics = field(default_factory=Metrics)
    clock_history: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not self.cores:
            self.cores = create_initial_cores(self.config.core_count)

    def find_process(self, pid: str) -> Optional[Process]:
        for process in self.processes:
            if process.pid == pid:
                return process
        return None

    def processes_in(self, state: ProcessState) -> List[Process]:
        return [p for p in self.processes if p.state == state]

    def all_terminated(self) -> bool:
        return bool(self.processes) and all(
            p.state == ProcessState.TERMINATED for p in self.processes)

    def to_dict(self) -> Dict:
        return {
            'config': self.config.to_dict(),
            'clock': self.clock,
            'status': self.status.value,
            'processes': [p.to_dict() for p in self.processes],
            'cores': [c.to_dict() for c in self.cores],
            'io_device': self.io_device.to_dict(),
            'kernel_log': [e.to_dict() for e in self.kernel_log],
            'metrics': self.metrics.to_dict(),
            'clock_history': list(self.clock_history),
        }
