"""
Simulator configuration and defaults
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .errors import ConfigurationError


class Algorithm(Enum):
    """Scheduling algorithm tag"""
    FCFS = "FCFS"
    SJF = "SJF"
    SRTF = "SRTF"
    ROUND_ROBIN = "ROUND_ROBIN"
    PRIORITY_PREEMPTIVE = "PRIORITY_PREEMPTIVE"
    PRIORITY_NON_PREEMPTIVE = "PRIORITY_NON_PREEMPTIVE"
    MLFQ = "MLFQ"

    @classmethod
    def from_name(cls, name) -> "Algorithm":
        """Accept an Algorithm, its value or a loose spelling like 'round-robin'"""
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper().replace('-', '_').replace(' ', '_')
        try:
            return cls(key)
        except ValueError:
            raise ConfigurationError(f"Unknown algorithm: {name}")


class SimulationStatus(Enum):
    """Run state of the whole simulation"""
    STOPPED = "STOPPED"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    STEP = "STEP"


# Process colour palette (first unused colour wins)
PROCESS_COLORS = [
    '#FF6B6B',  # red
    '#4ECDC4',  # teal
    '#45B7D1',  # blue
    '#96CEB4',  # green
    '#FFEAA7',  # yellow
    '#DDA0DD',  # plum
    '#98D8C8',  # mint
    '#F7DC6F',  # gold
    '#BB8FCE',  # purple
    '#85C1E9',  # light blue
    '#F8B500',  # orange
    '#00CED1',  # dark cyan
]
IDLE_COLOR = '#374151'

# Console menu choices; any positive core count is accepted
CORE_COUNT_OPTIONS = (1, 2, 4)
SPEED_OPTIONS = (0.5, 1, 2, 4)

DEFAULT_TIME_QUANTUM = 2
DEFAULT_AGING_THRESHOLD = 5
MLFQ_LEVELS = 3

# Guard against runaway batch runs
MAX_SIMULATION_TICKS = 10000


@dataclass
class SimulatorConfig:
    """Policy parameters selected before a run"""
    algorithm: Algorithm = Algorithm.FCFS
    core_count: int = 1
    time_quantum: int = DEFAULT_TIME_QUANTUM
    aging_enabled: bool = False
    aging_threshold: int = DEFAULT_AGING_THRESHOLD
    mlfq_levels: int = MLFQ_LEVELS
    speed: float = 1

    def validate(self):
        """Raise ConfigurationError on unusable values"""
        if not isinstance(self.algorithm, Algorithm):
            raise ConfigurationError(f"Unknown algorithm: {self.algorithm}")
        if self.core_count < 1:
            raise ConfigurationError(f"Core count must be at least 1, got {self.core_count}")
        if self.time_quantum < 1:
            raise ConfigurationError(f"Time quantum must be at least 1, got {self.time_quantum}")
        if self.aging_threshold < 1:
            raise ConfigurationError(
                f"Aging threshold must be at least 1, got {self.aging_threshold}")
        if self.mlfq_levels < 1:
            raise ConfigurationError(f"MLFQ needs at least one level, got {self.mlfq_levels}")
        if self.speed not in SPEED_OPTIONS:
            raise ConfigurationError(f"Speed must be one of {SPEED_OPTIONS}, got {self.speed}")

    def mlfq_quantum(self, level: int) -> int:
        """Quantum for an MLFQ level: base quantum doubled per level"""
        return self.time_quantum * (2 ** level)

    def updated(self, algorithm=None, core_count: Optional[int] = None,
                time_quantum: Optional[int] = None, aging_enabled: Optional[bool] = None,
                aging_threshold: Optional[int] = None,
                speed: Optional[float] = None) -> "SimulatorConfig":
        """Copy with the given fields replaced, validated"""
        config = SimulatorConfig(
            algorithm=Algorithm.from_name(algorithm) if algorithm is not None else self.algorithm,
            core_count=core_count if core_count is not None else self.core_count,
            time_quantum=time_quantum if time_quantum is not None else self.time_quantum,
            aging_enabled=aging_enabled if aging_enabled is not None else self.aging_enabled,
            aging_threshold=(aging_threshold if aging_threshold is not None
                             else self.aging_threshold),
            mlfq_levels=self.mlfq_levels,
            speed=speed if speed is not None else self.speed,
        )
        config.validate()
        return config

    def to_dict(self) -> Dict:
        return {
            'algorithm': self.algorithm.value,
            'core_count': self.core_count,
            'time_quantum': self.time_quantum,
            'aging_enabled': self.aging_enabled,
            'aging_threshold': self.aging_threshold,
            'mlfq_levels': self.mlfq_levels,
            'speed': self.speed,
        }
