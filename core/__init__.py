"""
Core modules for the CPU scheduling simulator

The tick engine and the Simulator live in core.engine and core.simulator;
they depend on the schedulers package and are imported from there directly.
"""

from .config import Algorithm, SimulationStatus, SimulatorConfig
from .errors import (SchedulerError, ProcessValidationError, ConfigurationError,
                     SimulationRunningError, UnknownProcessError, SchedulerInvariantError)
from .metrics import Metrics, calculate_metrics
from .process import (Process, ProcessState, Burst, BurstType, parse_burst_pattern,
                      format_burst_pattern, validate_process_definition, create_process_copy)
from .state import EventType, Event, GanttEntry, CPUCore, IODevice, SchedulerState

__all__ = [
    'Algorithm',
    'SimulationStatus',
    'SimulatorConfig',
    'SchedulerError',
    'ProcessValidationError',
    'ConfigurationError',
    'SimulationRunningError',
    'UnknownProcessError',
    'SchedulerInvariantError',
    'Metrics',
    'calculate_metrics',
    'Process',
    'ProcessState',
    'Burst',
    'BurstType',
    'parse_burst_pattern',
    'format_burst_pattern',
    'validate_process_definition',
    'create_process_copy',
    'EventType',
    'Event',
    'GanttEntry',
    'CPUCore',
    'IODevice',
    'SchedulerState',
]
