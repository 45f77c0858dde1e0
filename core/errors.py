"""
Scheduler exception hierarchy
"""


class SchedulerError(Exception):
    """Base class for all simulator errors"""


class ProcessValidationError(SchedulerError, ValueError):
    """Process definition rejected at the input boundary"""


class ConfigurationError(SchedulerError, ValueError):
    """Invalid simulator configuration"""


class SimulationRunningError(SchedulerError):
    """State-mutating call made while the simulation is running"""


class UnknownProcessError(SchedulerError, KeyError):
    """No process with the given id"""


class SchedulerInvariantError(SchedulerError, AssertionError):
    """Internal scheduling logic produced an impossible state"""
