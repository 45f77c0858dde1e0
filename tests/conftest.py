import matplotlib

matplotlib.use('Agg')

import pytest

from core.config import SimulatorConfig
from core.process import Process, parse_burst_pattern
from core.state import CPUCore


def make_process(pid, arrival_time=0, priority=1, pattern='CPU(4)', sequence=None, **attrs):
    """Process built straight from a pattern; sequence defaults to the pid number"""
    if sequence is None:
        sequence = int(pid.lstrip('P'))
    process = Process(pid, pid, arrival_time, priority, parse_burst_pattern(pattern),
                      sequence=sequence)
    for key, value in attrs.items():
        setattr(process, key, value)
    return process


def definition(name, arrival_time=0, priority=1, pattern='CPU(4)'):
    return {'name': name, 'arrival_time': arrival_time, 'priority': priority,
            'burst_pattern': pattern}


@pytest.fixture
def config():
    return SimulatorConfig()


@pytest.fixture
def fcfs_workload():
    return [
        definition('P1', 0, 1, 'CPU(12)'),
        definition('P2', 1, 1, 'CPU(2)'),
        definition('P3', 2, 1, 'CPU(2)'),
        definition('P4', 3, 1, 'CPU(2)'),
    ]


@pytest.fixture
def two_cores():
    return [CPUCore(0), CPUCore(1)]
