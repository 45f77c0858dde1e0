"""
CPU Scheduling Algorithms
"""

from typing import Dict, List, Optional

from core.config import Algorithm, SimulatorConfig
from core.process import Process
from .base import SchedulingDecision, tie_break_key
from .basic_schedulers import fcfs_schedule, sjf_schedule, srtf_schedule, round_robin_schedule
from .advanced_schedulers import (priority_preemptive_schedule, priority_non_preemptive_schedule,
                                  mlfq_schedule, apply_priority_aging)
from .load_balancer import assign_process_to_core

# Algorithm map
ALGORITHM_MAP = {
    Algorithm.FCFS: {
        'name': 'FCFS (First-Come, First-Served)',
        'policy': fcfs_schedule,
        'preemptive': False,
    },
    Algorithm.SJF: {
        'name': 'SJF (Shortest Job First)',
        'policy': sjf_schedule,
        'preemptive': False,
    },
    Algorithm.SRTF: {
        'name': 'SRTF (Shortest Remaining Time First)',
        'policy': srtf_schedule,
        'preemptive': True,
    },
    Algorithm.ROUND_ROBIN: {
        'name': 'Round Robin',
        'policy': round_robin_schedule,
        'preemptive': True,
    },
    Algorithm.PRIORITY_PREEMPTIVE: {
        'name': 'Priority (Preemptive)',
        'policy': priority_preemptive_schedule,
        'preemptive': True,
    },
    Algorithm.PRIORITY_NON_PREEMPTIVE: {
        'name': 'Priority (Non-Preemptive)',
        'policy': priority_non_preemptive_schedule,
        'preemptive': False,
    },
    Algorithm.MLFQ: {
        'name': 'Multi-Level Feedback Queue',
        'policy': mlfq_schedule,
        'preemptive': True,
    },
}


def get_next_process(algorithm: Algorithm, ready_queue: List[Process],
                     current_process: Optional[Process], current_time: int,
                     time_quantum_remaining: int,
                     config: SimulatorConfig) -> SchedulingDecision:
    """Run the selection policy registered for the algorithm"""
    return ALGORITHM_MAP[algorithm]['policy'](
        ready_queue, current_process, current_time, time_quantum_remaining, config)


def list_algorithms() -> List[Dict]:
    """Algorithm catalogue for front ends"""
    return [
        {'id': algorithm.value, 'name': info['name'], 'preemptive': info['preemptive']}
        for algorithm, info in ALGORITHM_MAP.items()
    ]


__all__ = [
    'ALGORITHM_MAP',
    'SchedulingDecision',
    'tie_break_key',
    'get_next_process',
    'list_algorithms',
    'fcfs_schedule',
    'sjf_schedule',
    'srtf_schedule',
    'round_robin_schedule',
    'priority_preemptive_schedule',
    'priority_non_preemptive_schedule',
    'mlfq_schedule',
    'apply_priority_aging',
    'assign_process_to_core',
]
