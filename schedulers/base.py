"""
Shared pieces of the selection policies
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from core.process import Process


@dataclass
class SchedulingDecision:
    """
    Outcome of one policy call for one core

    selected: process that should occupy the CPU this tick (None = idle)
    should_preempt: the running process must give up the CPU
    reset_quantum: load a fresh quantum for the selected process
    quantum: length of that fresh quantum (None = configured time quantum)
    demote: move the running process one MLFQ level down
    """
    selected: Optional[Process] = None
    should_preempt: bool = False
    reset_quantum: bool = False
    quantum: Optional[int] = None
    demote: bool = False


def tie_break_key(process: Process) -> Tuple[int, int]:
    """Earlier arrival wins, then the earlier-created process"""
    return (process.arrival_time, process.sequence)


def keep_running(current_process: Process) -> SchedulingDecision:
    return SchedulingDecision(selected=current_process)


def pick_when_idle(ready_queue: List[Process], key) -> SchedulingDecision:
    """Non-preemptive helper: choose only when the CPU is free"""
    if not ready_queue:
        return SchedulingDecision()
    return SchedulingDecision(selected=min(ready_queue, key=key), reset_quantum=True)
