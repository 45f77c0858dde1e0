"""
Basic scheduling policies
- FCFS (First-Come, First-Served)
- SJF (Shortest Job First, non-preemptive)
- SRTF (Shortest Remaining Time First, preemptive SJF)
- Round Robin
"""

from typing import List, Optional

from core.config import SimulatorConfig
from core.process import Process
from .base import SchedulingDecision, keep_running, pick_when_idle, tie_break_key


def fcfs_schedule(ready_queue: List[Process], current_process: Optional[Process],
                  current_time: int, time_quantum_remaining: int,
                  config: SimulatorConfig) -> SchedulingDecision:
    """
    FCFS: earliest arrival runs first
    Non-preemptive, the occupant always keeps the CPU
    """
    if current_process is not None:
        return keep_running(current_process)
    return pick_when_idle(ready_queue, tie_break_key)


def _shortest_burst_key(process: Process):
    return (process.get_remaining_time(),) + tie_break_key(process)


def sjf_schedule(ready_queue: List[Process], current_process: Optional[Process],
                 current_time: int, time_quantum_remaining: int,
                 config: SimulatorConfig) -> SchedulingDecision:
    """SJF: shortest current burst, chosen only when the CPU is idle"""
    if current_process is not None:
        return keep_running(current_process)
    return pick_when_idle(ready_queue, _shortest_burst_key)


def srtf_schedule(ready_queue: List[Process], current_process: Optional[Process],
                  current_time: int, time_quantum_remaining: int,
                  config: SimulatorConfig) -> SchedulingDecision:
    """
    SRTF: the process with the least remaining burst time always runs

    The occupant competes with the ready queue on every tick and is
    preempted as soon as the minimum moves to someone else.
    """
    candidates = list(ready_queue)
    if current_process is not None:
        candidates.append(current_process)
    if not candidates:
        return SchedulingDecision()

    selected = min(candidates, key=_shortest_burst_key)
    should_preempt = current_process is not None and selected is not current_process
    return SchedulingDecision(selected=selected,
                              should_preempt=should_preempt,
                              reset_quantum=should_preempt or current_process is None)


def round_robin_schedule(ready_queue: List[Process], current_process: Optional[Process],
                         current_time: int, time_quantum_remaining: int,
                         config: SimulatorConfig) -> SchedulingDecision:
    """
    Round Robin: FIFO ready queue with a fixed time slice

    When the slice runs out the head of the queue takes over; with nobody
    waiting the occupant simply gets a new slice.
    """
    if current_process is None:
        if not ready_queue:
            return SchedulingDecision()
        return SchedulingDecision(selected=ready_queue[0], reset_quantum=True)

    if time_quantum_remaining <= 0:
        if ready_queue:
            return SchedulingDecision(selected=ready_queue[0],
                                      should_preempt=True,
                                      reset_quantum=True)
        return SchedulingDecision(selected=current_process, reset_quantum=True)

    return keep_running(current_process)
