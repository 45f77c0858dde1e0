"""
Advanced scheduling policies
- Priority Scheduling (preemptive and non-preemptive)
- Multi-Level Feedback Queue (MLFQ)
- Priority aging
"""

from typing import List, Optional

from core.config import SimulatorConfig
from core.process import Process, ProcessState
from core.state import Event, EventType
from .base import SchedulingDecision, keep_running, pick_when_idle, tie_break_key


def _priority_key(process: Process):
    # lower number = higher priority
    return (process.priority,) + tie_break_key(process)


def priority_preemptive_schedule(ready_queue: List[Process], current_process: Optional[Process],
                                 current_time: int, time_quantum_remaining: int,
                                 config: SimulatorConfig) -> SchedulingDecision:
    """
    Preemptive priority
    A ready process takes the CPU only with a strictly smaller priority value
    """
    if current_process is None:
        return pick_when_idle(ready_queue, _priority_key)
    if not ready_queue:
        return keep_running(current_process)

    best = min(ready_queue, key=_priority_key)
    if best.priority < current_process.priority:
        return SchedulingDecision(selected=best, should_preempt=True, reset_quantum=True)
    return keep_running(current_process)


def priority_non_preemptive_schedule(ready_queue: List[Process],
                                     current_process: Optional[Process],
                                     current_time: int, time_quantum_remaining: int,
                                     config: SimulatorConfig) -> SchedulingDecision:
    """Non-preemptive priority: chosen only when the CPU is idle"""
    if current_process is not None:
        return keep_running(current_process)
    return pick_when_idle(ready_queue, _priority_key)


def _highest_level_head(ready_queue: List[Process]) -> Optional[Process]:
    """Head of the highest non-empty level; ready queue order is FIFO within a level"""
    if not ready_queue:
        return None
    return min(ready_queue, key=lambda p: p.queue_level)


def mlfq_schedule(ready_queue: List[Process], current_process: Optional[Process],
                  current_time: int, time_quantum_remaining: int,
                  config: SimulatorConfig) -> SchedulingDecision:
    """
    Multi-Level Feedback Queue

    Level L runs with quantum = base quantum * 2^L. A running process is
    preempted when something is waiting at a higher level, or when its
    quantum expires; only quantum expiry demotes it.
    """
    lowest_level = config.mlfq_levels - 1
    best = _highest_level_head(ready_queue)

    if current_process is None:
        if best is None:
            return SchedulingDecision()
        return SchedulingDecision(selected=best, reset_quantum=True,
                                  quantum=config.mlfq_quantum(best.queue_level))

    if best is not None and best.queue_level < current_process.queue_level:
        return SchedulingDecision(selected=best, should_preempt=True, reset_quantum=True,
                                  quantum=config.mlfq_quantum(best.queue_level))

    if time_quantum_remaining <= 0:
        new_level = min(current_process.queue_level + 1, lowest_level)
        if best is not None and best.queue_level <= new_level:
            return SchedulingDecision(selected=best, should_preempt=True, reset_quantum=True,
                                      quantum=config.mlfq_quantum(best.queue_level),
                                      demote=True)
        # nobody at the same or a higher level: keep going one level down
        return SchedulingDecision(selected=current_process, reset_quantum=True,
                                  quantum=config.mlfq_quantum(new_level), demote=True)

    return keep_running(current_process)


def apply_priority_aging(processes: List[Process], current_time: int,
                         aging_threshold: int) -> List[Event]:
    """
    Boost READY processes that waited a full threshold

    The priority value drops by one (never below 0) and the waiting reference
    restarts, so the next boost needs another full threshold of waiting.

    Returns:
        one aging event per boosted process
    """
    events = []
    for process in processes:
        if process.state != ProcessState.READY or process.waiting_since is None:
            continue
        waited = current_time - process.waiting_since
        if waited >= aging_threshold and process.priority > 0:
            old_priority = process.priority
            process.priority -= 1
            process.waiting_since = current_time
            events.append(Event(
                current_time, EventType.AGING_BOOST,
                f"{process.name} priority boosted: {old_priority} → {process.priority} "
                f"(waited {waited} units)",
                process_id=process.pid))
    return events
