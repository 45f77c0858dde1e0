"""
Tick engine: advances a simulation snapshot by exactly one time unit
"""

import logging
from copy import deepcopy
from typing import List, Optional

from schedulers import apply_priority_aging, assign_process_to_core, get_next_process
from schedulers.base import SchedulingDecision
from .config import Algorithm, IDLE_COLOR, SimulationStatus
from .errors import SchedulerInvariantError
from .metrics import calculate_metrics
from .process import Process, ProcessState
from .state import CPUCore, Event, EventType, GanttEntry, SchedulerState

logger = logging.getLogger(__name__)


def perform_tick(state: SchedulerState) -> SchedulerState:
    """
    Compute the next snapshot

    The input snapshot is left untouched: the tick runs on a deep copy
    which is returned once every effect has been applied.
    """
    return TickEngine(deepcopy(state)).run()


def preemption_reason(algorithm: Algorithm, preempted: Process,
                      selected: Optional[Process]) -> str:
    """Human readable reason for a preemption, per algorithm"""
    if selected is None:
        return ''
    if algorithm == Algorithm.SRTF:
        return (f"shorter remaining time ({selected.get_remaining_time()} < "
                f"{preempted.get_remaining_time()})")
    if algorithm == Algorithm.PRIORITY_PREEMPTIVE:
        return f"higher priority ({selected.priority} < {preempted.priority})"
    if algorithm == Algorithm.ROUND_ROBIN:
        return 'time quantum expired'
    if algorithm == Algorithm.MLFQ:
        if selected.queue_level < preempted.queue_level:
            return f"higher queue level (Q{selected.queue_level} above Q{preempted.queue_level})"
        return 'time quantum expired'
    return ''


class TickEngine:
    """
    One tick over a working copy of the state

    Order of work:
    1. arrivals (with load balancing)
    2. I/O completions
    3. I/O progress
    4. priority aging (when enabled)
    5. per-core scheduling decision
    6. per-core CPU execution
    7. waiting time of READY processes
    8. clock, log and metrics commit
    """

    def __init__(self, state: SchedulerState):
        self.state = state
        self.config = state.config
        self.current_time = state.clock
        self.next_time = state.clock + 1
        self.events: List[Event] = []

    def log_event(self, event_type: EventType, message: str,
                  process: Optional[Process] = None, core_id: Optional[int] = None,
                  time: Optional[int] = None):
        """Queue a kernel log event for this tick"""
        self.events.append(Event(
            self.current_time if time is None else time,
            event_type, message,
            process_id=process.pid if process is not None else None,
            core_id=core_id))

    def run(self) -> SchedulerState:
        self.handle_process_arrival()
        self.handle_io_completion()
        self.advance_io()

        if self.config.aging_enabled:
            self.events.extend(apply_priority_aging(
                self.state.processes, self.current_time, self.config.aging_threshold))

        for core in self.state.cores:
            self.schedule_core(core)
            self.execute_core(core)

        self.update_waiting_time()
        self.commit()
        return self.state

    def core_of(self, process: Process) -> CPUCore:
        if process.assigned_core is None:
            raise SchedulerInvariantError(f"{process.pid} is not bound to a core")
        return self.state.cores[process.assigned_core]

    def handle_process_arrival(self):
        """Admit NEW processes whose arrival time has come"""
        multi_core = len(self.state.cores) > 1

        for process in self.state.processes:
            if process.state != ProcessState.NEW or process.arrival_time > self.current_time:
                continue

            core_id = assign_process_to_core(self.state.cores, process)
            process.state = ProcessState.READY
            process.assigned_core = core_id
            process.waiting_since = self.current_time
            process.queue_level = 0
            self.state.cores[core_id].ready_queue.append(process)

            self.log_event(EventType.ARRIVAL, f"{process.name} arrived", process)
            if multi_core:
                self.log_event(EventType.LOAD_BALANCE,
                               f"{process.name} assigned to Core {core_id} (shortest queue)",
                               process, core_id)

    def handle_io_completion(self):
        """Move processes whose I/O burst is served on to their next burst"""
        device = self.state.io_device
        still_waiting = []

        for process in device.wait_queue:
            burst = process.current_burst
            if burst is not None and not burst.is_finished:
                still_waiting.append(process)
                continue

            next_burst = process.advance_burst()
            if process.is_completed():
                # I/O as the last burst: nothing left to schedule
                process.finish(self.current_time)
                self.log_event(EventType.IO_COMPLETE, f"{process.name} I/O completed", process)
                self.log_event(EventType.COMPLETE, f"{process.name} completed execution",
                               process, process.assigned_core)
            elif next_burst.is_io:
                still_waiting.append(process)
                self.log_event(EventType.IO_START,
                               f"{process.name} starting I/O operation "
                               f"({next_burst.duration} units)", process)
            else:
                process.state = ProcessState.READY
                process.waiting_since = self.current_time
                self.core_of(process).ready_queue.append(process)
                self.log_event(EventType.IO_COMPLETE,
                               f"{process.name} I/O completed, returning to ready queue",
                               process, process.assigned_core)

        device.wait_queue = still_waiting

    def advance_io(self):
        """Every process on the I/O device progresses by one unit"""
        for process in self.state.io_device.wait_queue:
            if not process.is_io_burst():
                raise SchedulerInvariantError(f"{process.pid} is on the I/O device without I/O")
            process.current_burst.advance(1)

    def schedule_core(self, core: CPUCore):
        """Ask the policy who runs on this core and apply the answer"""
        current = core.current_process
        if current is not None and core.time_quantum_remaining > 0:
            core.time_quantum_remaining -= 1

        core.ready_queue = [p for p in core.ready_queue if p.state == ProcessState.READY]

        decision = get_next_process(self.config.algorithm, list(core.ready_queue), current,
                                    self.current_time, core.time_quantum_remaining,
                                    self.config)

        displaced = None
        if decision.should_preempt and current is not None:
            self.preempt(core, current, decision)
            displaced = current
            current = None
        elif decision.demote and current is not None:
            self.demote(current, core)

        selected = decision.selected
        if selected is not None and selected is not current:
            self.dispatch(core, selected, displaced, decision)
        elif current is not None:
            self.extend_gantt(core, current)
            if decision.reset_quantum:
                core.time_quantum_remaining = self.quantum_for(decision)
        else:
            self.extend_gantt(core, None)

    def quantum_for(self, decision: SchedulingDecision) -> int:
        if decision.quantum is not None:
            return decision.quantum
        return self.config.time_quantum

    def preempt(self, core: CPUCore, process: Process, decision: SchedulingDecision):
        """Send the running process back to the ready queue"""
        selected = decision.selected
        reason = preemption_reason(self.config.algorithm, process, selected)
        self.log_event(EventType.PREEMPT,
                       f"{process.name} preempted by "
                       f"{selected.name if selected is not None else 'N/A'}: {reason}",
                       process, core.core_id)

        process.state = ProcessState.READY
        process.waiting_since = self.current_time
        if decision.demote:
            self.demote(process, core)
        core.ready_queue.append(process)
        core.current_process = None

        if core.gantt_history and core.gantt_history[-1].process_id == process.pid:
            core.gantt_history[-1].end_time = self.current_time

    def demote(self, process: Process, core: CPUCore):
        """One MLFQ level down, capped at the lowest level"""
        lowest_level = self.config.mlfq_levels - 1
        new_level = min(process.queue_level + 1, lowest_level)
        if new_level == process.queue_level:
            return
        old_level = process.queue_level
        process.queue_level = new_level
        self.log_event(EventType.DEMOTION,
                       f"{process.name} demoted from Q{old_level} to Q{new_level} "
                       f"(time quantum expired)",
                       process, core.core_id)

    def dispatch(self, core: CPUCore, process: Process, displaced: Optional[Process],
                 decision: SchedulingDecision):
        """Give the CPU to a process from the ready queue"""
        if not any(p is process for p in core.ready_queue):
            raise SchedulerInvariantError(
                f"{process.pid} selected on Core {core.core_id} but not in its ready queue")

        core.ready_queue = [p for p in core.ready_queue if p is not process]
        process.state = ProcessState.RUNNING
        process.waiting_since = None
        if process.start_time is None:
            process.start_time = self.current_time
            process.response_time = self.current_time - process.arrival_time
        core.current_process = process
        core.time_quantum_remaining = self.quantum_for(decision)

        if displaced is not None:
            self.log_event(EventType.CONTEXT_SWITCH,
                           f"Context switch on Core {core.core_id}: "
                           f"{displaced.name} → {process.name}",
                           process, core.core_id)
        else:
            self.log_event(EventType.START,
                           f"{process.name} started on Core {core.core_id}",
                           process, core.core_id)

        self.extend_gantt(core, process)

    def extend_gantt(self, core: CPUCore, process: Optional[Process]):
        """Stretch the open segment over this tick or open a new one"""
        history = core.gantt_history
        process_id = process.pid if process is not None else None
        if history and history[-1].process_id == process_id \
                and history[-1].end_time == self.current_time:
            history[-1].end_time = self.next_time
            return

        if process is None:
            history.append(GanttEntry(None, 'Idle', self.current_time, self.next_time,
                                      IDLE_COLOR))
        else:
            history.append(GanttEntry(process.pid, process.name, self.current_time,
                                      self.next_time, process.color))

    def execute_core(self, core: CPUCore):
        """Serve one unit of the running process's CPU burst"""
        process = core.current_process
        if process is None:
            return

        if not process.is_cpu_burst():
            raise SchedulerInvariantError(
                f"{process.pid} running on Core {core.core_id} without a CPU burst")

        if not process.current_burst.advance(1):
            return

        next_burst = process.advance_burst()
        if process.is_completed():
            process.finish(self.next_time)
            core.current_process = None
            self.log_event(EventType.COMPLETE, f"{process.name} completed execution",
                           process, core.core_id, time=self.next_time)
        elif next_burst.is_io:
            process.state = ProcessState.WAITING
            core.current_process = None
            self.state.io_device.wait_queue.append(process)
            self.log_event(EventType.IO_START,
                           f"{process.name} starting I/O operation ({next_burst.duration} units)",
                           process, core.core_id, time=self.next_time)
        # a CPU burst straight after keeps the process on the core

    def update_waiting_time(self):
        for process in self.state.processes:
            if process.state == ProcessState.READY:
                process.wait_time += 1

    def commit(self):
        state = self.state
        state.clock = self.next_time
        state.clock_history.append(self.next_time)
        state.kernel_log.extend(self.events)

        context_switches = sum(1 for e in state.kernel_log
                               if e.event_type == EventType.CONTEXT_SWITCH)
        state.metrics = calculate_metrics(state.processes, state.cores, state.clock,
                                          context_switches)

        if state.all_terminated():
            state.status = SimulationStatus.STOPPED

        logger.debug("tick %d -> %d: %d events, %d/%d terminated",
                     self.current_time, self.next_time, len(self.events),
                     state.metrics.completed_processes, len(state.processes))
