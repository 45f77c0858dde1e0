"""
Simulator: the synchronous API the front ends drive
"""

import logging
from copy import deepcopy
from typing import Iterable, List, Optional, Union

from .config import MAX_SIMULATION_TICKS, PROCESS_COLORS, SimulationStatus, SimulatorConfig
from .engine import perform_tick
from .errors import (ConfigurationError, SchedulerError, SimulationRunningError,
                     UnknownProcessError)
from .metrics import Metrics
from .process import (Burst, Process, ProcessState, create_process_copy, parse_burst_pattern,
                      validate_process_definition)
from .state import CPUCore, Event, IODevice, SchedulerState, create_initial_cores

logger = logging.getLogger(__name__)


def get_next_color(existing_processes: List[Process]) -> str:
    """First unused palette colour, cycling by process count once exhausted"""
    used_colors = {p.color for p in existing_processes}
    for color in PROCESS_COLORS:
        if color not in used_colors:
            return color
    return PROCESS_COLORS[len(existing_processes) % len(PROCESS_COLORS)]


class Simulator:
    """
    Owns one SchedulerState and replaces it on every tick

    Accessors hand out copies, so observers can never mutate the
    simulation between ticks.
    """

    def __init__(self, config: Optional[SimulatorConfig] = None):
        config = config or SimulatorConfig()
        config.validate()
        self._state = SchedulerState(config=config)
        self._process_counter = 0

    # ------------------------------------------------------------------
    # read accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> SchedulerState:
        return deepcopy(self._state)

    @property
    def config(self) -> SimulatorConfig:
        return deepcopy(self._state.config)

    @property
    def clock(self) -> int:
        return self._state.clock

    @property
    def status(self) -> SimulationStatus:
        return self._state.status

    @property
    def processes(self) -> List[Process]:
        return deepcopy(self._state.processes)

    @property
    def cores(self) -> List[CPUCore]:
        return deepcopy(self._state.cores)

    @property
    def io_device(self) -> IODevice:
        return deepcopy(self._state.io_device)

    @property
    def kernel_log(self) -> List[Event]:
        # events are frozen, a shallow copy is enough
        return list(self._state.kernel_log)

    @property
    def metrics(self) -> Metrics:
        return deepcopy(self._state.metrics)

    @property
    def is_running(self) -> bool:
        return self._state.status == SimulationStatus.RUNNING

    @property
    def is_complete(self) -> bool:
        return self._state.all_terminated()

    def get_process(self, pid: str) -> Process:
        process = self._state.find_process(pid)
        if process is None:
            raise UnknownProcessError(pid)
        return create_process_copy(process)

    # ------------------------------------------------------------------
    # configuration and process management
    # ------------------------------------------------------------------
    def _ensure_not_running(self, action: str):
        if self.is_running:
            raise SimulationRunningError(f"Cannot {action} while the simulation is running")

    def configure(self, algorithm=None, core_count: Optional[int] = None,
                  time_quantum: Optional[int] = None, aging_enabled: Optional[bool] = None,
                  aging_threshold: Optional[int] = None,
                  speed: Optional[float] = None) -> SimulatorConfig:
        """
        Change policy parameters; fields left as None keep their value

        Raises:
            SimulationRunningError: while RUNNING
            ConfigurationError: on invalid values, or a core count change
                after the clock has started
        """
        self._ensure_not_running('change the configuration')
        old_config = self._state.config
        new_config = old_config.updated(algorithm=algorithm, core_count=core_count,
                                        time_quantum=time_quantum,
                                        aging_enabled=aging_enabled,
                                        aging_threshold=aging_threshold, speed=speed)

        if new_config.core_count != old_config.core_count:
            if self._state.clock > 0:
                raise ConfigurationError("Reset the simulation before changing the core count")
            self._state.cores = create_initial_cores(new_config.core_count)

        self._state.config = new_config
        logger.info("configuration: %s", new_config.to_dict())
        return deepcopy(new_config)

    def add_process(self, name: str, arrival_time: int, priority: int,
                    bursts: Union[str, List[Burst]]) -> Process:
        """
        Append a NEW process

        Args:
            name: display name
            arrival_time: arrival tick (>= 0)
            priority: priority value (>= 0, lower is more urgent)
            bursts: burst pattern text or a list of Bursts

        Returns:
            copy of the created process
        """
        self._ensure_not_running('add a process')
        if isinstance(bursts, str):
            bursts = parse_burst_pattern(bursts)
        validate_process_definition(name, arrival_time, priority, bursts)

        self._process_counter += 1
        process = Process(
            pid=f"P{self._process_counter}",
            name=str(name).strip(),
            arrival_time=arrival_time,
            priority=priority,
            bursts=[Burst.create(b.burst_type, b.duration) for b in bursts],
            color=get_next_color(self._state.processes),
            sequence=self._process_counter,
        )
        self._state.processes.append(process)
        return create_process_copy(process)

    def load_processes(self, definitions: Iterable[dict]) -> List[Process]:
        """
        Replace the workload with a list of definitions

        Each definition has name, arrival_time, priority and burst_pattern.
        Every definition is validated before anything is replaced.
        """
        self._ensure_not_running('load processes')
        definitions = list(definitions)
        for d in definitions:
            validate_process_definition(d.get('name'), d.get('arrival_time'),
                                        d.get('priority'),
                                        parse_burst_pattern(d.get('burst_pattern', '')))

        self.clear_processes()
        return [self.add_process(d['name'], d['arrival_time'], d['priority'],
                                 d['burst_pattern'])
                for d in definitions]

    def remove_process(self, pid: str):
        """Delete a process that has not been admitted yet"""
        self._ensure_not_running('remove a process')
        process = self._state.find_process(pid)
        if process is None:
            raise UnknownProcessError(pid)
        if process.state != ProcessState.NEW:
            raise SchedulerError(f"{pid} has already been admitted and cannot be removed")
        self._state.processes = [p for p in self._state.processes if p.pid != pid]

    def clear_processes(self):
        """Drop the whole workload along with its history"""
        self._ensure_not_running('clear processes')
        self._reset_state()

    def reset(self):
        """
        Back to an empty simulation at clock 0
        The configuration survives a reset.
        """
        self._reset_state()
        logger.info("simulation reset")

    def _reset_state(self):
        self._state = SchedulerState(config=self._state.config)
        self._process_counter = 0

    # ------------------------------------------------------------------
    # run control
    # ------------------------------------------------------------------
    def start(self):
        if not self._state.processes:
            raise SchedulerError("No processes to schedule")
        self._state.status = SimulationStatus.RUNNING

    def pause(self):
        if self.is_running:
            self._state.status = SimulationStatus.PAUSED

    def stop(self):
        self._state.status = SimulationStatus.STOPPED

    def _advance(self):
        self._state = perform_tick(self._state)

    def tick(self) -> bool:
        """
        Timer driven tick: runs only while RUNNING

        Returns:
            whether a tick was executed
        """
        if not self.is_running:
            return False
        self._advance()
        return True

    def step(self):
        """Execute exactly one tick regardless of run state"""
        self._state.status = SimulationStatus.STEP
        self._advance()

    def run_to_completion(self, max_ticks: int = MAX_SIMULATION_TICKS) -> Metrics:
        """
        Batch run until every process terminates

        Args:
            max_ticks: guard against a workload that never finishes

        Returns:
            final metrics
        """
        self.start()
        ticks = 0
        while not self._state.all_terminated():
            if ticks >= max_ticks:
                logger.warning("simulation stopped after %d ticks without finishing", ticks)
                self._state.status = SimulationStatus.STOPPED
                break
            self._advance()
            ticks += 1
        return self.metrics


def run_algorithm(definitions: Iterable[dict], algorithm, core_count: int = 1,
                  time_quantum: Optional[int] = None, aging_enabled: bool = False,
                  aging_threshold: Optional[int] = None,
                  max_ticks: int = MAX_SIMULATION_TICKS) -> dict:
    """
    Run one algorithm over a fresh copy of the workload

    Returns:
        result dictionary (algorithm, config, statistics, cores, processes, event log)
    """
    simulator = Simulator()
    simulator.configure(algorithm=algorithm, core_count=core_count,
                        time_quantum=time_quantum, aging_enabled=aging_enabled,
                        aging_threshold=aging_threshold)
    simulator.load_processes(definitions)
    metrics = simulator.run_to_completion(max_ticks=max_ticks)
    state = simulator.state

    return {
        'algorithm': state.config.algorithm.value,
        'config': state.config,
        'statistics': metrics.to_dict(),
        'clock': state.clock,
        'cores': state.cores,
        'processes': state.processes,
        'event_log': state.kernel_log,
    }
