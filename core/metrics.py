"""
Performance metrics, recomputed from scratch after every tick
"""

from dataclasses import dataclass, asdict
from typing import Dict, List

from .process import Process, ProcessState


@dataclass
class Metrics:
    """Scheduling statistics"""
    cpu_utilization: float = 0.0  # percent over all cores
    throughput: float = 0.0  # completed processes per tick
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    avg_response_time: float = 0.0
    total_idle_time: int = 0
    total_busy_time: int = 0
    completed_processes: int = 0
    context_switches: int = 0

    def to_dict(self) -> Dict:
        return asdict(self)


def calculate_metrics(processes: List[Process], cores: List, clock: int,
                      context_switches: int = 0) -> Metrics:
    """
    Derive metrics from the committed process and core state

    Args:
        processes: every process in the simulation
        cores: CPU cores with their Gantt history
        clock: current simulation clock
        context_switches: number of context switches logged so far

    Returns:
        fresh Metrics value
    """
    total_busy_time = 0
    total_idle_time = 0
    for core in cores:
        for entry in core.gantt_history:
            if entry.is_idle:
                total_idle_time += entry.duration
            else:
                total_busy_time += entry.duration

    metrics = Metrics(total_idle_time=total_idle_time,
                      total_busy_time=total_busy_time,
                      context_switches=context_switches)
    if clock > 0 and cores:
        metrics.cpu_utilization = total_busy_time / (clock * len(cores)) * 100

    completed = [p for p in processes if p.state == ProcessState.TERMINATED]
    if not completed or clock == 0:
        return metrics

    count = len(completed)
    metrics.completed_processes = count
    metrics.throughput = count / clock
    metrics.avg_waiting_time = sum(p.wait_time for p in completed) / count
    metrics.avg_turnaround_time = sum(p.turnaround_time for p in completed) / count

    responded = [p for p in completed if p.response_time is not None]
    if responded:
        metrics.avg_response_time = sum(p.response_time for p in responded) / len(responded)

    return metrics
