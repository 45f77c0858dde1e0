"""
Load balancer: shortest queue first
"""

from typing import List

from core.process import Process
from core.state import CPUCore


def assign_process_to_core(cores: List[CPUCore], process: Process) -> int:
    """
    Pick the core for an arriving process

    Load is the ready queue length plus one for a busy core; the
    lowest-indexed core wins a tie.

    Returns:
        id of the chosen core
    """
    if not cores:
        raise ValueError(f"No core available for {process.pid}")
    return min(cores, key=lambda core: (core.load, core.core_id)).core_id
