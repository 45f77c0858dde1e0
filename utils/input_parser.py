"""
Input boundary: process files, presets and random workloads
"""

import csv
import logging
import random
from typing import Dict, List, Optional

from core.config import Algorithm
from core.errors import ConfigurationError, ProcessValidationError
from core.process import (Process, format_burst_pattern, parse_burst_pattern,
                          validate_process_definition)

logger = logging.getLogger(__name__)


# Preset scenarios: name -> workload and suggested settings
PRESETS: Dict[str, Dict] = {
    'Basic FCFS': {
        'description': 'Three CPU-only processes arriving one tick apart',
        'algorithm': Algorithm.FCFS,
        'processes': [
            {'name': 'P1', 'arrival_time': 0, 'priority': 1, 'burst_pattern': 'CPU(5)'},
            {'name': 'P2', 'arrival_time': 1, 'priority': 1, 'burst_pattern': 'CPU(3)'},
            {'name': 'P3', 'arrival_time': 2, 'priority': 1, 'burst_pattern': 'CPU(4)'},
        ],
    },
    'Preemption Demo': {
        'description': 'Later arrivals with better priority take over the CPU',
        'algorithm': Algorithm.PRIORITY_PREEMPTIVE,
        'processes': [
            {'name': 'P1', 'arrival_time': 0, 'priority': 3, 'burst_pattern': 'CPU(8)'},
            {'name': 'P2', 'arrival_time': 2, 'priority': 1, 'burst_pattern': 'CPU(4)'},
            {'name': 'P3', 'arrival_time': 4, 'priority': 2, 'burst_pattern': 'CPU(2)'},
        ],
    },
    'I/O Bound': {
        'description': 'Processes alternating CPU and I/O bursts',
        'algorithm': Algorithm.ROUND_ROBIN,
        'time_quantum': 2,
        'processes': [
            {'name': 'P1', 'arrival_time': 0, 'priority': 1,
             'burst_pattern': 'CPU(3) -> IO(2) -> CPU(2)'},
            {'name': 'P2', 'arrival_time': 1, 'priority': 2,
             'burst_pattern': 'CPU(2) -> IO(3) -> CPU(3)'},
            {'name': 'P3', 'arrival_time': 2, 'priority': 1, 'burst_pattern': 'CPU(4)'},
        ],
    },
    'Multi-Core Load': {
        'description': 'Four simultaneous arrivals spread over two cores',
        'algorithm': Algorithm.FCFS,
        'core_count': 2,
        'processes': [
            {'name': 'P1', 'arrival_time': 0, 'priority': 1, 'burst_pattern': 'CPU(6)'},
            {'name': 'P2', 'arrival_time': 0, 'priority': 2, 'burst_pattern': 'CPU(4)'},
            {'name': 'P3', 'arrival_time': 0, 'priority': 1, 'burst_pattern': 'CPU(5)'},
            {'name': 'P4', 'arrival_time': 0, 'priority': 3, 'burst_pattern': 'CPU(3)'},
        ],
    },
    'Round Robin Demo': {
        'description': 'A long and a short job sharing one core',
        'algorithm': Algorithm.ROUND_ROBIN,
        'time_quantum': 4,
        'processes': [
            {'name': 'P1', 'arrival_time': 0, 'priority': 1, 'burst_pattern': 'CPU(8)'},
            {'name': 'P2', 'arrival_time': 0, 'priority': 1, 'burst_pattern': 'CPU(4)'},
        ],
    },
}


def load_preset(simulator, name: str, apply_settings: bool = True) -> List[Process]:
    """
    Load a preset workload into a Simulator

    Args:
        simulator: target Simulator
        name: key of PRESETS
        apply_settings: also apply the preset's algorithm/quantum/core count

    Returns:
        created processes
    """
    if name not in PRESETS:
        raise ConfigurationError(f"Unknown preset: {name}")
    preset = PRESETS[name]

    simulator.reset()
    if apply_settings:
        simulator.configure(algorithm=preset.get('algorithm'),
                            core_count=preset.get('core_count'),
                            time_quantum=preset.get('time_quantum'))
    return simulator.load_processes(preset['processes'])


class InputParser:
    """Input file parser"""

    @staticmethod
    def parse_form(name: str, arrival_time: int, priority: int, burst_pattern: str) -> Dict:
        """
        Validate form input and return a process definition

        Raises:
            ProcessValidationError: when the input cannot become a process
        """
        bursts = parse_burst_pattern(burst_pattern)
        validate_process_definition(name, arrival_time, priority, bursts)
        return {
            'name': str(name).strip(),
            'arrival_time': arrival_time,
            'priority': priority,
            'burst_pattern': format_burst_pattern(bursts),
        }

    @staticmethod
    def parse_file(filename: str) -> List[Dict]:
        """
        Read process definitions from a CSV file

        Format: Name,ArrivalTime,Priority,BurstPattern
        e.g.   P1,0,3,"CPU(4) -> IO(2) -> CPU(3)"

        Blank lines and lines starting with # are skipped; invalid lines
        are logged and skipped.

        Returns:
            list of process definitions
        """
        definitions = []

        with open(filename, 'r', encoding='utf-8', newline='') as f:
            lines = [line for line in f if line.strip() and not line.lstrip().startswith('#')]

        for parts in csv.reader(lines, skipinitialspace=True):
            try:
                definitions.append(InputParser._create_definition_from_parts(parts))
            except ProcessValidationError as e:
                logger.warning("skipping line %s: %s", ','.join(parts), e)

        logger.info("loaded %d processes from %s", len(definitions), filename)
        return definitions

    @staticmethod
    def _create_definition_from_parts(parts: List[str]) -> Dict:
        """Build a definition from the CSV fields"""
        if len(parts) < 4:
            raise ProcessValidationError(f"Expected 4 fields but got {len(parts)}")

        try:
            arrival_time = int(parts[1])
            priority = int(parts[2])
        except ValueError as e:
            raise ProcessValidationError(f"Numeric field conversion error: {e}")

        return InputParser.parse_form(parts[0], arrival_time, priority, parts[3])

    @staticmethod
    def generate_random_processes(num_processes: int = 10,
                                  max_arrival: int = 20,
                                  max_burst: int = 12,
                                  max_io: int = 8,
                                  seed: Optional[int] = None) -> List[Dict]:
        """
        Random workload

        Args:
            num_processes: number of processes
            max_arrival: latest arrival time
            max_burst: longest CPU burst
            max_io: longest I/O burst
            seed: seed for a private random generator

        Returns:
            list of process definitions
        """
        rng = random.Random(seed)
        definitions = []

        for i in range(1, num_processes + 1):
            # 40% I/O bound: short CPU bursts between longer I/O
            is_io_bound = rng.random() < 0.4
            tokens = []
            if is_io_bound:
                num_cpu_bursts = rng.randint(2, 4)
                for j in range(num_cpu_bursts):
                    tokens.append(f"CPU({rng.randint(1, max(1, max_burst // 3))})")
                    if j < num_cpu_bursts - 1:
                        tokens.append(f"IO({rng.randint(max(1, max_io // 2), max_io)})")
            else:
                num_cpu_bursts = rng.randint(1, 2)
                for j in range(num_cpu_bursts):
                    tokens.append(f"CPU({rng.randint(max(1, max_burst // 2), max_burst)})")
                    if j < num_cpu_bursts - 1:
                        tokens.append(f"IO({rng.randint(1, max(1, max_io // 2))})")

            definitions.append({
                'name': f"P{i}",
                'arrival_time': rng.randint(0, max_arrival),
                'priority': rng.randint(0, 10),
                'burst_pattern': ' -> '.join(tokens),
            })

        logger.info("generated %d random processes", num_processes)
        return definitions

    @staticmethod
    def save_processes_to_file(definitions: List[Dict], filename: str):
        """
        Write process definitions in the format parse_file reads

        Args:
            definitions: process definitions
            filename: output path
        """
        with open(filename, 'w', encoding='utf-8', newline='') as f:
            f.write("# CPU Scheduler Simulator Input Data\n")
            f.write("# Format: Name,ArrivalTime,Priority,BurstPattern\n\n")
            writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL)
            for d in definitions:
                writer.writerow([d['name'], d['arrival_time'], d['priority'], d['burst_pattern']])

        logger.info("saved %d processes to %s", len(definitions), filename)

    @staticmethod
    def print_process_summary(definitions: List[Dict]):
        """Print a summary table of the workload"""
        print("\n" + "=" * 90)
        print("Process Summary")
        print("=" * 90)
        print(f"{'Name':<8} {'Arrival':>8} {'Priority':>9} {'CPU total':>10} "
              f"{'I/O total':>10}  Pattern")
        print("-" * 90)

        io_bound = 0
        for d in definitions:
            bursts = parse_burst_pattern(d['burst_pattern'])
            cpu_total = sum(b.duration for b in bursts if b.is_cpu)
            io_total = sum(b.duration for b in bursts if b.is_io)
            if io_total:
                io_bound += 1
            print(f"{d['name']:<8} {d['arrival_time']:>8} {d['priority']:>9} "
                  f"{cpu_total:>10} {io_total:>10}  {d['burst_pattern']}")

        print("=" * 90)
        print(f"Total processes: {len(definitions)}")
        print(f"  - CPU only: {len(definitions) - io_bound}")
        print(f"  - With I/O: {io_bound}")
        print()
