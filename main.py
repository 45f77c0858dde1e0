#!/usr/bin/env python3
"""
CPU Scheduler Simulator - command line entry point
"""

import logging
import os
import re
import sys

from core.config import (Algorithm, CORE_COUNT_OPTIONS, DEFAULT_AGING_THRESHOLD,
                         DEFAULT_TIME_QUANTUM)
from core.errors import SchedulerError
from core.simulator import run_algorithm
from schedulers import ALGORITHM_MAP
from utils.input_parser import InputParser, PRESETS
from utils.visualization import Visualizer

logger = logging.getLogger(__name__)

# Menu key -> algorithm
ALGORITHMS = {str(i): algorithm for i, algorithm in enumerate(ALGORITHM_MAP, 1)}


def print_banner():
    print("\n" + "=" * 80)
    print(" " * 28 + "CPU Scheduler Simulator")
    print("=" * 80 + "\n")


def print_algorithm_menu():
    """Algorithm selection menu"""
    print("\n" + "=" * 80)
    print("Select a scheduling algorithm")
    print("=" * 80)
    for key, algorithm in ALGORITHMS.items():
        info = ALGORITHM_MAP[algorithm]
        kind = 'preemptive' if info['preemptive'] else 'non-preemptive'
        print(f"  {key}. {info['name']} [{kind}]")
    print("  all. Run every algorithm")
    print("  0. Quit")
    print("=" * 80)


def get_user_choice():
    while True:
        choice = input("\nChoice: ").strip().lower()

        if choice == '0':
            print("\nExiting...")
            sys.exit(0)

        if choice in ALGORITHMS or choice == 'all':
            return choice

        print("[Error] Invalid choice, try again.")


def ask_int(prompt: str, default: int, allowed=None) -> int:
    """Integer prompt; empty input keeps the default"""
    while True:
        raw = input(f"{prompt} (default={default}): ").strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            print("[Error] Please enter a number.")
            continue
        if allowed is not None and value not in allowed:
            print(f"[Error] Must be one of {allowed}.")
            continue
        if value < 1:
            print("[Error] Must be at least 1.")
            continue
        return value


def select_settings() -> dict:
    """Cores, quantum and aging"""
    print("\n" + "=" * 80)
    print("Simulation settings")
    print("=" * 80)
    settings = {
        'core_count': ask_int("Number of cores", 1, CORE_COUNT_OPTIONS),
        'time_quantum': ask_int("Time quantum (RR / MLFQ base)", DEFAULT_TIME_QUANTUM),
    }
    aging = input("Enable priority aging? (y/n, default=n): ").strip().lower()
    settings['aging_enabled'] = aging == 'y'
    settings['aging_threshold'] = (ask_int("Aging threshold", DEFAULT_AGING_THRESHOLD)
                                   if settings['aging_enabled'] else DEFAULT_AGING_THRESHOLD)
    return settings


def select_input() -> list:
    """Workload: preset, random or file"""
    print("\n" + "=" * 80)
    print("Select input")
    print("=" * 80)
    presets = list(PRESETS)
    for i, name in enumerate(presets, 1):
        print(f"  {i}. Preset: {name} - {PRESETS[name]['description']}")
    print("  r. Random workload (saved to data/generated_input.txt)")
    print("  f. Load from file")
    print("=" * 80)

    while True:
        choice = input("\nInput option: ").strip().lower()

        if choice == 'r':
            definitions = InputParser.generate_random_processes(num_processes=10)
            script_dir = os.path.dirname(os.path.abspath(__file__))
            generated_file = os.path.join(script_dir, "data", "generated_input.txt")
            os.makedirs(os.path.dirname(generated_file), exist_ok=True)
            InputParser.save_processes_to_file(definitions, generated_file)
            print(f"[Done] Random processes saved to {generated_file}")
            return definitions

        if choice == 'f':
            filename = input("File path: ").strip()
            try:
                definitions = InputParser.parse_file(filename)
            except OSError as e:
                print(f"[Error] Cannot read {filename}: {e}")
                continue
            if not definitions:
                print("[Error] No valid processes in the file.")
                continue
            return definitions

        if choice.isdigit() and 1 <= int(choice) <= len(presets):
            return PRESETS[presets[int(choice) - 1]]['processes']

        print("[Error] Invalid choice, try again.")


def run_single_algorithm(algorithm: Algorithm, definitions: list, settings: dict):
    info = ALGORITHM_MAP[algorithm]
    print(f"\n{'=' * 80}")
    print(f"Running: {info['name']}")
    print(f"{'=' * 80}\n")

    try:
        return run_algorithm(definitions, algorithm, **settings)
    except SchedulerError as e:
        print(f"[Error] {info['name']} failed: {e}")
        logger.exception("simulation failed")
        return None


def run_all_algorithms(definitions: list, settings: dict) -> list:
    results = []
    for i, algorithm in enumerate(ALGORITHM_MAP, 1):
        print(f"[{i}/{len(ALGORITHM_MAP)}] {ALGORITHM_MAP[algorithm]['name']}...")
        result = run_single_algorithm(algorithm, definitions, settings)
        if result:
            results.append(result)
    return results


def safe_filename(name: str) -> str:
    safe = re.sub(r'[^A-Za-z0-9]+', '_', name)
    return safe.strip('_')


def save_results(results: list, output_dir: str = "simulation_results", show_log: bool = True):
    """Tables, Gantt charts, comparison chart and a text report"""
    os.makedirs(output_dir, exist_ok=True)
    visualizer = Visualizer()

    visualizer.print_statistics_table(results)
    for result in results:
        visualizer.print_process_details(result)

    if show_log and len(results) == 1:
        print("Kernel log")
        print("-" * 80)
        visualizer.print_kernel_log(results[0]['event_log'])
        print()

    print("Generating Gantt charts...")
    for result in results:
        save_path = os.path.join(output_dir, f"gantt_{safe_filename(result['algorithm'])}.png")
        visualizer.draw_gantt_chart(result['cores'], result['algorithm'],
                                    save_path=save_path, show=False)

    if len(results) > 1:
        print("Generating comparison chart...")
        visualizer.compare_algorithms(results, save_path=os.path.join(output_dir, "comparison.png"),
                                      show=False)

    save_results_to_file(results, os.path.join(output_dir, "results.txt"))

    print(f"\nResults saved to '{output_dir}/':")
    print("  - Gantt charts: gantt_*.png")
    if len(results) > 1:
        print("  - Comparison chart: comparison.png")
    print("  - Report: results.txt")


def save_results_to_file(results: list, filename: str):
    """Plain text report of every run"""
    with open(filename, 'w', encoding='utf-8') as f:
        f.write("=" * 120 + "\n")
        f.write("CPU Scheduler Simulation Results\n")
        f.write("=" * 120 + "\n\n")

        f.write(f"{'Algorithm':<28} {'Avg Wait':>10} {'Avg TAT':>10} {'Avg Resp':>10} "
                f"{'CPU Util(%)':>12} {'Ctx Sw':>8} {'Makespan':>9}\n")
        f.write("-" * 120 + "\n")
        for result in results:
            stats = result['statistics']
            f.write(f"{result['algorithm']:<28} "
                    f"{stats['avg_waiting_time']:>10.2f} "
                    f"{stats['avg_turnaround_time']:>10.2f} "
                    f"{stats['avg_response_time']:>10.2f} "
                    f"{stats['cpu_utilization']:>12.2f} "
                    f"{stats['context_switches']:>8} "
                    f"{result['clock']:>9}\n")

        for result in results:
            f.write("\n" + "=" * 120 + "\n")
            f.write(f"Algorithm: {result['algorithm']}  ({result['config'].to_dict()})\n")
            f.write("=" * 120 + "\n")
            f.write(f"{'ID':<5} {'Name':<8} {'Arrival':>8} {'Priority':>9} {'Finish':>7} "
                    f"{'Wait':>6} {'TAT':>6} {'Resp':>6}\n")
            for p in result['processes']:
                f.write(f"{p.pid:<5} {p.name:<8} {p.arrival_time:>8} {p.initial_priority:>9} "
                        f"{p.completion_time if p.completion_time is not None else '-':>7} "
                        f"{p.wait_time:>6} {p.turnaround_time:>6} "
                        f"{p.response_time if p.response_time is not None else 'N/A':>6}\n")

            f.write("\nKernel log\n")
            for event in result['event_log']:
                f.write(event.format() + "\n")

    logger.info("report written to %s", filename)


def main():
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s %(name)s: %(message)s')
    print_banner()

    definitions = select_input()
    InputParser.print_process_summary(definitions)
    settings = select_settings()

    while True:
        print_algorithm_menu()
        choice = get_user_choice()

        if choice == 'all':
            results = run_all_algorithms(definitions, settings)
        else:
            result = run_single_algorithm(ALGORITHMS[choice], definitions, settings)
            results = [result] if result else []

        if results:
            save_results(results)

        print("\n" + "=" * 80)
        again = input("Run another simulation? (y/n): ").strip().lower()
        if again != 'y':
            print("\nThanks for using the CPU Scheduler Simulator!")
            print("=" * 80 + "\n")
            break


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nSimulation interrupted by user.")
        sys.exit(0)
