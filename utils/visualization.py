"""
Visualisation: per-core Gantt charts, comparison charts and console tables
"""

import logging
from typing import Dict, List, Optional

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from core.config import IDLE_COLOR
from core.state import CPUCore, Event

logger = logging.getLogger(__name__)


class Visualizer:
    """Scheduling result visualisation"""

    def __init__(self):
        self.idle_color = IDLE_COLOR

    def draw_gantt_chart(self, cores: List[CPUCore], algorithm_name: str,
                         save_path: Optional[str] = None, show: bool = True):
        """
        Draw one Gantt row per core

        Args:
            cores: cores with their Gantt history
            algorithm_name: chart title
            save_path: where to save the figure (None = do not save)
            show: display the figure interactively
        """
        if not any(core.gantt_history for core in cores):
            logger.warning("no Gantt data for %s", algorithm_name)
            return None

        fig, ax = plt.subplots(figsize=(16, 2 + 1.2 * len(cores)))

        legend = {}
        for core in cores:
            y_pos = core.core_id
            for entry in core.gantt_history:
                color = self.idle_color if entry.is_idle else entry.color
                alpha = 0.4 if entry.is_idle else 1.0
                ax.barh(y_pos, entry.duration, left=entry.start_time, height=0.8,
                        color=color, alpha=alpha, edgecolor='black', linewidth=0.5)

                # label only segments wide enough to hold text
                if entry.duration > 1 or not entry.is_idle:
                    ax.text(entry.start_time + entry.duration / 2, y_pos, entry.process_name,
                            ha='center', va='center', fontsize=8, fontweight='bold')
                if not entry.is_idle:
                    legend.setdefault(entry.process_name, entry.color)

        ax.set_yticks([core.core_id for core in cores])
        ax.set_yticklabels([f'Core {core.core_id}' for core in cores])
        ax.invert_yaxis()
        ax.set_xlabel('Time', fontsize=12)
        ax.set_ylabel('CPU', fontsize=12)
        ax.set_title(f'Gantt Chart - {algorithm_name}', fontsize=14, fontweight='bold')
        ax.grid(axis='x', alpha=0.3)

        legend_elements = [mpatches.Patch(color=color, label=name)
                           for name, color in legend.items()]
        legend_elements.append(mpatches.Patch(color=self.idle_color, alpha=0.4, label='Idle'))
        ax.legend(handles=legend_elements, loc='upper right', fontsize=8)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            logger.info("Gantt chart saved to %s", save_path)

        if show:
            plt.show()
        else:
            plt.close(fig)
        return save_path

    def compare_algorithms(self, results: List[Dict], save_path: Optional[str] = None,
                           show: bool = True):
        """
        Bar charts comparing several algorithm runs

        Args:
            results: run results (see core.simulator.run_algorithm)
            save_path: where to save the figure
            show: display the figure interactively
        """
        if not results:
            logger.warning("no results to compare")
            return None

        algorithms = [r['algorithm'] for r in results]
        panels = [
            ('avg_waiting_time', 'Average Waiting Time', 'skyblue', '{:.2f}'),
            ('avg_turnaround_time', 'Average Turnaround Time', 'lightcoral', '{:.2f}'),
            ('cpu_utilization', 'CPU Utilization (%)', 'lightgreen', '{:.1f}%'),
            ('avg_response_time', 'Average Response Time', 'plum', '{:.2f}'),
        ]

        fig, axes = plt.subplots(2, 2, figsize=(16, 12))
        fig.suptitle('Scheduling Algorithms Performance Comparison',
                     fontsize=16, fontweight='bold')

        for ax, (key, title, color, fmt) in zip(axes.flat, panels):
            values = [r['statistics'][key] for r in results]
            bars = ax.bar(range(len(algorithms)), values, color=color, edgecolor='black')
            ax.set_xticks(range(len(algorithms)))
            ax.set_xticklabels(algorithms, rotation=45, ha='right', fontsize=9)
            ax.set_ylabel(title, fontsize=11)
            ax.set_title(f'{title} Comparison', fontsize=12, fontweight='bold')
            if key == 'cpu_utilization':
                ax.set_ylim(0, 100)
            ax.grid(axis='y', alpha=0.3)

            for bar, value in zip(bars, values):
                ax.text(bar.get_x() + bar.get_width() / 2., bar.get_height(),
                        fmt.format(value), ha='center', va='bottom', fontsize=9)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            logger.info("comparison chart saved to %s", save_path)

        if show:
            plt.show()
        else:
            plt.close(fig)
        return save_path

    def print_statistics_table(self, results: List[Dict]):
        """Metrics of several runs side by side"""
        print("\n" + "=" * 120)
        print("Scheduling Algorithm Performance")
        print("=" * 120)
        print(f"{'Algorithm':<28} {'Avg Wait':>10} {'Avg TAT':>10} {'Avg Resp':>10} "
              f"{'CPU Util(%)':>12} {'Throughput':>11} {'Ctx Sw':>8} {'Makespan':>9}")
        print("-" * 120)

        for result in results:
            stats = result['statistics']
            print(f"{result['algorithm']:<28} "
                  f"{stats['avg_waiting_time']:>10.2f} "
                  f"{stats['avg_turnaround_time']:>10.2f} "
                  f"{stats['avg_response_time']:>10.2f} "
                  f"{stats['cpu_utilization']:>12.2f} "
                  f"{stats['throughput']:>11.3f} "
                  f"{stats['context_switches']:>8} "
                  f"{result['clock']:>9}")

        print("=" * 120 + "\n")

    def print_process_details(self, result: Dict):
        """Per-process outcome of one run"""
        print(f"\n{'=' * 96}")
        print(f"Process Details - {result['algorithm']}")
        print(f"{'=' * 96}")
        print(f"{'ID':<5} {'Name':<8} {'Core':>5} {'Arrival':>8} {'Priority':>9} {'Start':>6} "
              f"{'Finish':>7} {'Wait':>6} {'TAT':>6} {'Resp':>6}")
        print(f"{'-' * 96}")

        for p in result['processes']:
            print(f"{p.pid:<5} {p.name:<8} "
                  f"{p.assigned_core if p.assigned_core is not None else '-':>5} "
                  f"{p.arrival_time:>8} "
                  f"{p.initial_priority:>9} "
                  f"{p.start_time if p.start_time is not None else '-':>6} "
                  f"{p.completion_time if p.completion_time is not None else '-':>7} "
                  f"{p.wait_time:>6} "
                  f"{p.turnaround_time:>6} "
                  f"{p.response_time if p.response_time is not None else 'N/A':>6}")

        print(f"{'=' * 96}\n")

    def print_kernel_log(self, events: List[Event], limit: Optional[int] = None):
        """Kernel log, oldest first (optionally only the last `limit` lines)"""
        shown = events[-limit:] if limit else events
        for event in shown:
            print(event.format())
