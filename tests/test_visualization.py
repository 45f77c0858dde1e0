import pytest

from core.config import Algorithm
from core.simulator import run_algorithm
from core.state import CPUCore
from utils.input_parser import PRESETS
from utils.visualization import Visualizer


@pytest.fixture(scope='module')
def results():
    workload = PRESETS['I/O Bound']['processes']
    return [run_algorithm(workload, algorithm, core_count=2)
            for algorithm in (Algorithm.FCFS, Algorithm.ROUND_ROBIN, Algorithm.MLFQ)]


def test_gantt_chart_is_saved(tmp_path, results):
    path = tmp_path / "gantt.png"
    saved = Visualizer().draw_gantt_chart(results[0]['cores'], results[0]['algorithm'],
                                          save_path=str(path), show=False)
    assert saved == str(path)
    assert path.stat().st_size > 0


def test_gantt_chart_without_history(caplog):
    assert Visualizer().draw_gantt_chart([CPUCore(0)], 'FCFS', show=False) is None
    assert 'no Gantt data' in caplog.text


def test_comparison_chart_is_saved(tmp_path, results):
    path = tmp_path / "comparison.png"
    Visualizer().compare_algorithms(results, save_path=str(path), show=False)
    assert path.exists()


def test_tables(capsys, results):
    visualizer = Visualizer()
    visualizer.print_statistics_table(results)
    visualizer.print_process_details(results[1])
    visualizer.print_kernel_log(results[1]['event_log'], limit=3)
    out = capsys.readouterr().out

    for result in results:
        assert result['algorithm'] in out
    assert 'Process Details - ROUND_ROBIN' in out
    assert out.rstrip().splitlines()[-1] == results[1]['event_log'][-1].format()
