import pytest

from core.config import Algorithm
from core.errors import ConfigurationError, ProcessValidationError
from core.simulator import Simulator
from utils.input_parser import PRESETS, InputParser, load_preset


def test_parse_form_normalises_pattern():
    d = InputParser.parse_form(' P1 ', 0, 2, 'cpu(3),io(2),cpu(1)')
    assert d == {'name': 'P1', 'arrival_time': 0, 'priority': 2,
                 'burst_pattern': 'CPU(3) -> IO(2) -> CPU(1)'}


def test_parse_form_rejects_bad_pattern():
    with pytest.raises(ProcessValidationError):
        InputParser.parse_form('P1', 0, 1, 'IO(3)')


def test_parse_file(tmp_path, caplog):
    path = tmp_path / "processes.csv"
    path.write_text(
        "# Name,ArrivalTime,Priority,BurstPattern\n"
        "\n"
        'P1,0,3,"CPU(4) -> IO(2) -> CPU(3)"\n'
        "P2, 2, 1, CPU(5)\n"
        "P3,x,1,CPU(2)\n"
        "P4,1,1,IO(2)\n"
        "P5,1\n",
        encoding='utf-8')

    definitions = InputParser.parse_file(str(path))

    assert [d['name'] for d in definitions] == ['P1', 'P2']
    assert definitions[0]['burst_pattern'] == 'CPU(4) -> IO(2) -> CPU(3)'
    assert definitions[1]['arrival_time'] == 2
    assert caplog.text.count('skipping line') == 3


def test_parse_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        InputParser.parse_file(str(tmp_path / "nope.csv"))


def test_saved_file_reads_back(tmp_path):
    definitions = InputParser.generate_random_processes(num_processes=6, seed=3)
    path = tmp_path / "out.csv"
    InputParser.save_processes_to_file(definitions, str(path))
    assert InputParser.parse_file(str(path)) == definitions


def test_random_generation_is_seeded():
    first = InputParser.generate_random_processes(num_processes=8, seed=42)
    second = InputParser.generate_random_processes(num_processes=8, seed=42)
    assert first == second
    assert len(first) == 8


def test_random_processes_are_valid():
    for d in InputParser.generate_random_processes(num_processes=30, seed=7):
        InputParser.parse_form(d['name'], d['arrival_time'], d['priority'], d['burst_pattern'])


def test_presets_are_valid():
    for name, preset in PRESETS.items():
        assert preset['processes'], name
        assert isinstance(preset['algorithm'], Algorithm)
        for d in preset['processes']:
            InputParser.parse_form(d['name'], d['arrival_time'], d['priority'],
                                   d['burst_pattern'])


def test_load_preset_applies_settings():
    simulator = Simulator()
    processes = load_preset(simulator, 'Multi-Core Load')
    assert len(processes) == 4
    assert simulator.config.core_count == 2
    assert len(simulator.cores) == 2


def test_load_preset_can_keep_settings():
    simulator = Simulator()
    simulator.configure(algorithm=Algorithm.SRTF)
    load_preset(simulator, 'Round Robin Demo', apply_settings=False)
    assert simulator.config.algorithm == Algorithm.SRTF
    assert simulator.config.time_quantum == 2


def test_load_unknown_preset():
    with pytest.raises(ConfigurationError):
        load_preset(Simulator(), 'Nothing')


def test_print_process_summary(capsys):
    InputParser.print_process_summary(PRESETS['I/O Bound']['processes'])
    out = capsys.readouterr().out
    assert 'Total processes: 3' in out
    assert 'With I/O: 2' in out
