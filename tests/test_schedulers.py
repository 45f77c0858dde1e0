import pytest

from core.config import Algorithm, SimulatorConfig
from core.process import ProcessState
from core.state import CPUCore, EventType
from schedulers import (ALGORITHM_MAP, apply_priority_aging, assign_process_to_core,
                        fcfs_schedule, get_next_process, list_algorithms,
                        mlfq_schedule, priority_non_preemptive_schedule,
                        priority_preemptive_schedule, round_robin_schedule,
                        sjf_schedule, srtf_schedule)

from conftest import make_process


def test_every_algorithm_is_registered():
    assert set(ALGORITHM_MAP) == set(Algorithm)
    ids = [a['id'] for a in list_algorithms()]
    assert ids == [a.value for a in Algorithm]


def test_fcfs_picks_earliest_arrival_then_insertion_order(config):
    late = make_process('P1', arrival_time=3)
    early_second = make_process('P3', arrival_time=1)
    early_first = make_process('P2', arrival_time=1)
    decision = fcfs_schedule([late, early_second, early_first], None, 3, 0, config)
    assert decision.selected is early_first
    assert decision.reset_quantum


def test_fcfs_never_preempts(config):
    running = make_process('P1', pattern='CPU(50)')
    decision = fcfs_schedule([make_process('P2', pattern='CPU(1)')], running, 5, 0, config)
    assert decision.selected is running
    assert not decision.should_preempt


def test_fcfs_idle_without_work(config):
    decision = fcfs_schedule([], None, 0, 0, config)
    assert decision.selected is None


def test_sjf_picks_shortest_current_burst(config):
    a = make_process('P1', pattern='CPU(6)')
    b = make_process('P2', pattern='CPU(2) -> IO(10) -> CPU(9)')
    c = make_process('P3', pattern='CPU(3)')
    assert sjf_schedule([a, b, c], None, 0, 0, config).selected is b


def test_sjf_ties_fall_back_to_arrival(config):
    a = make_process('P1', arrival_time=2, pattern='CPU(3)')
    b = make_process('P2', arrival_time=1, pattern='CPU(3)')
    assert sjf_schedule([a, b], None, 2, 0, config).selected is b


def test_sjf_is_non_preemptive(config):
    running = make_process('P1', pattern='CPU(9)')
    decision = sjf_schedule([make_process('P2', pattern='CPU(1)')], running, 1, 0, config)
    assert decision.selected is running
    assert not decision.should_preempt


def test_srtf_preempts_for_shorter_remaining(config):
    running = make_process('P1', pattern='CPU(8)')
    shorter = make_process('P2', arrival_time=1, pattern='CPU(2)')
    decision = srtf_schedule([shorter], running, 1, 0, config)
    assert decision.selected is shorter
    assert decision.should_preempt


def test_srtf_keeps_runner_on_equal_remaining(config):
    running = make_process('P1', pattern='CPU(3)')
    equal = make_process('P2', arrival_time=1, pattern='CPU(3)')
    decision = srtf_schedule([equal], running, 1, 0, config)
    assert decision.selected is running
    assert not decision.should_preempt


def test_srtf_equal_remaining_earlier_arrival_takes_over(config):
    running = make_process('P2', arrival_time=1, pattern='CPU(3)')
    earlier = make_process('P1', pattern='CPU(3)')
    decision = srtf_schedule([earlier], running, 1, 0, config)
    assert decision.selected is earlier
    assert decision.should_preempt


def test_round_robin_keeps_runner_while_quantum_left(config):
    running = make_process('P1')
    decision = round_robin_schedule([make_process('P2')], running, 1, 1, config)
    assert decision.selected is running
    assert not decision.should_preempt


def test_round_robin_rotates_on_expiry(config):
    running = make_process('P1')
    head, tail = make_process('P2'), make_process('P3')
    decision = round_robin_schedule([head, tail], running, 2, 0, config)
    assert decision.selected is head
    assert decision.should_preempt
    assert decision.reset_quantum


def test_round_robin_renews_quantum_when_alone(config):
    running = make_process('P1')
    decision = round_robin_schedule([], running, 2, 0, config)
    assert decision.selected is running
    assert not decision.should_preempt
    assert decision.reset_quantum


def test_round_robin_takes_queue_head_not_earliest_arrival(config):
    returned_from_io = make_process('P1', arrival_time=0)
    newcomer = make_process('P2', arrival_time=5)
    decision = round_robin_schedule([newcomer, returned_from_io], None, 6, 0, config)
    assert decision.selected is newcomer


def test_priority_preemptive_needs_strictly_better_priority(config):
    running = make_process('P1', priority=2)
    same = make_process('P2', priority=2)
    assert not priority_preemptive_schedule([same], running, 1, 0, config).should_preempt

    better = make_process('P3', priority=1)
    decision = priority_preemptive_schedule([same, better], running, 1, 0, config)
    assert decision.should_preempt
    assert decision.selected is better


def test_priority_non_preemptive(config):
    running = make_process('P1', priority=5)
    better = make_process('P2', priority=0)
    assert priority_non_preemptive_schedule([better], running, 1, 0, config).selected is running
    assert priority_non_preemptive_schedule([better, running], None, 1, 0, config).selected \
        is better


def test_get_next_process_dispatches_by_algorithm(config):
    long_job = make_process('P1', pattern='CPU(9)')
    short_job = make_process('P2', pattern='CPU(1)')
    fcfs = get_next_process(Algorithm.FCFS, [long_job, short_job], None, 0, 0, config)
    sjf = get_next_process(Algorithm.SJF, [long_job, short_job], None, 0, 0, config)
    assert fcfs.selected is long_job
    assert sjf.selected is short_job


class TestMLFQ:

    config = SimulatorConfig(algorithm=Algorithm.MLFQ, time_quantum=2)

    def test_quantum_doubles_per_level(self):
        assert [self.config.mlfq_quantum(level) for level in range(3)] == [2, 4, 8]

    def test_idle_core_takes_highest_level_first(self):
        low = make_process('P1', queue_level=2)
        high = make_process('P2', queue_level=0)
        decision = mlfq_schedule([low, high], None, 0, 0, self.config)
        assert decision.selected is high
        assert decision.quantum == 2

    def test_fifo_within_a_level(self):
        first = make_process('P2', queue_level=1)
        second = make_process('P1', queue_level=1)
        assert mlfq_schedule([first, second], None, 0, 0, self.config).selected is first

    def test_higher_level_arrival_preempts_without_demotion(self):
        running = make_process('P1', queue_level=1)
        arrival = make_process('P2', queue_level=0)
        decision = mlfq_schedule([arrival], running, 3, 3, self.config)
        assert decision.should_preempt
        assert not decision.demote

    def test_quantum_expiry_demotes_and_rotates(self):
        running = make_process('P1', queue_level=0)
        waiting = make_process('P2', queue_level=0)
        decision = mlfq_schedule([waiting], running, 2, 0, self.config)
        assert decision.should_preempt
        assert decision.demote
        assert decision.selected is waiting

    def test_expiry_with_only_lower_levels_waiting_keeps_runner(self):
        running = make_process('P1', queue_level=0)
        waiting = make_process('P2', queue_level=2)
        decision = mlfq_schedule([waiting], running, 2, 0, self.config)
        assert decision.selected is running
        assert decision.demote
        assert decision.quantum == 4


def test_aging_boosts_after_threshold():
    waiting = make_process('P1', priority=10, state=ProcessState.READY, waiting_since=0)
    assert apply_priority_aging([waiting], 9, 10) == []
    assert waiting.priority == 10

    events = apply_priority_aging([waiting], 10, 10)
    assert waiting.priority == 9
    assert waiting.waiting_since == 10
    assert [e.event_type for e in events] == [EventType.AGING_BOOST]
    assert "10 → 9" in events[0].message


def test_aging_never_goes_below_zero_and_skips_non_ready():
    top = make_process('P1', priority=0, state=ProcessState.READY, waiting_since=0)
    running = make_process('P2', priority=4, state=ProcessState.RUNNING, waiting_since=0)
    assert apply_priority_aging([top, running], 50, 5) == []
    assert top.priority == 0
    assert running.priority == 4


def test_load_balancer_prefers_shortest_queue(two_cores):
    two_cores[0].ready_queue.append(make_process('P1'))
    assert assign_process_to_core(two_cores, make_process('P2')) == 1


def test_load_balancer_counts_running_process(two_cores):
    two_cores[0].current_process = make_process('P1')
    two_cores[1].ready_queue.append(make_process('P2'))
    two_cores[1].ready_queue.append(make_process('P3'))
    assert assign_process_to_core(two_cores, make_process('P4')) == 0


def test_load_balancer_tie_goes_to_lowest_core(two_cores):
    assert assign_process_to_core(two_cores, make_process('P1')) == 0


def test_load_balancer_spreads_simultaneous_arrivals():
    cores = [CPUCore(i) for i in range(2)]
    for n in range(1, 5):
        process = make_process(f'P{n}')
        cores[assign_process_to_core(cores, process)].ready_queue.append(process)
    assert abs(len(cores[0].ready_queue) - len(cores[1].ready_queue)) <= 1


def test_load_balancer_without_cores():
    with pytest.raises(ValueError):
        assign_process_to_core([], make_process('P1'))
