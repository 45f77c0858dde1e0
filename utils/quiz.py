"""
Quiz mode: questions generated from scheduling situations

Randomness comes from an injected random.Random so that the scheduling
engine itself stays deterministic.
"""

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.config import Algorithm
from core.process import Process
from core.state import CPUCore

PREEMPT_YES = 'Yes, preempt'
PREEMPT_NO = 'No, continue'
POINTS_PER_ANSWER = 10


@dataclass
class QuizQuestion:
    question_id: str
    question_type: str  # PREEMPTION | NEXT_PROCESS | QUEUE_ORDER
    question: str
    options: List[str]
    correct_answer: str
    explanation: str
    timestamp: int
    context: Dict = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            'id': self.question_id,
            'type': self.question_type,
            'question': self.question,
            'options': list(self.options),
            'correct_answer': self.correct_answer,
            'explanation': self.explanation,
            'timestamp': self.timestamp,
            'context': dict(self.context),
        }


@dataclass
class QuizAnswer:
    question: QuizQuestion
    user_answer: str
    correct: bool
    time_taken: float  # ms


class QuizTrigger:
    """Decides when a question should pop up, and which one"""

    def __init__(self, rng: Optional[random.Random] = None, next_process_chance: float = 0.5):
        self.rng = rng or random.Random()
        self.next_process_chance = next_process_chance
        self.question_counter = 0

    def _next_id(self) -> str:
        self.question_counter += 1
        return f"Q{self.question_counter}"

    def check_preemption(self, arriving: Process, running: Optional[Process],
                         algorithm: Algorithm, clock: int) -> Optional[QuizQuestion]:
        """Should an arrival preempt the running process?"""
        if running is None:
            return None

        if algorithm == Algorithm.SRTF:
            arriving_remaining = arriving.get_remaining_time()
            running_remaining = running.get_remaining_time()
            if arriving_remaining < running_remaining:
                return QuizQuestion(
                    self._next_id(), 'PREEMPTION',
                    f"{arriving.name} has arrived with {arriving_remaining} units remaining. "
                    f"{running.name} has {running_remaining} units left. "
                    f"Should the CPU preempt {running.name}?",
                    [PREEMPT_YES, PREEMPT_NO], PREEMPT_YES,
                    f"In SRTF, the process with the shortest remaining time always runs. "
                    f"{arriving.name} ({arriving_remaining} units) < {running.name} "
                    f"({running_remaining} units), so preemption occurs.",
                    clock,
                    {'current_process': running.name, 'arriving_process': arriving.name,
                     'algorithm': algorithm.value})

        if algorithm == Algorithm.PRIORITY_PREEMPTIVE and arriving.priority < running.priority:
            return QuizQuestion(
                self._next_id(), 'PREEMPTION',
                f"{arriving.name} (priority {arriving.priority}) has arrived. "
                f"{running.name} (priority {running.priority}) is running. "
                f"Should preemption occur?",
                [PREEMPT_YES, PREEMPT_NO], PREEMPT_YES,
                f"In Priority Preemptive, lower priority numbers mean higher priority. "
                f"{arriving.name} ({arriving.priority}) has higher priority than "
                f"{running.name} ({running.priority}).",
                clock,
                {'current_process': running.name, 'arriving_process': arriving.name,
                 'algorithm': algorithm.value})

        return None

    def check_next_process(self, ready_queue: List[Process], algorithm: Algorithm,
                           clock: int) -> Optional[QuizQuestion]:
        """Which ready process runs next?"""
        if len(ready_queue) < 2:
            return None

        if algorithm == Algorithm.FCFS:
            correct = min(ready_queue, key=lambda p: (p.arrival_time, p.sequence))
            explanation = (f"In FCFS, the process that arrived first runs next. "
                           f"{correct.name} arrived at time {correct.arrival_time}.")
        elif algorithm in (Algorithm.SJF, Algorithm.SRTF):
            correct = min(ready_queue, key=lambda p: (p.get_remaining_time(), p.arrival_time,
                                                      p.sequence))
            explanation = (f"In {algorithm.value}, the process with the shortest (remaining) "
                           f"burst runs next. {correct.name} has "
                           f"{correct.get_remaining_time()} units.")
        elif algorithm in (Algorithm.PRIORITY_PREEMPTIVE, Algorithm.PRIORITY_NON_PREEMPTIVE):
            correct = min(ready_queue, key=lambda p: (p.priority, p.arrival_time, p.sequence))
            explanation = (f"In Priority scheduling, the lowest priority number runs first. "
                           f"{correct.name} has priority {correct.priority}.")
        elif algorithm == Algorithm.ROUND_ROBIN:
            correct = ready_queue[0]
            explanation = (f"In Round Robin, processes run in FIFO order within the ready "
                           f"queue. {correct.name} is at the front.")
        else:
            return None

        options = [p.name for p in ready_queue[:4]]
        if correct.name not in options:
            options[-1] = correct.name

        return QuizQuestion(
            self._next_id(), 'NEXT_PROCESS',
            f"The CPU is idle and the ready queue has: "
            f"{', '.join(p.name for p in ready_queue)}. Which process runs next?",
            options, correct.name, explanation, clock, {'algorithm': algorithm.value})

    def check_quantum_expiry(self, running: Process, ready_queue: List[Process],
                             time_quantum: int, clock: int) -> Optional[QuizQuestion]:
        """Round Robin slice used up while others wait"""
        if not ready_queue:
            return None
        remaining = running.get_remaining_time()
        if remaining <= 0:
            return None

        back_of_queue = f"{running.name} goes to back of queue"
        return QuizQuestion(
            self._next_id(), 'PREEMPTION',
            f"Time quantum ({time_quantum}) has expired for {running.name}. "
            f"It has {remaining} units remaining. What happens next?",
            [back_of_queue, f"{running.name} continues running",
             f"{running.name} terminates"],
            back_of_queue,
            "In Round Robin, when the time quantum expires, the process is moved to the "
            "back of the ready queue if it still has work remaining.",
            clock,
            {'current_process': running.name, 'algorithm': Algorithm.ROUND_ROBIN.value})

    def check_quiz_triggers(self, cores: List[CPUCore], new_arrivals: List[Process],
                            algorithm: Algorithm, clock: int, time_quantum: int,
                            recent_completion: bool) -> Optional[QuizQuestion]:
        """
        First applicable question for the current situation, if any

        Next-process questions after a completion fire only part of the
        time, drawn from the injected generator.
        """
        for arrival in new_arrivals:
            for core in cores:
                if core.current_process is not None:
                    question = self.check_preemption(arrival, core.current_process,
                                                     algorithm, clock)
                    if question:
                        return question

        if recent_completion:
            for core in cores:
                if len(core.ready_queue) >= 2:
                    question = self.check_next_process(core.ready_queue, algorithm, clock)
                    if question and self.rng.random() < self.next_process_chance:
                        return question
                    break

        if algorithm == Algorithm.ROUND_ROBIN:
            for core in cores:
                if core.current_process is not None and core.time_quantum_remaining <= 1:
                    question = self.check_quantum_expiry(core.current_process, core.ready_queue,
                                                         time_quantum, clock)
                    if question:
                        return question

        return None


class QuizState:
    """Answer bookkeeping for one quiz session"""

    def __init__(self):
        self.current_question: Optional[QuizQuestion] = None
        self.questions_answered = 0
        self.correct_answers = 0
        self.total_points = 0
        self.history: List[QuizAnswer] = []

    @property
    def active(self) -> bool:
        return self.current_question is not None

    def trigger(self, question: QuizQuestion):
        self.current_question = question

    def answer(self, user_answer: str, time_taken: float = 0) -> bool:
        """Record an answer to the open question; returns whether it was correct"""
        if self.current_question is None:
            raise ValueError("No quiz question is open")
        correct = user_answer == self.current_question.correct_answer
        self.questions_answered += 1
        if correct:
            self.correct_answers += 1
            self.total_points += POINTS_PER_ANSWER
        self.history.append(QuizAnswer(self.current_question, user_answer, correct, time_taken))
        return correct

    def dismiss(self):
        self.current_question = None

    def to_dict(self) -> Dict:
        return {
            'active': self.active,
            'current_question': (self.current_question.to_dict()
                                 if self.current_question else None),
            'questions_answered': self.questions_answered,
            'correct_answers': self.correct_answers,
            'total_points': self.total_points,
        }
