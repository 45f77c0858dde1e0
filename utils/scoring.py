"""
Predict & verify: score completion-time and average-waiting-time guesses
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.process import Process, ProcessState


@dataclass
class Prediction:
    process_id: str
    process_name: str
    predicted_ct: Optional[int] = None


@dataclass
class ScoreBreakdown:
    process_id: str
    process_name: str
    predicted_ct: Optional[int]
    actual_ct: Optional[int]
    difference: Optional[int]
    points: int


@dataclass
class PredictionResults:
    breakdown: List[ScoreBreakdown] = field(default_factory=list)
    predicted_awt: Optional[float] = None
    actual_awt: float = 0.0
    awt_difference: Optional[float] = None
    awt_points: int = 0
    total_score: int = 0
    max_score: int = 0
    accuracy: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'breakdown': [vars(b) for b in self.breakdown],
            'predicted_awt': self.predicted_awt,
            'actual_awt': self.actual_awt,
            'awt_difference': self.awt_difference,
            'awt_points': self.awt_points,
            'total_score': self.total_score,
            'max_score': self.max_score,
            'accuracy': self.accuracy,
        }


CT_MAX_POINTS = 10
AWT_MAX_POINTS = 20


def score_completion_time(difference: int) -> int:
    if difference == 0:
        return 10
    if difference <= 1:
        return 5
    if difference <= 3:
        return 2
    return 0


def score_average_waiting_time(difference: float) -> int:
    if difference <= 0.5:
        return 20
    if difference <= 1:
        return 10
    if difference <= 2:
        return 5
    return 0


def init_predictions(processes: List[Process]) -> List[Prediction]:
    """One empty prediction per process"""
    return [Prediction(p.pid, p.name) for p in processes]


def calculate_prediction_results(predictions: List[Prediction], processes: List[Process],
                                 predicted_awt: Optional[float]) -> PredictionResults:
    """
    Compare predictions with what the simulation produced

    Args:
        predictions: completion-time guesses per process
        processes: processes after the run
        predicted_awt: guessed average waiting time (None = not answered)

    Returns:
        per-process breakdown, totals and accuracy percentage
    """
    by_id = {p.pid: p for p in processes}
    results = PredictionResults(predicted_awt=predicted_awt)

    for pred in predictions:
        process = by_id.get(pred.process_id)
        actual_ct = process.completion_time if process is not None else None
        difference = None
        points = 0
        if pred.predicted_ct is not None and actual_ct is not None:
            difference = abs(pred.predicted_ct - actual_ct)
            points = score_completion_time(difference)

        results.max_score += CT_MAX_POINTS
        results.total_score += points
        results.breakdown.append(ScoreBreakdown(pred.process_id, pred.process_name,
                                                pred.predicted_ct, actual_ct,
                                                difference, points))

    completed = [p for p in processes if p.state == ProcessState.TERMINATED]
    if completed:
        results.actual_awt = sum(p.wait_time for p in completed) / len(completed)

    if predicted_awt is not None:
        results.awt_difference = abs(predicted_awt - results.actual_awt)
        results.awt_points = score_average_waiting_time(results.awt_difference)

    results.max_score += AWT_MAX_POINTS
    results.total_score += results.awt_points
    results.accuracy = results.total_score / results.max_score * 100
    return results
