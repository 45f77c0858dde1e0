"""
Utility modules
"""

from .input_parser import InputParser, PRESETS, load_preset
from .quiz import QuizQuestion, QuizState, QuizTrigger
from .scoring import Prediction, calculate_prediction_results, init_predictions
from .visualization import Visualizer

__all__ = [
    'InputParser',
    'PRESETS',
    'load_preset',
    'QuizQuestion',
    'QuizState',
    'QuizTrigger',
    'Prediction',
    'calculate_prediction_results',
    'init_predictions',
    'Visualizer',
]
