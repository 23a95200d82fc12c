"""Runtime predictor exports."""

from .base import HISTORY_FIELDS, IRuntimePredictor, JobHistoryRecord
from .history import HistoryError, HistoryLoadResult, load_history, parse_history_row, write_history
from .neural import FEATURE_NAMES, NetworkWeights, NeuralRuntimePredictor, TrainingResult, fit_network
from .registry import create_predictor, register_predictor
from .static import StaticEstimatePredictor

__all__ = [
    "FEATURE_NAMES",
    "HISTORY_FIELDS",
    "HistoryError",
    "HistoryLoadResult",
    "IRuntimePredictor",
    "JobHistoryRecord",
    "NetworkWeights",
    "NeuralRuntimePredictor",
    "StaticEstimatePredictor",
    "TrainingResult",
    "create_predictor",
    "fit_network",
    "load_history",
    "parse_history_row",
    "register_predictor",
    "write_history",
]
