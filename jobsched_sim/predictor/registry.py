"""Runtime predictor registry and factory."""

from __future__ import annotations

from collections.abc import Callable

from .base import IRuntimePredictor
from .neural import NeuralRuntimePredictor
from .static import StaticEstimatePredictor


PredictorFactory = Callable[..., IRuntimePredictor]


_REGISTRY: dict[str, PredictorFactory] = {
    "static": lambda params=None: StaticEstimatePredictor(),
    "neural": lambda params=None: NeuralRuntimePredictor(params=params),
    "neural_network": lambda params=None: NeuralRuntimePredictor(params=params),
}


def register_predictor(name: str, factory: PredictorFactory) -> None:
    _REGISTRY[name.lower()] = factory


def create_predictor(name: str, params: dict | None = None) -> IRuntimePredictor:
    key = name.lower()
    if key not in _REGISTRY:
        raise ValueError(f"unknown predictor {name}")
    return _REGISTRY[key](params or {})
