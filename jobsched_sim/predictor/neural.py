"""Feed-forward neural runtime predictor trained online on completed jobs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import logging
import math
from typing import Any

import numpy as np

from jobsched_sim.model import Job

from .base import IRuntimePredictor, JobHistoryRecord


logger = logging.getLogger(__name__)


INPUT_FEATURES = 7
HIDDEN_NEURONS = 10
OUTPUT_NEURONS = 1

FEATURE_NAMES: tuple[str, ...] = (
    "estimated_execution_time",
    "priority",
    "io_bound",
    "num_dependencies",
    "memory_requirement",
    "network_requirement",
    "arrival_time",
)


@dataclass(slots=True)
class NetworkWeights:
    """Weights of the 7-10-1 network."""

    w_hidden: np.ndarray
    b_hidden: np.ndarray
    w_out: np.ndarray
    b_out: float

    @classmethod
    def xavier(cls, seed: int) -> "NetworkWeights":
        rng = np.random.default_rng(seed)
        input_scale = math.sqrt(2.0 / (INPUT_FEATURES + HIDDEN_NEURONS))
        hidden_scale = math.sqrt(2.0 / (HIDDEN_NEURONS + OUTPUT_NEURONS))
        return cls(
            w_hidden=rng.uniform(-1.0, 1.0, size=(INPUT_FEATURES, HIDDEN_NEURONS)) * input_scale,
            b_hidden=rng.uniform(-1.0, 1.0, size=HIDDEN_NEURONS) * input_scale,
            w_out=rng.uniform(-1.0, 1.0, size=HIDDEN_NEURONS) * hidden_scale,
            b_out=float(rng.uniform(-1.0, 1.0) * hidden_scale),
        )

    def copy(self) -> "NetworkWeights":
        return NetworkWeights(
            w_hidden=self.w_hidden.copy(),
            b_hidden=self.b_hidden.copy(),
            w_out=self.w_out.copy(),
            b_out=self.b_out,
        )

    def forward(self, features: np.ndarray) -> np.ndarray:
        hidden = np.maximum(features @ self.w_hidden + self.b_hidden, 0.0)
        return hidden @ self.w_out + self.b_out


@dataclass(slots=True)
class TrainingResult:
    epochs: int
    training_mse: float
    validation_mse: float


def fit_network(
    weights: NetworkWeights,
    features: np.ndarray,
    targets: np.ndarray,
    *,
    learning_rate: float,
    max_epochs: int,
    lr_decay: float = 0.9,
    decay_every: int = 100,
    tolerance: float = 1e-4,
) -> tuple[int, float]:
    """Full-batch gradient descent on squared error; updates ``weights`` in place.

    Returns the number of epochs run and the last epoch's training MSE.
    """
    count = len(targets)
    if count == 0:
        return 0, float("nan")

    lr = learning_rate
    prev_mse = math.inf
    mse = math.nan
    epochs_run = 0
    for epoch in range(max_epochs):
        epochs_run = epoch + 1
        pre_hidden = features @ weights.w_hidden + weights.b_hidden
        hidden = np.maximum(pre_hidden, 0.0)
        prediction = hidden @ weights.w_out + weights.b_out
        error = prediction - targets
        mse = float(np.mean(error * error))

        grad_out = error / count
        grad_hidden = np.outer(grad_out, weights.w_out) * (pre_hidden > 0.0)

        weights.w_out -= lr * (hidden.T @ grad_out)
        weights.b_out -= lr * float(grad_out.sum())
        weights.w_hidden -= lr * (features.T @ grad_hidden)
        weights.b_hidden -= lr * grad_hidden.sum(axis=0)

        if abs(prev_mse - mse) < tolerance:
            break
        prev_mse = mse
        if epochs_run % decay_every == 0:
            lr *= lr_decay
    return epochs_run, mse


def _mse(weights: NetworkWeights, features: np.ndarray, targets: np.ndarray) -> float:
    if len(targets) == 0:
        return float("nan")
    error = weights.forward(features) - targets
    return float(np.mean(error * error))


def _mape(weights: NetworkWeights, features: np.ndarray, targets: np.ndarray) -> float:
    mask = targets > 0
    if not mask.any():
        return 0.0
    prediction = weights.forward(features[mask])
    return float(np.mean(np.abs((prediction - targets[mask]) / targets[mask])) * 100.0)


class NeuralRuntimePredictor(IRuntimePredictor):
    """Predict execution time from seven job features.

    Below ``min_records`` observations the job's own estimate is returned
    unchanged. The network is retrained on every ``retrain_interval``-th new
    observation.
    """

    DEFAULT_LEARNING_RATE = 0.01
    DEFAULT_EPOCHS = 1000
    DEFAULT_SEED = 42
    MIN_RECORDS = 20
    RETRAIN_INTERVAL = 10
    STD_FLOOR = 1e-4
    TRAIN_FRACTION = 0.8
    CV_FOLDS = 5

    def __init__(self, params: dict[str, Any] | None = None) -> None:
        config = params or {}
        self._learning_rate = float(config.get("learning_rate", self.DEFAULT_LEARNING_RATE))
        if self._learning_rate <= 0:
            raise ValueError("predictor.params.learning_rate must be > 0")
        self._epochs = int(config.get("epochs", self.DEFAULT_EPOCHS))
        if self._epochs < 1:
            raise ValueError("predictor.params.epochs must be >= 1")
        self._seed = int(config.get("seed", self.DEFAULT_SEED))
        self._min_records = int(config.get("min_records", self.MIN_RECORDS))
        self._retrain_interval = int(config.get("retrain_interval", self.RETRAIN_INTERVAL))
        if self._retrain_interval < 1:
            raise ValueError("predictor.params.retrain_interval must be >= 1")

        self._weights = NetworkWeights.xavier(self._seed)
        self._history: list[JobHistoryRecord] = []
        self._means = np.zeros(INPUT_FEATURES)
        self._stds = np.ones(INPUT_FEATURES)
        self._trained = False
        self._last_result: TrainingResult | None = None

    @property
    def history_size(self) -> int:
        return len(self._history)

    @property
    def trained(self) -> bool:
        return self._trained

    @property
    def last_result(self) -> TrainingResult | None:
        return self._last_result

    def predict(self, job: Job, *, num_dependencies: int = 0) -> int:
        if len(self._history) < self._min_records or not self._trained:
            return job.estimated_execution_time
        features = self._normalize(self._job_features(job, num_dependencies)[None, :])
        prediction = float(self._weights.forward(features)[0])
        if not math.isfinite(prediction):
            return job.estimated_execution_time
        return int(max(1, round(prediction)))

    def record(self, record: JobHistoryRecord) -> None:
        self._history.append(record)
        if len(self._history) % self._retrain_interval == 0:
            self.train()

    def add_history(self, records: Iterable[JobHistoryRecord]) -> int:
        """Bulk-load observations and train once at the end."""
        before = len(self._history)
        self._history.extend(records)
        added = len(self._history) - before
        if added and len(self._history) >= self._min_records:
            self.train()
        return added

    def train(self) -> TrainingResult | None:
        if len(self._history) < self._min_records:
            return None

        features, targets = self._history_arrays(self._history)
        self._means = features.mean(axis=0)
        stds = features.std(axis=0)
        self._stds = np.where(stds < self.STD_FLOOR, 1.0, stds)
        normalized = self._normalize(features)

        order = np.random.default_rng(self._seed).permutation(len(targets))
        train_size = int(len(targets) * self.TRAIN_FRACTION)
        train_idx, valid_idx = order[:train_size], order[train_size:]

        epochs, training_mse = fit_network(
            self._weights,
            normalized[train_idx],
            targets[train_idx],
            learning_rate=self._learning_rate,
            max_epochs=self._epochs,
        )
        validation_mse = _mse(self._weights, normalized[valid_idx], targets[valid_idx])
        self._trained = True
        self._last_result = TrainingResult(
            epochs=epochs,
            training_mse=training_mse,
            validation_mse=validation_mse,
        )
        logger.info(
            "runtime predictor trained on %d records: epochs=%d training_mse=%.4f validation_mse=%.4f",
            len(self._history),
            epochs,
            training_mse,
            validation_mse,
        )
        return self._last_result

    def accuracy_report(self) -> dict:
        """Read-only diagnostics; never consulted by scheduling decisions."""
        if len(self._history) < self._min_records or self._last_result is None:
            return {
                "status": "insufficient_data",
                "records": len(self._history),
                "min_records": self._min_records,
            }

        features, targets = self._history_arrays(self._history)
        normalized = self._normalize(features)
        order = np.random.default_rng(self._seed).permutation(len(targets))
        validation_mse = self._last_result.validation_mse

        return {
            "status": "ok",
            "records": len(self._history),
            "architecture": f"{INPUT_FEATURES}-{HIDDEN_NEURONS}-{OUTPUT_NEURONS}",
            "training_mse": self._last_result.training_mse,
            "validation_mse": validation_mse,
            "rmse": math.sqrt(validation_mse) if math.isfinite(validation_mse) else float("nan"),
            "mape": _mape(self._weights, normalized, targets),
            "cv_mape": self._cross_validated_mape(normalized[order], targets[order]),
            "improvement_over_naive_pct": self._improvement_over_naive(normalized, targets, order),
            "feature_importance": self._feature_importance(),
        }

    def _cross_validated_mape(self, features: np.ndarray, targets: np.ndarray) -> float:
        fold_size = len(targets) // self.CV_FOLDS
        if fold_size == 0:
            return float("nan")
        fold_scores: list[float] = []
        for fold in range(self.CV_FOLDS):
            start, end = fold * fold_size, (fold + 1) * fold_size
            held_out = np.arange(start, end)
            kept = np.concatenate([np.arange(0, start), np.arange(end, len(targets))])
            weights = NetworkWeights.xavier(self._seed)
            fit_network(
                weights,
                features[kept],
                targets[kept],
                learning_rate=self._learning_rate,
                max_epochs=self._epochs,
            )
            fold_scores.append(_mape(weights, features[held_out], targets[held_out]))
        return float(np.mean(fold_scores))

    def _improvement_over_naive(
        self, features: np.ndarray, targets: np.ndarray, order: np.ndarray
    ) -> float:
        test_idx = order[: len(order) // self.CV_FOLDS]
        if len(test_idx) == 0:
            return 0.0
        estimates = np.array([self._history[i].estimated_time for i in test_idx], dtype=float)
        model_error = np.abs(self._weights.forward(features[test_idx]) - targets[test_idx]).sum()
        naive_error = np.abs(estimates - targets[test_idx]).sum()
        if naive_error <= 0:
            return 0.0
        return float(100.0 * (naive_error - model_error) / naive_error)

    def _feature_importance(self) -> dict[str, float]:
        # Sensitivity of the output to a one-stddev shift from the mean input.
        baseline = self._normalize(self._means[None, :])
        base_prediction = float(self._weights.forward(baseline)[0])
        sensitivity = np.zeros(INPUT_FEATURES)
        for idx in range(INPUT_FEATURES):
            perturbed = baseline.copy()
            perturbed[0, idx] += 1.0
            sensitivity[idx] = abs(float(self._weights.forward(perturbed)[0]) - base_prediction)
        total = sensitivity.sum()
        if total > 0:
            sensitivity = sensitivity / total
        return {name: float(value) for name, value in zip(FEATURE_NAMES, sensitivity, strict=True)}

    def _normalize(self, features: np.ndarray) -> np.ndarray:
        with np.errstate(divide="ignore", invalid="ignore"):
            normalized = (features - self._means) / self._stds
        return np.nan_to_num(normalized, nan=0.0, posinf=0.0, neginf=0.0)

    @staticmethod
    def _job_features(job: Job, num_dependencies: int) -> np.ndarray:
        demand = job.resources
        return np.array(
            [
                job.estimated_execution_time,
                job.priority,
                1.0 if job.io_bound else 0.0,
                num_dependencies,
                demand.memory if demand else 0,
                demand.network if demand else 0,
                job.arrival_time,
            ],
            dtype=float,
        )

    @staticmethod
    def _history_arrays(records: list[JobHistoryRecord]) -> tuple[np.ndarray, np.ndarray]:
        # Arrival time is not part of the history format and enters training as zero.
        features = np.array(
            [
                [
                    r.estimated_time,
                    r.priority,
                    1.0 if r.io_bound else 0.0,
                    r.num_dependencies,
                    r.memory_requirement,
                    r.network_requirement,
                    0.0,
                ]
                for r in records
            ],
            dtype=float,
        )
        targets = np.array([r.actual_time for r in records], dtype=float)
        return features, targets
