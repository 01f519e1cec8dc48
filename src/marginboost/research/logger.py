"""Round observers for experiments.

Observers are passed through ``RunConfig(observer=...)`` and receive one
``RoundRecord`` per round. They never change the run.

Example:
    >>> logger = CSVLogger("adaboost.csv", train=train, test=test)
    >>> booster = AdaBoost(config=RunConfig(observer=logger))
    >>> f = booster.fit(train, DecisionStump())
"""

from __future__ import annotations

import csv
from collections.abc import Callable
from pathlib import Path

import jax.numpy as jnp
from jax import Array

from marginboost.core.state import RoundRecord
from marginboost.losses import zero_one_loss
from marginboost.sample import Sample

CSV_HEADER = (
    "round", "objective", "edge", "bound", "train_loss", "test_loss", "time",
)


class History:
    """Keeps every record in memory."""

    def __init__(self):
        self.records: list[RoundRecord] = []

    def on_round(self, record: RoundRecord) -> None:
        self.records.append(record)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def objectives(self) -> list[float]:
        return [r.objective for r in self.records]

    @property
    def bounds(self) -> list[float | None]:
        return [r.bound for r in self.records]

    @property
    def edges(self) -> list[float | None]:
        return [r.edge for r in self.records]


class CSVLogger:
    """Writes one CSV row per round.

    Columns: ``round, objective, edge, bound, train_loss, test_loss, time``.
    Losses are left empty when the matching sample is not given.

    Args:
        path: Output file, truncated on construction.
        train: Sample on which ``train_loss`` is measured.
        test: Sample on which ``test_loss`` is measured.
        loss: ``loss(predictions, targets)``; defaults to the zero-one loss.
    """

    def __init__(
        self,
        path: str | Path,
        train: Sample | None = None,
        test: Sample | None = None,
        loss: Callable[[Array, Array], Array] = zero_one_loss,
    ):
        self.path = Path(path)
        self.train = train
        self.test = test
        self.loss = loss
        with self.path.open("w", newline="") as f:
            csv.writer(f).writerow(CSV_HEADER)

    def _loss_on(self, sample: Sample | None, record: RoundRecord) -> float | str:
        if sample is None:
            return ""
        predictions = jnp.asarray(record.hypothesis.predict_all(sample.features))
        return float(self.loss(predictions, sample.target))

    def on_round(self, record: RoundRecord) -> None:
        row = record.as_row()
        row["train_loss"] = self._loss_on(self.train, record)
        row["test_loss"] = self._loss_on(self.test, record)
        with self.path.open("a", newline="") as f:
            csv.writer(f).writerow(
                ["" if row[key] is None else row[key] for key in CSV_HEADER]
            )
