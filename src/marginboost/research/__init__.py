"""Research observers: per-round records of a boosting run."""

from marginboost.research.logger import CSV_HEADER, CSVLogger, History

__all__ = [
    "History",
    "CSVLogger",
    "CSV_HEADER",
]
