"""Boosters: one control loop, one class per algorithm."""

from marginboost.boosters.adaboost import AdaBoost
from marginboost.boosters.adaboostv import AdaBoostV
from marginboost.boosters.base import Booster, CappedBooster
from marginboost.boosters.cerlpboost import CERLPBoost
from marginboost.boosters.erlpboost import ERLPBoost
from marginboost.boosters.lpboost import LPBoost
from marginboost.boosters.smoothboost import SmoothBoost
from marginboost.boosters.softboost import SoftBoost, TotalBoost

__all__ = [
    "Booster",
    "CappedBooster",
    # Empirical risk
    "AdaBoost",
    # Hard margin
    "AdaBoostV",
    "TotalBoost",
    # Soft margin
    "LPBoost",
    "SoftBoost",
    "ERLPBoost",
    "CERLPBoost",
    "SmoothBoost",
]
