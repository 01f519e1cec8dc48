"""
marginboost: Margin-based boosting with JAX.

A single boosting loop shared by three families of algorithms:
1. Empirical risk minimization - AdaBoost
2. Hard margin maximization - AdaBoostV, TotalBoost
3. Soft margin maximization - LPBoost, SoftBoost, ERLPBoost, CERLPBoost,
   SmoothBoost

Features:
- Pluggable weak learners (decision stumps included)
- Pluggable LP/QP solvers (scipy adapter included)
- Capped weightings with exact relative entropy projection
- Duality-gap stopping rules with certified termination
- JSON persistence of combined hypotheses
- Per-round observers for experiments

Quick Start:
    >>> from marginboost import LPBoost, DecisionStump, Sample, ScipySolver
    >>> sample = Sample.from_arrays(X_train, y_train)
    >>> booster = LPBoost(nu=0.1 * len(sample), solver=ScipySolver())
    >>> f = booster.fit(sample, DecisionStump())
    >>> f.predict_all(X_test)
    >>> f.certified
    True
"""

import jax

# Weighting invariants are checked to 1e-9.
jax.config.update("jax_enable_x64", True)

from marginboost._version import __version__  # noqa: E402

from marginboost.aggregation import (  # noqa: E402
    DEFAULT_LABEL,
    CombinedHypothesis,
    Predictions,
    weighted_vote,
)
from marginboost.boosters import (  # noqa: E402
    AdaBoost,
    AdaBoostV,
    Booster,
    CERLPBoost,
    ERLPBoost,
    LPBoost,
    SmoothBoost,
    SoftBoost,
    TotalBoost,
)
from marginboost.core import RoundRecord, RunConfig, State, Termination  # noqa: E402
from marginboost.errors import (  # noqa: E402
    BoostingError,
    DegenerateWeighting,
    InfeasibleCapping,
    InvalidCappingParameter,
    InvalidConfiguration,
    InvalidSampleSize,
    SolverFailure,
    SolverNotConfigured,
    WeakLearnerFailure,
)
from marginboost.research import CSVLogger, History  # noqa: E402
from marginboost.sample import Sample  # noqa: E402
from marginboost.solvers import ScipySolver  # noqa: E402
from marginboost.weak_learners import DecisionStump, StumpClassifier  # noqa: E402

__all__ = [
    "__version__",
    # Data
    "Sample",
    # Run configuration
    "RunConfig",
    "RoundRecord",
    "State",
    "Termination",
    # Boosters
    "Booster",
    "AdaBoost",
    "AdaBoostV",
    "TotalBoost",
    "LPBoost",
    "SoftBoost",
    "ERLPBoost",
    "CERLPBoost",
    "SmoothBoost",
    # Combined hypothesis
    "CombinedHypothesis",
    "Predictions",
    "DEFAULT_LABEL",
    "weighted_vote",
    # Weak learners
    "DecisionStump",
    "StumpClassifier",
    # Solvers
    "ScipySolver",
    # Observers
    "History",
    "CSVLogger",
    # Errors
    "BoostingError",
    "InvalidSampleSize",
    "InvalidCappingParameter",
    "InvalidConfiguration",
    "DegenerateWeighting",
    "InfeasibleCapping",
    "SolverFailure",
    "SolverNotConfigured",
    "WeakLearnerFailure",
]
