"""
marginboost Quickstart
======================

Boosting decision stumps on Breast Cancer with each algorithm family.
"""

import time

from sklearn.datasets import load_breast_cancer
from sklearn.metrics import accuracy_score
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import StandardScaler

from marginboost import (
    AdaBoost,
    AdaBoostV,
    CERLPBoost,
    CombinedHypothesis,
    DecisionStump,
    ERLPBoost,
    LPBoost,
    RunConfig,
    Sample,
    ScipySolver,
    SmoothBoost,
    SoftBoost,
)


def load_data():
    data = load_breast_cancer()
    X, y = data.data, 2 * data.target - 1

    # Normalize features
    scaler = StandardScaler()
    X = scaler.fit_transform(X)

    return train_test_split(X, y, test_size=0.2, random_state=42)


def main():
    print("=" * 60)
    print(" marginboost Quickstart")
    print("=" * 60)

    X_train, X_test, y_train, y_test = load_data()
    sample = Sample.from_arrays(X_train, y_train)
    nu = 0.1 * len(sample)
    print(f"Train: {len(X_train)}, Test: {len(X_test)}, Features: {X_train.shape[1]}")

    config = RunConfig(tolerance=0.05, max_rounds=100)
    boosters = {
        "AdaBoost": AdaBoost(config=config),
        "AdaBoostV": AdaBoostV(config=config),
        "LPBoost": LPBoost(nu=nu, solver=ScipySolver(), config=config),
        "SoftBoost": SoftBoost(nu=nu, solver=ScipySolver(), config=config),
        "ERLPBoost": ERLPBoost(nu=nu, config=config),
        "CERLPBoost": CERLPBoost(nu=nu, config=config),
        "SmoothBoost": SmoothBoost(kappa=0.5, gamma=0.25, config=config),
    }

    results = {}
    for name, booster in boosters.items():
        start = time.perf_counter()
        f = booster.fit(sample, DecisionStump())
        elapsed = time.perf_counter() - start

        acc = accuracy_score(y_test, f.predict_all(X_test))
        results[name] = acc
        print(
            f"  {name:12s} rounds={booster.rounds:4d}  "
            f"{f.termination.value:24s} acc={acc:.4f}  ({elapsed:.1f}s)"
        )

    # Save and reload the last model
    restored = CombinedHypothesis.from_json(f.to_json())
    assert (restored.predict_all(X_test) == f.predict_all(X_test)).all()

    print("\n" + "=" * 60)
    print(" Summary")
    print("=" * 60)
    best = max(results, key=results.get)
    print(f"  Best: {best} ({results[best]:.4f})")


if __name__ == "__main__":
    main()
