"""Pytest configuration and fixtures for overfitstats tests."""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def seed():
    """Random seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    return np.random.default_rng(seed)


@pytest.fixture
def quadratic_frame(rng):
    """Noise-free quadratic: y = 1 + 2x - 0.5x^2 on 40 points."""
    x = rng.normal(0, 3, 40)
    y = 1 + 2 * x - 0.5 * x ** 2
    return pd.DataFrame({"x": x, "y": y})


@pytest.fixture
def personality_frame(rng):
    """Synthetic gender/age/Big Five data with a known linear response.

    wellbeing = 2 + 0.5*male + 0.03*age - 0.02*male*age
                + 0.4*E - 0.6*N + 0.2*C + epsilon
    """
    n = 400
    gender = rng.choice(["female", "male"], size=n)
    age = rng.integers(18, 70, size=n).astype(float)
    traits = rng.normal(3, 0.7, size=(n, 5))
    male = (gender == "male").astype(float)
    wellbeing = (
        2
        + 0.5 * male
        + 0.03 * age
        - 0.02 * male * age
        + 0.2 * traits[:, 1]
        + 0.4 * traits[:, 2]
        - 0.6 * traits[:, 4]
        + rng.normal(0, 0.5, n)
    )
    return pd.DataFrame({
        "gender": gender,
        "age": age,
        "O": traits[:, 0],
        "C": traits[:, 1],
        "E": traits[:, 2],
        "A": traits[:, 3],
        "N": traits[:, 4],
        "wellbeing": wellbeing,
    })


@pytest.fixture
def personality_csv(personality_frame, tmp_path):
    path = tmp_path / "personality.csv"
    personality_frame.to_csv(path, index=False)
    return path
