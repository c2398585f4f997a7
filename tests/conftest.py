"""Pytest configuration and shared fixtures for qubitsim tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- A fresh simulation context per test
"""

import os

import numpy as np
import pytest
import torch


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic torch RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    Device is determined by default_device().

    Returns:
        A seeded torch.Generator instance.
    """
    from qubitsim.core.device import default_device

    device = default_device().as_torch_device()
    generator = torch.Generator(device=device)
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function")
def context():
    """A fresh SimulationContext with the standard gate library."""
    from qubitsim.core.context import default_context

    return default_context()


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set global random seeds for reproducibility."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(_seed())
