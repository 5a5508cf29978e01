"""Shared fixtures for the staticop test-suite."""
import numpy as np
import pytest

import staticop as so


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def run_ctx():
    return so.RunContext(so.cpu())


def blobs(*arrays):
    return [so.TensorBlob(a) for a in arrays]


def make_inputs(rng, batch=3, feature=5, hidden=4, bias=True, dtype=np.float64):
    data = rng.standard_normal((batch, 1, 1, feature)).astype(dtype)
    weight = rng.standard_normal((hidden, feature)).astype(dtype)
    arrays = [data, weight]
    if bias:
        arrays.append(rng.standard_normal((hidden,)).astype(dtype))
    return arrays
