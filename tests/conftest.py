import dataclasses

import numpy as np
import pytest

from lcvx import (
    LCvxTrajectoryOptimizer,
    RocketModel,
    TrajectorySolution,
    mars_lander_params,
)


@pytest.fixture(scope="session")
def mars_params():
    return mars_lander_params()


@pytest.fixture(scope="session")
def vertical_params():
    """Straight-down descent from 500 m, comfortably feasible in 30 s."""
    return mars_lander_params(r0=(0.0, 0.0, 500.0), v0=(0.0, 0.0, -20.0))


@pytest.fixture(scope="session")
def low_fuel_params(mars_params):
    return dataclasses.replace(mars_params, m_wet=mars_params.m_dry + 10.0)


@pytest.fixture(scope="session")
def non_rotating_params(mars_params):
    return dataclasses.replace(mars_params, omega=np.zeros(3))


@pytest.fixture(scope="module")
def vertical_result(vertical_params):
    optimizer = LCvxTrajectoryOptimizer(RocketModel(vertical_params))
    return optimizer.solve(30.0)


def make_solution(t, u, z):
    """Hand-built optimized trajectory with ``len(t) - 1`` inputs."""
    t = np.asarray(t, dtype=float)
    u = np.asarray(u, dtype=float)
    N = t.size
    return TrajectorySolution(
        t=t,
        r=np.zeros((3, N)),
        v=np.zeros((3, N)),
        z=np.asarray(z, dtype=float),
        u=u,
        xi=np.linalg.norm(u, axis=0),
        cost=0.0,
    )


@pytest.fixture
def solution_factory():
    return make_solution
