import dataclasses

import numpy as np
import pytest
from numpy.testing import assert_allclose

from lcvx import (
    ControlLaw,
    RocketModel,
    SimulationConfig,
    Simulator,
    ZOHReplayControl,
    rk4,
    zoh_discretize,
)
from lcvx.simulator import rk4_grid


class ZeroControl(ControlLaw):
    def __call__(self, t, state):
        return np.zeros(4)


def test_rk4_grid_appends_final_time():
    assert_allclose(rk4_grid(0.3, 1.0), [0.0, 0.3, 0.6, 0.9, 1.0])
    assert_allclose(rk4_grid(0.25, 1.0), [0.0, 0.25, 0.5, 0.75, 1.0])
    with pytest.raises(ValueError):
        rk4_grid(0.0, 1.0)


def test_rk4_exponential_decay():
    t, X = rk4(lambda t, x: -x, np.array([1.0, 2.0]), 0.01, 1.0)
    assert X.shape == (2, t.size)
    assert_allclose(X[:, -1], np.exp(-1.0) * np.array([1.0, 2.0]), rtol=1e-9)


def test_free_fall_matches_closed_form(non_rotating_params):
    simulator = Simulator(RocketModel(non_rotating_params), SimulationConfig(dt=0.1))
    result = simulator.simulate(ZeroControl(), 4.05)
    p = non_rotating_params
    T = 4.05
    assert result.t_f == pytest.approx(T)
    assert_allclose(result.final_position, p.r0 + p.v0 * T + 0.5 * p.gravity * T**2, atol=1e-8)
    assert_allclose(result.final_velocity, p.v0 + p.gravity * T, atol=1e-9)
    assert result.final_mass == pytest.approx(p.m_wet)
    assert result.cost == 0.0
    assert result.u.shape == (3, result.num_nodes)


def test_rk4_is_fourth_order(non_rotating_params):
    params = dataclasses.replace(non_rotating_params, omega=(0.0, 0.0, 0.5))
    model = RocketModel(params)
    T = 4.0
    exact = zoh_discretize(model, T).step(params.initial_state, np.zeros(4))

    errors = []
    for dt in (0.125, 0.0625):
        result = Simulator(model, SimulationConfig(dt=dt)).simulate(ZeroControl(), T)
        errors.append(np.linalg.norm(result.state(result.num_nodes - 1) - exact))
    assert 12.0 < errors[0] / errors[1] < 20.0


def test_custom_initial_state(non_rotating_params):
    simulator = Simulator(RocketModel(non_rotating_params))
    x0 = np.concatenate([np.zeros(3), np.zeros(3), [np.log(1600.0)]])
    result = simulator.simulate(ZeroControl(), 1.0, x0=x0)
    assert_allclose(result.state(0), x0)
    assert result.final_position[2] == pytest.approx(0.5 * non_rotating_params.gravity[2])


def test_plain_replay_reproduces_optimized_trajectory(vertical_result, vertical_params):
    plan = vertical_result.solution
    simulator = Simulator(RocketModel(vertical_params))
    closed_loop = simulator.simulate(ZOHReplayControl(plan), plan.t_f)
    assert np.linalg.norm(closed_loop.final_position) < 2.0
    assert np.linalg.norm(closed_loop.final_velocity) < 0.25


def test_mass_adaptive_replay_lands_close(vertical_result, vertical_params):
    plan = vertical_result.solution
    simulator = Simulator(RocketModel(vertical_params))
    closed_loop = simulator.simulate(ZOHReplayControl(plan, mass_adaptive=True), plan.t_f)
    assert np.linalg.norm(closed_loop.final_position) < 15.0
    assert vertical_params.m_dry < closed_loop.final_mass < vertical_params.m_wet
