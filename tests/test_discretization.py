import numpy as np
import pytest
from numpy.testing import assert_allclose

from lcvx import RocketModel, uniform_time_grid, zoh_discretize


@pytest.mark.parametrize("dt", [0.1, 1.0, 2.5])
def test_non_rotating_matrices_are_closed_form(non_rotating_params, dt):
    params = non_rotating_params
    dyn = zoh_discretize(RocketModel(params), dt)

    I = np.eye(3)
    A = np.eye(7)
    A[0:3, 3:6] = dt * I
    B = np.zeros((7, 4))
    B[0:3, 0:3] = 0.5 * dt**2 * I
    B[3:6, 0:3] = dt * I
    B[6, 3] = -params.alpha * dt
    p = np.concatenate([0.5 * dt**2 * params.gravity, dt * params.gravity, [0.0]])

    assert_allclose(dyn.A, A, atol=1e-12)
    assert_allclose(dyn.B, B, atol=1e-12)
    assert_allclose(dyn.p, p, atol=1e-12)
    assert dyn.dt == dt


def test_zero_input_step_is_free_fall(non_rotating_params):
    dyn = zoh_discretize(RocketModel(non_rotating_params), 1.0)
    x1 = dyn.step(np.zeros(7), np.zeros(4))
    g = non_rotating_params.gravity
    assert_allclose(x1, np.concatenate([0.5 * g, g, [0.0]]), atol=1e-12)


def test_two_half_steps_equal_one_full_step(mars_params):
    model = RocketModel(mars_params)
    full = zoh_discretize(model, 2.0)
    half = zoh_discretize(model, 1.0)
    x0 = mars_params.initial_state
    u = np.array([1.0, -0.5, 6.0, 6.1])

    x_half = half.step(half.step(x0, u), u)
    assert_allclose(x_half, full.step(x0, u), rtol=1e-10, atol=1e-8)


def test_rotation_couples_horizontal_axes(mars_params):
    dyn = zoh_discretize(RocketModel(mars_params), 1.0)
    # Coriolis term couples v_x into v_y
    assert abs(dyn.A[4, 3]) > 0.0
    assert_allclose(dyn.A[6], np.eye(7)[6])


def test_discretize_rejects_non_positive_step(mars_params):
    with pytest.raises(ValueError):
        zoh_discretize(RocketModel(mars_params), 0.0)


@pytest.mark.parametrize(
    "t_f, dt, num_nodes",
    [
        (10.0, 1.0, 11),
        (10.5, 1.0, 12),
        (0.5, 1.0, 2),
        (3.0, 0.5, 7),
    ],
)
def test_uniform_time_grid(t_f, dt, num_nodes):
    grid = uniform_time_grid(t_f, dt)
    assert grid.size == num_nodes
    assert grid[0] == 0.0
    assert grid[-1] == pytest.approx(t_f)
    steps = np.diff(grid)
    assert_allclose(steps, steps[0])
    assert steps[0] <= dt + 1e-12


@pytest.mark.parametrize("t_f", [0.0, -1.0])
def test_uniform_time_grid_rejects_non_positive_duration(t_f):
    with pytest.raises(ValueError):
        uniform_time_grid(t_f, 1.0)
