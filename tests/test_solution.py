import numpy as np
import pytest
from numpy.testing import assert_allclose

from lcvx import SolverStatus, TrajectoryOptimizationResult


@pytest.fixture
def solution(solution_factory):
    u = np.array([[0.0, 3.0], [0.0, 0.0], [4.0, 4.0]])
    return solution_factory([0.0, 1.0, 2.0], u, np.log([100.0, 90.0, 80.0]))


def test_derived_thrust(solution):
    assert_allclose(solution.m, [100.0, 90.0, 80.0])
    assert_allclose(solution.T, [[0.0, 270.0], [0.0, 0.0], [400.0, 360.0]])
    assert_allclose(solution.T_nrm, [400.0, 450.0])
    assert_allclose(solution.gamma, [0.0, np.arccos(0.8)], atol=1e-12)


def test_summary_properties(solution):
    assert solution.num_nodes == 3
    assert solution.t_f == 2.0
    assert solution.final_mass == pytest.approx(80.0)
    assert solution.fuel_used == pytest.approx(20.0)
    assert_allclose(solution.state(1), [0, 0, 0, 0, 0, 0, np.log(90.0)])


def test_infeasible_result():
    result = TrajectoryOptimizationResult.infeasible(12.0, SolverStatus.SOLVER_ERROR, "boom")
    assert not result.success
    assert result.cost == np.inf
    assert result.solution is None
    assert result.status is SolverStatus.SOLVER_ERROR


def test_optimal_status_without_solution_is_not_success():
    result = TrajectoryOptimizationResult(
        t_f=12.0, status=SolverStatus.OPTIMAL, message="", cost=1.0
    )
    assert not result.success
