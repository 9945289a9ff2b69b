"""
Fixed-final-time fuel-optimal landing via lossless convexification.

For a given flight duration the optimizer discretizes the dynamics, builds
the convex relaxation (see :mod:`lcvx.socp_builder`), hands it to a conic
backend and post-processes the result into a
:class:`~lcvx.solution.TrajectorySolution`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .conic import SolverStatus
from .conic_solver import ConicSolver, make_conic_solver
from .discretization import uniform_time_grid, zoh_discretize
from .rocket_model import RocketModel
from .socp_builder import LandingSOCP, build_landing_socp
from .solution import TrajectoryOptimizationResult, TrajectorySolution

logger = logging.getLogger(__name__)


@dataclass
class OptimizerConfig:
    backend: str = "cvxpy"
    solver: Optional[str] = None
    verbose: bool = False


class LCvxTrajectoryOptimizer:
    def __init__(
        self,
        model: RocketModel,
        config: Optional[OptimizerConfig] = None,
        conic_solver: Optional[ConicSolver] = None,
    ):
        self.model = model
        self.params = model.params
        self.config = config if config is not None else OptimizerConfig()
        self.conic_solver = (
            conic_solver
            if conic_solver is not None
            else make_conic_solver(self.config.backend, self.config.solver, self.config.verbose)
        )

    def solve(self, t_f: float) -> TrajectoryOptimizationResult:
        """
        Solves the landing problem for flight duration ``t_f``.

        Never raises for an infeasible or failed solve; the returned result
        carries the solver status and ``cost = inf`` instead.
        """
        if not np.isfinite(t_f) or t_f <= 0.0:
            return TrajectoryOptimizationResult.infeasible(
                t_f, SolverStatus.INFEASIBLE, "flight duration must be positive"
            )
        try:
            socp = self.build(t_f)
        except ValueError as exc:
            # the maximum-thrust reference mass runs out before t_f
            logger.debug("t_f=%.4f s: %s", t_f, exc)
            return TrajectoryOptimizationResult.infeasible(t_f, SolverStatus.INFEASIBLE, str(exc))

        conic = self.conic_solver.solve(socp.problem)
        if not conic.success:
            logger.debug(
                "t_f=%.4f s: %s (%s)", t_f, conic.status.value, conic.message
            )
            return TrajectoryOptimizationResult.infeasible(t_f, conic.status, conic.message)

        solution = self._unpack(socp, conic.y, conic.objective)
        logger.debug("t_f=%.4f s: optimal, cost=%.6f", t_f, solution.cost)
        return TrajectoryOptimizationResult(
            t_f=t_f,
            status=conic.status,
            message=conic.message,
            cost=solution.cost,
            solution=solution,
        )

    def build(self, t_f: float) -> LandingSOCP:
        """Raises ``ValueError`` when maximum thrust would burn the whole vehicle mass before ``t_f``."""
        time_grid = uniform_time_grid(t_f, self.params.dt)
        dynamics = zoh_discretize(self.model, time_grid[1] - time_grid[0])
        return build_landing_socp(self.params, dynamics, time_grid)

    @staticmethod
    def _unpack(socp: LandingSOCP, y: np.ndarray, cost: float) -> TrajectorySolution:
        x = socp.scaling.to_physical(y)
        r, v, z, u, xi = socp.layout.split(x)
        return TrajectorySolution(t=socp.time_grid, r=r, v=v, z=z, u=u, xi=xi, cost=cost)
