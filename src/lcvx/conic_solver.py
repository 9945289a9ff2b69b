"""
Wrappers that hand a :class:`~lcvx.conic.ConicProblem` to an actual solver.

Every ``solve`` call builds its own solver instance, so calls share no state
and can run from independent threads or processes.
"""

from __future__ import annotations

import abc
import logging
from typing import Optional

import casadi as ca
import cvxpy as cp
import numpy as np

from .conic import ConicProblem, ConicSolution, SolverStatus

logger = logging.getLogger(__name__)


class ConicSolver(abc.ABC):
    name = "abstract"

    @abc.abstractmethod
    def solve(self, problem: ConicProblem) -> ConicSolution:
        """Solves ``problem`` once and reports the termination status."""


class CvxpyConicSolver(ConicSolver):
    """
    Interior-point SOCP solve through CVXPY.

    Parameters
    ----------
    solver : str, optional
        CVXPY solver name (``"CLARABEL"``, ``"ECOS"``, ...).  ``None`` lets
        CVXPY pick an installed conic solver.
    verbose : bool
        Forwarded to the solver.
    """

    name = "cvxpy"

    _STATUS_MAP = {
        cp.OPTIMAL: SolverStatus.OPTIMAL,
        cp.OPTIMAL_INACCURATE: SolverStatus.SUBOPTIMAL,
        cp.INFEASIBLE: SolverStatus.INFEASIBLE,
        cp.INFEASIBLE_INACCURATE: SolverStatus.INFEASIBLE,
        cp.UNBOUNDED: SolverStatus.INFEASIBLE,
        cp.UNBOUNDED_INACCURATE: SolverStatus.INFEASIBLE,
        cp.settings.INFEASIBLE_OR_UNBOUNDED: SolverStatus.INFEASIBLE,
    }

    def __init__(self, solver: Optional[str] = None, verbose: bool = False):
        self.solver = solver
        self.verbose = verbose

    def solve(self, problem: ConicProblem) -> ConicSolution:
        y = cp.Variable(problem.num_variables)
        constraints = []
        if problem.A_eq.shape[0] > 0:
            constraints.append(problem.A_eq @ y == problem.b_eq)
        if problem.G.shape[0] > 0:
            constraints.append(problem.G @ y <= problem.h)
        for block in problem.cones:
            bound = block.f @ y + block.e
            vectors = cp.reshape(block.F @ y + block.g, (block.dim, block.count), order="F")
            constraints.append(cp.SOC(bound, vectors, axis=0))

        prob = cp.Problem(cp.Minimize(problem.c @ y), constraints)
        try:
            prob.solve(solver=self.solver, verbose=self.verbose)
        except cp.error.SolverError as exc:
            logger.debug("cvxpy solver error: %s", exc)
            return ConicSolution.failed(SolverStatus.SOLVER_ERROR, str(exc))

        status = self._STATUS_MAP.get(prob.status, SolverStatus.SOLVER_ERROR)
        if y.value is None:
            return ConicSolution.failed(status, f"cvxpy status {prob.status}")
        y_opt = np.asarray(y.value, dtype=float)
        return ConicSolution(
            status=status,
            y=y_opt,
            objective=problem.objective(y_opt),
            message=f"cvxpy status {prob.status}",
        )


class CasadiConicSolver(ConicSolver):
    """
    Same program posed as a smooth NLP and solved by IPOPT via CasADi.

    Cones become ``||a||^2 - t^2 <= 0`` together with ``t >= 0``.  Useful as
    a cross-check on small problems; the interior-point SOCP backend is the
    faster and more robust choice for the landing problem.
    """

    name = "casadi"

    _STATUS_MAP = {
        "Solve_Succeeded": SolverStatus.OPTIMAL,
        "Solved_To_Acceptable_Level": SolverStatus.SUBOPTIMAL,
        "Infeasible_Problem_Detected": SolverStatus.INFEASIBLE,
    }

    def __init__(self, max_iter: int = 500, verbose: bool = False):
        self.max_iter = max_iter
        self.verbose = verbose

    def solve(self, problem: ConicProblem) -> ConicSolution:
        n = problem.num_variables
        y = ca.MX.sym("y", n)
        cost = ca.dot(ca.DM(problem.c), y)

        g_list = []
        lbg_list = []
        ubg_list = []

        if problem.A_eq.shape[0] > 0:
            g_list.append(ca.mtimes(ca.DM(problem.A_eq.toarray()), y) - problem.b_eq)
            lbg_list.append(np.zeros(problem.A_eq.shape[0]))
            ubg_list.append(np.zeros(problem.A_eq.shape[0]))

        if problem.G.shape[0] > 0:
            g_list.append(ca.mtimes(ca.DM(problem.G.toarray()), y) - problem.h)
            lbg_list.append(-np.inf * np.ones(problem.G.shape[0]))
            ubg_list.append(np.zeros(problem.G.shape[0]))

        for block in problem.cones:
            vectors = ca.mtimes(ca.DM(block.F.toarray()), y) + block.g
            vectors = ca.reshape(vectors, block.dim, block.count)
            bound = ca.mtimes(ca.DM(block.f.toarray()), y) + block.e
            g_list.append(ca.sum1(vectors**2).T - bound**2)
            lbg_list.append(-np.inf * np.ones(block.count))
            ubg_list.append(np.zeros(block.count))
            g_list.append(bound)
            lbg_list.append(np.zeros(block.count))
            ubg_list.append(np.inf * np.ones(block.count))

        nlp = {"x": y, "f": cost, "g": ca.vertcat(*g_list)}
        opts = {
            "ipopt.print_level": 5 if self.verbose else 0,
            "ipopt.max_iter": self.max_iter,
            "ipopt.sb": "yes",
            "print_time": 0,
            "error_on_fail": False,
        }
        try:
            solver = ca.nlpsol("conic_nlp", "ipopt", nlp, opts)
            sol = solver(
                x0=np.zeros(n),
                lbg=np.concatenate(lbg_list),
                ubg=np.concatenate(ubg_list),
            )
        except RuntimeError as exc:
            logger.debug("casadi solver error: %s", exc)
            return ConicSolution.failed(SolverStatus.SOLVER_ERROR, str(exc))

        return_status = solver.stats().get("return_status", "unknown")
        status = self._STATUS_MAP.get(return_status, SolverStatus.SOLVER_ERROR)
        y_opt = np.asarray(sol["x"].full(), dtype=float).reshape(-1)
        return ConicSolution(
            status=status,
            y=y_opt,
            objective=problem.objective(y_opt),
            message=f"ipopt {return_status}",
        )


def make_conic_solver(backend: str = "cvxpy", solver: Optional[str] = None, verbose: bool = False) -> ConicSolver:
    if backend == "cvxpy":
        return CvxpyConicSolver(solver=solver, verbose=verbose)
    if backend == "casadi":
        return CasadiConicSolver(verbose=verbose)
    raise ValueError(f"unknown conic backend {backend!r}")
