"""
Solver-independent description of a second-order-cone program.

    minimize    c^T y + c0
    subject to  A_eq y == b_eq
                G y <= h
                ||F_j y + g_j||_2 <= f_j^T y + e_j   for every cone j

Backends in :mod:`lcvx.conic_solver` consume :class:`ConicProblem` and hand
back a :class:`ConicSolution`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import scipy.sparse as sp


class SolverStatus(enum.Enum):
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    SUBOPTIMAL = "suboptimal"
    SOLVER_ERROR = "solver_error"


@dataclass(frozen=True, eq=False)
class SecondOrderConeBlock:
    """
    ``count`` cones of dimension ``dim`` stacked cone by cone.

    Rows ``j*dim : (j+1)*dim`` of ``F``/``g`` form the vector part of cone
    ``j``; row ``j`` of ``f``/``e`` its scalar bound.
    """

    F: sp.csr_matrix
    g: np.ndarray
    f: sp.csr_matrix
    e: np.ndarray
    dim: int
    name: str = ""

    def __post_init__(self) -> None:
        assert self.F.shape[0] == self.dim * self.count
        assert self.g.shape == (self.F.shape[0],)
        assert self.e.shape == (self.count,)

    @property
    def count(self) -> int:
        return self.f.shape[0]

    def residual(self, y: np.ndarray) -> np.ndarray:
        """``||F_j y + g_j|| - (f_j y + e_j)`` per cone; non-positive when satisfied."""
        vectors = (self.F @ y + self.g).reshape(self.count, self.dim)
        return np.linalg.norm(vectors, axis=1) - (self.f @ y + self.e)


@dataclass(frozen=True, eq=False)
class ConicProblem:
    c: np.ndarray
    A_eq: sp.csr_matrix
    b_eq: np.ndarray
    G: sp.csr_matrix
    h: np.ndarray
    cones: List[SecondOrderConeBlock] = field(default_factory=list)
    objective_offset: float = 0.0

    @property
    def num_variables(self) -> int:
        return self.c.size

    def objective(self, y: np.ndarray) -> float:
        return float(self.c @ y + self.objective_offset)


@dataclass(frozen=True, eq=False)
class ConicSolution:
    status: SolverStatus
    y: Optional[np.ndarray]
    objective: float
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is SolverStatus.OPTIMAL

    @classmethod
    def failed(cls, status: SolverStatus, message: str) -> "ConicSolution":
        return cls(status=status, y=None, objective=np.inf, message=message)
