"""
Trajectory containers shared by the optimizer, the simulator and any
reporting code downstream of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .conic import SolverStatus

E_Z = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True, eq=False)
class TrajectorySolution:
    """
    Discrete trajectory in physical units.

    Attributes
    ----------
    t : np.ndarray
        Time grid (N,) [s].
    r, v : np.ndarray
        Position [m] and velocity [m/s], shape (3, N).
    z : np.ndarray
        Log-mass (N,) [log kg].
    u : np.ndarray
        Thrust acceleration (3, K) [m/s^2]; ``K = N - 1`` for an optimized
        trajectory and ``K = N`` for a simulated one.
    xi : np.ndarray
        Thrust acceleration magnitude bound (K,) [m/s^2].
    cost : float
        Optimal cost (optimized trajectory) or 0 (simulated trajectory).

    The thrust ``T`` [N], its norm, the mass history and the pointing angle
    ``gamma`` [rad] are derived on construction.
    """

    t: np.ndarray
    r: np.ndarray
    v: np.ndarray
    z: np.ndarray
    u: np.ndarray
    xi: np.ndarray
    cost: float
    m: np.ndarray = field(init=False, repr=False)
    T: np.ndarray = field(init=False, repr=False)
    T_nrm: np.ndarray = field(init=False, repr=False)
    gamma: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        m = np.exp(self.z)
        K = self.u.shape[1]
        T = m[:K] * self.u
        T_nrm = np.linalg.norm(T, axis=0)
        with np.errstate(invalid="ignore", divide="ignore"):
            cos_gamma = np.clip((E_Z @ T) / T_nrm, -1.0, 1.0)
        object.__setattr__(self, "m", m)
        object.__setattr__(self, "T", T)
        object.__setattr__(self, "T_nrm", T_nrm)
        object.__setattr__(self, "gamma", np.arccos(cos_gamma))

    @property
    def num_nodes(self) -> int:
        return self.t.size

    @property
    def t_f(self) -> float:
        return float(self.t[-1])

    @property
    def final_position(self) -> np.ndarray:
        return self.r[:, -1]

    @property
    def final_velocity(self) -> np.ndarray:
        return self.v[:, -1]

    @property
    def final_mass(self) -> float:
        return float(self.m[-1])

    @property
    def fuel_used(self) -> float:
        return float(self.m[0] - self.m[-1])

    def state(self, k: int) -> np.ndarray:
        return np.concatenate([self.r[:, k], self.v[:, k], [self.z[k]]])


@dataclass(frozen=True, eq=False)
class TrajectoryOptimizationResult:
    """
    Outcome of one fixed-duration solve.

    ``solution`` is populated only when the conic solver reports an optimal
    termination; every other status carries ``cost = inf`` so a duration
    search can compare results without special cases.
    """

    t_f: float
    status: SolverStatus
    message: str
    cost: float
    solution: Optional[TrajectorySolution] = None

    @property
    def success(self) -> bool:
        return self.status is SolverStatus.OPTIMAL and self.solution is not None

    @classmethod
    def infeasible(
        cls, t_f: float, status: SolverStatus, message: str
    ) -> "TrajectoryOptimizationResult":
        return cls(t_f=t_f, status=status, message=message, cost=np.inf, solution=None)
