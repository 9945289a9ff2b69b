"""
Closed-loop replay of a control law through the continuous dynamics.

Integration is fixed-step classical Runge-Kutta on a grid much finer than the
optimization step.  No divergence detection is performed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from .control import ControlLaw
from .rocket_model import RocketModel
from .solution import TrajectorySolution

_GRID_TOL = np.sqrt(np.finfo(float).eps)


@dataclass
class SimulationConfig:
    dt: float = 1e-2


def rk4_grid(dt: float, t_final: float) -> np.ndarray:
    """``0, dt, 2 dt, ...`` up to ``t_final``, closed with ``t_final`` when it is not on the grid."""
    if dt <= 0.0:
        raise ValueError("dt must be > 0")
    steps = int(np.floor(t_final / dt))
    t = dt * np.arange(steps + 1)
    if t_final - t[-1] >= _GRID_TOL:
        t = np.append(t, t_final)
    return t


def rk4(
    f: Callable[[float, np.ndarray], np.ndarray],
    x0: np.ndarray,
    dt: float,
    t_final: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Integrates ``x' = f(t, x)`` from ``x(0) = x0``.

    Returns
    -------
    t : np.ndarray
        Time grid (N,).
    X : np.ndarray
        States (n, N), ``X[:, 0] = x0``.
    """
    t = rk4_grid(dt, t_final)
    X = np.empty((np.size(x0), t.size))
    X[:, 0] = x0
    for k in range(t.size - 1):
        y = X[:, k]
        h = t[k + 1] - t[k]
        t_k = t[k]
        k1 = f(t_k, y)
        k2 = f(t_k + 0.5 * h, y + 0.5 * h * k1)
        k3 = f(t_k + 0.5 * h, y + 0.5 * h * k2)
        k4 = f(t_k + h, y + h * k3)
        X[:, k + 1] = y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
    return t, X


class Simulator:
    def __init__(self, model: RocketModel, config: Optional[SimulationConfig] = None):
        self.model = model
        self.config = config if config is not None else SimulationConfig()

    def simulate(
        self,
        control: ControlLaw,
        t_final: float,
        x0: Optional[np.ndarray] = None,
    ) -> TrajectorySolution:
        """
        Runs ``control`` in closed loop for ``t_final`` seconds.

        The initial state defaults to ``[r0; v0; log(m_wet)]``.  The input is
        sampled at every grid point; the returned cost is always 0.
        """
        if x0 is None:
            x0 = self.model.params.initial_state
        x0 = np.asarray(x0, dtype=float)

        def dynamics(t: float, x: np.ndarray) -> np.ndarray:
            return self.model.state_derivative(x, control(t, x))

        t, X = rk4(dynamics, x0, self.config.dt, t_final)
        U = np.column_stack([control(t[k], X[:, k]) for k in range(t.size)])
        return TrajectorySolution(
            t=t,
            r=X[0:3],
            v=X[3:6],
            z=X[6],
            u=U[0:3],
            xi=U[3],
            cost=0.0,
        )
