"""
Zero-order-hold discretization utilities.

The rotating-frame terms and gravity are not negligible over a one second
step, so the discrete matrices come from the exact matrix exponential of the
augmented system rather than from an Euler or Runge-Kutta approximation.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.linalg import expm

from .rocket_model import RocketModel


@dataclass(frozen=True, eq=False)
class DiscreteDynamics:
    """
    Container for the recursion ``x[k+1] = A x[k] + B u[k] + p``.

    Attributes
    ----------
    A : np.ndarray
        State transition matrix (n, n).
    B : np.ndarray
        Input matrix (n, m).
    p : np.ndarray
        Constant term (n,) collecting gravity over one step.
    dt : float
        Step the matrices were computed for.
    """

    A: np.ndarray
    B: np.ndarray
    p: np.ndarray
    dt: float

    def step(self, state: np.ndarray, control: np.ndarray) -> np.ndarray:
        return self.A @ state + self.B @ control + self.p


def zoh_discretize(model: RocketModel, dt: float) -> DiscreteDynamics:
    """
    Exact ZOH discretization of ``model`` at step ``dt``.

    Uses ``expm([[A_c, B_c, p_c], [0, 0, 0]] * dt)``; the top block row holds
    ``A``, ``B`` and ``p``.
    """
    if dt <= 0.0:
        raise ValueError("dt must be > 0")

    n, m = model.state_dim, model.control_dim
    augmented = np.zeros((n + m + 1, n + m + 1))
    augmented[:n, :n] = model.A_c
    augmented[:n, n : n + m] = model.B_c
    augmented[:n, n + m] = model.p_c

    M = expm(augmented * dt)
    return DiscreteDynamics(
        A=M[:n, :n],
        B=M[:n, n : n + m],
        p=M[:n, n + m],
        dt=dt,
    )


def uniform_time_grid(t_f: float, nominal_dt: float) -> np.ndarray:
    """
    Uniform grid on ``[0, t_f]`` whose step is the largest value not above
    ``nominal_dt`` that divides ``t_f`` into whole intervals.
    """
    if t_f <= 0.0:
        raise ValueError("t_f must be > 0")
    num_nodes = int(np.floor(t_f / nominal_dt)) + 1 + int(t_f % nominal_dt != 0)
    return np.linspace(0.0, t_f, num_nodes)
