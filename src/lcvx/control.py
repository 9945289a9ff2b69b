"""
Control laws for replaying an optimized trajectory in simulation.

The optimized trajectory is open-loop: the inputs are piecewise constant in
time.  :class:`ZOHReplayControl` looks the input up by time and can rescale
it by the simulated mass; it never reacts to position or velocity errors.
"""

from __future__ import annotations

import abc

import numpy as np

from .solution import TrajectorySolution


class ControlLaw(abc.ABC):
    """Maps ``(t, x)`` to the input ``[a; xi]`` of the 3-DoF model."""

    @abc.abstractmethod
    def __call__(self, t: float, state: np.ndarray) -> np.ndarray:
        ...


class ZOHReplayControl(ControlLaw):
    """
    Zero-order-hold replay of an optimized trajectory.

    Parameters
    ----------
    solution : TrajectorySolution
        Optimized trajectory; held by reference and never modified.
    mass_adaptive : bool
        When ``False`` (default) the stored acceleration is replayed
        unchanged, which reproduces the discrete plan up to integration
        error.  When ``True`` the stored thrust (stored acceleration times
        the optimizer's node mass) is divided by the current simulated
        mass.  The planned acceleration is constant over a hold interval
        while the mass decays, so this variant over-accelerates slightly and
        lands tens of metres off on long descents; it is opt-in.
    """

    def __init__(self, solution: TrajectorySolution, mass_adaptive: bool = False):
        assert solution.u.shape[1] == solution.num_nodes - 1
        self.solution = solution
        self.mass_adaptive = mass_adaptive

    def node_index(self, t: float) -> int:
        """Latest node at or before ``t``; the last input once past the horizon."""
        last = self.solution.u.shape[1] - 1
        i = int(np.searchsorted(self.solution.t, t, side="right")) - 1
        if i < 0 or i > last:
            return last
        return i

    def __call__(self, t: float, state: np.ndarray) -> np.ndarray:
        i = self.node_index(t)
        mass = np.exp(state[6])
        if self.mass_adaptive:
            thrust = self.solution.m[i] * self.solution.u[:, i]
        else:
            thrust = mass * self.solution.u[:, i]
        return np.concatenate([thrust / mass, [np.linalg.norm(thrust) / mass]])
