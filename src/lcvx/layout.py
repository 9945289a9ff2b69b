"""
Index bookkeeping and variable scaling for the landing SOCP.

The decision vector is laid out block by block,

    [ r (3N) | v (3N) | z (N) | u (3(N-1)) | xi (N-1) ]

with node-major ordering inside each block, so ``r[:, k]`` occupies three
consecutive entries.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .rocket_model import RocketParams


@dataclass(frozen=True)
class DecisionLayout:
    num_nodes: int

    @property
    def num_steps(self) -> int:
        return self.num_nodes - 1

    @property
    def r_start(self) -> int:
        return 0

    @property
    def v_start(self) -> int:
        return 3 * self.num_nodes

    @property
    def z_start(self) -> int:
        return 6 * self.num_nodes

    @property
    def u_start(self) -> int:
        return 7 * self.num_nodes

    @property
    def xi_start(self) -> int:
        return self.u_start + 3 * self.num_steps

    @property
    def decision_dim(self) -> int:
        return self.xi_start + self.num_steps

    def r(self, k: int) -> np.ndarray:
        return self.r_start + 3 * k + np.arange(3)

    def v(self, k: int) -> np.ndarray:
        return self.v_start + 3 * k + np.arange(3)

    def z(self, k: int) -> int:
        return self.z_start + k

    def u(self, k: int) -> np.ndarray:
        return self.u_start + 3 * k + np.arange(3)

    def xi(self, k: int) -> int:
        return self.xi_start + k

    def state(self, k: int) -> np.ndarray:
        return np.concatenate([self.r(k), self.v(k), [self.z(k)]])

    def control(self, k: int) -> np.ndarray:
        return np.concatenate([self.u(k), [self.xi(k)]])

    def split(self, x: np.ndarray):
        """Splits a physical decision vector into ``(r, v, z, u, xi)``."""
        N = self.num_nodes
        r = x[self.r_start : self.v_start].reshape(N, 3).T
        v = x[self.v_start : self.z_start].reshape(N, 3).T
        z = x[self.z_start : self.u_start].copy()
        u = x[self.u_start : self.xi_start].reshape(N - 1, 3).T
        xi = x[self.xi_start : self.decision_dim].copy()
        return r, v, z, u, xi


@dataclass(frozen=True, eq=False)
class VariableScaling:
    """
    Affine map ``x = scale * y + offset`` between physical and dimensionless
    decision vectors.  Conic solvers converge reliably only when all
    dimensionless variables are of order one.
    """

    scale: np.ndarray
    offset: np.ndarray

    @classmethod
    def for_problem(cls, params: RocketParams, layout: DecisionLayout) -> "VariableScaling":
        S_r = np.maximum(1.0, np.abs(params.r0))
        S_v = np.maximum(1.0, np.abs(params.v0))

        s_z = 0.5 * (np.log(params.m_dry) + np.log(params.m_wet))
        S_z = np.log(params.m_wet) - s_z

        accel_max = params.rho_max / params.m_dry
        s_xi = 0.5 * (params.rho_min / params.m_wet * np.cos(params.pointing) + accel_max)
        S_xi = accel_max - s_xi
        s_u = np.array([0.0, 0.0, s_xi])
        S_u = np.array(
            [
                accel_max * np.sin(params.pointing),
                accel_max * np.sin(params.pointing),
                S_xi,
            ]
        )

        N = layout.num_nodes
        scale = np.concatenate(
            [
                np.tile(S_r, N),
                np.tile(S_v, N),
                np.full(N, S_z),
                np.tile(S_u, N - 1),
                np.full(N - 1, S_xi),
            ]
        )
        offset = np.concatenate(
            [
                np.zeros(3 * N),
                np.zeros(3 * N),
                np.full(N, s_z),
                np.tile(s_u, N - 1),
                np.full(N - 1, s_xi),
            ]
        )
        assert scale.size == layout.decision_dim
        return cls(scale=scale, offset=offset)

    def to_physical(self, y: np.ndarray) -> np.ndarray:
        return self.scale * y + self.offset

    def to_scaled(self, x: np.ndarray) -> np.ndarray:
        return (x - self.offset) / self.scale
