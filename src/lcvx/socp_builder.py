"""
Assembles the convexified fixed-final-time landing problem.

Constraints are written in physical units on the decision vector ``x``
described by :class:`~lcvx.layout.DecisionLayout` and mapped to the
dimensionless vector ``y`` through ``x = S y + s`` just before the problem is
handed to a conic backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import scipy.sparse as sp

from .conic import ConicProblem, SecondOrderConeBlock
from .discretization import DiscreteDynamics
from .layout import DecisionLayout, VariableScaling
from .rocket_model import RocketParams

E_Z = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True, eq=False)
class LandingSOCP:
    problem: ConicProblem
    layout: DecisionLayout
    scaling: VariableScaling
    time_grid: np.ndarray
    dynamics: DiscreteDynamics


class _SparseRows:
    """
    Sparse rows in triplet form with one constant per row: the right-hand
    side for (in)equalities, the additive term for cone expressions.
    """

    def __init__(self, num_cols: int):
        self.num_cols = num_cols
        self._rows: List[int] = []
        self._cols: List[int] = []
        self._vals: List[float] = []
        self._const: List[float] = []

    def __len__(self) -> int:
        return len(self._const)

    def add(self, cols, vals, const: float) -> None:
        cols = np.atleast_1d(np.asarray(cols, dtype=int))
        vals = np.broadcast_to(np.asarray(vals, dtype=float), cols.shape)
        row = len(self._const)
        self._rows.extend([row] * cols.size)
        self._cols.extend(cols.tolist())
        self._vals.extend(vals.tolist())
        self._const.append(float(const))

    def add_block(self, cols: np.ndarray, matrix: np.ndarray, const: Sequence[float]) -> None:
        for i in range(matrix.shape[0]):
            self.add(cols, matrix[i], const[i])

    def add_constant(self, const: float) -> None:
        self._const.append(float(const))

    def matrix(self) -> sp.csr_matrix:
        return sp.csr_matrix(
            (self._vals, (self._rows, self._cols)),
            shape=(len(self._const), self.num_cols),
        )

    def constants(self) -> np.ndarray:
        return np.asarray(self._const, dtype=float)


def max_thrust_log_mass(params: RocketParams, t: np.ndarray) -> np.ndarray:
    """
    Log-mass ``z0(t)`` after burning at maximum thrust since ``t = 0``; the
    expansion point of the thrust-bound approximation.
    """
    mass = params.m_wet - params.alpha * params.rho_max * np.asarray(t)
    if np.any(mass <= 0.0):
        raise ValueError("maximum-thrust reference mass is exhausted before the final time")
    return np.log(mass)


def min_thrust_log_mass(params: RocketParams, t: np.ndarray) -> np.ndarray:
    return np.log(params.m_wet - params.alpha * params.rho_min * np.asarray(t))


def glide_slope_faces(glide_slope: float) -> np.ndarray:
    """Four-face polyhedral inner approximation ``H r <= 0`` of the glide-slope cone."""
    c, s = np.cos(glide_slope), np.sin(glide_slope)
    return np.array(
        [
            [c, 0.0, -s],
            [-c, 0.0, -s],
            [0.0, c, -s],
            [0.0, -c, -s],
        ]
    )


def build_landing_socp(
    params: RocketParams, dynamics: DiscreteDynamics, time_grid: np.ndarray
) -> LandingSOCP:
    z0 = max_thrust_log_mass(params, time_grid)
    layout = DecisionLayout(num_nodes=time_grid.size)
    scaling = VariableScaling.for_problem(params, layout)
    n = layout.decision_dim
    N = layout.num_nodes
    dt = dynamics.dt

    eq = _SparseRows(n)
    ineq = _SparseRows(n)

    _dynamics_constraints(eq, layout, dynamics)
    _boundary_conditions(eq, ineq, layout, params)

    z_upper = min_thrust_log_mass(params, time_grid)
    mu_min = params.rho_min * np.exp(-z0)
    mu_max = params.rho_max * np.exp(-z0)

    lower_thrust = (_SparseRows(n), _SparseRows(n))
    thrust_cone = (_SparseRows(n), _SparseRows(n))
    speed_cone = (_SparseRows(n), _SparseRows(n))
    H_gs = glide_slope_faces(params.glide_slope)
    cos_pointing = np.cos(params.pointing)

    for k in range(N):
        ineq.add(layout.z(k), -1.0, -z0[k])
        ineq.add(layout.z(k), 1.0, z_upper[k])
        ineq.add_block(layout.r(k), H_gs, np.zeros(4))

        vector, bound = speed_cone
        vector.add_block(layout.v(k), np.eye(3), np.zeros(3))
        bound.add_constant(params.v_max)

        if k == N - 1:
            continue

        z_k, xi_k = layout.z(k), layout.xi(k)

        # xi <= mu_max (1 - dz)
        ineq.add([xi_k, z_k], [1.0, mu_max[k]], mu_max[k] * (1.0 + z0[k]))

        # xi >= mu_min (1 - dz + dz^2/2) as ||(2 sqrt(mu) dz, 2w - 1)|| <= 2w + 1
        w_const = -mu_min[k] * (1.0 + z0[k])
        root_mu = np.sqrt(mu_min[k])
        vector, bound = lower_thrust
        vector.add(z_k, 2.0 * root_mu, -2.0 * root_mu * z0[k])
        vector.add([xi_k, z_k], [2.0, 2.0 * mu_min[k]], 2.0 * w_const - 1.0)
        bound.add([xi_k, z_k], [2.0, 2.0 * mu_min[k]], 2.0 * w_const + 1.0)

        vector, bound = thrust_cone
        vector.add_block(layout.u(k), np.eye(3), np.zeros(3))
        bound.add(xi_k, 1.0, 0.0)

        # u . e_z >= xi cos(pointing)
        ineq.add(np.append(layout.u(k), xi_k), np.append(-E_Z, cos_pointing), 0.0)

    c = np.zeros(n)
    c[layout.xi_start : layout.decision_dim] = dt

    cones = [
        _scaled_cone(thrust_cone, 3, scaling, "thrust_direction"),
        _scaled_cone(lower_thrust, 2, scaling, "thrust_lower_bound"),
        _scaled_cone(speed_cone, 3, scaling, "speed"),
    ]
    A_eq, b_eq = _scaled_rows(eq, scaling)
    G, h = _scaled_rows(ineq, scaling)
    problem = ConicProblem(
        c=scaling.scale * c,
        A_eq=A_eq,
        b_eq=b_eq,
        G=G,
        h=h,
        cones=cones,
        objective_offset=float(c @ scaling.offset),
    )
    return LandingSOCP(
        problem=problem,
        layout=layout,
        scaling=scaling,
        time_grid=time_grid,
        dynamics=dynamics,
    )


def _dynamics_constraints(
    eq: _SparseRows, layout: DecisionLayout, dynamics: DiscreteDynamics
) -> None:
    n_x = dynamics.A.shape[0]
    block = np.hstack([np.eye(n_x), -dynamics.A, -dynamics.B])
    for k in range(layout.num_steps):
        cols = np.concatenate([layout.state(k + 1), layout.state(k), layout.control(k)])
        eq.add_block(cols, block, dynamics.p)


def _boundary_conditions(
    eq: _SparseRows, ineq: _SparseRows, layout: DecisionLayout, params: RocketParams
) -> None:
    last = layout.num_nodes - 1
    eq.add_block(layout.r(0), np.eye(3), params.r0)
    eq.add_block(layout.v(0), np.eye(3), params.v0)
    eq.add(layout.z(0), 1.0, np.log(params.m_wet))
    eq.add_block(layout.r(last), np.eye(3), np.zeros(3))
    eq.add_block(layout.v(last), np.eye(3), np.zeros(3))
    ineq.add(layout.z(last), -1.0, -np.log(params.m_dry))


def _scaled_rows(rows: _SparseRows, scaling: VariableScaling) -> Tuple[sp.csr_matrix, np.ndarray]:
    """``M x (<=|==) b`` becomes ``(M S) y (<=|==) b - M s``."""
    M = rows.matrix()
    return (M @ sp.diags(scaling.scale)).tocsr(), rows.constants() - M @ scaling.offset


def _scaled_cone(
    parts: Tuple[_SparseRows, _SparseRows], dim: int, scaling: VariableScaling, name: str
) -> SecondOrderConeBlock:
    vector, bound = parts
    F, f = vector.matrix(), bound.matrix()
    S = sp.diags(scaling.scale)
    return SecondOrderConeBlock(
        F=(F @ S).tocsr(),
        g=vector.constants() + F @ scaling.offset,
        f=(f @ S).tocsr(),
        e=bound.constants() + f @ scaling.offset,
        dim=dim,
        name=name,
    )
