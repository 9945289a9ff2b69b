"""
Physical parameters and continuous-time dynamics of the 3-DoF lander.

The state is ``x = [r; v; z]`` with position ``r``, velocity ``v`` and
log-mass ``z = log(m)``.  The input is ``u = [a; xi]`` where ``a`` is the
thrust acceleration (thrust divided by mass) and ``xi`` bounds its norm.
Written in a frame rotating with the planet the dynamics are linear-affine:

    r' = v
    v' = -w x (w x r) - 2 w x v + g + a
    z' = -alpha * xi
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np


STANDARD_GRAVITY = 9.807  # [m/s^2]

STATE_DIM = 7
CONTROL_DIM = 4


def _skew(vector: np.ndarray) -> np.ndarray:
    return np.array(
        [
            [0.0, -vector[2], vector[1]],
            [vector[2], 0.0, -vector[0]],
            [-vector[1], vector[0], 0.0],
        ]
    )


def _frozen_vector(values, name: str) -> np.ndarray:
    vector = np.array(values, dtype=float).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"{name} must be a 3-vector, got shape {vector.shape}")
    vector.setflags(write=False)
    return vector


@dataclass(frozen=True, eq=False)
class RocketParams:
    """
    Vehicle and environment description.

    Attributes
    ----------
    gravity : np.ndarray
        Gravity acceleration vector [m/s^2], constant.
    omega : np.ndarray
        Planet angular velocity [rad/s] expressed in the landing frame.
    m_dry, m_wet : float
        Dry and wet (dry + propellant) mass [kg].
    isp : float
        Specific impulse [s].
    cant : float
        Engine cant angle off the vertical axis [rad].
    rho_min, rho_max : float
        Minimum and maximum total net thrust [N].
    glide_slope : float
        Maximum approach angle measured from the vertical [rad].
    pointing : float
        Maximum thrust pointing angle from the vertical [rad].
    v_max : float
        Speed bound [m/s].
    r0, v0 : np.ndarray
        Initial position [m] and velocity [m/s].
    dt : float
        Nominal discretization step [s].
    """

    gravity: np.ndarray
    omega: np.ndarray
    m_dry: float
    m_wet: float
    isp: float
    cant: float
    rho_min: float
    rho_max: float
    glide_slope: float
    pointing: float
    v_max: float
    r0: np.ndarray
    v0: np.ndarray
    dt: float = 1.0

    def __post_init__(self) -> None:
        for name in ("gravity", "omega", "r0", "v0"):
            object.__setattr__(self, name, _frozen_vector(getattr(self, name), name))

        if not 0.0 < self.m_dry < self.m_wet:
            raise ValueError("require 0 < m_dry < m_wet")
        if not 0.0 <= self.rho_min <= self.rho_max:
            raise ValueError("require 0 <= rho_min <= rho_max")
        if self.rho_max <= 0.0:
            raise ValueError("rho_max must be > 0")
        if self.isp <= 0.0:
            raise ValueError("isp must be > 0")
        if self.dt <= 0.0:
            raise ValueError("dt must be > 0")
        if self.v_max <= 0.0:
            raise ValueError("v_max must be > 0")
        for name in ("cant", "glide_slope", "pointing"):
            angle = getattr(self, name)
            if not 0.0 <= angle < 0.5 * np.pi:
                raise ValueError(f"{name} must lie in [0, pi/2), got {angle}")

    @property
    def alpha(self) -> float:
        """Mass depletion per unit thrust, 1/(Isp g0 cos(cant)) [s/m]."""
        return 1.0 / (self.isp * STANDARD_GRAVITY * np.cos(self.cant))

    @property
    def initial_state(self) -> np.ndarray:
        return np.concatenate([self.r0, self.v0, [np.log(self.m_wet)]])


def mars_lander_params(
    latitude: float = np.deg2rad(30.0),
    r0: Tuple[float, float, float] = (2000.0, 0.0, 1500.0),
    v0: Tuple[float, float, float] = (80.0, 30.0, -75.0),
    dt: float = 1.0,
) -> RocketParams:
    """
    Mars landing scenario: six canted engines throttled between 30 % and
    80 % of 3.1 kN, landing site at ``latitude`` on a sidereally rotating
    planet.
    """
    e_x = np.array([1.0, 0.0, 0.0])
    e_z = np.array([0.0, 0.0, 1.0])
    sidereal_day = 24.6229 * 3600.0
    omega = (2.0 * np.pi / sidereal_day) * (np.cos(latitude) * e_x + np.sin(latitude) * e_z)

    n_engines = 6
    cant = np.deg2rad(27.0)
    engine_thrust = 3.1e3
    return RocketParams(
        gravity=-3.7114 * e_z,
        omega=omega,
        m_dry=1505.0,
        m_wet=1905.0,
        isp=225.0,
        cant=cant,
        rho_min=n_engines * 0.3 * engine_thrust * np.cos(cant),
        rho_max=n_engines * 0.8 * engine_thrust * np.cos(cant),
        glide_slope=np.deg2rad(86.0),
        pointing=np.deg2rad(40.0),
        v_max=800.0 * 1e3 / 3600.0,
        r0=r0,
        v0=v0,
        dt=dt,
    )


@dataclass(frozen=True, eq=False)
class RocketModel:
    """
    Continuous-time linear-affine dynamics ``x' = A_c x + B_c u + p_c``.

    Parameters
    ----------
    params : RocketParams
        Physical constants, shared by reference with every consumer.
    """

    params: RocketParams
    A_c: np.ndarray = field(init=False, repr=False)
    B_c: np.ndarray = field(init=False, repr=False)
    p_c: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        omega_x = _skew(self.params.omega)

        A_c = np.zeros((STATE_DIM, STATE_DIM))
        A_c[0:3, 3:6] = np.eye(3)
        A_c[3:6, 0:3] = -omega_x @ omega_x
        A_c[3:6, 3:6] = -2.0 * omega_x

        B_c = np.zeros((STATE_DIM, CONTROL_DIM))
        B_c[3:6, 0:3] = np.eye(3)
        B_c[6, 3] = -self.params.alpha

        p_c = np.concatenate([np.zeros(3), self.params.gravity, [0.0]])

        for name, value in (("A_c", A_c), ("B_c", B_c), ("p_c", p_c)):
            value.setflags(write=False)
            object.__setattr__(self, name, value)

    @property
    def state_dim(self) -> int:
        return STATE_DIM

    @property
    def control_dim(self) -> int:
        return CONTROL_DIM

    def state_derivative(self, state: np.ndarray, control: np.ndarray) -> np.ndarray:
        assert state.shape[0] == self.state_dim
        assert control.shape[0] == self.control_dim
        return self.A_c @ state + self.B_c @ control + self.p_c
