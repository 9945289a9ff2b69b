"""
Fuel-optimal 3-DoF powered-descent guidance by lossless convexification.

The package exposes the rocket model and its exact ZOH discretization, the
convexified fixed-final-time landing problem and its conic backends, a
golden-section search over the flight duration, and an RK4 simulator that
replays the optimized inputs in closed loop.
"""

from .conic import ConicProblem, ConicSolution, SecondOrderConeBlock, SolverStatus
from .conic_solver import CasadiConicSolver, ConicSolver, CvxpyConicSolver, make_conic_solver
from .control import ControlLaw, ZOHReplayControl
from .discretization import DiscreteDynamics, uniform_time_grid, zoh_discretize
from .golden import golden_section_search
from .pipeline import InfeasibleLandingError, LandingPlan, plan_landing
from .rocket_model import RocketModel, RocketParams, mars_lander_params
from .simulator import SimulationConfig, Simulator, rk4
from .solution import TrajectoryOptimizationResult, TrajectorySolution
from .time_of_flight import (
    TimeOfFlightConfig,
    TimeOfFlightResult,
    TimeOfFlightSearch,
    flight_time_bracket,
)
from .trajectory_optimizer import LCvxTrajectoryOptimizer, OptimizerConfig

__all__ = [
    "ConicProblem",
    "ConicSolution",
    "SecondOrderConeBlock",
    "SolverStatus",
    "ConicSolver",
    "CvxpyConicSolver",
    "CasadiConicSolver",
    "make_conic_solver",
    "ControlLaw",
    "ZOHReplayControl",
    "DiscreteDynamics",
    "uniform_time_grid",
    "zoh_discretize",
    "golden_section_search",
    "InfeasibleLandingError",
    "LandingPlan",
    "plan_landing",
    "RocketModel",
    "RocketParams",
    "mars_lander_params",
    "SimulationConfig",
    "Simulator",
    "rk4",
    "TrajectoryOptimizationResult",
    "TrajectorySolution",
    "TimeOfFlightConfig",
    "TimeOfFlightResult",
    "TimeOfFlightSearch",
    "flight_time_bracket",
    "LCvxTrajectoryOptimizer",
    "OptimizerConfig",
]
