"""
End-to-end landing planner: duration search, optimal solve, closed-loop check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .control import ZOHReplayControl
from .rocket_model import RocketModel, RocketParams
from .simulator import SimulationConfig, Simulator
from .solution import TrajectorySolution
from .time_of_flight import TimeOfFlightConfig, TimeOfFlightResult, TimeOfFlightSearch
from .trajectory_optimizer import LCvxTrajectoryOptimizer, OptimizerConfig

logger = logging.getLogger(__name__)


class InfeasibleLandingError(RuntimeError):
    def __init__(self, search: TimeOfFlightResult):
        self.search = search
        super().__init__(
            f"no feasible landing found; best flight time {search.t_opt:.3f} s "
            f"ended with status {search.result.status.value}"
        )


@dataclass
class LandingPlan:
    search: TimeOfFlightResult
    trajectory: TrajectorySolution
    closed_loop: TrajectorySolution

    @property
    def t_f(self) -> float:
        return self.search.t_opt

    @property
    def fuel_used(self) -> float:
        return self.trajectory.fuel_used

    @property
    def landing_error(self) -> float:
        """Distance between the simulated touchdown point and the target [m]."""
        return float(np.linalg.norm(self.closed_loop.final_position))


def plan_landing(
    params: RocketParams,
    optimizer_config: Optional[OptimizerConfig] = None,
    search_config: Optional[TimeOfFlightConfig] = None,
    simulation_config: Optional[SimulationConfig] = None,
    mass_adaptive: bool = False,
) -> LandingPlan:
    """
    Finds the fuel-optimal flight time, solves the landing problem for it and
    replays the optimal inputs through the RK4 simulator.

    Raises
    ------
    InfeasibleLandingError
        When no duration in the search bracket admits a landing.
    """
    model = RocketModel(params)
    optimizer = LCvxTrajectoryOptimizer(model, optimizer_config)
    search = TimeOfFlightSearch(optimizer, search_config).run()
    if not search.feasible:
        raise InfeasibleLandingError(search)

    trajectory = search.result.solution
    control = ZOHReplayControl(trajectory, mass_adaptive=mass_adaptive)
    closed_loop = Simulator(model, simulation_config).simulate(control, trajectory.t_f)

    plan = LandingPlan(search=search, trajectory=trajectory, closed_loop=closed_loop)
    logger.info(
        "landing plan: t_f=%.3f s, fuel %.2f kg, simulated miss %.3f m",
        plan.t_f,
        plan.fuel_used,
        plan.landing_error,
    )
    return plan
