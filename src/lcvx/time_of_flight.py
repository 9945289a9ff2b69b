"""
Outer minimum-fuel search over the flight duration.

Each candidate duration is scored by one fixed-final-time solve; the
golden-section search needs the evaluations in order, so they run one after
another.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .golden import golden_section_search
from .rocket_model import RocketParams
from .solution import TrajectoryOptimizationResult
from .trajectory_optimizer import LCvxTrajectoryOptimizer

logger = logging.getLogger(__name__)


@dataclass
class TimeOfFlightConfig:
    tolerance: float = 1e-3
    t_min: Optional[float] = None
    t_max: Optional[float] = None


@dataclass
class TimeOfFlightResult:
    t_opt: float
    cost: float
    result: TrajectoryOptimizationResult
    evaluations: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def feasible(self) -> bool:
        return self.result.success and np.isfinite(self.cost)


def flight_time_bracket(params: RocketParams) -> Tuple[float, float]:
    """
    Duration bracket ``(t_min, t_max)``.

    ``t_min`` stops the initial velocity at full thrust with the dry mass;
    ``t_max`` burns all propellant at minimum thrust.
    """
    t_min = params.m_dry * np.linalg.norm(params.v0) / params.rho_max
    if params.rho_min > 0.0:
        t_max = (params.m_wet - params.m_dry) / (params.alpha * params.rho_min)
    else:
        t_max = (params.m_wet - params.m_dry) / (params.alpha * params.rho_max)
    return float(t_min), float(t_max)


class TimeOfFlightSearch:
    def __init__(
        self,
        optimizer: LCvxTrajectoryOptimizer,
        config: Optional[TimeOfFlightConfig] = None,
    ):
        self.optimizer = optimizer
        self.config = config if config is not None else TimeOfFlightConfig()
        self._evaluations: List[Tuple[float, float]] = []
        self._last: Optional[TrajectoryOptimizationResult] = None

    def bracket(self) -> Tuple[float, float]:
        t_min, t_max = flight_time_bracket(self.optimizer.params)
        if self.config.t_min is not None:
            t_min = self.config.t_min
        if self.config.t_max is not None:
            t_max = self.config.t_max
        return t_min, t_max

    def cost(self, t_f: float) -> float:
        self._last = self.optimizer.solve(t_f)
        self._evaluations.append((t_f, self._last.cost))
        return self._last.cost

    def run(self) -> TimeOfFlightResult:
        self._evaluations = []
        t_min, t_max = self.bracket()
        logger.info("searching flight time in [%.3f, %.3f] s", t_min, t_max)

        t_opt, _ = golden_section_search(self.cost, t_min, t_max, self.config.tolerance)
        # the final evaluation of the search is at t_opt
        result = self._last
        if not result.success:
            logger.warning(
                "no feasible flight time found (t_f=%.3f s, %s)", t_opt, result.status.value
            )
        else:
            logger.info("optimal flight time %.3f s, cost %.4f", t_opt, result.cost)
        return TimeOfFlightResult(
            t_opt=t_opt,
            cost=result.cost,
            result=result,
            evaluations=list(self._evaluations),
        )
