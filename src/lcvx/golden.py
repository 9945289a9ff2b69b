"""Golden-section search for unimodal scalar functions."""

from __future__ import annotations

import logging
import math
from typing import Callable, Tuple

logger = logging.getLogger(__name__)

GOLDEN_RATIO = 0.5 * (1.0 + math.sqrt(5.0))


def golden_section_iterations(a: float, b: float, tol: float) -> int:
    """Number of function evaluations needed to shrink ``[a, b]`` below ``tol``."""
    width = abs(b - a)
    if width <= tol:
        return 1
    return int(math.ceil(math.log(width / tol) / math.log(GOLDEN_RATIO) + 1))


def golden_section_search(
    f: Callable[[float], float], a: float, b: float, tol: float
) -> Tuple[float, float]:
    """
    Minimizes a unimodal ``f`` on ``[a, b]`` to within ``tol`` in ``x``.

    Follows Kochenderfer and Wheeler, *Algorithms for Optimization*, 2019:
    the retained interior point is reused so every iteration costs exactly
    one new evaluation.  The endpoints ``a`` and ``b`` swap roles as the
    bracket shrinks, which is why the bracket is not kept ordered.

    Infinite values are compared like any other value.

    Returns
    -------
    (x, f(x)) : tuple
        Midpoint of the final bracket and its function value.
    """
    n = golden_section_iterations(a, b, tol)
    rho = GOLDEN_RATIO - 1.0
    d = rho * b + (1.0 - rho) * a
    yd = f(d)
    for _ in range(n - 1):
        c = rho * a + (1.0 - rho) * b
        yc = f(c)
        if yc < yd:
            b, d, yd = d, c, yc
        else:
            a, b = b, c
        logger.debug("golden bracket: [%.3f, %.3f, %.3f, %.3f]", *sorted([a, b, c, d]))
    x = 0.5 * (a + b)
    return x, f(x)
