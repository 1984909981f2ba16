"""
Score combination and effect aggregation for region members

Stouffer's method with equal weights is the default score combination:
each member score p_i is mapped to z_i = isf(p_i) on the standard normal,
combined as Z = sum(w_i * z_i) / sqrt(sum(w_i ** 2)) and mapped back with
p = sf(Z). Fisher's method and a Sidak-adjusted minimum are available as
alternatives.
"""

from typing import Optional, Sequence

import numpy as np
from scipy.stats import combine_pvalues

from ..utils import InvalidInput, get_logger

logger = get_logger(__name__)

# Scores of exactly 0 or 1 map to infinite z-scores
MIN_SCORE = 1e-300
MAX_SCORE = 1.0 - 1e-16


def combine_scores(
    scores: Sequence[float],
    effects: Optional[Sequence[float]] = None,
    method: str = "stouffer",
    weights: str = "equal",
) -> float:
    """
    Combine member significance scores into one region score

    Args:
        scores: Member p-values or adjusted p-values
        effects: Member effect sizes, used when weights="effect"
        method: "stouffer", "fisher" or "min_p"
        weights: "equal" or "effect" (Stouffer only)

    Returns:
        Combined score in [0, 1]
    """
    p = np.clip(np.asarray(scores, dtype=float), MIN_SCORE, MAX_SCORE)

    if p.size == 0:
        raise InvalidInput("Cannot combine an empty set of scores")

    if method == "stouffer":
        w = _stouffer_weights(p.size, effects, weights)
        _, combined = combine_pvalues(p, method="stouffer", weights=w)
    elif method == "fisher":
        _, combined = combine_pvalues(p, method="fisher")
    elif method == "min_p":
        # 1 - (1 - min p) ** k, computed without cancellation
        combined = -np.expm1(p.size * np.log1p(-p.min()))
    else:
        raise InvalidInput(f"Unknown score combination method: {method}")

    return float(np.clip(combined, 0.0, 1.0))


def _stouffer_weights(
    n: int, effects: Optional[Sequence[float]], weights: str
) -> np.ndarray:
    if weights == "equal":
        return np.ones(n)

    if weights != "effect":
        raise InvalidInput(f"Unknown weighting scheme: {weights}")

    if effects is None or len(effects) != n:
        raise InvalidInput("Effect weighting needs one effect size per score")

    w = np.abs(np.asarray(effects, dtype=float))
    if not w.any():
        logger.debug("All member effects are zero; using equal weights")
        return np.ones(n)
    return w


def aggregate_effect(effects: Sequence[float], method: str = "mean") -> float:
    """
    Aggregate member effect sizes

    "max_abs" returns the signed effect of the largest-magnitude member.
    """
    values = np.asarray(effects, dtype=float)

    if values.size == 0:
        raise InvalidInput("Cannot aggregate an empty set of effects")

    if method == "mean":
        return float(values.mean())
    if method == "median":
        return float(np.median(values))
    if method == "max_abs":
        return float(values[np.argmax(np.abs(values))])

    raise InvalidInput(f"Unknown effect aggregation method: {method}")


def effect_direction(effects: Sequence[float]) -> str:
    """hyper when every member gains methylation, hypo when every member loses it"""
    values = np.asarray(effects, dtype=float)
    if values.size and (values > 0).all():
        return "hyper"
    if values.size and (values < 0).all():
        return "hypo"
    return "mixed"
