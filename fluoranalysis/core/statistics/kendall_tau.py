"""Weighted Kendall's Tau-b rank correlation."""

import math
from typing import Sequence, Tuple

import numpy as np

from fluoranalysis.core.statistics.sort import weighted_merge_sort_mut
from fluoranalysis.utils.validation import check_lengths

TIE_TOLERANCE = 1e-12


def weighted_kendall_tau_b_correlation(
    data_a: Sequence,
    data_b: Sequence,
    weights: Sequence[float]
) -> float:
    """Compute the weighted Kendall's Tau-b rank correlation coefficient.

    Each pair of observations ``(i, j)`` carries the mass ``w_i * w_j``.
    Discordant mass is counted with a weighted merge sort of the ``b`` ranks
    taken in ``a`` rank order, and the ties in either variable are removed
    from both the numerator and the normalisation::

        tau_b = 2 (C - D) / sqrt[(n0 - n1)(n0 - n2)]

    where ``n0 = (sum w)^2 - sum w^2`` is the total weighted pair mass counted
    in both orders, ``n1``/``n2`` are the same quantity restricted to tied
    groups of ``a``/``b``, and ``C``/``D`` are the concordant/discordant mass
    of unordered pairs.

    Args:
        data_a: First sequence of orderable observations
        data_b: Second sequence, same length as ``data_a``
        weights: Non-negative observation weights, same length as the data

    Returns:
        Tau-b in [-1.0, 1.0]. Returns 0.0 for fewer than two observations or
        when exactly one variable has no untied pair mass, and NaN when both
        variables are entirely tied.

    Raises:
        MismatchedArrayLengthsError: If the three sequences differ in length
    """
    check_lengths(data_a, "data_a", data_b, "data_b")
    check_lengths(data_a, "data_a", weights, "weights")

    n = len(data_a)
    if n < 2:
        return 0.0

    data_a = np.asarray(data_a)
    data_b = np.asarray(data_b)
    weights = np.asarray(weights, dtype=np.float64)

    a_ranks, a_tie_corr = rank_with_weights(data_a, weights)
    b_ranks, b_tie_corr = rank_with_weights(data_b, weights)

    # b ranks in a-rank order; ties in a are ordered by b so they never count
    # as discordant
    order = np.lexsort((b_ranks, a_ranks))
    joint_tie_corr = _joint_tie_correction(a_ranks, b_ranks, weights, order)
    b_sorted = b_ranks[order].tolist()
    w_sorted = weights[order].tolist()
    discordant = weighted_merge_sort_mut(b_sorted, w_sorted)

    total_w = float(np.sum(weights))
    total_w_pairs = total_w ** 2 - float(np.sum(weights ** 2))

    concordant = (total_w_pairs - a_tie_corr - b_tie_corr + joint_tie_corr) / 2.0 - discordant
    numer = 2.0 * (concordant - discordant)

    # untied mass at rounding level means the variable is constant
    tol = TIE_TOLERANCE * abs(total_w_pairs)
    untied_a = total_w_pairs - a_tie_corr
    untied_b = total_w_pairs - b_tie_corr
    a_degenerate = not untied_a > tol
    b_degenerate = not untied_b > tol
    if a_degenerate and b_degenerate:
        return float('nan')
    if a_degenerate or b_degenerate:
        return 0.0

    denom = math.sqrt(untied_a * untied_b)
    if denom == 0.0 or math.isnan(denom):
        return 0.0

    tau = numer / denom
    return min(1.0, max(-1.0, tau))


def rank_with_weights(data: np.ndarray, weights: np.ndarray) -> Tuple[np.ndarray, float]:
    """Rank data with average ranks and compute its weighted tie correction.

    Args:
        data: 1D array of orderable values
        weights: 1D array of weights, same length as ``data``

    Returns:
        Tuple of (ranks, tie_correction). Ranks start at 1 and tied values
        share the average of the ranks they span. The tie correction is
        ``sum over tie groups of (sum w)^2 - sum w^2``, i.e. twice the sum of
        pairwise weight products inside each group.
    """
    n = len(data)
    order = np.argsort(data, kind="stable")
    sorted_data = data[order]

    starts = np.flatnonzero(np.r_[True, sorted_data[1:] != sorted_data[:-1]])
    sizes = np.diff(np.r_[starts, n])

    ranks = np.empty(n, dtype=np.float64)
    ranks[order] = np.repeat(starts + 1 + (sizes - 1) / 2.0, sizes)

    return ranks, _group_pair_mass(weights[order], starts, sizes)


def _joint_tie_correction(
    a_ranks: np.ndarray,
    b_ranks: np.ndarray,
    weights: np.ndarray,
    order: np.ndarray
) -> float:
    """Pair mass (counted in both orders) of pairs tied in both variables.

    ``order`` must sort the pairs lexicographically by (a rank, b rank).
    """
    a_sorted = a_ranks[order]
    b_sorted = b_ranks[order]
    new_group = (a_sorted[1:] != a_sorted[:-1]) | (b_sorted[1:] != b_sorted[:-1])
    starts = np.flatnonzero(np.r_[True, new_group])
    sizes = np.diff(np.r_[starts, len(order)])
    return _group_pair_mass(weights[order], starts, sizes)


def _group_pair_mass(sorted_weights: np.ndarray, starts: np.ndarray, sizes: np.ndarray) -> float:
    tied = sizes > 1
    if not np.any(tied):
        return 0.0
    group_sum = np.add.reduceat(sorted_weights, starts)
    group_sq = np.add.reduceat(sorted_weights ** 2, starts)
    return float(np.sum((group_sum ** 2 - group_sq)[tied]))
