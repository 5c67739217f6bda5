"""Weighted merge sort with weighted inversion counting."""

from typing import MutableSequence

from fluoranalysis.utils.validation import check_lengths


def weighted_merge_sort_mut(data: MutableSequence, weights: MutableSequence[float]) -> float:
    """Sort data and its weights in place and count weighted inversions.

    Performs a bottom-up merge sort on ``data`` while applying the same
    permutation to ``weights``. Every discordant pair ``i < j`` with
    ``data[i] > data[j]`` contributes ``weights[i] * weights[j]`` to the
    returned count, so with unit weights the result is the classical
    inversion count. Equal values are never counted and keep their relative
    order.

    The merge alternates between two buffers instead of copying back after
    every pass. A prefix sum of the source weights is rebuilt each pass so
    that the weight still waiting in the left run, when a right-run element
    is taken first, is a single subtraction.

    Args:
        data: Mutable sequence of orderable values (list or 1D numpy array)
        weights: Mutable sequence of weights, same length as ``data``

    Returns:
        The weighted inversion count

    Raises:
        MismatchedArrayLengthsError: If ``len(data) != len(weights)``

    Reference:
        https://doi.org/10.1109/TIP.2019.2909194
    """
    check_lengths(data, "data", weights, "weights")

    n = len(data)
    if n < 2:
        return 0.0

    # Work on plain lists, ping-ponging between the two buffer pairs
    data_from = list(data)
    weights_from = [float(w) for w in weights]
    data_to = [None] * n
    weights_to = [0.0] * n
    cum_weights = [0.0] * n

    swap = 0.0
    step = 1
    while step < n:
        acc = 0.0
        for i in range(n):
            acc += weights_from[i]
            cum_weights[i] = acc

        left = 0
        k = 0
        while True:
            right = left + step
            end = right + step
            if end > n:
                if right > n:
                    break
                end = n

            l = left
            r = right
            while l < right and r < end:
                if data_from[l] > data_from[r]:
                    if l == 0:
                        swap += weights_from[r] * cum_weights[right - 1]
                    else:
                        swap += weights_from[r] * (cum_weights[right - 1] - cum_weights[l - 1])
                    data_to[k] = data_from[r]
                    weights_to[k] = weights_from[r]
                    r += 1
                else:
                    data_to[k] = data_from[l]
                    weights_to[k] = weights_from[l]
                    l += 1
                k += 1

            while l < right:
                data_to[k] = data_from[l]
                weights_to[k] = weights_from[l]
                k += 1
                l += 1
            while r < end:
                data_to[k] = data_from[r]
                weights_to[k] = weights_from[r]
                k += 1
                r += 1

            left = end

        # unmerged tail when n is not a power of two
        while k < n:
            data_to[k] = data_from[k]
            weights_to[k] = weights_from[k]
            k += 1

        data_from, data_to = data_to, data_from
        weights_from, weights_to = weights_to, weights_from
        step *= 2

    data[:] = data_from
    weights[:] = weights_from

    return swap
