"""Initial medoid selection for the PAM family.

Each initializer is a function ``f(dm, k, random_state=None)`` that
returns an array of k distinct observation indices. BUILD is exact and
deterministic; LAB approximates it on small random samples and needs a
seed.
"""

import logging

import numpy as np

from ..exception import InvalidParameter
from ..util.log import timed
from ..util.random import check_random_source

logger = logging.getLogger(__name__)


def build(dm, k, random_state=None):
    """Greedy BUILD initialization from classic PAM.

    The first medoid is the observation with the smallest total
    distance to all others. Every further medoid is the non-medoid that
    reduces the total cost the most, i.e. maximizes the summed gain
    ``max(0, nearest[j] - d(j, candidate))`` over all points j. Ties go
    to the lowest index. Runs in O(n^2 k).

    Parameters
    ----------
    dm : DistanceMatrix
        Distances between the observations.
    k : int
        Number of medoids to choose.
    random_state : ignored
        Accepted for interface compatibility with `lab`.

    Returns
    -------
    medoids : np.ndarray, shape=(k,)

    References
    ----------
    .. [1] Kaufman, L. & Rousseeuw, P. J. Clustering by means of
        Medoids. Statistical Data Analysis Based on the L1 Norm and
        Related Methods (1987).
    """

    n = dm.n
    medoids = np.empty(k, dtype=int)
    is_medoid = np.zeros(n, dtype=bool)

    with timed("BUILD chose %s medoids in %.2f sec.", logger.debug, k):
        best, best_total = 0, np.inf
        for c in range(n):
            total = dm.row(c).sum()
            if total < best_total:
                best, best_total = c, total

        medoids[0] = best
        is_medoid[best] = True
        nearest = dm.row(best)
        logger.debug("BUILD medoid 0 is %s (total distance %.5f).",
                     best, best_total)

        for i in range(1, k):
            best, best_gain = -1, -np.inf
            for c in range(n):
                if is_medoid[c]:
                    continue
                row = dm.row(c)
                gain = np.maximum(nearest - row, 0).sum()
                if gain > best_gain:
                    best, best_gain = c, gain
                    best_row = row

            medoids[i] = best
            is_medoid[best] = True
            np.minimum(nearest, best_row, out=nearest)
            logger.debug("BUILD medoid %s is %s (gain %.5f).",
                         i, best, best_gain)

    return medoids


def lab_sample_size(n):
    """Per-step candidate sample size used by LAB, 10 + ceil(sqrt(n))."""
    return min(n, 10 + int(np.ceil(np.sqrt(n))))


def lab(dm, k, random_state):
    """Linear Approximative BUILD (LAB).

    LAB follows BUILD, but at every step it draws a fresh random sample
    of the remaining non-medoids, of size 10 + ceil(sqrt(n)), and both
    picks the candidate from that sample and measures its gain only on
    that sample. This makes initialization O(nk) rather than O(n^2 k)
    at the cost of some quality.

    Parameters
    ----------
    dm : DistanceMatrix
        Distances between the observations.
    k : int
        Number of medoids to choose.
    random_state : int or RandomSource
        Source of randomness for sampling. Required.

    Returns
    -------
    medoids : np.ndarray, shape=(k,)

    References
    ----------
    .. [1] Schubert, E. & Rousseeuw, P. J. Faster k-Medoids Clustering:
        Improving the PAM, CLARA, and CLARANS Algorithms. SISAP (2019).
    """

    random_state = check_random_source(random_state)

    n = dm.n
    sample_size = lab_sample_size(n)

    # the non-medoids always occupy pool[:remaining]
    pool = np.arange(n)
    remaining = n

    medoids = np.empty(k, dtype=int)
    nearest = np.full(n, np.inf)

    with timed("LAB chose %s medoids in %.2f sec.", logger.debug, k):
        for i in range(k):
            size = min(sample_size, remaining)
            random_state.shuffle_prefix(pool[:remaining], size)
            sample = pool[:size]

            sub = dm.subset(sample).square()
            if i == 0:
                pos = int(np.argmin(sub.sum(axis=1)))
            else:
                gains = np.maximum(nearest[sample][None, :] - sub, 0)
                pos = int(np.argmax(gains.sum(axis=1)))

            medoids[i] = pool[pos]
            np.minimum(nearest, dm.row(medoids[i]), out=nearest)

            pool[pos] = pool[remaining - 1]
            pool[remaining - 1] = medoids[i]
            remaining -= 1

            logger.debug("LAB medoid %s is %s (from a sample of %s).",
                         i, medoids[i], size)

    return medoids


INITIALIZERS = {
    'BUILD': build,
    'LAB': lab,
}


def get_initializer(name):
    """Look up an initializer by name ('BUILD' or 'LAB').

    Callables are passed through, so custom initializers with the same
    signature can be supplied directly.
    """

    if callable(name):
        return name
    try:
        return INITIALIZERS[str(name).upper()]
    except KeyError:
        raise InvalidParameter(
            "'%s' is not a recognized initializer; choose from %s."
            % (name, sorted(INITIALIZERS)))
