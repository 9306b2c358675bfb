"""Partitioning Around Medoids (PAM), the exact swap-based k-medoids
algorithm, and the baseline the faster variants are measured against.
"""

import logging
import warnings

import numpy as np

from ..distance import as_distance_matrix
from ..exception import PerformanceWarning
from ..util.log import timed

from .assignment import Assignment
from .initializers import build
from . import util

logger = logging.getLogger(__name__)

# above this many observations, PAM's O(k n^2) swap search is painfully
# slow and FastPAM should be preferred
PAM_WARN_SIZE = 5000


def pam(distances, k, maxiter=0):
    """Partitioning Around Medoids.

    The original k-medoids algorithm of Kaufman and Rousseeuw: BUILD
    chooses k initial medoids, then every iteration evaluates every
    possible (medoid, non-medoid) swap and performs the one that reduces
    the total distance the most. It stops when no swap improves the
    cost or after `maxiter` iterations. Each swap search costs
    O(k (n-k) n).

    Parameters
    ----------
    distances : DistanceMatrix or array-like
        Distances between the n observations; see `as_distance_matrix`.
    k : int
        Number of medoids, 1 <= k <= n.
    maxiter : int, default=0
        Maximum number of swap iterations; 0 runs to convergence.

    Returns
    -------
    result : KMedoidsResult
        Total cost, medoid indices, and assignment of each observation
        to a medoid.

    References
    ----------
    .. [1] Kaufman, L. & Rousseeuw, P. J. Clustering by means of
        Medoids. Statistical Data Analysis Based on the L1 Norm and
        Related Methods (1987).
    """

    dm = as_distance_matrix(distances)
    k = util.check_n_clusters(k, dm.n)
    maxiter = util.check_maxiter(maxiter)

    if dm.n > PAM_WARN_SIZE:
        warnings.warn(
            "PAM on %s observations will be slow; consider fastpam or "
            "fastclara." % dm.n, PerformanceWarning)

    medoids = build(dm, k)
    with timed("PAM finished in %.2f sec.", logger.info):
        medoids, _ = pam_optimize(dm, medoids, maxiter)

    return util.make_result(dm, medoids)


def pam_optimize(dm, medoids, maxiter=0):
    """Run PAM swap iterations on an initial medoid set.

    Parameters
    ----------
    dm : DistanceMatrix
    medoids : array-like, shape=(k,)
        Initial medoids; left untouched.
    maxiter : int, default=0
        Maximum number of iterations; 0 runs to convergence.

    Returns
    -------
    medoids : np.ndarray, shape=(k,)
        Optimized medoids.
    costs : list
        Total cost before the first and after every performed swap.
    """

    medoids = np.array(medoids, dtype=int)

    assignment = Assignment.compute(dm, medoids)
    cost = assignment.cost()
    logger.info("PAM initial cost %.7f.", cost)
    costs = [cost]

    iteration = 0
    while maxiter <= 0 or iteration < maxiter:
        iteration += 1

        delta, slot, candidate = _best_swap(dm, medoids, assignment)
        if slot < 0 or not util.improves(delta, cost):
            logger.info("PAM converged after %s iterations with cost %.7f.",
                        iteration - 1, cost)
            break

        logger.debug("Swapping medoid %s (slot %s) for %s, delta %.7f.",
                     medoids[slot], slot, candidate, delta)

        medoids[slot] = candidate
        assignment = Assignment.compute(dm, medoids)
        new_cost = assignment.cost()

        if new_cost > cost:
            logger.warning(
                "PAM cost increased from %.7f to %.7f after a swap "
                "(expected change %.7f).", cost, new_cost, delta)
        cost = new_cost
        costs.append(cost)
        logger.info("PAM iteration %s: cost %.7f.", iteration, cost)
    else:
        logger.info("PAM stopped after maxiter=%s iterations with cost "
                    "%.7f.", maxiter, cost)

    return medoids, costs


def _best_swap(dm, medoids, assignment):
    """Exhaustive PAM swap search.

    Returns the best (delta, slot, candidate) over all swaps. Ties go to
    the lowest slot, then the lowest candidate. Slot is -1 when there
    are no candidates.
    """

    k = len(medoids)
    deltas = np.full((k, dm.n), np.inf)

    is_medoid = np.zeros(dm.n, dtype=bool)
    is_medoid[medoids] = True

    for c in np.flatnonzero(~is_medoid):
        row = dm.row(c)
        for slot in range(k):
            deltas[slot, c] = assignment.swap_delta(row, slot)

    if not np.isfinite(deltas).any():
        return np.inf, -1, -1

    # row-major argmin: lowest slot first, then lowest candidate
    slot, candidate = np.unravel_index(np.argmin(deltas), deltas.shape)
    return deltas[slot, candidate], int(slot), int(candidate)
