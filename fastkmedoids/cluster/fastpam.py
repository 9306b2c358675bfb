"""FastPAM: PAM with a swap search that is O(k) times faster, plus the
option of performing several swaps per iteration.
"""

import logging

import numpy as np

from ..distance import as_distance_matrix
from ..exception import InvalidParameter
from ..util.log import timed
from ..util.random import DEFAULT_SEED, check_random_source

from .assignment import Assignment
from .initializers import build, get_initializer
from . import util

logger = logging.getLogger(__name__)


def fastpam(distances, k, maxiter=0, initializer='LAB', fasttol=1.0,
            seed=DEFAULT_SEED):
    """FastPAM k-medoids clustering.

    FastPAM finds the same kind of locally optimal medoids as PAM, but
    computes the cost change of removing each of the k medoids for a
    candidate in a single pass over the data, so the swap search costs
    O(n (n-k)) rather than O(k n (n-k)). It also remembers the best
    candidate for every medoid and, after the best swap, may perform
    further swaps from the same pass (see `fasttol`).

    Parameters
    ----------
    distances : DistanceMatrix or array-like
        Distances between the n observations; see `as_distance_matrix`.
    k : int
        Number of medoids, 1 <= k <= n.
    maxiter : int, default=0
        Maximum number of swap iterations; 0 runs to convergence.
    initializer : {'LAB', 'BUILD'}, default='LAB'
        Initialization method. LAB (linear approximative BUILD) is much
        cheaper than BUILD and is the recommended pairing.
    fasttol : float, default=1.0
        Tolerance for additional swaps, in [0, 1]. After the best swap of
        an iteration, the best swap remembered for every other medoid is
        re-evaluated and performed if it still improves the cost by at
        least ``(1 - fasttol)`` times the improvement measured before
        the first swap. 1.0 performs any additional swap that still
        improves; 0.0 performs it only if its improvement did not
        shrink, i.e. it looks independent of the swaps before it.
    seed : int or RandomSource, default=123456789
        Seed for the LAB initializer.

    Returns
    -------
    result : KMedoidsResult
        Total cost, medoid indices, and assignment of each observation
        to a medoid.

    References
    ----------
    .. [1] Schubert, E. & Rousseeuw, P. J. Faster k-Medoids Clustering:
        Improving the PAM, CLARA, and CLARANS Algorithms. SISAP (2019).
        https://arxiv.org/abs/1810.05691
    """

    dm = as_distance_matrix(distances)
    k = util.check_n_clusters(k, dm.n)
    maxiter = util.check_maxiter(maxiter)
    fasttol = check_fasttol(fasttol)
    init = get_initializer(initializer)
    random_state = None if init is build else check_random_source(seed)

    medoids = init(dm, k, random_state)
    with timed("FastPAM finished in %.2f sec.", logger.info):
        medoids, _ = fastpam_optimize(dm, medoids, maxiter, fasttol)

    return util.make_result(dm, medoids)


def check_fasttol(fasttol):
    if not 0 <= fasttol <= 1:
        raise InvalidParameter(
            "fasttol must lie in [0, 1] (got %s)." % fasttol)
    return float(fasttol)


def fastpam_optimize(dm, medoids, maxiter=0, fasttol=1.0):
    """Run FastPAM swap iterations on an initial medoid set.

    Parameters
    ----------
    dm : DistanceMatrix
    medoids : array-like, shape=(k,)
        Initial medoids; left untouched.
    maxiter : int, default=0
        Maximum number of iterations; 0 runs to convergence.
    fasttol : float, default=1.0
        Tolerance for additional swaps; see `fastpam`.

    Returns
    -------
    medoids : np.ndarray, shape=(k,)
        Optimized medoids.
    costs : list
        Total cost before the first and after every iteration.
    """

    medoids = np.array(medoids, dtype=int)

    assignment = Assignment.compute(dm, medoids)
    cost = assignment.cost()
    logger.info("FastPAM initial cost %.7f.", cost)
    costs = [cost]

    iteration = 0
    while maxiter <= 0 or iteration < maxiter:
        iteration += 1

        best, best_ids = find_best_swaps(dm, medoids, assignment)
        slot = int(np.argmin(best))
        if not util.improves(best[slot], cost):
            logger.info(
                "FastPAM converged after %s iterations with cost %.7f.",
                iteration - 1, cost)
            break

        logger.debug("Swapping medoid %s (slot %s) for %s, delta %.7f.",
                     medoids[slot], slot, best_ids[slot], best[slot])
        assignment.swap(dm, medoids, slot, best_ids[slot])
        cost += best[slot]
        best[slot] = np.inf

        n_swaps = 1 + _additional_swaps(
            dm, medoids, assignment, cost, best, best_ids, fasttol)

        # incremental updates are only trusted within one iteration
        assignment = Assignment.compute(dm, medoids)
        cost = assignment.cost()
        costs.append(cost)

        logger.info("FastPAM iteration %s: %s swaps, cost %.7f.",
                    iteration, n_swaps, cost)
    else:
        logger.info("FastPAM stopped after maxiter=%s iterations with "
                    "cost %.7f.", maxiter, cost)

    return medoids, costs


def find_best_swaps(dm, medoids, assignment):
    """Best swap candidate for every medoid.

    For each non-medoid candidate, the cost change of removing each of
    the k medoids is computed in one O(n) pass; the best candidate per
    medoid is kept, ties going to the lowest candidate index. Only the
    current medoids are skipped: without the triangle inequality, even
    an observation at distance 0 from a medoid can be the best swap.

    Returns
    -------
    best : np.ndarray, shape=(k,)
        Best cost change found for each medoid slot (inf if none).
    best_ids : np.ndarray, shape=(k,)
        Candidate achieving it (-1 if none).
    """

    k = len(medoids)
    best = np.full(k, np.inf)
    best_ids = np.full(k, -1, dtype=int)

    is_medoid = np.zeros(dm.n, dtype=bool)
    is_medoid[medoids] = True

    for c in np.flatnonzero(~is_medoid):
        deltas = assignment.swap_deltas(dm.row(c), k)
        better = deltas < best
        best[better] = deltas[better]
        best_ids[better] = c

    return best, best_ids


def _additional_swaps(dm, medoids, assignment, cost, best, best_ids,
                      fasttol):
    """Perform the remembered swaps that survive the `fasttol` test, in
    order of their remembered improvement. Consumes `best`.

    A remembered swap (slot, candidate) is re-measured against the
    current assignment and performed if the candidate isn't a medoid
    yet, the swap still improves the cost, and the new delta is at most
    ``(1 - fasttol)`` times the remembered one.

    Returns the number of swaps performed.
    """

    n_swaps = 0
    while True:
        slot = int(np.argmin(best))
        if not util.improves(best[slot], cost):
            break

        candidate = best_ids[slot]
        remembered = best[slot]
        best[slot] = np.inf

        if candidate in medoids:
            continue

        delta = assignment.swap_deltas(dm.row(candidate), len(medoids))[slot]
        if util.improves(delta, cost) and delta <= (1 - fasttol) * remembered:
            logger.debug(
                "Additional swap of medoid %s (slot %s) for %s, delta %.7f "
                "(remembered %.7f).", medoids[slot], slot, candidate,
                delta, remembered)
            assignment.swap(dm, medoids, slot, candidate)
            cost += delta
            n_swaps += 1

    return n_swaps
