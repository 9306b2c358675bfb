"""FastCLARANS: randomized local search over medoid swaps.

CLARANS treats every medoid set as a node in a graph whose edges are
single swaps, and walks that graph from random starting points, taking
any improving edge it happens to sample. The "Fast" variant evaluates a
sampled non-medoid against all k medoids at once.
"""

import logging
import math
import numbers

import numpy as np
from joblib import Parallel, delayed

from ..distance import as_distance_matrix
from ..exception import InvalidParameter
from ..util.log import timed
from ..util.parallel import resolve_n_jobs
from ..util.random import DEFAULT_SEED, check_random_source

from .assignment import Assignment
from . import util

logger = logging.getLogger(__name__)


def fastclarans(distances, k, numlocal=2, maxneighbor=0.025,
                seed=DEFAULT_SEED, n_jobs=1):
    """FastCLARANS k-medoids clustering.

    Each of `numlocal` restarts begins from k random medoids. It then
    repeatedly samples a non-medoid, computes the cost change of
    swapping it with each of the k medoids in a single O(n) pass, and
    performs the best of those swaps if it lowers the cost. The restart
    ends once `maxneighbor` consecutive samples failed to improve, or
    once every non-medoid has been tried without improvement (a local
    optimum). The best restart is returned. No BUILD/LAB initialization
    is involved.

    Parameters
    ----------
    distances : DistanceMatrix or array-like
        Distances between the n observations; see `as_distance_matrix`.
    k : int
        Number of medoids, 1 <= k <= n.
    numlocal : int, default=2
        Number of restarts.
    maxneighbor : float, default=0.025
        Number of consecutive non-improving samples after which the
        current medoids are accepted. Values below 1 are a fraction of
        the k(n-k) swaps neighboring each medoid set; others are an
        absolute count. Any value of at least n-k guarantees that a
        restart ends in a true local optimum.
    seed : int or RandomSource, default=123456789
        Seed for the random starts and sampling.
    n_jobs : int, default=1
        Number of restarts to run in parallel. Results are identical
        for any value.

    Returns
    -------
    result : KMedoidsResult
        Total cost, medoid indices, and assignment of each observation
        to a medoid.

    References
    ----------
    .. [1] Ng, R. T. & Han, J. CLARANS: A Method for Clustering Objects
        for Spatial Data Mining. IEEE TKDE 14(5), 1003-1016 (2002).
    .. [2] Schubert, E. & Rousseeuw, P. J. Faster k-Medoids Clustering:
        Improving the PAM, CLARA, and CLARANS Algorithms. SISAP (2019).
        https://arxiv.org/abs/1810.05691
    """

    dm = as_distance_matrix(distances)
    k = util.check_n_clusters(k, dm.n)
    numlocal = util.check_positive_int(numlocal, 'numlocal')
    budget = neighbor_budget(maxneighbor, dm.n, k)
    n_jobs = resolve_n_jobs(n_jobs)
    random_state = check_random_source(seed)

    logger.info("Running %s restarts, accepting after %s non-improving "
                "samples.", numlocal, budget)

    with timed("FastCLARANS finished in %.2f sec.", logger.info):
        sources = [random_state.spawn() for _ in range(numlocal)]
        results = Parallel(n_jobs=n_jobs)(
            delayed(_local_search)(dm, k, budget, source)
            for source in sources)

        best = None
        for i, result in enumerate(results):
            logger.info("Restart %s: cost %.7f.", i, result.cost)
            if best is None or result.cost < best.cost:
                best = result

    return best


def neighbor_budget(maxneighbor, n, k):
    """Number of consecutive non-improving samples a restart tolerates.

    Values of `maxneighbor` below 1 are a fraction of k(n-k), rounded
    up; others are taken as an absolute count.
    """

    if isinstance(maxneighbor, bool) or \
            not isinstance(maxneighbor, numbers.Real) or \
            not maxneighbor > 0:
        raise InvalidParameter(
            "maxneighbor must be a positive number (got %r)."
            % (maxneighbor,))

    if maxneighbor < 1:
        return max(1, int(math.ceil(maxneighbor * k * (n - k))))
    return int(maxneighbor)


def _local_search(dm, k, budget, random_state):
    """One CLARANS restart from random medoids, drawing from its own
    `random_state`."""

    order = np.arange(dm.n)
    random_state.shuffle_prefix(order, k)
    medoids = order[:k].copy()

    # non-medoids; pool[:tried] were sampled since the last swap
    pool = order[k:].copy()
    tried = 0

    assignment = Assignment.compute(dm, medoids)
    cost = assignment.cost()
    logger.debug("Restart from %s, cost %.7f.", medoids, cost)

    fails = swaps = 0
    while fails < budget and tried < len(pool):
        j = tried + random_state.integers(len(pool) - tried)
        pool[tried], pool[j] = pool[j], pool[tried]
        candidate = pool[tried]
        tried += 1

        deltas = assignment.swap_deltas(dm.row(candidate), k)
        slot = int(np.argmin(deltas))

        if util.improves(deltas[slot], cost):
            logger.debug("Swapping medoid %s (slot %s) for %s, delta %.7f.",
                         medoids[slot], slot, candidate, deltas[slot])
            pool[tried - 1] = medoids[slot]
            assignment.swap(dm, medoids, slot, candidate)
            cost += deltas[slot]
            swaps += 1

            tried = fails = 0
        else:
            fails += 1

    logger.debug("Restart ended after %s swaps (%s)", swaps,
                 "local optimum" if tried == len(pool) else "budget spent")

    return util.make_result(dm, medoids)
