"""FastCLARA: Clustering LARge Applications with FastPAM.

CLARA runs a PAM-family algorithm on several random samples of the data
and keeps the medoids that score best on the full data set.
"""

import logging
import numbers

import numpy as np
from joblib import Parallel, delayed

from ..distance import as_distance_matrix
from ..exception import InvalidParameter
from ..util.log import timed
from ..util.parallel import resolve_n_jobs
from ..util.random import DEFAULT_SEED, check_random_source

from .fastpam import check_fasttol, fastpam, fastpam_optimize
from .initializers import build, get_initializer
from . import util

logger = logging.getLogger(__name__)

KEEP_POLICIES = ('best', 'last')


def fastclara(distances, k, maxiter=0, initializer='LAB', fasttol=1.0,
              numsamples=5, sampling=0.25, independent=False, keep='best',
              seed=DEFAULT_SEED, n_jobs=1):
    """FastCLARA k-medoids clustering.

    Each of `numsamples` iterations draws a sample of the observations,
    clusters the sample with the given initializer and FastPAM, and
    scores the resulting medoids by assigning the *full* data set to
    them. The medoids with the lowest full-data cost are returned, so a
    sample that happens to be unrepresentative can't win by looking good
    on itself.

    Parameters
    ----------
    distances : DistanceMatrix or array-like
        Distances between the n observations; see `as_distance_matrix`.
    k : int
        Number of medoids, 1 <= k <= n.
    maxiter : int, default=0
        Maximum number of FastPAM iterations per sample; 0 runs to
        convergence.
    initializer : {'LAB', 'BUILD'}, default='LAB'
        Initialization method used on each sample.
    fasttol : float, default=1.0
        Tolerance for additional FastPAM swaps; see `fastpam`.
    numsamples : int, default=5
        Number of samples to draw.
    sampling : float, default=0.25
        Sample size. Values below 1 are a fraction of n, others an
        absolute number of observations. Must exceed k; values of n or
        more make CLARA equivalent to FastPAM on the full data.
    independent : bool, default=False
        Draw every sample from scratch. By default, the medoids chosen
        by `keep` are included in every subsequent sample.
    keep : {'best', 'last'}, default='best'
        Which medoids are carried into the next sample when not
        `independent`: the best found so far, or those of the preceding
        sample.
    seed : int or RandomSource, default=123456789
        Seed for sampling and initialization.
    n_jobs : int, default=1
        Number of samples to process in parallel when `independent`.
        Results are identical for any value.

    Returns
    -------
    result : KMedoidsResult
        Total cost, medoid indices, and assignment of each observation
        to a medoid.

    References
    ----------
    .. [1] Kaufman, L. & Rousseeuw, P. J. Clustering Large Data Sets.
        Pattern Recognition in Practice (1986).
    .. [2] Schubert, E. & Rousseeuw, P. J. Faster k-Medoids Clustering:
        Improving the PAM, CLARA, and CLARANS Algorithms. SISAP (2019).
        https://arxiv.org/abs/1810.05691
    """

    dm = as_distance_matrix(distances)
    k = util.check_n_clusters(k, dm.n)
    maxiter = util.check_maxiter(maxiter)
    fasttol = check_fasttol(fasttol)
    init = get_initializer(initializer)
    numsamples = util.check_positive_int(numsamples, 'numsamples')
    sample_size = clara_sample_size(sampling, dm.n, k)
    n_jobs = resolve_n_jobs(n_jobs)
    if keep not in KEEP_POLICIES:
        raise InvalidParameter(
            "keep must be one of %s (got %r)." % (KEEP_POLICIES, keep))
    random_state = check_random_source(seed)

    if sample_size >= dm.n:
        logger.info("Sample size %s covers all %s observations; running "
                    "FastPAM on the full data.", sample_size, dm.n)
        return fastpam(dm, k, maxiter=maxiter, initializer=init,
                       fasttol=fasttol, seed=random_state)

    logger.info("Drawing %s samples of %s of %s observations.",
                numsamples, sample_size, dm.n)

    with timed("FastCLARA finished in %.2f sec.", logger.info):
        if independent:
            sources = [random_state.spawn() for _ in range(numsamples)]
            results = Parallel(n_jobs=n_jobs)(
                delayed(_cluster_sample)(
                    dm, k, sample_size, init, maxiter, fasttol, source)
                for source in sources)

            best = None
            for i, result in enumerate(results):
                logger.info("Sample %s: full cost %.7f.", i, result.cost)
                if best is None or result.cost < best.cost:
                    best = result
        else:
            if n_jobs > 1:
                logger.info("Samples carry medoids forward and can't be "
                            "processed in parallel; ignoring n_jobs=%s.",
                            n_jobs)

            best, carried = None, None
            for i in range(numsamples):
                result = _cluster_sample(
                    dm, k, sample_size, init, maxiter, fasttol,
                    random_state.spawn(), carried=carried)
                logger.info("Sample %s: full cost %.7f.", i, result.cost)

                if best is None or result.cost < best.cost:
                    best = result
                carried = best.medoids if keep == 'best' else result.medoids

    return best


def clara_sample_size(sampling, n, k):
    """Number of observations per CLARA sample.

    Values of `sampling` below 1 are a fraction of n, others an absolute
    count; the result is capped at n.

    Raises
    ------
    InvalidParameter
        If the sample couldn't hold more than k observations and
        doesn't cover the whole data set.
    """

    if isinstance(sampling, bool) or not isinstance(sampling, numbers.Real) \
            or not sampling > 0:
        raise InvalidParameter(
            "sampling must be a positive number (got %r)." % (sampling,))

    size = int(sampling * n) if sampling < 1 else int(sampling)
    size = min(size, n)

    # a sample covering all n observations runs on the full data
    if size <= k and size < n:
        raise InvalidParameter(
            "A sample of %s observations (sampling=%s, n=%s) must be "
            "larger than k=%s." % (size, sampling, n, k))

    return size


def draw_sample(n, size, random_state, carried=None):
    """Draw `size` distinct observations, always including `carried`.

    Returns
    -------
    sample : np.ndarray, shape=(size,)
        Sorted observation indices.
    """

    if carried is None:
        pool = np.arange(n)
        random_state.shuffle_prefix(pool, size)
        sample = pool[:size]
    else:
        carried = np.asarray(carried, dtype=int)
        is_carried = np.zeros(n, dtype=bool)
        is_carried[carried] = True

        pool = np.flatnonzero(~is_carried)
        extra = size - len(carried)
        random_state.shuffle_prefix(pool, extra)
        sample = np.concatenate([carried, pool[:extra]])

    return np.sort(sample)


def _cluster_sample(dm, k, size, init, maxiter, fasttol, random_state,
                    carried=None):
    """Cluster one CLARA sample and score it on the full data set."""

    sample = draw_sample(dm.n, size, random_state, carried)
    sub = dm.subset(sample)

    medoids = init(sub, k, None if init is build else random_state)
    medoids, _ = fastpam_optimize(sub, medoids, maxiter, fasttol)

    return util.make_result(dm, sample[medoids])
