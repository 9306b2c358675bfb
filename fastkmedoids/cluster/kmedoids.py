import inspect
import logging

from sklearn.base import BaseEstimator, ClusterMixin

from ..distance import DistanceMatrix, as_distance_matrix
from ..exception import InvalidParameter
from ..util.log import timed
from ..util.random import DEFAULT_SEED

from .pam import pam
from .fastpam import fastpam
from .clara import fastclara
from .clarans import fastclarans
from . import util

logger = logging.getLogger(__name__)

ALGORITHMS = {
    'pam': pam,
    'fastpam': fastpam,
    'fastclara': fastclara,
    'fastclarans': fastclarans,
}


def get_algorithm(name):
    try:
        return ALGORITHMS[str(name).lower()]
    except KeyError:
        raise InvalidParameter(
            "'%s' is not a recognized algorithm; choose from %s."
            % (name, sorted(ALGORITHMS)))


def algorithm_parameters(name):
    """Names of the tuning parameters accepted by an algorithm."""

    params = inspect.signature(get_algorithm(name)).parameters
    return [p for p in params if p not in ('distances', 'k')]


def kmedoids(distances, n, k, algorithm='fastpam', **params):
    """K-medoids clustering of precomputed distances.

    K-medoids is a clustering algorithm similar to the k-means
    algorithm, but the center of each cluster is required to actually
    be one of the observations, so only pairwise distances are needed.

    Parameters
    ----------
    distances : array-like, shape=(n*(n-1)/2,)
        Pairwise distances in column-wise upper-triangular order: the
        distance between observations i < j is at ``i + j*(j-1)/2``.
    n : int
        Number of observations.
    k : int
        Number of clusters, 1 <= k <= n.
    algorithm : {'pam', 'fastpam', 'fastclara', 'fastclarans'}
        Clustering algorithm to run.
    **params
        Algorithm-specific parameters (`maxiter`, `initializer`,
        `fasttol`, `numsamples`, `sampling`, `independent`, `keep`,
        `seed`, `numlocal`, `maxneighbor`, `n_jobs`); see the
        individual algorithms.

    Returns
    -------
    result : KMedoidsResult
        Total cost, medoid indices, and assignment of each observation
        to a medoid.
    """

    method = get_algorithm(algorithm)

    unknown = set(params) - set(algorithm_parameters(algorithm))
    if unknown:
        raise InvalidParameter(
            "Algorithm '%s' doesn't accept parameter(s) %s."
            % (algorithm, ', '.join(sorted(unknown))))

    dm = DistanceMatrix(distances, n)

    logger.info("Clustering %s observations into %s clusters with %s.",
                n, k, algorithm)

    return method(dm, k, **params)


class KMedoids(BaseEstimator, ClusterMixin, util.KMedoidsMixin):
    """SKlearn-style object for k-medoids clustering of precomputed
    distances.

    Parameters
    ----------
    n_clusters : int
        The number of clusters (medoids) to find.
    algorithm : {'pam', 'fastpam', 'fastclara', 'fastclarans'}, \
            default='fastpam'
        Clustering algorithm to run.
    maxiter : int, default=0
        Maximum number of swap iterations (pam, fastpam, fastclara); 0
        runs to convergence.
    initializer : {'LAB', 'BUILD'}, default='LAB'
        Initialization method (fastpam, fastclara). PAM always uses
        BUILD.
    fasttol : float, default=1.0
        Tolerance for additional swaps (fastpam, fastclara).
    numsamples : int, default=5
        Number of samples (fastclara).
    sampling : float, default=0.25
        Sample size, relative when below 1 (fastclara).
    independent : bool, default=False
        Draw samples without carrying medoids forward (fastclara).
    keep : {'best', 'last'}, default='best'
        Medoids carried into the next sample (fastclara).
    numlocal : int, default=2
        Number of restarts (fastclarans).
    maxneighbor : float, default=0.025
        Non-improving samples before accepting a local optimum,
        relative when below 1 (fastclarans).
    seed : int, default=123456789
        Seed for every randomized step.
    n_jobs : int, default=1
        Parallel workers for independent samples or restarts.

    Attributes
    ----------
    result_ : KMedoidsResult
    labels_ : np.ndarray, shape=(n,)
    medoid_indices_ : np.ndarray, shape=(n_clusters,)
    cost_ : float
    runtime_ : float
        Wall time of the last `fit`, in seconds.
    """

    def __init__(
            self, n_clusters, algorithm='fastpam', maxiter=0,
            initializer='LAB', fasttol=1.0, numsamples=5, sampling=0.25,
            independent=False, keep='best', numlocal=2, maxneighbor=0.025,
            seed=DEFAULT_SEED, n_jobs=1):

        self.n_clusters = n_clusters
        self.algorithm = algorithm
        self.maxiter = maxiter
        self.initializer = initializer
        self.fasttol = fasttol
        self.numsamples = numsamples
        self.sampling = sampling
        self.independent = independent
        self.keep = keep
        self.numlocal = numlocal
        self.maxneighbor = maxneighbor
        self.seed = seed
        self.n_jobs = n_jobs

    def fit(self, X, y=None):
        """Cluster the observations whose distances are `X`.

        Parameters
        ----------
        X : DistanceMatrix or array-like
            A DistanceMatrix, a square (n, n) distance matrix, or a
            triangular storage vector.
        y : ignored
        """

        method = get_algorithm(self.algorithm)
        params = {name: getattr(self, name)
                  for name in algorithm_parameters(self.algorithm)}

        with timed("Fit %s in %.2f sec.", logger.info,
                   self.algorithm) as timing:
            self.result_ = method(as_distance_matrix(X), self.n_clusters,
                                  **params)

        self.runtime_ = timing.elapsed
        return self
