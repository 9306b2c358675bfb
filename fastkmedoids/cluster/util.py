import logging
import numbers
from collections import namedtuple

import numpy as np

from ..exception import ImproperlyConfigured, InvalidParameter
from .assignment import Assignment

logger = logging.getLogger(__name__)

# relative size a cost change must exceed to count as an improvement;
# keeps rounding noise from cycling the swap loops
IMPROVEMENT_TOLERANCE = 1e-12


class KMedoidsMixin:
    """Attribute accessors shared by the k-medoids estimators, which
    keep their output in `self.result_`.
    """

    def _check_fitted(self):
        if not hasattr(self, 'result_'):
            raise ImproperlyConfigured(
                "The clusterer must be fit before its results can be "
                "accessed.")

    @property
    def labels_(self):
        self._check_fitted()
        return self.result_.assignment

    @property
    def medoid_indices_(self):
        self._check_fitted()
        return self.result_.medoids

    @property
    def cost_(self):
        self._check_fitted()
        return self.result_.cost


class KMedoidsResult(namedtuple('KMedoidsResult',
                                ['cost',
                                 'medoids',
                                 'assignment'])):
    """Outcome of a k-medoids run.

    Attributes
    ----------
    cost : float
        Sum of the distances of every observation to its medoid.
    medoids : np.ndarray, shape=(k,)
        Observation index of each medoid.
    assignment : np.ndarray, shape=(n,)
        Position in `medoids` of each observation's medoid.
    """

    __slots__ = ()

    @property
    def n_clusters(self):
        return len(self.medoids)

    def members(self, cluster):
        """Observation indices assigned to the given cluster."""
        return np.flatnonzero(self.assignment == cluster)


def make_result(dm, medoids):
    """Freeze a medoid set into a KMedoidsResult, assigning every
    observation from scratch so the reported cost is exact.

    Parameters
    ----------
    dm : DistanceMatrix
    medoids : array-like, shape=(k,)

    Returns
    -------
    result : KMedoidsResult
    """

    medoids = np.array(medoids, dtype=int)
    assignment = Assignment.compute(dm, medoids)

    labels = assignment.nearest_index.astype(int)
    medoids.flags.writeable = False
    labels.flags.writeable = False

    return KMedoidsResult(
        cost=assignment.cost(),
        medoids=medoids,
        assignment=labels)


def improves(delta, cost):
    """Does a cost change of `delta` improve a clustering of cost
    `cost`?"""
    return delta < -IMPROVEMENT_TOLERANCE * cost


def check_n_clusters(k, n):
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidParameter(
            "Number of clusters must be an integer (got %r)." % (k,))
    if k < 1:
        raise InvalidParameter(
            "Number of clusters must be at least 1 (got %s)." % k)
    if k > n:
        raise InvalidParameter(
            "Can't find %s medoids among %s observations." % (k, n))
    return int(k)


def check_maxiter(maxiter):
    if isinstance(maxiter, bool) or not isinstance(maxiter, numbers.Integral) \
            or maxiter < 0:
        raise InvalidParameter(
            "maxiter must be a non-negative integer (got %r)." % (maxiter,))
    return int(maxiter)


def check_positive_int(value, name):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) \
            or value < 1:
        raise InvalidParameter(
            "%s must be a positive integer (got %r)." % (name, value))
    return int(value)
