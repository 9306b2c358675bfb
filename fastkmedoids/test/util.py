import numpy as np

from scipy.spatial.distance import pdist
from sklearn.datasets import make_blobs

from ..distance import DistanceMatrix

BLOB_CENTERS = [[0, 0], [10, 0], [0, 10]]


def blob_distances(n_samples=90, centers=BLOB_CENTERS, cluster_std=0.5,
                   random_state=0):
    """Euclidean distances between well-separated gaussian blobs.

    Returns
    -------
    dm : DistanceMatrix
    labels : np.ndarray, shape=(n_samples,)
        Blob each observation was drawn from.
    """

    X, y = make_blobs(
        n_samples=n_samples, centers=centers, cluster_std=cluster_std,
        random_state=random_state)

    return DistanceMatrix.from_condensed(pdist(X)), y


def random_distances(n, dim=2, seed=0):
    """Distances between uniformly scattered points, free of ties."""

    X = np.random.RandomState(seed).uniform(size=(n, dim))
    return DistanceMatrix.from_condensed(pdist(X))


def brute_force_cost(dm, medoids):
    D = dm.square()
    return D[:, np.asarray(medoids)].min(axis=1).sum()


def assert_local_optimum(dm, medoids, rtol=1e-9):
    """No single (medoid, non-medoid) swap lowers the cost."""

    cost = brute_force_cost(dm, medoids)
    medoids = list(medoids)

    for slot in range(len(medoids)):
        for c in range(dm.n):
            if c in medoids:
                continue
            swapped = medoids.copy()
            swapped[slot] = c
            new_cost = brute_force_cost(dm, swapped)
            assert new_cost >= cost * (1 - rtol), \
                "Swapping slot %s for %s lowers cost %s to %s." % (
                    slot, c, cost, new_cost)


def assert_pure_clusters(labels, truth):
    """Every true group falls in exactly one cluster, and vice versa."""

    pairs = set(zip(truth, labels))
    assert len(pairs) == len(np.unique(truth)) == len(np.unique(labels)), \
        pairs
