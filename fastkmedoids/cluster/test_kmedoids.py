import warnings

import pytest

import numpy as np
from numpy.testing import assert_array_equal, assert_allclose

from sklearn.base import clone

from scipy.spatial.distance import pdist

from ..distance import DistanceMatrix
from ..exception import ImproperlyConfigured, InvalidParameter
from ..test.util import (blob_distances, random_distances, brute_force_cost,
                         assert_local_optimum, assert_pure_clusters)

from .fastpam import fastpam, fastpam_optimize
from .initializers import build
from .kmedoids import KMedoids, kmedoids, algorithm_parameters, ALGORITHMS
from .pam import pam, pam_optimize
from . import util


def check_result(dm, result, k):
    """Medoids are distinct, assignments point at the nearest medoid,
    and the cost is exact."""

    D = dm.square()

    assert result.n_clusters == k
    assert len(np.unique(result.medoids)) == k
    assert result.assignment.shape == (dm.n,)

    to_medoids = D[:, result.medoids]
    assert_allclose(to_medoids[np.arange(dm.n), result.assignment],
                    to_medoids.min(axis=1))
    assert_allclose(result.cost, brute_force_cost(dm, result.medoids))

    # every medoid belongs to its own cluster
    assert_array_equal(result.assignment[result.medoids], np.arange(k))


def test_pam_line():
    dm = DistanceMatrix([1, 2, 1, 10, 9, 8], 4)

    result = pam(dm, 2)

    assert_array_equal(result.medoids, [1, 3])
    assert_array_equal(result.assignment, [0, 0, 0, 1])
    assert result.cost == 2


def test_uniform_distances():
    n, k, d = 10, 3, 2.5
    dm = DistanceMatrix(np.full(45, d), n)

    for result in [pam(dm, k), fastpam(dm, k),
                   fastpam(dm, k, initializer='BUILD')]:
        check_result(dm, result, k)
        assert_allclose(result.cost, (n - k) * d)


def test_pam_local_optimum():
    dm = random_distances(30, seed=21)

    result = pam(dm, 3)

    check_result(dm, result, 3)
    assert_local_optimum(dm, result.medoids)


def test_pam_cost_never_increases():
    dm = random_distances(60, seed=13)

    medoids, costs = pam_optimize(dm, build(dm, 5))

    assert len(costs) >= 1
    assert (np.diff(costs) <= 0).all(), costs
    assert_allclose(costs[-1], brute_force_cost(dm, medoids))


def test_pam_maxiter():
    dm = random_distances(60, seed=13)

    _, costs = pam_optimize(dm, [0, 1, 2, 3, 4], maxiter=1)

    assert len(costs) <= 2


def test_pam_all_points_are_medoids():
    dm = random_distances(8)

    result = pam(dm, 8)

    assert result.cost == 0
    assert_array_equal(np.sort(result.medoids), np.arange(8))


def test_pam_single_cluster():
    dm = random_distances(20, seed=3)

    result = pam(dm, 1)

    assert result.medoids[0] == np.argmin(dm.square().sum(axis=1))
    assert_array_equal(result.assignment, 0)


def test_fastpam_local_optimum():
    dm = random_distances(40, seed=31)

    for initializer in ['LAB', 'BUILD']:
        for fasttol in [0.0, 0.5, 1.0]:
            result = fastpam(dm, 4, initializer=initializer,
                             fasttol=fasttol)

            check_result(dm, result, 4)
            assert_local_optimum(dm, result.medoids)


def test_fastpam_cost_never_increases():
    dm = random_distances(80, seed=7)

    medoids, costs = fastpam_optimize(dm, [0, 1, 2, 3, 4, 5])

    assert (np.diff(costs) <= 1e-9).all(), costs
    assert_allclose(costs[-1], brute_force_cost(dm, medoids))


def test_fastpam_finds_blobs():
    dm, truth = blob_distances()

    fast = fastpam(dm, 3)
    slow = pam(dm, 3)

    assert_pure_clusters(fast.assignment, truth)
    assert_pure_clusters(slow.assignment, truth)
    assert fast.cost <= slow.cost * (1 + 1e-9)


def test_fastpam_same_seed_same_result():
    dm = random_distances(150, seed=9)

    a = fastpam(dm, 6, seed=3)
    b = fastpam(dm, 6, seed=3)

    assert_array_equal(a.medoids, b.medoids)
    assert_array_equal(a.assignment, b.assignment)
    assert a.cost == b.cost


def test_fastpam_build_ignores_seed():
    dm = random_distances(50, seed=9)

    a = fastpam(dm, 3, initializer='BUILD', seed=1)
    b = fastpam(dm, 3, initializer='BUILD', seed=None)

    assert_array_equal(a.medoids, b.medoids)


def test_single_cluster_and_all_medoids():
    dm = random_distances(12, seed=1)

    one = fastpam(dm, 1)
    assert_allclose(one.cost, dm.square().sum(axis=1).min())

    every = fastpam(dm, 12)
    assert every.cost == 0


def test_result_is_frozen():
    dm = random_distances(20)
    result = fastpam(dm, 2)

    with pytest.raises(ValueError):
        result.medoids[0] = 5

    with pytest.raises(ValueError):
        result.assignment[0] = 1

    assert_array_equal(result.members(0),
                       np.flatnonzero(result.assignment == 0))


@pytest.mark.parametrize('algorithm', ['pam', 'fastpam'])
def test_invalid_parameters(algorithm):
    dm = random_distances(10)
    method = ALGORITHMS[algorithm]

    for k in [0, 11, -1, 2.5, True]:
        with pytest.raises(InvalidParameter):
            method(dm, k)

    with pytest.raises(InvalidParameter):
        method(dm, 2, maxiter=-1)


def test_fastpam_invalid_parameters():
    dm = random_distances(10)

    for fasttol in [-0.1, 1.5]:
        with pytest.raises(InvalidParameter):
            fastpam(dm, 2, fasttol=fasttol)

    with pytest.raises(InvalidParameter):
        fastpam(dm, 2, initializer='random')

    with pytest.raises(InvalidParameter):
        fastpam(dm, 2, seed=None)


def test_pam_warns_on_large_data(monkeypatch):
    from . import pam as pam_module
    from ..exception import PerformanceWarning

    monkeypatch.setattr(pam_module, 'PAM_WARN_SIZE', 10)
    dm = random_distances(15)

    with warnings.catch_warnings(record=True) as w:
        warnings.simplefilter('always')
        pam(dm, 2)

    assert any(issubclass(x.category, PerformanceWarning) for x in w)


def test_improves():
    assert util.improves(-1, 10)
    assert not util.improves(0, 10)
    assert not util.improves(-1e-14, 10)
    assert not util.improves(np.inf, 10)


def test_kmedoids_dispatch():
    dm = DistanceMatrix([1, 2, 1, 10, 9, 8], 4)

    result = kmedoids(dm.data, 4, 2, algorithm='pam')
    assert_array_equal(result.medoids, [1, 3])

    result = kmedoids(dm.data, 4, 2, algorithm='FastPAM', seed=5,
                      initializer='BUILD')
    assert result.cost == 2


def test_kmedoids_dispatch_errors():
    dm = random_distances(10)

    with pytest.raises(InvalidParameter):
        kmedoids(dm.data, 10, 2, algorithm='kmeans')

    with pytest.raises(InvalidParameter):
        kmedoids(dm.data, 10, 2, algorithm='pam', seed=3)

    with pytest.raises(InvalidParameter):
        kmedoids(dm.data, 11, 2)


def test_algorithm_parameters():
    assert algorithm_parameters('pam') == ['maxiter']
    assert algorithm_parameters('fastpam') == \
        ['maxiter', 'initializer', 'fasttol', 'seed']
    assert 'numlocal' in algorithm_parameters('fastclarans')
    assert 'keep' in algorithm_parameters('fastclara')


@pytest.mark.parametrize('algorithm', sorted(ALGORITHMS))
def test_estimator(algorithm):
    dm, truth = blob_distances()

    clustering = KMedoids(n_clusters=3, algorithm=algorithm,
                          maxneighbor=1000)

    with pytest.raises(ImproperlyConfigured):
        clustering.labels_

    labels = clustering.fit_predict(dm.square())

    assert_array_equal(labels, clustering.labels_)
    assert_array_equal(clustering.medoid_indices_, clustering.result_.medoids)
    assert clustering.cost_ == clustering.result_.cost
    assert clustering.runtime_ >= 0
    assert_pure_clusters(labels, truth)


def test_estimator_params():
    clustering = KMedoids(n_clusters=4, algorithm='fastclara', sampling=40,
                          seed=9)
    params = clustering.get_params()

    assert params['n_clusters'] == 4
    assert params['sampling'] == 40
    assert params['seed'] == 9

    other = clone(clustering)
    assert other.get_params() == params


def test_estimator_accepts_storage_vector():
    dm, _ = blob_distances(n_samples=30)

    a = KMedoids(3, algorithm='pam').fit(dm.data)
    b = KMedoids(3, algorithm='pam').fit(dm)

    assert_array_equal(a.labels_, b.labels_)


def line_with_duplicates():
    # three observations at 0, two at 5 and one at 9
    positions = np.array([0, 0, 0, 5, 5, 9], dtype=float)
    return DistanceMatrix.from_condensed(pdist(positions[:, None]))


def check_valid(dm, result, k):
    """Like `check_result`, but tolerant of tied medoids, which may
    claim each other's members."""

    D = dm.square()

    assert len(np.unique(result.medoids)) == k
    assert ((result.assignment >= 0) & (result.assignment < k)).all()

    to_medoids = D[:, result.medoids]
    assert_allclose(to_medoids[np.arange(dm.n), result.assignment],
                    to_medoids.min(axis=1))
    assert_allclose(result.cost, brute_force_cost(dm, result.medoids))


def test_fastpam_not_worse_than_pam_from_same_start():
    # not a metric: 0 and 1 coincide, yet only 1 is close to 2
    dm = DistanceMatrix([0, 10, 1], 3)

    slow_medoids, slow = pam_optimize(dm, [0])
    fast_medoids, fast = fastpam_optimize(dm, [0])

    assert_array_equal(slow_medoids, [1])
    assert_array_equal(fast_medoids, [1])
    assert fast[-1] <= slow[-1]
    assert_local_optimum(dm, fast_medoids)

    blobs, _ = blob_distances()
    start = [0, 1, 2]
    for fasttol in [0.0, 1.0]:
        _, slow = pam_optimize(blobs, start)
        _, fast = fastpam_optimize(blobs, start, fasttol=fasttol)

        assert fast[-1] <= slow[-1] * (1 + 1e-9)


def test_fastpam_swaps_in_zero_distance_candidate():
    dm = DistanceMatrix([0, 10, 1], 3)

    for initializer in [build, lambda dm, k, random_state: np.array([0])]:
        result = fastpam(dm, 1, initializer=initializer)
        assert result.cost == 1


@pytest.mark.parametrize('algorithm,params', [
    ('pam', {}),
    ('fastpam', {}),
    ('fastpam', {'initializer': 'BUILD', 'fasttol': 0.0}),
    ('fastclara', {'sampling': 5}),
    ('fastclara', {'sampling': 5, 'independent': True}),
    ('fastclarans', {'maxneighbor': 1000}),
])
def test_duplicate_observations(algorithm, params):
    dm = line_with_duplicates()

    result = ALGORITHMS[algorithm](dm, 3, **params)

    check_valid(dm, result, 3)
    if algorithm != 'fastclara':
        # every swap-local optimum puts a medoid on 0, 5 and 9
        assert result.cost == 0


def test_duplicate_observations_ties():
    dm = line_with_duplicates()

    result = pam(dm, 2)

    # observations at 0 and at 5 tie for the smallest total distance;
    # BUILD takes the lower index
    check_valid(dm, result, 2)
    assert_allclose(result.cost, 4)
    assert_array_equal(np.sort(result.medoids), [0, 3])
