"""Read-only access to a precomputed pairwise distance relation.

Distances are stored once per unordered pair in a flat, column-wise
upper-triangular vector: the pair (i, j) with i < j lives at position
``i + j*(j-1)/2``, so column j holds the j distances from observations
0..j-1 to j.
"""

import logging
import numbers

import numpy as np
from scipy.spatial import distance as ssd

from .exception import DataInvalid, InvalidParameter

logger = logging.getLogger(__name__)


def storage_size(n):
    """Number of stored distances for `n` observations."""
    return n * (n - 1) // 2


def infer_n_observations(length):
    """Recover n from the length of a triangular storage vector.

    Raises
    ------
    InvalidParameter
        If `length` isn't n(n-1)/2 for any integer n.
    """

    n = int(round((1 + np.sqrt(1 + 8 * length)) / 2))
    if storage_size(n) != length:
        raise InvalidParameter(
            "A distance vector of length %s doesn't correspond to any "
            "number of observations." % length)
    return n


class DistanceMatrix:
    """Immutable accessor over triangular distance storage.

    Parameters
    ----------
    data : array-like, shape=(n*(n-1)/2,)
        Pairwise distances in column-wise upper-triangular order.
    n : int
        Number of observations.

    Raises
    ------
    InvalidParameter
        If `n` isn't a positive integer or `data` has the wrong length.
    DataInvalid
        If any distance is negative or NaN.
    """

    def __init__(self, data, n):
        if (isinstance(n, bool) or not isinstance(n, numbers.Integral)
                or n < 1):
            raise InvalidParameter(
                "Number of observations must be a positive integer "
                "(got %r)." % (n,))

        data = np.array(data, dtype=float).ravel()
        if len(data) != storage_size(n):
            raise InvalidParameter(
                "Distance storage has length %s, but %s observations "
                "require n(n-1)/2 = %s." % (len(data), n, storage_size(n)))
        if np.isnan(data).any():
            raise DataInvalid("Distance storage contains NaN values.")
        if (data < 0).any():
            raise DataInvalid(
                "Distances must be nonnegative (minimum was %s)."
                % data.min())

        data.flags.writeable = False

        self.n = int(n)
        self._data = data

        # offset of column j, i.e. the position of the pair (0, j)
        cols = np.arange(self.n, dtype=np.int64)
        self._col_starts = cols * (cols - 1) // 2

    @classmethod
    def from_square(cls, D):
        """Build from a square, symmetric matrix with a zero diagonal.

        Parameters
        ----------
        D : array-like, shape=(n, n)

        Returns
        -------
        dm : DistanceMatrix
        """

        D = np.asarray(D, dtype=float)
        try:
            ssd.is_valid_dm(D, tol=1e-10, throw=True, name='D')
        except ValueError as e:
            raise InvalidParameter(str(e))

        j, i = np.tril_indices(len(D), -1)
        return cls(D[i, j], len(D))

    @classmethod
    def from_condensed(cls, y):
        """Build from a scipy-style condensed distance vector (as
        returned by `scipy.spatial.distance.pdist`), which is ordered
        row-wise rather than column-wise.

        Parameters
        ----------
        y : array-like, shape=(n*(n-1)/2,)

        Returns
        -------
        dm : DistanceMatrix
        """

        y = np.asarray(y, dtype=float)
        try:
            ssd.num_obs_y(y)
        except ValueError as e:
            raise InvalidParameter(str(e))

        return cls.from_square(ssd.squareform(y, checks=False))

    def __len__(self):
        return self.n

    def __repr__(self):
        return 'DistanceMatrix(n=%s)' % self.n

    def __getitem__(self, ij):
        i, j = ij
        return self.distance(i, j)

    @property
    def data(self):
        """The (read-only) triangular storage vector."""
        return self._data

    def _check_index(self, i):
        if not 0 <= i < self.n:
            raise IndexError(
                "Observation %s is out of range for %s observations."
                % (i, self.n))

    def distance(self, i, j):
        """Distance between observations `i` and `j`.

        Raises
        ------
        IndexError
            If `i` or `j` lies outside [0, n).
        """

        self._check_index(i)
        self._check_index(j)

        if i == j:
            return 0.0
        if i > j:
            i, j = j, i
        return float(self._data[i + self._col_starts[j]])

    def row(self, i):
        """Distances from observation `i` to every observation.

        Returns
        -------
        row : np.ndarray, shape=(n,)
        """

        self._check_index(i)

        row = np.empty(self.n, dtype=float)
        # column i is contiguous in storage; the rest of the row is
        # spread over the later columns
        start = self._col_starts[i]
        row[:i] = self._data[start:start + i]
        row[i] = 0
        row[i+1:] = self._data[i + self._col_starts[i+1:]]

        return row

    def rows(self, indices):
        """Distances from each of `indices` to every observation.

        Returns
        -------
        rows : np.ndarray, shape=(len(indices), n)
        """

        out = np.empty((len(indices), self.n), dtype=float)
        for r, i in enumerate(indices):
            out[r] = self.row(i)
        return out

    def block(self, rows, cols):
        """Distances between each of `rows` and each of `cols`, read
        straight from storage in O(len(rows) * len(cols)).

        Returns
        -------
        block : np.ndarray, shape=(len(rows), len(cols))
        """

        rows = np.asarray(rows, dtype=np.int64).reshape(-1, 1)
        cols = np.asarray(cols, dtype=np.int64).reshape(1, -1)
        for indices in (rows, cols):
            if indices.size and (indices.min() < 0
                                 or indices.max() >= self.n):
                raise IndexError(
                    "Block indices must lie in [0, %s)." % self.n)

        lo, hi = np.minimum(rows, cols), np.maximum(rows, cols)
        same = lo == hi

        out = np.zeros(same.shape, dtype=float)
        out[~same] = self._data[lo[~same] + self._col_starts[hi[~same]]]
        return out

    def subset(self, indices):
        """Distance matrix induced by a subset of the observations.

        Observation r of the returned matrix is observation
        ``indices[r]`` of this one.

        Parameters
        ----------
        indices : array-like of int
            Distinct observation indices.

        Returns
        -------
        dm : DistanceMatrix
        """

        indices = np.asarray(indices, dtype=np.int64)
        if len(indices) and (indices.min() < 0 or indices.max() >= self.n):
            raise IndexError(
                "Subset indices must lie in [0, %s)." % self.n)
        if len(np.unique(indices)) != len(indices):
            raise InvalidParameter("Subset indices must be distinct.")

        # column-wise order: (0, 1), (0, 2), (1, 2), (0, 3), ...
        b, a = np.tril_indices(len(indices), -1)
        i, j = indices[a], indices[b]
        lo, hi = np.minimum(i, j), np.maximum(i, j)

        return DistanceMatrix(self._data[lo + self._col_starts[hi]],
                              len(indices))

    def square(self):
        """Dense, symmetric (n, n) copy of the distances."""

        D = np.zeros((self.n, self.n), dtype=float)
        j, i = np.tril_indices(self.n, -1)
        D[i, j] = self._data
        D[j, i] = self._data
        return D


def as_distance_matrix(X, n=None):
    """Coerce `X` into a DistanceMatrix.

    Parameters
    ----------
    X : DistanceMatrix, array-like
        An existing DistanceMatrix (returned as-is), a square (n, n)
        distance matrix, or a 1-D triangular storage vector.
    n : int, default=None
        Number of observations for a storage vector. Inferred from its
        length when not given.

    Returns
    -------
    dm : DistanceMatrix
    """

    if isinstance(X, DistanceMatrix):
        if n is not None and n != X.n:
            raise InvalidParameter(
                "Got n=%s for a DistanceMatrix over %s observations."
                % (n, X.n))
        return X

    X = np.asarray(X, dtype=float)
    if X.ndim == 2:
        if n is not None and n != len(X):
            raise InvalidParameter(
                "Got n=%s for a %s x %s distance matrix."
                % (n, X.shape[0], X.shape[1]))
        return DistanceMatrix.from_square(X)
    elif X.ndim == 1:
        if n is None:
            n = infer_n_observations(len(X))
        return DistanceMatrix(X, n)
    else:
        raise InvalidParameter(
            "Distances must be a storage vector or a square matrix "
            "(got an array of shape %s)." % (X.shape,))
