"""Seedable random number source shared by the stochastic parts of the
clustering engines (LAB, CLARA sampling and CLARANS search).

Every component that needs randomness takes a `RandomSource` (or a
seed) explicitly; nothing here touches numpy's global random state.
"""

import numbers

import numpy as np

from ..exception import InvalidParameter

DEFAULT_SEED = 123456789


class RandomSource:
    """Deterministic pseudo-random generator.

    Two sources built from the same seed produce identical streams, for
    every operation below, which is what makes LAB, FastCLARA and
    FastCLARANS reproducible.

    Parameters
    ----------
    seed : int
        Non-negative integer seed.
    """

    def __init__(self, seed):
        if seed is None:
            raise InvalidParameter(
                "A seed is required to build a RandomSource.")
        if (isinstance(seed, bool) or not isinstance(seed, numbers.Integral)
                or seed < 0):
            raise InvalidParameter(
                "Seed must be a non-negative integer (got %r)." % (seed,))

        self.seed = int(seed)
        self._generator = np.random.Generator(np.random.PCG64(self.seed))

    def __repr__(self):
        return 'RandomSource(seed=%s)' % self.seed

    def next_u64(self):
        """Draw the next raw unsigned 64-bit word from the stream."""
        return int(self._generator.bit_generator.random_raw())

    def integers(self, bound):
        """Draw a uniform integer in [0, bound).

        numpy draws bounded integers by rejection sampling, so the
        result carries no modulo bias.
        """
        if bound < 1:
            raise InvalidParameter(
                "Bound for a random integer must be positive (got %s)."
                % bound)
        return int(self._generator.integers(bound))

    def uniform(self):
        """Draw a uniform real in [0, 1)."""
        return float(self._generator.random())

    def shuffle_prefix(self, indices, m):
        """Partially shuffle `indices` in place so that its first `m`
        entries are a uniform sample, without replacement, of the whole
        array.

        Parameters
        ----------
        indices : np.ndarray
            Index array to permute. Views are permuted in place, which
            lets callers shuffle only the live prefix of a larger pool.
        m : int
            Number of leading positions to fill.

        Returns
        -------
        indices : np.ndarray
            The same array, for convenience.
        """

        n = len(indices)
        if m < 0 or m > n:
            raise InvalidParameter(
                "Cannot draw %s of %s indices without replacement." % (m, n))

        for i in range(min(m, n - 1)):
            j = i + self.integers(n - i)
            indices[i], indices[j] = indices[j], indices[i]

        return indices

    def spawn(self):
        """Derive an independent child source from this stream."""
        return RandomSource(self.next_u64())


def check_random_source(seed):
    """Turn `seed` into a RandomSource.

    Parameters
    ----------
    seed : int or RandomSource
        If a RandomSource, it is returned unchanged; an integer builds a
        fresh source. None is rejected, since the callers of this
        function all require randomness.

    Returns
    -------
    random_source : RandomSource
    """

    if isinstance(seed, RandomSource):
        return seed
    if seed is None:
        raise InvalidParameter(
            "This algorithm is randomized and requires a seed.")
    return RandomSource(seed)
