"""Nearest/second-nearest medoid bookkeeping shared by the PAM family.

Every swap-based engine keeps, for each observation, the slot and
distance of its nearest medoid and of its second-nearest medoid. The
cost change of any swap can be read off this record in O(n), and the
record itself can be patched after a swap without a full O(nk)
reassignment.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def _nearest_two(rows):
    """Slot and distance of the two smallest entries of each column of
    `rows` (shape (k, m)). Ties go to the lowest slot.
    """

    cols = np.arange(rows.shape[1])

    nearest_idx = np.argmin(rows, axis=0)
    nearest = rows[nearest_idx, cols]

    if rows.shape[0] < 2:
        second_idx = np.full(rows.shape[1], -1, dtype=int)
        second = np.full(rows.shape[1], np.inf)
    else:
        masked = rows.copy()
        masked[nearest_idx, cols] = np.inf
        second_idx = np.argmin(masked, axis=0)
        second = masked[second_idx, cols]

    return nearest_idx, nearest, second_idx, second


class Assignment:
    """Per-observation assignment record for a medoid set.

    Attributes
    ----------
    nearest_index : np.ndarray, shape=(n,)
        Slot (position in the medoid array) of each observation's
        nearest medoid.
    nearest : np.ndarray, shape=(n,)
        Distance to that medoid.
    second_index : np.ndarray, shape=(n,)
        Slot of the second-nearest medoid, -1 when k == 1.
    second : np.ndarray, shape=(n,)
        Distance to the second-nearest medoid, inf when k == 1.
    """

    def __init__(self, nearest_index, nearest, second_index, second):
        self.nearest_index = nearest_index
        self.nearest = nearest
        self.second_index = second_index
        self.second = second

    @classmethod
    def compute(cls, dm, medoids):
        """Assign every observation in `dm` to its nearest medoids from
        scratch. O(nk).
        """
        return cls(*_nearest_two(dm.rows(medoids)))

    def __len__(self):
        return len(self.nearest)

    def cost(self):
        """Total distance of every observation to its nearest medoid."""
        return float(self.nearest.sum())

    def swap_delta(self, row, slot):
        """Exact change in cost from replacing the medoid in `slot` by
        the observation whose distances are `row`. O(n).
        """

        # points losing their medoid fall back to the closer of the
        # candidate and their second-nearest medoid; everyone else only
        # moves if the candidate is closer than their current medoid.
        lost = self.nearest_index == slot
        return float(np.where(
            lost,
            np.minimum(row, self.second) - self.nearest,
            np.minimum(row - self.nearest, 0)).sum())

    def swap_deltas(self, row, k):
        """Change in cost from inserting the observation whose distances
        are `row` while removing each of the k medoids in turn.

        All k deltas come out of a single O(n) pass over the points,
        which is the key trick of FastPAM and FastCLARANS.

        Parameters
        ----------
        row : np.ndarray, shape=(n,)
            Distances from the candidate to every observation.
        k : int
            Number of medoids.

        Returns
        -------
        deltas : np.ndarray, shape=(k,)
            deltas[m] is the change in total cost of swapping medoid m
            for the candidate.
        """

        # gain of adding the candidate without removing anything
        shared = np.minimum(row - self.nearest, 0)
        # correction for points whose nearest medoid is the one removed
        own = np.minimum(row, self.second) - self.nearest - shared

        return shared.sum() + np.bincount(
            self.nearest_index, weights=own, minlength=k)

    def swap(self, dm, medoids, slot, candidate):
        """Replace ``medoids[slot]`` by `candidate` and patch this record
        to match, in place.

        Only points whose nearest medoid was removed (and the candidate
        is no better than their second) or whose second-nearest medoid
        was removed (and the candidate is farther) need a full
        reassignment; everything else is updated from the candidate's
        distances alone.
        """

        row = dm.row(candidate)
        medoids[slot] = candidate

        ni, nd = self.nearest_index, self.nearest
        si, sd = self.second_index, self.second

        lost_nearest = ni == slot
        lost_second = (si == slot) & ~lost_nearest
        closer = ~lost_nearest & (row < nd)

        keep_nearest = lost_nearest & (row <= sd)
        redo = (lost_nearest & ~keep_nearest) | \
            (lost_second & ~closer & (row > sd))
        keep_second = lost_second & ~closer & (row <= sd)
        new_second = ~lost_nearest & ~lost_second & ~closer & (row < sd)

        nd[keep_nearest] = row[keep_nearest]

        si[closer] = ni[closer]
        sd[closer] = nd[closer]
        ni[closer] = slot
        nd[closer] = row[closer]

        sd[keep_second] = row[keep_second]

        si[new_second] = slot
        sd[new_second] = row[new_second]

        redo = np.flatnonzero(redo)
        if len(redo):
            logger.debug("Reassigning %s of %s points after swapping "
                         "slot %s to %s.", len(redo), len(nd), slot,
                         candidate)
            ni[redo], nd[redo], si[redo], sd[redo] = _nearest_two(
                dm.block(medoids, redo))

        return self
