import os
import multiprocessing as mp

from ..exception import InvalidParameter


def auto_nprocs():
    return int(os.getenv('OMP_NUM_THREADS', mp.cpu_count()))


def resolve_n_jobs(n_jobs):
    """Turn an `n_jobs` setting into a concrete number of workers.

    None means sequential, -1 means one worker per available processor
    (per `auto_nprocs`).
    """

    if n_jobs is None:
        return 1
    if n_jobs == -1:
        return auto_nprocs()
    if int(n_jobs) != n_jobs or n_jobs < 1:
        raise InvalidParameter(
            "n_jobs must be a positive integer, -1 or None (got %s)." % n_jobs)
    return int(n_jobs)
