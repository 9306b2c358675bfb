"""General purpose utilities for random sampling, logging, and other
misc tasks.
"""

from .random import RandomSource, check_random_source
from .parallel import auto_nprocs, resolve_n_jobs
