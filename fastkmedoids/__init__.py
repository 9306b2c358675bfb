"""k-medoids clustering from precomputed pairwise distances.

The algorithms (PAM, FastPAM, FastCLARA and FastCLARANS) all take a
`DistanceMatrix` (or anything `as_distance_matrix` accepts) and return a
`KMedoidsResult` with the total cost, the medoid indices, and the
assignment of every observation to a medoid.
"""

from .distance import DistanceMatrix, as_distance_matrix
from .exception import ImproperlyConfigured, InvalidParameter, DataInvalid
from .util.random import RandomSource

from .cluster.pam import pam
from .cluster.fastpam import fastpam
from .cluster.clara import fastclara
from .cluster.clarans import fastclarans
from .cluster.kmedoids import KMedoids, kmedoids
from .cluster.util import KMedoidsResult

__version__ = '0.1.0'
