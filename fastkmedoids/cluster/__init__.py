"""Library code for k-medoids clustering: PAM, FastPAM, FastCLARA and
FastCLARANS, with BUILD and LAB initialization.
"""

from . import assignment
from . import clara
from . import clarans
from . import fastpam
from . import initializers
from . import kmedoids
from . import pam
from . import util

from .clara import fastclara
from .clarans import fastclarans
from .initializers import build, lab
from .kmedoids import KMedoids
from .util import KMedoidsResult
