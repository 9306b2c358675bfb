"""The cluster app runs k-medoids clustering on a precomputed distance
file. The distances may be stored as a column-wise triangular vector
(the native layout), as a scipy-style condensed vector, or as a square
matrix. The app writes the medoid indices and the assignment of every
observation to a medoid, and optionally a JSON summary.
"""

import sys
import argparse
import json
import logging

import numpy as np

logging.basicConfig(
    level=logging.INFO,
    format=('%(asctime)s %(name)-8s %(levelname)-7s %(message)s'),
    datefmt='%m-%d-%Y %H:%M:%S')

from fastkmedoids.apps.util import writable_file

from fastkmedoids import exception
from fastkmedoids.cluster.kmedoids import (ALGORITHMS, algorithm_parameters,
                                           get_algorithm)
from fastkmedoids.distance import DistanceMatrix, as_distance_matrix
from fastkmedoids.util.log import timed


logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

DISTANCE_FORMATS = ['triangular', 'condensed', 'square']

# command-line flags that map directly to algorithm parameters
PARAMETER_FLAGS = ['maxiter', 'initializer', 'fasttol', 'numsamples',
                   'sampling', 'independent', 'keep', 'numlocal',
                   'maxneighbor', 'seed', 'n_jobs']


def process_command_line(argv):

    parser = argparse.ArgumentParser(
        prog='cluster',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        description="Cluster observations into k clusters with k-medoids, "
                    "given their pairwise distances.")

    # INPUTS
    input_args = parser.add_argument_group("Input Settings")
    input_args.add_argument(
        "--distances", required=True,
        help="Path to an .npy file holding the pairwise distances.")
    input_args.add_argument(
        "--distance-format", default='triangular', choices=DISTANCE_FORMATS,
        help="Layout of the distances: 'triangular' is the column-wise "
             "upper triangle (pair i<j at i + j(j-1)/2), 'condensed' is "
             "scipy's pdist layout, 'square' is a full n x n matrix.")
    input_args.add_argument(
        "--n-observations", default=None, type=int,
        help="Number of observations. Inferred from the file if omitted; "
             "if given, it is checked against the file.")

    # PARAMETERS
    cluster_args = parser.add_argument_group("Clustering Settings")
    cluster_args.add_argument(
        '--algorithm', default='fastpam', choices=sorted(ALGORITHMS),
        help="The clustering algorithm to use.")
    cluster_args.add_argument(
        '-k', '--cluster-number', required=True, type=int, dest='k',
        help="Number of clusters (medoids) to produce.")
    cluster_args.add_argument(
        '--maxiter', default=None, type=int,
        help="Maximum number of swap iterations, 0 for no limit "
             "(pam, fastpam, fastclara).")
    cluster_args.add_argument(
        '--initializer', default=None, choices=['BUILD', 'LAB'],
        help="Initialization method (fastpam, fastclara).")
    cluster_args.add_argument(
        '--fasttol', default=None, type=float,
        help="Tolerance for additional swaps per iteration, in [0, 1] "
             "(fastpam, fastclara).")
    cluster_args.add_argument(
        '--numsamples', default=None, type=int,
        help="Number of samples to draw (fastclara).")
    cluster_args.add_argument(
        '--sampling', default=None, type=float,
        help="Sample size; a fraction of n if below 1 (fastclara).")
    cluster_args.add_argument(
        '--independent', default=None, action='store_true',
        help="Don't carry medoids into subsequent samples (fastclara).")
    cluster_args.add_argument(
        '--keep', default=None, choices=['best', 'last'],
        help="Which medoids to carry into the next sample (fastclara).")
    cluster_args.add_argument(
        '--numlocal', default=None, type=int,
        help="Number of restarts (fastclarans).")
    cluster_args.add_argument(
        '--maxneighbor', default=None, type=float,
        help="Non-improving samples before accepting a local optimum; a "
             "fraction of k(n-k) if below 1 (fastclarans).")
    cluster_args.add_argument(
        '--seed', default=None, type=int,
        help="Random seed (fastpam with LAB, fastclara, fastclarans).")
    cluster_args.add_argument(
        '--n-jobs', default=None, type=int, dest='n_jobs',
        help="Parallel workers for independent samples or restarts "
             "(fastclara, fastclarans); -1 uses all processors.")

    # OUTPUT
    output_args = parser.add_argument_group("Output Settings")
    output_args.add_argument(
        '--medoids', required=True, action=writable_file,
        help="The location to write medoid indices (.npy).")
    output_args.add_argument(
        '--assignments', required=True, action=writable_file,
        help="The location to write assignments of observations to "
             "medoids (.npy).")
    output_args.add_argument(
        '--summary', default=None, action=writable_file,
        help="Optional location for a JSON summary of the clustering.")

    args = parser.parse_args(argv[1:])

    accepted = algorithm_parameters(args.algorithm)
    args.params = {}
    for name in PARAMETER_FLAGS:
        value = getattr(args, name)
        if value is None:
            continue
        if name not in accepted:
            raise exception.ImproperlyConfigured(
                "--%s has no effect with --algorithm %s." %
                (name.replace('_', '-'), args.algorithm))
        args.params[name] = value

    return args


def load_distances(path, distance_format, n=None):
    """Load a distance file into a DistanceMatrix."""

    data = np.load(path)

    if distance_format == 'square':
        if data.ndim != 2:
            raise exception.ImproperlyConfigured(
                "Expected a square matrix in %s, found shape %s." %
                (path, data.shape))
        return as_distance_matrix(data, n=n)

    if data.ndim != 1:
        raise exception.ImproperlyConfigured(
            "Expected a distance vector in %s, found shape %s." %
            (path, data.shape))

    if distance_format == 'condensed':
        dm = DistanceMatrix.from_condensed(data)
        if n is not None and n != dm.n:
            raise exception.InvalidParameter(
                "--n-observations %s doesn't match the %s observations in "
                "%s." % (n, dm.n, path))
        return dm

    return as_distance_matrix(data, n=n)


def write_result(result, args):

    np.save(args.medoids, np.asarray(result.medoids))
    np.save(args.assignments, np.asarray(result.assignment))

    if args.summary:
        summary = {
            'algorithm': args.algorithm,
            'k': int(args.k),
            'params': args.params,
            'cost': float(result.cost),
            'medoids': [int(m) for m in result.medoids],
            'cluster_sizes': np.bincount(
                result.assignment, minlength=len(result.medoids)).tolist(),
        }
        with open(args.summary, 'w') as f:
            json.dump(summary, f, indent=4)


def main(argv=None):

    args = process_command_line(argv)

    with timed("Loaded distances in %.2f sec.", logger.info):
        dm = load_distances(args.distances, args.distance_format,
                            n=args.n_observations)

    logger.info("Clustering %s observations into %s clusters with %s "
                "(%s).", dm.n, args.k, args.algorithm,
                json.dumps(args.params))

    with timed("Clustering with %s took %.2f sec.", logger.info,
               args.algorithm):
        result = get_algorithm(args.algorithm)(dm, args.k, **args.params)

    logger.info("Final cost %.7f with medoids %s.", result.cost,
                list(result.medoids))

    write_result(result, args)

    logger.info("Success! Medoids written to %s, assignments to %s.",
                args.medoids, args.assignments)

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
