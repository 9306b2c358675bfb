"""Custom fastkmedoids-only exceptions.
"""


class ImproperlyConfigured(Exception):
    '''The given configuration is incomplete or otherwise not usable.'''
    pass


class InvalidParameter(ImproperlyConfigured):
    '''A clustering parameter violates a precondition (k out of range,
    a sample too small to hold k medoids, a missing seed, storage that
    doesn't match the number of observations, etc).
    '''
    pass


class DataInvalid(Exception):
    '''
    The data looks structurally invalid (negative or NaN distances,
    mismatched array lengths, etc).
    '''
    pass


class PerformanceWarning(UserWarning):
    """Something has happened that may have substantial performance
    implications and may be easy to avoid.
    """
    pass
