import time

from contextlib import contextmanager


class Timing:
    """Wall time of a `timed` block, set when the block exits."""

    __slots__ = ('elapsed',)

    def __init__(self):
        self.elapsed = None


@contextmanager
def timed(string, log_func, *args):
    """Time the enclosed block and report it through `log_func`.

    `string` is a %-format whose last placeholder receives the elapsed
    seconds; any `args` fill the placeholders before it. The yielded
    `Timing` holds the elapsed time once the block is done.
    """

    timing = Timing()
    tick = time.perf_counter()
    yield timing
    timing.elapsed = time.perf_counter() - tick
    log_func(string, *(args + (timing.elapsed,)))
