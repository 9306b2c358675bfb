from ..util.log import timed


def test_timed_reports_elapsed():
    calls = []

    def log_func(string, *args):
        calls.append((string, args))

    with timed("Clustered %s points in %.2f sec.", log_func, 12) as timing:
        assert timing.elapsed is None

    assert timing.elapsed >= 0
    assert len(calls) == 1

    string, args = calls[0]
    assert args == (12, timing.elapsed)
    assert string % args == "Clustered 12 points in %.2f sec." % \
        timing.elapsed


def test_timed_skips_report_on_error():
    calls = []

    try:
        with timed("%.2f", lambda *a: calls.append(a)):
            raise KeyError('boom')
    except KeyError:
        pass

    assert calls == []
