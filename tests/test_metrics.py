import time

from bdjuno.metrics import DEFAULT_BUCKETS, ActionMetrics, Histogram


def test_default_buckets():
    assert Histogram().buckets == (0.5, 1, 2, 3, 4, 5)
    assert DEFAULT_BUCKETS == Histogram().buckets


def test_small_observation_fills_every_bucket():
    hist = Histogram()
    hist.observe(0.1)
    assert hist.counts == [1] * len(hist.buckets)
    assert hist.count == 1
    assert hist.total == 0.1


def test_large_observation_fills_no_bucket():
    hist = Histogram()
    hist.observe(10)
    assert hist.counts == [0] * len(hist.buckets)
    assert hist.count == 1


def test_counts_are_cumulative():
    hist = Histogram()
    for value in (0.3, 1.5, 2.5, 4.5, 9):
        hist.observe(value)
    assert hist.counts == sorted(hist.counts)
    assert hist.counts[-1] <= hist.count
    assert hist.count == 5


def test_bound_is_inclusive():
    hist = Histogram(buckets=(1.0,))
    hist.observe(1.0)
    assert hist.counts == [1]


def test_success_and_error_counters():
    metrics = ActionMetrics()
    metrics.success("/account_balance")
    metrics.success("/account_balance")
    metrics.error("/account_balance")
    assert metrics.requests[("/account_balance", "200")] == 2
    assert metrics.errors[("/account_balance", "500")] == 1


def test_observe_response_time():
    metrics = ActionMetrics()
    start = time.monotonic() - 0.75
    elapsed = metrics.observe_response_time("/delegation", start)
    assert elapsed >= 0.75
    assert metrics.response_times["/delegation"].count == 1


def test_observe_response_time_records_elapsed_total():
    metrics = ActionMetrics()
    start = time.monotonic() - 2.5
    elapsed = metrics.observe_response_time("/delegation", start)
    assert elapsed >= 2.5
    assert metrics.response_times["/delegation"].total == elapsed