import math

from poolwatch.sources.adapters.base import finalize_status
from poolwatch.utils.sanitize import round_percent, sanitize_last_block, to_int, to_timestamp
from poolwatch.utils.types import Pool


def test_fee_rounds_to_two_places():
    assert round_percent(1.005 + 0.0033) == 1.01
    assert round_percent(0.125) == 0.13
    assert round_percent(2) == 2.0


def test_nan_last_block_becomes_zero():
    assert sanitize_last_block(math.nan) == 0
    assert sanitize_last_block(None) == 0
    assert sanitize_last_block("soon") == 0
    assert sanitize_last_block(1_600_000_000.0) == 1_600_000_000


def test_missing_timestamp_is_nan_until_finalized():
    pool = Pool(id="x", api="http://p/", type="forknote")
    pool.last_block = to_timestamp(None, divisor=1000)
    assert math.isnan(pool.last_block)
    assert finalize_status(pool).last_block == 0


def test_to_int_is_lenient():
    assert to_int("42") == 42
    assert to_int(42.9) == 42
    assert to_int(None) == 0
    assert to_int("n/a") == 0
    assert to_int(math.inf, default=-1) == -1
