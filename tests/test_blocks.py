import re
from datetime import datetime, timezone

from statchain.blocks import SENTINEL_FINGERPRINT, Block, format_block

STAMP = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def make_block(values=(1.0, 2.0, 3.0), prev="abc"):
    block = Block(index=3, values=values, prev_fingerprint=prev, timestamp=STAMP)
    block.mean = 2.0
    block.median = 2.0
    block.two_sd_lower = 0.367
    block.two_sd_upper = 3.633
    return block


def test_fingerprint_is_64_lowercase_hex():
    fp = make_block().compute_fingerprint()
    assert re.fullmatch(r"[0-9a-f]{64}", fp)


def test_fingerprint_deterministic():
    assert make_block().compute_fingerprint() == make_block().compute_fingerprint()


def test_fingerprint_changes_with_any_field():
    base = make_block().compute_fingerprint()
    assert make_block(values=(1.0, 2.0, 3.5)).compute_fingerprint() != base
    assert make_block(prev="abd").compute_fingerprint() != base

    changed = make_block()
    changed.median = 2.5
    assert changed.compute_fingerprint() != base

    changed = make_block()
    changed.outliers = (3.0,)
    assert changed.compute_fingerprint() != base

    changed = make_block()
    changed.index = 4
    assert changed.compute_fingerprint() != base


def test_fingerprint_ignores_sub_second_timestamp():
    a = make_block()
    b = make_block()
    b.timestamp = STAMP.replace(microsecond=500000)
    assert a.compute_fingerprint() == b.compute_fingerprint()


def test_to_record_fields():
    block = make_block()
    block.fingerprint = SENTINEL_FINGERPRINT
    record = block.to_record()
    assert list(record) == [
        "index",
        "timestamp",
        "values",
        "fingerprint",
        "prev_fingerprint",
        "mean",
        "median",
        "two_sd_lower",
        "two_sd_upper",
        "outliers",
    ]
    assert record["values"] == [1.0, 2.0, 3.0]
    assert record["fingerprint"] == SENTINEL_FINGERPRINT
    assert record["timestamp"] == STAMP.isoformat()


def test_format_block():
    block = make_block()
    block.outliers = (3.0,)
    text = format_block(block)
    assert "Index: 3" in text
    assert "Mean: 2.00" in text
    assert "2-SD range: 0.37 - 3.63" in text
    assert "3.00" in text.split("Outliers:")[1]
