import hashlib
import hmac

from poolwatch.sources.identity import pool_id, pool_id_for


def test_key_is_formatted_triple_and_message_is_empty():
    expected = hmac.new(b"TRTLaddr-true-false", b"", hashlib.sha256).hexdigest()
    assert pool_id("TRTLaddr", True, False) == expected


def test_same_triple_same_id():
    entry = {"miningAddress": "TRTLaddr", "mergedMining": False, "mergedMiningIsParentChain": False}
    first = pool_id_for(entry)
    second = pool_id_for({**entry, "name": "renamed", "api": "http://elsewhere/"})
    assert first == second
    assert len(first) == 64


def test_any_triple_change_changes_id():
    base = pool_id("TRTLaddr", False, False)
    assert pool_id("TRTLother", False, False) != base
    assert pool_id("TRTLaddr", True, False) != base
    assert pool_id("TRTLaddr", False, True) != base


def test_missing_fields_are_empty_strings():
    expected = hmac.new(b"--", b"", hashlib.sha256).hexdigest()
    assert pool_id_for({}) == expected
