import hashlib
import hmac
from typing import Any


def _fmt(value: Any) -> str:
    # mirrors printf-style "%s" for the values found in pool list JSON
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def pool_id(mining_address: Any, merged_mining: Any, merged_mining_is_parent_chain: Any) -> str:
    """
    Stable pool identifier.

    The formatted triple is the HMAC *key* and the hashed message is empty.
    Ids already persisted were generated this way, so the scheme must not
    change without migrating stored rows.
    """
    key = "%s-%s-%s" % (_fmt(mining_address), _fmt(merged_mining), _fmt(merged_mining_is_parent_chain))
    return hmac.new(key.encode("utf-8"), b"", hashlib.sha256).hexdigest()


def pool_id_for(entry: dict) -> str:
    return pool_id(
        entry.get("miningAddress"),
        entry.get("mergedMining"),
        entry.get("mergedMiningIsParentChain"),
    )
