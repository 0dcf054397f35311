import pytest

from poolwatch.sources.identity import pool_id
from poolwatch.sources.pool_list import PoolListSource
from poolwatch.utils.errors import SourceUnavailable

LIST_URL = "http://list.test/pools.json"

RAW_LIST = {
    "pools": [
        {
            "name": "Alpha",
            "url": "https://alpha.test",
            "api": "https://alpha.test/api/",
            "type": "Forknote",
            "miningAddress": "TRTLalpha",
            "mergedMining": False,
            "mergedMiningIsParentChain": False,
            "telegram": "@alpha",
        },
        {
            "name": "Beta",
            "api": "https://beta.test/api/",
            "type": "NODE.JS",
            "miningAddress": "TRTLbeta",
            "mergedMining": True,
            "mergedMiningIsParentChain": True,
        },
    ]
}


@pytest.mark.asyncio
async def test_fetch_list_normalizes_entries(client_for):
    source = PoolListSource(client_for({LIST_URL: RAW_LIST}))
    pools = await source.fetch_list(LIST_URL)

    assert [p.name for p in pools] == ["Alpha", "Beta"]
    alpha, beta = pools
    assert alpha.type == "forknote"
    assert beta.type == "node.js"
    assert alpha.id == pool_id("TRTLalpha", False, False)
    assert beta.id == pool_id("TRTLbeta", True, True)
    assert (beta.merged_mining, beta.merged_mining_is_parent_chain) == (1, 1)
    assert (alpha.merged_mining, alpha.merged_mining_is_parent_chain) == (0, 0)
    assert alpha.extra == {"telegram": "@alpha"}

    for pool in pools:
        assert (pool.height, pool.hashrate, pool.miners) == (0, 0, 0)
        assert (pool.fee, pool.min_payout, pool.last_block, pool.donation) == (0, 0, 0, 0)
        assert pool.status == 0


@pytest.mark.asyncio
async def test_missing_pools_field_is_source_unavailable(client_for):
    source = PoolListSource(client_for({LIST_URL: {"nodes": []}}))
    with pytest.raises(SourceUnavailable):
        await source.fetch_list(LIST_URL)


@pytest.mark.asyncio
async def test_transport_error_is_source_unavailable(client_for):
    source = PoolListSource(client_for({}))
    with pytest.raises(SourceUnavailable):
        await source.fetch_list(LIST_URL)


@pytest.mark.asyncio
async def test_http_error_status_is_source_unavailable(client_for):
    source = PoolListSource(client_for({LIST_URL: 503}))
    with pytest.raises(SourceUnavailable):
        await source.fetch_list(LIST_URL)
