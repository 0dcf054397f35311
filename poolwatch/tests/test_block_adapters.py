import json

import pytest

from poolwatch.utils.types import Block

API = "http://pool.test/api/"
HASH_A = "a" * 64
HASH_B = "b" * 64
HASH_C = "c" * 64


@pytest.mark.asyncio
async def test_nodejs_blocks_backfill_and_order(make_registry, make_pool, make_node):
    node = make_node({11: HASH_B, 12: "0"})
    registry = make_registry(
        {
            API + "pool/blocks?page=0&limit=30": [
                {"height": 10, "hash": HASH_A},
                {"height": 11},                 # filled in by the node
                {"height": 12, "hash": "abc"},  # node answers "0" -> dropped
                {"height": 13, "hash": HASH_C},
            ]
        },
        node=node,
    )
    result = await registry.fetch_blocks(make_pool("node.js", API))

    assert result.blocks == [Block(13, HASH_C), Block(11, HASH_B), Block(10, HASH_A)]
    assert sorted(node.calls) == [11, 12]


@pytest.mark.asyncio
async def test_forknote_blocks_from_flattened_sorted_set(make_registry, make_pool, make_node):
    node = make_node({})
    registry = make_registry(
        {
            API + "stats": {
                "pool": {
                    "blocks": [
                        f"{HASH_A}:1600000000:1000:900:0:2900000", "105",
                        f"{HASH_B}:1599999000:1000:1200", "110",
                        "short:1599998000:1000:800", "100",
                    ]
                }
            }
        },
        node=node,
    )
    result = await registry.fetch_blocks(make_pool("forknote", API))

    # "short" is not a full hash and the node cannot resolve height 100
    assert result.blocks == [Block(110, HASH_B), Block(105, HASH_A)]
    assert node.calls == [100]


@pytest.mark.asyncio
async def test_snowflake_blocks_are_sorted_descending(make_registry, make_pool):
    snow = "http://snow.test/"
    registry = make_registry({
        snow + "apipool/coin_altblocks/11898?page=0&limit=200": [
            {"height": 5, "hash": HASH_A},
            {"height": 10, "hash": HASH_B},
            {"height": 7, "hash": HASH_C},
        ]
    })
    result = await registry.fetch_blocks(make_pool("snowflake-2", snow))
    assert [b.height for b in result.blocks] == [10, 7, 5]


@pytest.mark.asyncio
async def test_solo_blocks_resolve_heights_by_hash(make_registry, make_pool):
    explorer = "http://explorer.test/block/header/"
    registry = make_registry({
        API + "stats/blocks": [{"hash": HASH_A}, {"hash": HASH_B}, {"hash": HASH_C}],
        explorer + HASH_A: {"height": 20},
        explorer + HASH_B: {"height": 30},
        # HASH_C lookup fails -> only that block is lost
    })
    result = await registry.fetch_blocks(make_pool("solo", API))
    assert result.blocks == [Block(30, HASH_B), Block(20, HASH_A)]


@pytest.mark.asyncio
async def test_other_blocks_only_for_cryptonote_social(make_registry, make_pool):
    seen = []
    registry = make_registry(
        {
            "https://cryptonote.social/json/MinedBlocks": {
                "Blocks": [{"Height": 3, "Hash": HASH_A}, {"Height": 4, "Hash": HASH_B}]
            }
        },
        seen=seen,
    )

    social = await registry.fetch_blocks(make_pool("other", "https://cryptonote.social/json/PoolStats"))
    generic = await registry.fetch_blocks(make_pool("other", "http://other.test/stats"))

    assert social.blocks == [Block(4, HASH_B), Block(3, HASH_A)]
    assert generic.blocks == []
    method, url, body = seen[0]
    assert (method, url) == ("POST", "https://cryptonote.social/json/MinedBlocks")
    assert json.loads(body) == {"Coin": "trtl"}
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_unreachable_block_source_gives_empty_list(make_registry, make_pool):
    registry = make_registry({})
    result = await registry.fetch_blocks(make_pool("node.js", API))
    assert result.blocks == []
