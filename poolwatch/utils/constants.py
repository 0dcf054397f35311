# ── Collector defaults ─────────────────────────────────────────────────
DEFAULT_POLLING_INTERVAL = 60          # seconds
DEFAULT_UPDATE_INTERVAL = 60 * 60      # 1 hour
DEFAULT_HISTORY_DAYS = 0.25            # 6 hours
SECONDS_PER_DAY = 86_400

# ── Upstream request timeouts (seconds) ───────────────────────────────
LEGACY_TIMEOUT = 1.0     # forknote / node.js / other
SLOW_TIMEOUT = 10.0      # snowflake / solo / block lookups
LIST_TIMEOUT = 30.0

# ── Block listings ────────────────────────────────────────────────────
BLOCKS_SNAPSHOT_LIMIT = 30
NODEJS_BLOCKS_LIMIT = 30
FORKNOTE_BLOCKS_LIMIT = 30
SNOWFLAKE_BLOCKS_LIMIT = 200
BLOCK_HASH_LENGTH = 64
NULL_BLOCK_HASH = "0"

# internal chain identifier used by snowflake pools for per-port stats
SNOWFLAKE_CHAIN_ID = "11898"

DEFAULT_BLOCK_HEADER_URL = "https://blockapi.turtlepay.io/block/header/"

CRYPTONOTE_SOCIAL_HOST = "cryptonote.social"
CRYPTONOTE_SOCIAL_BLOCKS_URL = "https://cryptonote.social/json/MinedBlocks"
CRYPTONOTE_SOCIAL_COIN = "trtl"

UNKNOWN_POOL_TYPE = "Unknown Pool Type"

