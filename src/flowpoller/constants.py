from __future__ import annotations

# chunking bound for a single events query (Access API limit)
DEFAULT_MAX_HEIGHT_RANGE = 250

DEFAULT_POLLING_INTERVAL_S = 30.0

# Flow Access API REST endpoints
MAINNET_ACCESS_URL = "https://rest-mainnet.onflow.org"
TESTNET_ACCESS_URL = "https://rest-testnet.onflow.org"

# FlowToken contract events on mainnet
TOKENS_WITHDRAWN = "A.1654653399040a61.FlowToken.TokensWithdrawn"
TOKENS_DEPOSITED = "A.1654653399040a61.FlowToken.TokensDeposited"
FLOW_TOKEN_EVENTS = (TOKENS_WITHDRAWN, TOKENS_DEPOSITED)
