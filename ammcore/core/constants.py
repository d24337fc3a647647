"""Protocol constants shared by the processor and lifecycle code."""

from __future__ import annotations

# Default administrative owner installed when the global state is first created.
INITIAL_STATE_OWNER = "DjXkZxNWUoGsL87rbWRFVPmoxN1FKXUWpinUyN921PwQ"

# Seed for the global state record address.
GLOBAL_STATE_SEED = "AmmState"

# Wrapped native asset; swap fees in this mint are paid as native transfers.
NATIVE_MINT = "So11111111111111111111111111111111111111112"

LP_MINT_DECIMALS = 8

# Liquidity-token supply floor (0.001 LP at 8 decimals).
MIN_LP_SUPPLY = 100_000

INITIAL_SWAP_POOL_AMOUNT = 1_000_000_000
