"""Economy limits and defaults.

Placed here so the value models, the winnings calculator and the Discord
layer can all read the same numbers without importing each other.
"""

from __future__ import annotations

from datetime import UTC, datetime

# Base ceilings before tier/mastery scaling
WALLET_LIMIT = 100_000_000
BET_LIMIT = 100_000
BANK_LIMIT = 250_000_000
STAR_LIMIT = 100_000
MULTIPLIER_LIMIT = 0
TIER_LIMIT = 100
MASTERY_LIMIT = 25
LEVEL_LIMIT = 1000

# Defaults for a freshly created player
DEFAULT_WALLET = int(BET_LIMIT * 0.1)
DEFAULT_BET = DEFAULT_WALLET
DEFAULT_BANK = 0
DEFAULT_STARS = STAR_LIMIT // 100
DEFAULT_MULTIPLIER = 0
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# Energy is stored as stars; one energy is worth STAR_RATIO stars.
STAR_RATIO = 100
STAR_GAIN = 10
ENERGY_LIMIT = STAR_LIMIT / STAR_RATIO
ENERGY_DURATION_MINUTES = 10
TIER_ADDED_DURATION_MINUTES = 2

# Per-tier additions
TIER_ADDED_ENERGY = (5000 - ENERGY_LIMIT) / TIER_LIMIT
TIER_ADDED_MULTIPLIER = 500 / TIER_LIMIT

# Per-mastery additions
MASTERY_ADDED_WALLET = (500_000_000 - WALLET_LIMIT) / MASTERY_LIMIT
MASTERY_ADDED_BET = (500_000 - BET_LIMIT) / MASTERY_LIMIT
MASTERY_ADDED_BANK = (1_000_000_000 - BANK_LIMIT) / MASTERY_LIMIT

# min_bet = max_bet / MIN_BET_DIVISOR
MIN_BET_DIVISOR = 1000

# Parties
PARTY_SIZE_LIMIT = 5
PARTY_MULTIPLIER_LIMIT = 100
PARTY_PRESTIGE_LIMIT = 10

# Sessions
SESSION_INTERACTIONS_LIMIT = 60
GAME_ACTION_TIMEOUT_SECONDS = 10.0
PICKER_TIMEOUT_SECONDS = 60.0
