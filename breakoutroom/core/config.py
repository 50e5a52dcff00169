"""
Breakout room client configuration constants.

Constants are organized into:
- PROTOCOL: Fixed by the join protocol, changing them breaks interop with hosts
- POLICY: Implementation choices for lookups and challenge generation
- OPERATIONAL: Deployment-specific settings (env vars)
"""

import os

# =============================================================================
# PROTOCOL CONSTANTS
# =============================================================================

# DNS TXT record holding the room key: _breakoutroom.<domain> "key=<room key>"
BREAKOUT_ROOM_TXT_PREFIX: str = "_breakoutroom"
BREAKOUT_ROOM_TXT_LABEL: str = "key"

# DNS TXT record holding the host DID: _atproto.<domain> "did=<did>"
DID_TXT_PREFIX: str = "_atproto"
DID_TXT_LABEL: str = "did"

# Keybase site verification is published on the bare domain
KEYBASE_SITE_TXT_LABEL: str = "keybase-site-verification"

# =============================================================================
# POLICY CONSTANTS
# =============================================================================

# Random bytes mixed into every challenge (hex encoded, plus a timestamp)
CHALLENGE_ENTROPY_BYTES: int = 32

# =============================================================================
# OPERATIONAL SETTINGS (deployment-specific, via environment variables)
# =============================================================================

# Keybase identity provider base URL. Overridable for staging mirrors and tests.
KEYBASE_BASE_URL: str = os.getenv("BREAKOUT_KEYBASE_URL", "https://keybase.io").rstrip("/")

# Timeout for Keybase public key / proof lookups (seconds)
KEYBASE_TIMEOUT_SECONDS: float = float(os.getenv("BREAKOUT_KEYBASE_TIMEOUT", "10.0"))

# GnuPG executable used for signing and verification
GPG_BINARY: str = os.getenv("BREAKOUT_GPG_BINARY", "gpg")

# Total time budget for a single DNS TXT lookup (seconds)
DNS_LIFETIME_SECONDS: float = float(os.getenv("BREAKOUT_DNS_LIFETIME", "5.0"))
