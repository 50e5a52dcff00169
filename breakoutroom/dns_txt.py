"""DNS TXT lookups for room discovery.

A host advertises its room key under a namespaced TXT record, e.g.

    _breakoutroom.example.com.  TXT  "key=<room key>"
    _atproto.example.com.       TXT  "did=did:plc:..."
"""

import logging
from typing import List, Optional

import dns.asyncresolver
import dns.resolver

from breakoutroom.core.config import (
    BREAKOUT_ROOM_TXT_LABEL,
    BREAKOUT_ROOM_TXT_PREFIX,
    DID_TXT_LABEL,
    DID_TXT_PREFIX,
    DNS_LIFETIME_SECONDS,
    KEYBASE_SITE_TXT_LABEL,
)

logger = logging.getLogger("breakout.dns")


async def resolve_txt(domain: str) -> List[List[str]]:
    """Resolve TXT records for a domain.

    Returns:
        One list of character-strings per record, as published.

    Raises:
        dns.exception.DNSException: Lookup failed.
    """
    answer = await dns.asyncresolver.resolve(domain, "TXT", lifetime=DNS_LIFETIME_SECONDS)
    return [
        [s.decode("utf-8", errors="replace") for s in rdata.strings]
        for rdata in answer
    ]


def value_from_records(records: List[List[str]], label: str) -> Optional[str]:
    """Find `label=value` among TXT records. The last match wins."""
    value = None
    for record in records:
        name, sep, rest = "".join(record).partition("=")
        if sep and name == label:
            value = rest
    return value


async def value_from_domain(domain: str, label: str) -> Optional[str]:
    """Look up a labelled value in a domain's TXT records.

    Returns None when the name does not exist or has no TXT records.
    Other DNS failures propagate.
    """
    try:
        records = await resolve_txt(domain)
    except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
        logger.debug(f"No TXT records for {domain}", extra={"domain": domain})
        return None
    logger.debug(f"TXT records for {domain}: {records}", extra={"domain": domain})
    return value_from_records(records, label)


async def load(domain: str, proto: Optional[str], label: str) -> Optional[str]:
    """Look up `label` under `<proto>.<domain>` (or the bare domain)."""
    name = domain
    if proto and not domain.startswith(proto):
        name = f"{proto}.{domain}"
    return await value_from_domain(name, label)


async def breakout_room_key(domain: str) -> Optional[str]:
    return await load(domain, BREAKOUT_ROOM_TXT_PREFIX, BREAKOUT_ROOM_TXT_LABEL)


async def did_key(domain: str) -> Optional[str]:
    return await load(domain, DID_TXT_PREFIX, DID_TXT_LABEL)


async def keybase_key(domain: str) -> Optional[str]:
    return await load(domain, None, KEYBASE_SITE_TXT_LABEL)
