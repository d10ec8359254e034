"""
Merchant profile registry.

Profiles are looked up once per extraction by hostname. Order matters only
if two profiles could match the same host, which none currently do.
"""
from typing import Optional, Sequence

from wishmeta.merchants.base import MerchantProfile
from wishmeta.merchants.aliexpress import ALIEXPRESS
from wishmeta.merchants.amazon import AMAZON
from wishmeta.merchants.carrefour import CARREFOUR
from wishmeta.merchants.decathlon import DECATHLON
from wishmeta.merchants.hm import HM
from wishmeta.merchants.miravia import MIRAVIA
from wishmeta.merchants.zara import ZARA

PROFILES = (
    AMAZON,
    ALIEXPRESS,
    HM,
    ZARA,
    DECATHLON,
    CARREFOUR,
    MIRAVIA,
)


def find_profile(url: str, profiles: Sequence[MerchantProfile] = PROFILES) -> Optional[MerchantProfile]:
    """Return the profile serving this URL's host, or None for generic sites."""
    for profile in profiles:
        if profile.matches(url):
            return profile
    return None


__all__ = [
    "MerchantProfile",
    "PROFILES",
    "find_profile",
    "AMAZON",
    "ALIEXPRESS",
    "HM",
    "ZARA",
    "DECATHLON",
    "CARREFOUR",
    "MIRAVIA",
]
