from __future__ import annotations

from ..config.loader import RegionRules, TrackerConfig
from ..models.delivery import Region

"""Region classification.

Two total functions over the closed Region set, one per source schema. Token
tables come from RegionRules (configuration); matching is case-insensitive.

Route-export priority (first match wins):
    a. driver on the broker list                         -> DAFITI
    b. brand token in vehicle or origin                  -> NESPRESSO
    c. city/depot pair: vehicle has city and origin has depot,
       or vehicle has depot, or origin has city          -> SAO_PAULO
    d. Dafiti depot token in vehicle or origin           -> DAFITI
    e. second-city token in vehicle or origin            -> RIO_DE_JANEIRO
    f. default                                           -> DAFITI

Fleet-management: branch code (column K) exactly equal to a configured code
-> that code's region, anything else -> DAFITI.
"""

__all__ = [
    "classify_route_region",
    "classify_fleet_region",
]

DEFAULT_REGION = Region.DAFITI


def _mentions(text: str, tokens: tuple[str, ...]) -> bool:
    return any(token in text for token in tokens)


def classify_route_region(
    vehicle: str | None,
    origin: str | None,
    driver: str,
    config: TrackerConfig,
) -> Region:
    if config.is_broker(driver):
        return Region.DAFITI

    rules: RegionRules = config.regions
    veh = (vehicle or "").upper()
    org = (origin or "").upper()

    if _mentions(veh, rules.brand_tokens) or _mentions(org, rules.brand_tokens):
        return Region.NESPRESSO

    city, depot = rules.city_token, rules.depot_token
    if (city in veh and depot in org) or depot in veh or city in org:
        return Region.SAO_PAULO

    if _mentions(veh, rules.dafiti_depot_tokens) or _mentions(org, rules.dafiti_depot_tokens):
        return Region.DAFITI

    if _mentions(veh, rules.second_city_tokens) or _mentions(org, rules.second_city_tokens):
        return Region.RIO_DE_JANEIRO

    return DEFAULT_REGION


def classify_fleet_region(
    branch: str | None,
    driver: str,
    loading_user: str,
    config: TrackerConfig,
) -> Region:
    # driver / loading_user are accepted for signature parity with the free-text
    # variant; the branch code alone decides.
    code = (branch or "").strip().upper()
    return config.regions.fleet_branch_regions.get(code, DEFAULT_REGION)
