"""Recipient selection for restaurant broadcasts.

Favoriters are always included as ``favorite`` with no distance. Remaining
candidates are included as ``nearby`` when their origin lies within the radius
of a restaurant that has valid coordinates. One entry per user.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from dinewave.models.message import RECIPIENT_FAVORITE, RECIPIENT_NEARBY
from dinewave.services.geo import Coordinate, distance_km, is_valid_coordinates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    user_id: str
    latitude: float | None
    longitude: float | None


@dataclass(frozen=True)
class Recipient:
    user_id: str
    recipient_type: str
    distance_km: float | None


def resolve_recipients(
    restaurant: Coordinate,
    radius_km: float,
    candidates: Iterable[Candidate],
    favoriters: Iterable[str],
) -> list[Recipient]:
    """Return the deduplicated recipient list ordered by user id."""
    recipients: dict[str, Recipient] = {}
    for user_id in favoriters:
        recipients[user_id] = Recipient(user_id=user_id, recipient_type=RECIPIENT_FAVORITE, distance_km=None)

    if restaurant.is_valid:
        for candidate in candidates:
            if candidate.user_id in recipients:
                continue
            if not is_valid_coordinates(candidate.latitude, candidate.longitude):
                continue
            distance = distance_km(
                restaurant.latitude,
                restaurant.longitude,
                candidate.latitude,
                candidate.longitude,
            )
            if distance <= radius_km:
                recipients[candidate.user_id] = Recipient(
                    user_id=candidate.user_id,
                    recipient_type=RECIPIENT_NEARBY,
                    distance_km=distance,
                )
    else:
        logger.info("[BROADCAST] Restaurant has no valid coordinates; nearby targeting skipped.")

    return [recipients[user_id] for user_id in sorted(recipients)]
