"""Genre affinity learning from catalog metadata of library items."""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from smart_discovery.config import get_settings
from smart_discovery.constants import RATING_MAX, UNRATED_GENRE_WEIGHT
from smart_discovery.models.catalog import MetadataResponse
from smart_discovery.models.library import LibraryEntry, MediaType

logger = logging.getLogger(__name__)

MetadataFetcher = Callable[[str], Awaitable[Mapping[str, Any]]]


def metadata_path(item: LibraryEntry) -> str:
    if item.media_type == MediaType.MOVIE:
        return f"/movie/{item.id}"
    return f"/tv/{item.id}"


async def analyze_genres(
    items: Sequence[LibraryEntry],
    fetch_metadata: MetadataFetcher,
    timeout_ms: int | None = None,
    *,
    max_concurrency: int | None = None,
) -> dict[int, float]:
    """Learn per-genre affinity scores from the user's library.

    Each item's genres are looked up through fetch_metadata. Every genre
    occurrence contributes rating / 5 for rated items and the weight of a
    neutral rating for unrated ones, so well-rated genres rise above genres
    the user merely collects. Scores are normalized by the number of items
    whose lookup succeeded and fall in [0, 1].

    Lookups run concurrently. A lookup that raises, returns a malformed
    payload or exceeds timeout_ms is skipped; this function never raises.

    Args:
        items: Library entries to learn from
        fetch_metadata: Async callable resolving "/movie/{id}" or "/tv/{id}"
        timeout_ms: Per-lookup timeout (default: settings.genre_fetch_timeout_ms)
        max_concurrency: Max in-flight lookups (default: settings.genre_fetch_concurrency)

    Returns:
        Mapping of genre id -> affinity score
    """
    if not items:
        return {}

    settings = get_settings()
    timeout = (timeout_ms if timeout_ms is not None else settings.genre_fetch_timeout_ms) / 1000
    semaphore = asyncio.Semaphore(max_concurrency or settings.genre_fetch_concurrency)

    async def lookup(item: LibraryEntry) -> list[int] | None:
        path = metadata_path(item)
        async with semaphore:
            try:
                data = await asyncio.wait_for(fetch_metadata(path), timeout=timeout)
                return MetadataResponse.model_validate(data).genre_ids()
            except asyncio.TimeoutError:
                logger.warning(f"Genre lookup timed out after {timeout:.1f}s for {item.key}")
            except ValidationError as e:
                logger.warning(f"Malformed genre metadata for {item.key}: {e.error_count()} errors")
            except Exception as e:
                logger.warning(f"Genre lookup failed for {item.key}: {e}")
        return None

    results = await asyncio.gather(*(lookup(item) for item in items))

    genre_weights: dict[int, float] = defaultdict(float)
    succeeded = 0
    for item, genre_ids in zip(items, results):
        if genre_ids is None:
            continue
        succeeded += 1
        weight = _item_weight(item)
        for genre_id in set(genre_ids):
            genre_weights[genre_id] += weight

    if not succeeded:
        logger.info(f"Genre analysis got no metadata for {len(items)} items")
        return {}

    affinities = {genre_id: min(total / succeeded, 1.0) for genre_id, total in genre_weights.items()}

    top_genres = sorted(affinities.items(), key=lambda x: x[1], reverse=True)[:10]
    logger.info(
        f"Genre analysis: {succeeded}/{len(items)} lookups succeeded, "
        f"top genres {[(g, f'{s:.2f}') for g, s in top_genres]}"
    )
    return affinities


def _item_weight(item: LibraryEntry) -> float:
    if item.user_rating is None:
        return UNRATED_GENRE_WEIGHT
    return item.user_rating / RATING_MAX
