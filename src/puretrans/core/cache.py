# Copyright 2025 KTTC AI (https://github.com/kttc-ai)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""In-memory translation cache.

Least-recently-used cache with a per-entry time to live. Only pure
results are ever stored, so a cache hit can be returned without
revalidation. Each entry also carries the overall quality score of its
result: results below ``min_quality`` are refused, entries falling
below a raised minimum are dropped, and when the cache is full the
lowest-quality entry goes first.
"""

from __future__ import annotations

import hashlib
import logging
import re
import time
import unicodedata
from collections import OrderedDict
from dataclasses import dataclass

from puretrans.core.models import (
    ContentType,
    Language,
    PureTranslationResult,
    TranslationMethod,
)
from puretrans.monitoring.quality import weighted_overall

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Cache counters."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    rejected: int = 0
    invalidated: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """Share of lookups served from the cache (0-100)."""
        lookups = self.hits + self.misses
        return round(100.0 * self.hits / lookups, 2) if lookups else 0.0


@dataclass
class _Entry:
    result: PureTranslationResult
    expires_at: float
    quality: float
    source_text: str


def make_cache_key(
    text: str,
    source_language: Language,
    target_language: Language,
    content_type: ContentType,
) -> str:
    """Cache key for a request.

    Texts differing only in Unicode normalization or whitespace share a key.

    Example:
        >>> a = make_cache_key("عقد  البيع", Language.ARABIC, Language.FRENCH, ContentType.GENERAL)
        >>> a == make_cache_key("عقد البيع", Language.ARABIC, Language.FRENCH, ContentType.GENERAL)
        True
    """
    normalized = " ".join(unicodedata.normalize("NFC", text).split())
    material = "\x1f".join(
        (normalized, source_language.value, target_language.value, content_type.value)
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def result_quality(result: PureTranslationResult) -> float:
    """Overall quality score of a result (0-100).

    Uses the score recorded by the gateway when present, otherwise the
    weighted score of the result's quality metrics.
    """
    recorded = result.metadata.extra.get("quality_score")
    if isinstance(recorded, (int, float)):
        return float(recorded)
    return weighted_overall(result.quality_metrics)


class TranslationCache:
    """Quality-aware LRU cache of pure translation results."""

    def __init__(
        self,
        max_entries: int = 10000,
        ttl_seconds: float = 3600.0,
        min_quality: float = 0.0,
    ) -> None:
        """Initialize cache.

        Args:
            max_entries: Capacity before entries are evicted
            ttl_seconds: Lifetime of an entry
            min_quality: Lowest overall quality score a cached result may have
        """
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.min_quality = min_quality
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key) if isinstance(key, str) else None
        return entry is not None and self._usable(entry, time.monotonic())

    def _usable(self, entry: _Entry, now: float) -> bool:
        return now < entry.expires_at and entry.quality >= self.min_quality

    def get(self, key: str) -> PureTranslationResult | None:
        """Cached result for key.

        Returns None when the entry is missing, expired or below the
        current quality minimum; stale entries are dropped.
        """
        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            return None
        if not self._usable(entry, time.monotonic()):
            del self._entries[key]
            self._stats.misses += 1
            return None
        self._entries.move_to_end(key)
        self._stats.hits += 1
        return entry.result

    def put(self, key: str, result: PureTranslationResult, source_text: str = "") -> bool:
        """Store a result.

        Impure results, emergency content and results below the quality
        minimum are refused. When the cache is full the lowest-quality
        entry is evicted, least recently used first among equals.

        Args:
            key: Cache key from :func:`make_cache_key`
            result: Result to store
            source_text: Source text, kept for pattern invalidation

        Returns:
            True if the result was stored
        """
        if not result.is_pure or result.method is TranslationMethod.EMERGENCY_GENERIC:
            self._stats.rejected += 1
            logger.debug("Refusing to cache %s result", result.method.value)
            return False

        quality = result_quality(result)
        if quality < self.min_quality:
            self._stats.rejected += 1
            logger.debug(
                "Refusing to cache result with quality %.2f (minimum %.2f)",
                quality,
                self.min_quality,
            )
            return False

        self._entries[key] = _Entry(
            result, time.monotonic() + self.ttl_seconds, quality, source_text
        )
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            victim = min(self._entries, key=lambda k: self._entries[k].quality)
            del self._entries[victim]
            self._stats.evictions += 1
        return True

    def invalidate(self, key: str) -> bool:
        """Drop one entry."""
        return self._entries.pop(key, None) is not None

    def invalidate_matching(self, pattern: str | re.Pattern[str]) -> int:
        """Drop entries whose source or translated text matches a pattern.

        Args:
            pattern: Regular expression searched in both texts

        Returns:
            Number of entries dropped

        Raises:
            re.error: If the pattern does not compile
        """
        regex = re.compile(pattern)
        matching = [
            key
            for key, entry in self._entries.items()
            if regex.search(entry.source_text) or regex.search(entry.result.translated_text)
        ]
        for key in matching:
            del self._entries[key]
        self._stats.invalidated += len(matching)
        logger.info(
            "Invalidated %d cache entries matching %r (%d remain)",
            len(matching),
            regex.pattern,
            len(self._entries),
        )
        return len(matching)

    def clear(self) -> int:
        """Drop every entry.

        Returns:
            Number of entries dropped
        """
        count = len(self._entries)
        self._entries.clear()
        logger.info("Translation cache cleared (%d entries)", count)
        return count

    def cleanup_expired(self) -> int:
        """Drop expired entries.

        Returns:
            Number of entries dropped
        """
        now = time.monotonic()
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def cleanup_low_quality(self) -> int:
        """Drop entries below the current quality minimum.

        Returns:
            Number of entries dropped
        """
        low = [k for k, e in self._entries.items() if e.quality < self.min_quality]
        for key in low:
            del self._entries[key]
        self._stats.invalidated += len(low)
        if low:
            logger.info(
                "Removed %d cache entries below quality %.2f", len(low), self.min_quality
            )
        return len(low)

    def stats(self) -> CacheStats:
        """Current counters."""
        self._stats.size = len(self._entries)
        return self._stats
