"""
Report cache: generated channel reports kept per channel over a key-value substrate.

Each channel keeps at most `max_reports_per_channel` reports; saving one more
evicts that channel's oldest. Reports older than `ttl` are treated as absent
at read time and pruned on the next save. One key per report:

    {prefix}report_{channel_id}_{timestamp}  ->  JSON CachedReport

Aliases (handles, URL fragments) map to canonical channel ids under
{prefix}alias_{alias}.
"""

import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..models.history import CachedReport, CachedReportSummary, ChannelHistorySummary
from .errors import CorruptEntry, NotFound, StorageError
from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "soibrand_"
DEFAULT_MAX_REPORTS_PER_CHANNEL = 5
DEFAULT_TTL = timedelta(days=7)


def now_ms() -> int:
    return int(time.time() * 1000)


def iso_from_ms(timestamp: int) -> str:
    """ISO-8601 UTC string for epoch milliseconds, e.g. 2026-10-19T08:00:00.000Z."""
    dt = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _metadata_from_payload(payload: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """(brand_name, avatar) as the report generator lays them out, when present."""
    brand = payload.get("brand_name")
    part_1 = payload.get("report_part_1")
    info = part_1.get("channel_info") if isinstance(part_1, dict) else None
    avatar = info.get("avatar") if isinstance(info, dict) else None
    return (
        brand if isinstance(brand, str) else None,
        avatar if isinstance(avatar, str) else None,
    )


class ReportCacheStore:
    """Bounded, TTL-expiring, per-channel report history."""

    def __init__(
        self,
        storage: KeyValueStore,
        max_reports_per_channel: int = DEFAULT_MAX_REPORTS_PER_CHANNEL,
        ttl: timedelta = DEFAULT_TTL,
        prefix: str = DEFAULT_PREFIX,
        clock: Callable[[], int] = now_ms,
    ):
        if max_reports_per_channel < 1:
            raise ValueError("max_reports_per_channel must be >= 1")
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._storage = storage
        self.max_reports_per_channel = max_reports_per_channel
        self.ttl_ms = int(ttl.total_seconds() * 1000)
        self._report_prefix = f"{prefix}report_"
        self._alias_prefix = f"{prefix}alias_"
        self._clock = clock
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Keys and records
    # ------------------------------------------------------------------

    def _report_key(self, channel_id: str, timestamp: int) -> str:
        return f"{self._report_prefix}{channel_id}_{timestamp}"

    def _is_expired(self, timestamp: int, now: int) -> bool:
        return now - timestamp > self.ttl_ms

    def _report_keys(self, channel_id: Optional[str] = None) -> List[str]:
        """Report keys, optionally only those of one channel."""
        if channel_id is None:
            return [k for k in self._storage.keys() if k.startswith(self._report_prefix)]
        channel_prefix = f"{self._report_prefix}{channel_id}_"
        # "a_1" must not match channel "a" when listing "a_b_1"; the rest must be the timestamp.
        return [
            k for k in self._storage.keys()
            if k.startswith(channel_prefix) and k[len(channel_prefix):].isdigit()
        ]

    def _read(self, key: str) -> Optional[CachedReport]:
        """Deserialize one entry. None if it vanished; CorruptEntry if it cannot be parsed."""
        raw = self._storage.get(key)
        if raw is None:
            return None
        try:
            return CachedReport.model_validate_json(raw)
        except ValidationError as e:
            raise CorruptEntry(key, str(e.errors()[0].get("msg", e))) from e

    def _live_reports(self, channel_id: Optional[str] = None) -> List[CachedReport]:
        """Non-expired readable reports, newest first. Corrupt entries are skipped."""
        now = self._clock()
        reports: List[CachedReport] = []
        for key in self._report_keys(channel_id):
            try:
                report = self._read(key)
            except CorruptEntry as e:
                logger.warning("[report_cache] skipping %s", e)
                continue
            if report is None or self._is_expired(report.timestamp, now):
                continue
            if channel_id is not None and report.channel_id != channel_id:
                continue
            reports.append(report)
        reports.sort(key=lambda r: r.timestamp, reverse=True)
        return reports

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(
        self,
        channel_id: str,
        payload: Dict[str, Any],
        brand_name: Optional[str] = None,
        channel_avatar: Optional[str] = None,
    ) -> CachedReport:
        """
        Store a new report for channel_id stamped with the current time.

        Prunes expired entries, then evicts this channel's oldest reports until
        there is room. Two saves in the same millisecond get distinct timestamps.
        Raises StorageError if the substrate rejects the write; evicted reports
        are put back in that case.
        """
        if not channel_id:
            raise ValueError("channel_id cannot be empty")
        default_brand, default_avatar = _metadata_from_payload(payload)
        with self._lock:
            self.clear_expired()
            timestamp = self._clock()
            newest = max(
                (self._timestamp_of(k, channel_id) for k in self._report_keys(channel_id)),
                default=None,
            )
            if newest is not None and timestamp <= newest:
                timestamp = newest + 1
            report = CachedReport(
                channel_id=channel_id,
                timestamp=timestamp,
                created_at=iso_from_ms(timestamp),
                brand_name=brand_name if brand_name is not None else default_brand,
                channel_avatar=channel_avatar if channel_avatar is not None else default_avatar,
                payload=payload,
            )
            try:
                body = report.model_dump_json()
            except (TypeError, ValueError) as e:
                raise StorageError(f"Cannot serialize report for {channel_id}: {e}") from e

            existing = self._live_reports(channel_id)
            evicted: List[Tuple[str, str]] = []
            while len(existing) >= self.max_reports_per_channel:
                key = self._report_key(channel_id, existing.pop().timestamp)
                raw = self._storage.get(key)
                self._storage.remove(key)
                if raw is not None:
                    evicted.append((key, raw))
            try:
                self._storage.set(self._report_key(channel_id, timestamp), body)
            except StorageError:
                for key, raw in reversed(evicted):
                    self._storage.set(key, raw)
                logger.warning("[report_cache] save failed for %s; restored %d evicted", channel_id, len(evicted))
                raise
            for key, _ in evicted:
                logger.info("[report_cache] evicted %s (cap %d)", key, self.max_reports_per_channel)
            logger.info("[report_cache] saved %s@%d", channel_id, timestamp)
            return report

    def _timestamp_of(self, key: str, channel_id: str) -> int:
        return int(key[len(self._report_prefix) + len(channel_id) + 1:])

    def delete_report(self, channel_id: str, timestamp: int) -> None:
        """Remove one report. Deleting an absent report is a no-op."""
        with self._lock:
            self._storage.remove(self._report_key(channel_id, timestamp))

    def delete_channel(self, channel_id: str) -> int:
        """Remove every report of one channel. Returns how many were removed."""
        with self._lock:
            keys = self._report_keys(channel_id)
            for key in keys:
                self._storage.remove(key)
            return len(keys)

    def clear_expired(self) -> int:
        """Remove expired and unreadable reports of every channel. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            removed = 0
            for key in self._report_keys():
                try:
                    report = self._read(key)
                except CorruptEntry as e:
                    logger.warning("[report_cache] removing %s", e)
                    report = None
                if report is None or self._is_expired(report.timestamp, now):
                    self._storage.remove(key)
                    removed += 1
            if removed:
                logger.info("[report_cache] pruned %d expired entries", removed)
            return removed

    def clear_all(self) -> None:
        """Remove every report of every channel. Aliases are kept."""
        with self._lock:
            keys = self._report_keys()
            for key in keys:
                self._storage.remove(key)
            logger.info("[report_cache] cleared %d reports", len(keys))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_report(self, channel_id: str, timestamp: int) -> CachedReport:
        """The report stored under (channel_id, timestamp). NotFound if absent, expired, or corrupt."""
        try:
            report = self._read(self._report_key(channel_id, timestamp))
        except CorruptEntry as e:
            logger.warning("[report_cache] %s", e)
            raise NotFound(channel_id, timestamp) from e
        if report is None or report.channel_id != channel_id or self._is_expired(report.timestamp, self._clock()):
            raise NotFound(channel_id, timestamp)
        return report

    def get_latest_report(self, channel_id: str) -> CachedReport:
        """Newest live report of a channel. NotFound if it has none."""
        reports = self._live_reports(channel_id)
        if not reports:
            raise NotFound(channel_id)
        return reports[0]

    def list_reports_for_channel(self, channel_id: str) -> List[CachedReportSummary]:
        """Summaries of one channel's live reports, newest first."""
        return [r.summary() for r in self._live_reports(channel_id)]

    def list_history(self) -> List[CachedReportSummary]:
        """Summaries of every live report of every channel, newest first."""
        return [r.summary() for r in self._live_reports()]

    def list_channels(self) -> List[ChannelHistorySummary]:
        """One entry per channel with a live report, most recent activity first."""
        newest: Dict[str, CachedReport] = {}
        counts: Dict[str, int] = {}
        for report in self._live_reports():
            counts[report.channel_id] = counts.get(report.channel_id, 0) + 1
            newest.setdefault(report.channel_id, report)
        return [
            ChannelHistorySummary(
                channel_id=r.channel_id,
                timestamp=r.timestamp,
                created_at=r.created_at,
                brand_name=r.brand_name,
                channel_avatar=r.channel_avatar,
                report_count=counts[r.channel_id],
            )
            for r in sorted(newest.values(), key=lambda r: r.timestamp, reverse=True)
        ]

    def count(self) -> int:
        """Number of live reports across all channels."""
        return len(self._live_reports())

    # ------------------------------------------------------------------
    # Aliases
    # ------------------------------------------------------------------

    def set_channel_alias(self, alias: str, channel_id: str) -> None:
        """Remember that alias (e.g. '@handle') refers to channel_id."""
        if not alias or not channel_id:
            raise ValueError("alias and channel_id cannot be empty")
        with self._lock:
            self._storage.set(f"{self._alias_prefix}{alias.strip().lower()}", channel_id)

    def resolve_channel_id(self, alias: str) -> Optional[str]:
        """Channel id previously recorded for alias, or None."""
        if not alias:
            return None
        return self._storage.get(f"{self._alias_prefix}{alias.strip().lower()}")
