"""
Record repository: the only place that writes to the store.

Every mutating call is gated by an Authorizer, stamps id/createdAt, and
re-derives cached totals before the write so stored summaries never drift
from their entries.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

import pandas as pd

from .authorization import Authorizer
from .config import (
    BRAND_REGISTRY,
    BRANDS,
    DEFAULT_SUPERVISOR_SETTINGS,
    DYEING_PROGRAM_PATH,
    PRODUCTION_PATH,
    RFT_PATH,
    SUPERVISOR_SETTINGS_PATH,
)
from .dyeing_program import program_from_extraction, recalculate_program_totals
from .errors import StoreError
from .loaders.extraction import ExtractionClient
from .loaders.store import RecordStore
from .loaders.utils import to_number
from .rft import merge_extracted_rft, refresh_performance

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "production": PRODUCTION_PATH,
    "rft": RFT_PATH,
    "dyeing_program": DYEING_PROGRAM_PATH,
}


def snapshot_to_records(snapshot: Any) -> list[dict]:
    """Collection snapshot (id -> record, or a list) as a record list."""
    if not snapshot:
        return []
    if isinstance(snapshot, list):
        return [r for r in snapshot if isinstance(r, dict)]
    return [{"id": key, **value} for key, value in snapshot.items() if isinstance(value, dict)]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DashboardRepository:
    """Load, save and delete dashboard records through a RecordStore."""

    def __init__(self, store: RecordStore, authorizer: Authorizer):
        self.store = store
        self.authorizer = authorizer

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def load(self, kind: str) -> list[dict]:
        records = snapshot_to_records(self.store.get(self._path(kind)))
        logger.info("Loaded %d %s records", len(records), kind)
        return records

    def watch(self, kind: str, callback: Callable[[list[dict]], None]) -> Callable[[], None]:
        """Subscribe to a collection; callback receives the full record list."""
        return self.store.subscribe(
            self._path(kind), lambda snapshot: callback(snapshot_to_records(snapshot))
        )

    def supervisor_settings(self) -> dict:
        stored = self.store.get(SUPERVISOR_SETTINGS_PATH) or {}
        return {**DEFAULT_SUPERVISOR_SETTINGS, **stored}

    def supervisors(self) -> tuple[str, str]:
        settings = self.supervisor_settings()
        return settings["supervisorA"], settings["supervisorB"]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def save_production(self, record: dict, principal: Any, replace_id: str | None = None) -> dict:
        """Store a production record; totalProduction is the sum of brand totals."""
        self.authorizer.require(principal, "save")
        record = self._stamp(record, replace_id)
        record["totalProduction"] = sum(
            to_number((record.get(brand) or {}).get("total")) for brand in BRANDS
        )
        return self._write("production", record)

    def save_rft(self, record: dict, principal: Any, replace_id: str | None = None) -> dict:
        self.authorizer.require(principal, "save")
        record = refresh_performance(self._stamp(record, replace_id), self.supervisors())
        return self._write("rft", record)

    def save_program(self, record: dict, principal: Any, replace_id: str | None = None) -> dict:
        self.authorizer.require(principal, "save")
        record = recalculate_program_totals(self._stamp(record, replace_id))
        return self._write("dyeing_program", record)

    def delete(self, kind: str, record_id: str, principal: Any) -> None:
        self.authorizer.require(principal, "delete")
        path = f"{self._path(kind)}/{record_id}"
        try:
            self.store.remove(path)
        except StoreError:
            logger.exception("Failed to delete %s", path)
            raise
        logger.info("Deleted %s", path)

    def save_supervisor_settings(self, settings: dict, principal: Any) -> dict:
        self.authorizer.require(principal, "settings")
        merged = {**DEFAULT_SUPERVISOR_SETTINGS, **settings}
        merged["supervisorA"] = str(merged["supervisorA"]).strip().upper()
        merged["supervisorB"] = str(merged["supervisorB"]).strip().upper()
        try:
            self.store.set(SUPERVISOR_SETTINGS_PATH, merged)
        except StoreError:
            logger.exception("Failed to save supervisor settings")
            raise
        return merged

    # ------------------------------------------------------------------
    # Document uploads
    # ------------------------------------------------------------------
    def upload_production(
        self,
        client: ExtractionClient,
        path: str,
        principal: Any,
        replace_id: str | None = None,
    ) -> dict:
        self.authorizer.require(principal, "upload")
        extracted = client.extract_file("production", path)
        record = {
            "id": replace_id,
            "date": extracted.get("date") or pd.Timestamp.today().strftime("%d %b %Y"),
            "createdAt": _now_iso(),
        }
        for brand, meta in BRAND_REGISTRY.items():
            record[brand] = {**(extracted.get(brand) or {}), "name": meta["label"]}
        return self.save_production(record, principal, replace_id)

    def upload_rft(self, client: ExtractionClient, path: str, principal: Any, base: dict | None = None) -> dict:
        self.authorizer.require(principal, "upload")
        extracted = client.extract_file("rft", path)
        record = merge_extracted_rft(extracted, base, self.supervisors())
        return self.save_rft(record, principal)

    def upload_program(self, client: ExtractionClient, path: str, principal: Any, default_industry: str) -> dict:
        self.authorizer.require(principal, "upload")
        extracted = client.extract_file("dyeing_program", path)
        return self.save_program(program_from_extraction(extracted, default_industry), principal)

    # ------------------------------------------------------------------
    def _path(self, kind: str) -> str:
        try:
            return COLLECTIONS[kind]
        except KeyError:
            raise ValueError(f"Unknown collection: {kind!r}") from None

    def _stamp(self, record: dict, replace_id: str | None) -> dict:
        return {
            **record,
            "id": replace_id or record.get("id") or str(uuid.uuid4()),
            "createdAt": record.get("createdAt") or _now_iso(),
        }

    def _write(self, kind: str, record: dict) -> dict:
        path = f"{self._path(kind)}/{record['id']}"
        try:
            self.store.set(path, record)
        except StoreError:
            logger.exception("Failed to write %s", path)
            raise
        logger.info("Saved %s", path)
        return record
