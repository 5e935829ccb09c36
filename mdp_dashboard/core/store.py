from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import logging
import os
import secrets
import string
import tempfile
import time

from ..config import STORE_VERSION
from .records import ResponseRecord, Submission
from .scoring import composite_score, round_score


logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class StorageFault(RuntimeError):
    """The backing file could not be read or written."""


class NotFoundFault(KeyError):
    """No record has the requested id."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_record_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"mdp_{int(time.time() * 1000)}_{suffix}"


class RecordStore:
    """Survey responses kept as one JSON file, rewritten whole on every change."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def ensure(self) -> None:
        if not self.path.exists():
            self._write([], created=_now_iso())
            logger.info("Created new data file at %s", self.path)

    # ----------------------------
    # Reads
    # ----------------------------
    def _read_raw(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"responses": [], "metadata": {}}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("Error reading survey data from %s", self.path)
            raise StorageFault(f"Could not read {self.path}: {exc}") from exc

        # early files held a bare array
        if isinstance(raw, list):
            return {"responses": raw, "metadata": {}}
        if isinstance(raw, dict):
            responses = raw.get("responses") or []
            metadata = raw.get("metadata") or {}
            if isinstance(responses, list) and isinstance(metadata, dict):
                return {"responses": responses, "metadata": metadata}
        raise StorageFault(f"Unexpected data layout in {self.path}")

    def _parse(self, responses: List[Any]) -> List[ResponseRecord]:
        try:
            return [ResponseRecord.from_dict(r) for r in responses]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.exception("Malformed survey response in %s", self.path)
            raise StorageFault(f"Malformed survey response in {self.path}: {exc!r}") from exc

    def list_all(self) -> List[ResponseRecord]:
        return self._parse(self._read_raw()["responses"])

    # ----------------------------
    # Writes
    # ----------------------------
    def _write(self, records: List[ResponseRecord], created: Optional[str]) -> None:
        now = _now_iso()
        payload = {
            "responses": [r.to_dict() for r in records],
            "metadata": {
                "created": created or now,
                "lastUpdated": now,
                "version": STORE_VERSION,
                "totalResponses": len(records),
            },
        }
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".survey-", suffix=".json", dir=str(self.path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            logger.exception("Error writing survey data to %s", self.path)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageFault(f"Could not write {self.path}: {exc}") from exc

    def append(self, submission: Submission) -> ResponseRecord:
        raw = self._read_raw()
        records = self._parse(raw["responses"])
        taken = {r.id for r in records}

        record_id = new_record_id()
        while record_id in taken:
            record_id = new_record_id()

        score = composite_score(
            submission.job_knowledge,
            submission.quality_of_work,
            submission.communication,
            submission.initiative,
        )
        record = ResponseRecord(
            id=record_id,
            mdp_name=submission.mdp_name,
            function=submission.function,
            manager_name=submission.manager_name,
            rotation=str(submission.rotation),
            job_knowledge=submission.job_knowledge,
            quality_of_work=submission.quality_of_work,
            communication=submission.communication,
            initiative=submission.initiative,
            function_specific_1=submission.function_specific_1,
            function_specific_2=submission.function_specific_2,
            composite_score=round_score(score),
            timestamp=_now_iso(),
        )
        self._write(records + [record], created=raw["metadata"].get("created"))
        logger.info("New survey response saved: %s (%s)", record.mdp_name, record.function)
        return record

    def delete_by_id(self, record_id: str) -> ResponseRecord:
        raw = self._read_raw()
        records = self._parse(raw["responses"])
        kept = [r for r in records if r.id != record_id]
        if len(kept) == len(records):
            raise NotFoundFault(record_id)

        removed = next(r for r in records if r.id == record_id)
        self._write(kept, created=raw["metadata"].get("created"))
        logger.info("Survey response deleted: %s", record_id)
        return removed
