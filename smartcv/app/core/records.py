# smartcv/app/core/records.py

import logging
from typing import List, Optional

from pydantic import ValidationError

from smartcv.app.core.adapters import KeyValueAdapter
from smartcv.app.core.result import Ok, Result, Unavailable
from smartcv.app.models.platform_models import KVItem
from smartcv.app.models.record_models import AnalysisRecord

logger = logging.getLogger(__name__)

RECORD_KEY_PREFIX = "record:"


def record_key(record_id: str) -> str:
    return f"{RECORD_KEY_PREFIX}{record_id}"


class RecordRepository:
    """Analysis records in the key-value store, one JSON document per `record:<id>`."""

    def __init__(self, kv: KeyValueAdapter):
        self.kv = kv

    async def save(self, record: AnalysisRecord) -> Result[bool]:
        return await self.kv.set(record_key(record.id), record.to_json())

    async def get(self, record_id: str) -> Result[Optional[AnalysisRecord]]:
        """Raises pydantic.ValidationError when the stored document is not a record."""
        res = await self.kv.get(record_key(record_id))
        if isinstance(res, Unavailable):
            return res
        if res.value is None:
            return Ok(None)
        return Ok(AnalysisRecord.from_json(res.value))

    async def list(self) -> Result[List[AnalysisRecord]]:
        res = await self.kv.list(f"{RECORD_KEY_PREFIX}*", return_values=True)
        if isinstance(res, Unavailable):
            return res

        records = []
        for item in res.value:
            if not isinstance(item, KVItem):
                continue
            try:
                records.append(AnalysisRecord.from_json(item.value))
            except ValidationError as e:
                logger.warning("Skipping unreadable record %s: %s", item.key, e)
        return Ok(records)
