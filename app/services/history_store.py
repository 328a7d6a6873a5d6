# app/services/history_store.py

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os
from pydantic import TypeAdapter, ValidationError

from app.schemas.workflow import WorkflowRunResult

logger = logging.getLogger(__name__)

_RUNS = TypeAdapter(List[WorkflowRunResult])


class HistoryStore:
    """
    Append-only run history in a single JSON file, most recent first.

    Writes go through one asyncio.Lock and land via temp file + rename, so
    concurrent runs can never leave a half-written file behind. File access
    uses aiofiles so other runs keep going while the disk is busy.
    """
    def __init__(self, path: str = "data/history.json", max_entries: int = 50):
        self.path = Path(path)
        self.max_entries = max_entries
        self._lock = asyncio.Lock()

    async def _read(self) -> List[WorkflowRunResult]:
        if not await aiofiles.os.path.exists(self.path):
            return []
        async with aiofiles.open(self.path, "rb") as f:
            content = await f.read()
        return _RUNS.validate_json(content)

    async def _write(self, runs: List[WorkflowRunResult]) -> None:
        await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
        payload = json.dumps(
            [run.model_dump(mode="json", by_alias=True) for run in runs],
            indent=2,
        )
        temp_file = self.path.with_suffix(".tmp")
        try:
            async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(temp_file, self.path)
        except BaseException:
            if await aiofiles.os.path.exists(temp_file):
                await aiofiles.os.remove(temp_file)
            raise

    async def append(self, run: WorkflowRunResult) -> None:
        """Persist a finished run. Best effort: errors are logged, never raised."""
        async with self._lock:
            try:
                try:
                    runs = await self._read()
                except (OSError, ValueError, ValidationError) as e:
                    logger.error("Failed to parse history file, starting fresh: %s", e)
                    runs = []

                # Re-appending the same run replaces it instead of duplicating
                runs = [r for r in runs if r.id != run.id]
                runs.insert(0, run)
                await self._write(runs[: self.max_entries])
            except Exception as e:
                logger.error("Failed to save history: %s", e)

    async def list(self) -> List[WorkflowRunResult]:
        """Stored runs, most recent first. Empty on any read failure."""
        try:
            runs = await self._read()
        except Exception as e:
            logger.error("Failed to read history: %s", e)
            return []
        return runs[: self.max_entries]

    async def status(self) -> str:
        """Reachability for health reporting."""
        try:
            if not await aiofiles.os.path.isdir(self.path.parent):
                return "init_required"
            writable = await aiofiles.os.access(self.path.parent, os.W_OK)
            return "connected" if writable else "error"
        except OSError as e:
            logger.error("History store check failed: %s", e)
            return "error"
