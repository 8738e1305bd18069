"""
JSON file backed submission log.

The whole log is one JSON array, read fully and rewritten fully on every
mutation. Rewrites go through a temporary file and os.replace, and every
read-modify-write cycle holds one asyncio.Lock so concurrent requests cannot
lose each other's entries.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from landing_service.shared.contact.errors import PersistenceFailure
from landing_service.shared.contact.schemas import Submission

logger = logging.getLogger(__name__)


class SubmissionLog:
    """Append-only ordered log of accepted submissions."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read_documents(self) -> List[dict]:
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            content = f.read()
        if not content.strip():
            return []
        documents = json.loads(content)
        if not isinstance(documents, list):
            raise ValueError(f"{self.path} does not contain a JSON array")
        return documents

    def _write_documents(self, documents: List[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(documents, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except BaseException:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise

    def _append_sync(self, submission: Submission) -> None:
        documents = self._read_documents()
        documents.append(submission.to_document())
        self._write_documents(documents)

    def _update_sync(self, submission_id: str, changes: dict) -> bool:
        documents = self._read_documents()
        for document in documents:
            if isinstance(document, dict) and document.get("id") == submission_id:
                for key, value in changes.items():
                    if value is None:
                        document.pop(key, None)
                    else:
                        document[key] = value
                self._write_documents(documents)
                return True
        return False

    async def append(self, submission: Submission) -> Submission:
        """
        Append a submission and durably rewrite the log.

        Raises:
            PersistenceFailure if the log cannot be read or written
        """
        async with self._lock:
            try:
                await asyncio.to_thread(self._append_sync, submission)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to persist submission {submission.id}: {str(e)}", exc_info=True)
                raise PersistenceFailure("Failed to save submission")
        return submission

    async def update(self, submission_id: str, **changes) -> bool:
        """
        Rewrite fields of an existing entry (camelCase keys). A value of None removes the key.

        Returns:
            True if the entry was found and rewritten

        Raises:
            PersistenceFailure if the log cannot be read or written
        """
        async with self._lock:
            try:
                found = await asyncio.to_thread(self._update_sync, submission_id, changes)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to update submission {submission_id}: {str(e)}", exc_info=True)
                raise PersistenceFailure("Failed to update submission")
        if not found:
            logger.warning(f"Submission {submission_id} not found in log, update skipped")
        return found

    async def read_all(self) -> List[Submission]:
        """
        Return every submission in log order.

        Raises:
            PersistenceFailure if the log cannot be read or holds invalid entries
        """
        async with self._lock:
            try:
                documents = await asyncio.to_thread(self._read_documents)
                return [Submission.model_validate(document) for document in documents]
            except (OSError, ValueError, ValidationError) as e:
                logger.error(f"Failed to read submission log {self.path}: {str(e)}", exc_info=True)
                raise PersistenceFailure("Failed to read submission log")

    async def get(self, submission_id: str) -> Optional[Submission]:
        for submission in await self.read_all():
            if submission.id == submission_id:
                return submission
        return None
