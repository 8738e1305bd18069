"""Tests for the JSON file backed submission log."""

import asyncio
import json

import pytest

from landing_service.shared.contact.errors import PersistenceFailure
from landing_service.shared.contact.schemas import Submission
from landing_service.shared.contact.submission_log import SubmissionLog


def make_submission(n: int) -> Submission:
    return Submission(
        timestamp=f"2026-01-01T00:00:{n:02d}+00:00",
        name=f"Name {n}",
        email=f"user{n}@example.com",
        subject=f"Subject {n}",
        message=f"Message {n}",
    )


def test_missing_file_is_empty_log(tmp_path):
    log = SubmissionLog(tmp_path / "missing.json")
    assert asyncio.run(log.read_all()) == []


def test_append_then_read_preserves_order(tmp_path):
    log = SubmissionLog(tmp_path / "data" / "submissions.json")
    submissions = [make_submission(n) for n in range(5)]

    async def run():
        for submission in submissions:
            await log.append(submission)
        return await log.read_all()

    assert asyncio.run(run()) == submissions


def test_document_is_a_json_array_with_camel_case_keys(tmp_path):
    path = tmp_path / "submissions.json"
    log = SubmissionLog(path)
    asyncio.run(log.append(make_submission(1)))

    documents = json.loads(path.read_text(encoding="utf-8"))
    assert isinstance(documents, list)
    assert documents[0]["notificationSent"] is False
    assert "notificationError" not in documents[0]
    assert "notificationSentAt" not in documents[0]
    assert documents[0]["name"] == "Name 1"


def test_concurrent_appends_are_not_lost(tmp_path):
    log = SubmissionLog(tmp_path / "submissions.json")
    submissions = [make_submission(n) for n in range(20)]

    async def run():
        await asyncio.gather(*(log.append(s) for s in submissions))
        return await log.read_all()

    stored = asyncio.run(run())
    assert len(stored) == 20
    assert {s.id for s in stored} == {s.id for s in submissions}


def test_update_changes_only_the_target_entry(tmp_path):
    log = SubmissionLog(tmp_path / "submissions.json")
    first, second = make_submission(1), make_submission(2)

    async def run():
        await log.append(first)
        await log.append(second)
        found = await log.update(second.id, notificationSent=True, notificationSentAt="2026-01-01T01:00:00+00:00")
        return found, await log.read_all()

    found, stored = asyncio.run(run())
    assert found
    assert [s.id for s in stored] == [first.id, second.id]
    assert stored[0].notification_sent is False
    assert stored[1].notification_sent is True
    assert stored[1].notification_sent_at == "2026-01-01T01:00:00+00:00"


def test_update_with_none_removes_key(tmp_path):
    log = SubmissionLog(tmp_path / "submissions.json")
    submission = make_submission(1)

    async def run():
        await log.append(submission)
        await log.update(submission.id, notificationError="boom")
        await log.update(submission.id, notificationError=None, notificationSent=True)
        return await log.get(submission.id)

    stored = asyncio.run(run())
    assert stored.notification_error is None
    assert stored.notification_sent is True


def test_update_unknown_id_leaves_log_alone(tmp_path):
    path = tmp_path / "submissions.json"
    log = SubmissionLog(path)
    asyncio.run(log.append(make_submission(1)))
    before = path.read_text(encoding="utf-8")

    assert asyncio.run(log.update("no-such-id", notificationSent=True)) is False
    assert path.read_text(encoding="utf-8") == before


def test_corrupt_document_is_a_persistence_failure(tmp_path):
    path = tmp_path / "submissions.json"
    path.write_text("{not json", encoding="utf-8")
    log = SubmissionLog(path)

    with pytest.raises(PersistenceFailure):
        asyncio.run(log.append(make_submission(1)))
    # The unreadable document is never replaced
    assert path.read_text(encoding="utf-8") == "{not json"


def test_non_array_document_is_a_persistence_failure(tmp_path):
    path = tmp_path / "submissions.json"
    path.write_text('{"entries": []}', encoding="utf-8")

    with pytest.raises(PersistenceFailure):
        asyncio.run(SubmissionLog(path).read_all())


def test_unwritable_location_is_a_persistence_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    log = SubmissionLog(blocker / "submissions.json")

    with pytest.raises(PersistenceFailure):
        asyncio.run(log.append(make_submission(1)))


def test_no_temporary_files_left_behind(tmp_path):
    log = SubmissionLog(tmp_path / "submissions.json")
    asyncio.run(log.append(make_submission(1)))
    assert [p.name for p in tmp_path.iterdir()] == ["submissions.json"]
