"""
Contact submission pipeline.

rate check -> parse & validate -> persist -> notify (detached) -> respond.
Notification runs in a background task that is never awaited by the request,
so its outcome only ever lands in the submission log.
"""

import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional, Set, Union

from pydantic import ValidationError

from landing_service.shared.contact.errors import ClientError, NotificationError, RateLimited
from landing_service.shared.contact.notifier import Notifier, build_notification
from landing_service.shared.contact.rate_limit import RateLimitLedger
from landing_service.shared.contact.schemas import ContactRequest, Submission, utc_now_iso
from landing_service.shared.contact.submission_log import SubmissionLog

logger = logging.getLogger(__name__)

NOTIFICATION_TIMEOUT_SECONDS = 30
REQUIRED_FIELDS_MESSAGE = "All fields are required"
INVALID_BODY_MESSAGE = "Invalid request body"


def parse_contact_request(raw_body: bytes) -> ContactRequest:
    """
    Decode and validate a contact form body.

    Raises:
        ClientError for malformed JSON, a non-object body or invalid fields
    """
    try:
        payload = json.loads(raw_body or b"")
    except (ValueError, UnicodeDecodeError):
        raise ClientError(INVALID_BODY_MESSAGE)

    if not isinstance(payload, dict):
        raise ClientError(INVALID_BODY_MESSAGE)

    try:
        return ContactRequest.model_validate(payload)
    except ValidationError as e:
        for error in e.errors():
            if error.get("type") == "string_too_long":
                field = str(error["loc"][0]).capitalize()
                limit = error.get("ctx", {}).get("max_length")
                raise ClientError(f"{field} must be no more than {limit} characters")
        raise ClientError(REQUIRED_FIELDS_MESSAGE)


class ContactPipeline:
    """Accepts contact form submissions for one process."""

    def __init__(
        self,
        ledger: RateLimitLedger,
        log: SubmissionLog,
        notifier: Optional[Notifier] = None,
        recipient: Optional[str] = None,
        sender: Optional[str] = None,
        notification_timeout: float = NOTIFICATION_TIMEOUT_SECONDS,
        now: Callable[[], str] = utc_now_iso,
    ):
        self.ledger = ledger
        self.log = log
        self.notifier = notifier
        self.recipient = recipient
        self.sender = sender or recipient
        self.notification_timeout = notification_timeout
        self._now = now
        self._tasks: Set[asyncio.Task] = set()

    async def submit(
        self,
        client_id: str,
        body: Union[bytes, Callable[[], Awaitable[bytes]]],
    ) -> Submission:
        """
        Run one submission through the pipeline.

        body is either the raw bytes or a coroutine function that reads them.
        A reader is only awaited once the rate check has passed.

        Returns:
            The persisted submission (notificationSent is still False)

        Raises:
            RateLimited before the body is looked at
            ClientError for malformed or incomplete bodies
            PersistenceFailure if the log cannot be written
        """
        if not self.ledger.check_and_record(client_id):
            retry_after = self.ledger.retry_after(client_id)
            logger.warning(f"Contact form rate limit exceeded for {client_id}")
            raise RateLimited(
                "Too many requests. Please wait before sending another message.",
                retry_after=retry_after,
            )

        raw_body = await body() if callable(body) else body
        contact = parse_contact_request(raw_body)

        submission = Submission.from_request(contact, timestamp=self._now())
        await self.log.append(submission)
        logger.info(f"Contact submission {submission.id} saved")

        if self.notifier is not None:
            self._dispatch(submission, contact)

        return submission

    def _dispatch(self, submission: Submission, contact: ContactRequest) -> None:
        message = build_notification(contact, to=self.recipient, sender=self.sender)
        task = asyncio.create_task(self._notify(submission.id, message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _notify(self, submission_id: str, message) -> None:
        try:
            await asyncio.wait_for(self.notifier.send(message), timeout=self.notification_timeout)
        except asyncio.TimeoutError:
            await self._record_failure(submission_id, f"Notification timed out after {self.notification_timeout}s")
            return
        except NotificationError as e:
            await self._record_failure(submission_id, str(e))
            return
        except Exception as e:
            logger.error(f"Unexpected notification failure for {submission_id}: {str(e)}", exc_info=True)
            await self._record_failure(submission_id, str(e) or type(e).__name__)
            return

        logger.info(f"Notification for submission {submission_id} sent")
        try:
            await self.log.update(
                submission_id,
                notificationSent=True,
                notificationSentAt=self._now(),
                notificationError=None,
            )
        except Exception as e:
            logger.error(f"Could not record notification success for {submission_id}: {str(e)}")

    async def _record_failure(self, submission_id: str, reason: str) -> None:
        logger.error(f"Notification for submission {submission_id} failed: {reason}")
        try:
            await self.log.update(submission_id, notificationError=reason)
        except Exception as e:
            logger.error(f"Could not record notification failure for {submission_id}: {str(e)}")

    @property
    def pending_notifications(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for outstanding notification tasks to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
