import asyncio
import logging
from typing import Callable, Optional, Tuple

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from estimation_rpa.config import settings
from estimation_rpa.message_queue import MessageQueue
from estimation_rpa.models.job import JobStatus
from estimation_rpa.models.messages import JobNotification, QueueNames

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def send_email_notification(to_email: str, subject: str, content: str) -> Optional[int]:
    """
    Send an email notification using SendGrid.

    Parameters:
        to_email (str): The recipient's email address.
        subject (str): The subject for the email.
        content (str): The plain text content of the email.

    Returns:
        Optional[int]: The status code returned by the SendGrid API, or None
        when no SendGrid credentials are configured and the send is simulated.
    """
    if not settings.SENDGRID_API_KEY or not settings.FROM_EMAIL:
        logger.info(f"Simulating email to {to_email}: {subject}")
        return None

    message = Mail(
        from_email=settings.FROM_EMAIL,
        to_emails=to_email,
        subject=subject,
        plain_text_content=content,
    )
    try:
        sg = SendGridAPIClient(settings.SENDGRID_API_KEY)
        response = sg.send(message)
        logger.info(f"Email sent to {to_email} with status code {response.status_code}")
        return response.status_code
    except Exception as e:
        logger.error("Failed to send email", exc_info=True)
        raise e


def format_notification(notification: JobNotification) -> Tuple[str, str]:
    """Build the subject and plain-text body for a job notification."""
    status = notification.status
    subject = f"ERP estimation job {notification.job_id}: {status.value}"
    lines = [f"Job ID: {notification.job_id}", f"Status: {status.value}"]

    result = notification.result
    if result is not None:
        lines.append(f"Summary: {result.message}")
        completed = sum(1 for s in result.steps if s.is_completed)
        lines.append(f"Steps completed: {completed}/{result.data.get('totalSteps', len(result.steps))}")
        failed = result.failed_step
        if failed is not None:
            lines.append(f"Failed at step {failed.step_number} ({failed.description}): {failed.error_message}")
        if result.errors:
            lines.append("Errors:")
            lines.extend(f"  - {error}" for error in result.errors)
    if notification.error_message and status in (JobStatus.RETRYING, JobStatus.FAILED):
        lines.append(f"Error: {notification.error_message}")
    if status == JobStatus.RETRYING:
        lines.append("The job will be retried automatically.")
    return subject, "\n".join(lines)


class NotificationConsumer:
    """E-mails the job submitter whenever a notification is published."""

    def __init__(self, queue: MessageQueue, send: Callable[[str, str, str], Optional[int]] = send_email_notification):
        self.queue = queue
        self.send = send

    async def handle(self, notification: JobNotification) -> None:
        if not notification.recipient_email:
            logger.info(f"No recipient for job {notification.job_id}, notification not e-mailed")
            return
        subject, body = format_notification(notification)
        # SendGrid's client is blocking
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self.send, notification.recipient_email, subject, body)

    async def run(self, stop_event: asyncio.Event) -> None:
        await self.queue.start_consuming(QueueNames.NOTIFICATIONS, JobNotification, self.handle, stop_event)
