import logging
import pytest
from unittest.mock import MagicMock
from estimation_rpa import email_service
from estimation_rpa.email_service import format_notification, send_email_notification
from estimation_rpa.models.job import JobStatus
from estimation_rpa.models.messages import JobNotification
from estimation_rpa.models.state import AggregateResult, WorkflowStep

pytestmark = pytest.mark.unit

def test_email_service_without_sendgrid(monkeypatch, caplog):
    # Ensure SENDGRID_API_KEY is not set
    monkeypatch.setattr(email_service.settings, "SENDGRID_API_KEY", None)
    monkeypatch.setattr(email_service.settings, "FROM_EMAIL", "test@example.com")

    with caplog.at_level(logging.INFO, logger="estimation_rpa.email_service"):
        response = send_email_notification("recipient@example.com", "Test Subject", "Test Content")
    assert "Simulating email to recipient@example.com: Test Subject" in caplog.text
    assert response is None

def test_email_service_with_sendgrid(monkeypatch):
    monkeypatch.setattr(email_service.settings, "SENDGRID_API_KEY", "SG.test")
    monkeypatch.setattr(email_service.settings, "FROM_EMAIL", "test@example.com")
    client = MagicMock()
    client.return_value.send.return_value.status_code = 202
    monkeypatch.setattr(email_service, "SendGridAPIClient", client)

    response = send_email_notification("recipient@example.com", "Test Subject", "Test Content")
    assert response == 202
    client.assert_called_once_with("SG.test")

def test_format_failed_notification():
    steps = [
        WorkflowStep(step_number=1, description="Navigate to ERP", action="navigate", is_completed=True),
        WorkflowStep(step_number=2, description="Company login", action="company_login",
                     error_message="Company login details not provided"),
    ]
    result = AggregateResult(
        success=False,
        message="Workflow failed at step 2",
        steps=steps,
        data={"totalSteps": 16},
        errors=["Company login details not provided"],
    )
    subject, body = format_notification(
        JobNotification(job_id="job-1", status=JobStatus.FAILED, result=result, error_message="Workflow failed at step 2")
    )
    assert subject == "ERP estimation job job-1: failed"
    assert "Steps completed: 1/16" in body
    assert "Failed at step 2 (Company login): Company login details not provided" in body
    assert "  - Company login details not provided" in body

def test_format_retrying_notification():
    subject, body = format_notification(
        JobNotification(job_id="job-2", status=JobStatus.RETRYING, error_message="Browser crashed")
    )
    assert subject.endswith("retrying")
    assert "Error: Browser crashed" in body
    assert "retried automatically" in body
