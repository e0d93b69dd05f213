import pytest
from datetime import timedelta
from estimation_rpa.anomaly import AnomalyDetector
from estimation_rpa.models.job import Job, utcnow
from estimation_rpa.models.state import AggregateResult

def make_job(**kwargs):
    return Job(job_id="job-1", job_type="erp-estimation-workflow", **kwargs)

@pytest.mark.unit
class TestAnomalyDetector:
    @pytest.fixture
    def detector(self):
        return AnomalyDetector()

    def test_clean_run_has_no_anomalies(self, detector):
        result = AggregateResult(success=True, message="ok", data={"completedSteps": 16})
        assert detector.detect(make_job(), result) == []

    def test_old_job(self, detector):
        job = make_job(created_at=utcnow() - timedelta(days=8))
        result = AggregateResult(success=True, message="ok", data={"x": 1})
        assert detector.detect(job, result) == ["Job is older than 7 days"]

    def test_success_without_data(self, detector):
        result = AggregateResult(success=True, message="ok")
        assert "Successful result but no data returned" in detector.detect(make_job(), result)

    def test_failure_without_errors(self, detector):
        result = AggregateResult(success=False, message="failed")
        assert "Failed result but no error details provided" in detector.detect(make_job(), result)

    def test_high_retry_count(self, detector):
        result = AggregateResult(success=False, message="failed", errors=["boom"])
        assert detector.detect(make_job(retry_count=3), result) == ["High retry count: 3"]
        assert detector.detect(make_job(retry_count=2), result) == []
