from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from estimation_rpa.core.config import JOB_TYPE_ERP_ESTIMATION
from estimation_rpa.models.payload import JobPayload

class JobSubmission(BaseModel):
    payload: JobPayload = Field(..., description="Structured estimation request (credentials, size, material, printing, finishing, processes).")
    sender_email: Optional[EmailStr] = Field(None, description="Email address to send notifications")
    subject: str = Field("", description="Subject line of the originating request")
    job_type: str = Field(JOB_TYPE_ERP_ESTIMATION, description="Job type tag used for dispatch")
