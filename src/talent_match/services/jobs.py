"""Job posting management."""

from typing import Any, List, Mapping, Union

from talent_match.core.errors import NotFoundError, ValidationError, WorkflowError, is_error
from talent_match.core.ids import is_valid_id
from talent_match.core.models import Job
from talent_match.services.common import ServiceBase
from talent_match.storage.base import JobStore
from talent_match.validators import JobInput, validate


class JobService(ServiceBase):
    """Create, read, deactivate and delete job postings."""

    component = "job_service"

    def __init__(self, jobs: JobStore):
        super().__init__()
        self.jobs = jobs

    async def list_active(self) -> Union[List[Job], WorkflowError]:
        try:
            return await self.jobs.list_active()
        except Exception as e:
            return self.internal_error("list_active_jobs", e)

    async def get(self, job_id: str) -> Union[Job, WorkflowError]:
        if not is_valid_id(job_id):
            return ValidationError("Validation failed", details=["job_id: Job ID must be a valid 24-character hex identifier"])
        try:
            job = await self.jobs.get(job_id)
        except Exception as e:
            return self.internal_error("get_job", e, job_id=job_id)
        if job is None:
            return NotFoundError("Job not found", entity="Job")
        return job

    async def create(self, payload: Mapping[str, Any], created_by: str) -> Union[Job, WorkflowError]:
        """Validate and store a new active job posting."""
        data = validate(JobInput, payload)
        if is_error(data):
            return data
        try:
            job = await self.jobs.create(Job(
                title=data.title,
                description=data.description,
                location=data.location,
                required_skills=data.required_skills,
                created_by=created_by,
            ))
        except Exception as e:
            return self.internal_error("create_job", e, created_by=created_by)
        self.logger.info("Job created", job_id=job.id, created_by=created_by)
        return job

    async def deactivate(self, job_id: str) -> Union[Job, WorkflowError]:
        """Mark a job inactive so it stops accepting applications and matches."""
        if not is_valid_id(job_id):
            return NotFoundError("Job not found", entity="Job")
        try:
            job = await self.jobs.set_active(job_id, False)
        except Exception as e:
            return self.internal_error("deactivate_job", e, job_id=job_id)
        if job is None:
            return NotFoundError("Job not found", entity="Job")
        self.logger.info("Job deactivated", job_id=job_id)
        return job

    async def delete(self, job_id: str, deleted_by: str) -> Union[bool, WorkflowError]:
        if not is_valid_id(job_id):
            return NotFoundError("Job not found", entity="Job")
        try:
            deleted = await self.jobs.delete(job_id)
        except Exception as e:
            return self.internal_error("delete_job", e, job_id=job_id)
        if not deleted:
            return NotFoundError("Job not found", entity="Job")
        self.logger.info("Job deleted", job_id=job_id, deleted_by=deleted_by)
        return True
