from datetime import datetime
from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alnet.db.session import get_db
from alnet.deps import ensure_owner_or_admin, get_current_admin, get_current_user, get_page_params, PageParams
from alnet.modules.analytics.services.events import log_event
from alnet.modules.jobs.models.job import Job
from alnet.modules.jobs.schemas.job import (
    JobApplicationCreate,
    JobApplicationOut,
    JobCreate,
    JobOut,
    JobStatistics,
    JobStatus,
    JobType,
    JobUpdate,
)
from alnet.modules.jobs.services.job import (
    apply_to_job,
    close_job,
    create_job,
    delete_job,
    get_application,
    get_job,
    get_job_applications,
    get_job_statistics,
    get_jobs,
    get_user_jobs,
    update_job,
)
from alnet.modules.notifications.services.notification_events import create_job_application_notification
from alnet.modules.user_management.models.user import User
from alnet.schemas.response import ApiResponse, Page, StatusMessage, paginate, success_response

router = APIRouter()
logger = logging.getLogger("alnet")

POSTER_ROLES = ("alumni", "admin")

def _get_job_or_404(db: Session, job_id: str) -> Job:
    job = get_job(db, job_id)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Job not found",
        )
    return job

@router.post("", response_model=ApiResponse[JobOut], status_code=status.HTTP_201_CREATED)
def post_job(
    *,
    db: Session = Depends(get_db),
    request: Request,
    job_in: JobCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Post a job; alumni and admins only"""
    if current_user.role not in POSTER_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only alumni can post jobs",
        )
    job = create_job(db, job_in, current_user.id)
    log_event(db, "job_posted", user_id=current_user.id, metadata={"job_id": job.id}, request=request)
    return success_response(job)

@router.get("", response_model=ApiResponse[Page[JobOut]])
def list_jobs(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    keyword: Optional[str] = None,
    job_type: Optional[JobType] = Query(None, alias="jobType"),
    job_status: Optional[JobStatus] = Query(None, alias="status"),
    location: Optional[str] = None,
    company: Optional[str] = None,
    skill: Optional[str] = None,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Browse job postings, newest first"""
    jobs, total = get_jobs(
        db,
        skip=page_params.offset,
        limit=page_params.limit,
        keyword=keyword,
        job_type=job_type.value if job_type else None,
        status=job_status.value if job_status else None,
        location=location,
        company=company,
        skill=skill,
    )
    return success_response(paginate(jobs, total, page_params.page, page_params.limit))

@router.get("/my-postings", response_model=ApiResponse[Page[JobOut]])
def read_my_postings(
    *,
    db: Session = Depends(get_db),
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    jobs, total = get_user_jobs(db, current_user.id, page_params.offset, page_params.limit)
    return success_response(paginate(jobs, total, page_params.page, page_params.limit))

@router.get("/statistics", response_model=ApiResponse[JobStatistics])
def read_job_statistics(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
) -> Any:
    return success_response(get_job_statistics(db))

@router.get("/{job_id}", response_model=ApiResponse[JobOut])
def read_job(
    *,
    db: Session = Depends(get_db),
    job_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    return success_response(_get_job_or_404(db, job_id))

@router.put("/{job_id}", response_model=ApiResponse[JobOut])
def update_job_posting(
    *,
    db: Session = Depends(get_db),
    job_id: str,
    job_in: JobUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    job = _get_job_or_404(db, job_id)
    ensure_owner_or_admin(job.posted_by_user_id, current_user)
    return success_response(update_job(db, job, job_in))

@router.patch("/{job_id}/close", response_model=ApiResponse[JobOut])
def close_job_posting(
    *,
    db: Session = Depends(get_db),
    job_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    job = _get_job_or_404(db, job_id)
    ensure_owner_or_admin(job.posted_by_user_id, current_user)
    return success_response(close_job(db, job))

@router.delete("/{job_id}", response_model=ApiResponse[StatusMessage])
def delete_job_posting(
    *,
    db: Session = Depends(get_db),
    job_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    job = _get_job_or_404(db, job_id)
    ensure_owner_or_admin(job.posted_by_user_id, current_user)
    delete_job(db, job)
    logger.info(f"Job {job_id} deleted by {current_user.id}")
    return success_response({"message": "Job deleted successfully"})

@router.post("/{job_id}/apply", response_model=ApiResponse[JobApplicationOut], status_code=status.HTTP_201_CREATED)
def apply_for_job(
    *,
    db: Session = Depends(get_db),
    request: Request,
    job_id: str,
    application_in: Optional[JobApplicationCreate] = None,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Apply to an open job"""
    job = _get_job_or_404(db, job_id)
    if job.posted_by_user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot apply to your own job posting",
        )
    if job.status != "open":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Job is not accepting applications",
        )
    if job.application_deadline and job.application_deadline < datetime.utcnow():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Application deadline has passed",
        )
    if get_application(db, job.id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already applied to this job",
        )

    cover_letter = application_in.cover_letter if application_in else None
    try:
        application = apply_to_job(db, job, current_user.id, cover_letter)
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already applied to this job",
        )

    create_job_application_notification(db, job.id, job.title, current_user.id, job.posted_by_user_id)
    log_event(db, "job_applied", user_id=current_user.id, metadata={"job_id": job.id}, request=request)
    return success_response(application)

@router.get("/{job_id}/applications", response_model=ApiResponse[Page[JobApplicationOut]])
def read_job_applications(
    *,
    db: Session = Depends(get_db),
    job_id: str,
    page_params: PageParams = Depends(get_page_params),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Applications to a job; visible to its poster and admins"""
    job = _get_job_or_404(db, job_id)
    ensure_owner_or_admin(job.posted_by_user_id, current_user)
    items, total = get_job_applications(db, job.id, page_params.offset, page_params.limit)
    return success_response(paginate(items, total, page_params.page, page_params.limit))
