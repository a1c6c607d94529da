from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from alnet.db.filters import icontains
from alnet.modules.jobs.models.job import Job, JobApplication
from alnet.modules.jobs.schemas.job import JobCreate, JobUpdate
from alnet.modules.profiles.services.profile import get_profiles_by_user_ids, profile_summary

logger = logging.getLogger(__name__)

def get_job(db: Session, job_id: str) -> Optional[Job]:
    """Get job by ID"""
    return db.query(Job).filter(Job.id == job_id).first()

def create_job(db: Session, job_in: JobCreate, user_id: str) -> Job:
    """Create an open job posting"""
    data = job_in.model_dump()
    data["job_type"] = job_in.job_type.value
    data["required_skills"] = data.get("required_skills") or []
    job = Job(**data, status="open", posted_by_user_id=user_id, posted_date=datetime.utcnow())
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info(f"Job {job.id} posted by {user_id}")
    return job

def get_jobs(
    db: Session,
    skip: int = 0,
    limit: int = 10,
    keyword: Optional[str] = None,
    job_type: Optional[str] = None,
    status: Optional[str] = None,
    location: Optional[str] = None,
    company: Optional[str] = None,
    skill: Optional[str] = None,
) -> Tuple[List[Job], int]:
    """Filter job postings; open jobs only unless a status is given"""
    query = db.query(Job).filter(Job.status == (status or "open"))
    if keyword:
        query = query.filter(or_(
            icontains(Job.title, keyword),
            icontains(Job.description, keyword),
            icontains(Job.company_name, keyword),
        ))
    if job_type:
        query = query.filter(Job.job_type == job_type)
    if location:
        query = query.filter(icontains(Job.location, location))
    if company:
        query = query.filter(icontains(Job.company_name, company))
    if skill:
        query = query.filter(icontains(Job.required_skills, skill))

    total = query.count()
    jobs = query.order_by(Job.posted_date.desc(), Job.id).offset(skip).limit(limit).all()
    return jobs, total

def get_user_jobs(db: Session, user_id: str, skip: int = 0, limit: int = 10) -> Tuple[List[Job], int]:
    """Jobs posted by a user, any status"""
    query = db.query(Job).filter(Job.posted_by_user_id == user_id)
    total = query.count()
    return query.order_by(Job.posted_date.desc(), Job.id).offset(skip).limit(limit).all(), total

def update_job(db: Session, job: Job, job_in: JobUpdate) -> Job:
    """Update the fields present in the request"""
    update_data = job_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field in ("title", "description", "company_name", "location", "job_type", "status"):
            continue
        if field in ("job_type", "status"):
            value = value.value
        if field == "required_skills" and value is None:
            value = []
        setattr(job, field, value)
    db.commit()
    db.refresh(job)
    return job

def close_job(db: Session, job: Job) -> Job:
    job.status = "closed"
    db.commit()
    db.refresh(job)
    logger.info(f"Job {job.id} closed")
    return job

def delete_job(db: Session, job: Job) -> None:
    """Delete a job and its applications"""
    db.query(JobApplication).filter(JobApplication.job_id == job.id).delete(synchronize_session=False)
    db.delete(job)
    db.commit()

def get_application(db: Session, job_id: str, applicant_id: str) -> Optional[JobApplication]:
    return db.query(JobApplication).filter(
        JobApplication.job_id == job_id,
        JobApplication.applicant_id == applicant_id,
    ).first()

def apply_to_job(db: Session, job: Job, applicant_id: str, cover_letter: Optional[str] = None) -> JobApplication:
    """Record an application and bump the job's counter in one commit"""
    application = JobApplication(job_id=job.id, applicant_id=applicant_id, cover_letter=cover_letter)
    db.add(application)
    db.query(Job).filter(Job.id == job.id).update(
        {"applications_count": Job.applications_count + 1},
        synchronize_session=False,
    )
    db.commit()
    db.refresh(application)
    return application

def get_job_applications(db: Session, job_id: str, skip: int = 0, limit: int = 20) -> Tuple[List[dict], int]:
    query = db.query(JobApplication).filter(JobApplication.job_id == job_id)
    total = query.count()
    applications = query.order_by(JobApplication.created_at.asc(), JobApplication.id).offset(skip).limit(limit).all()
    profiles = get_profiles_by_user_ids(db, [a.applicant_id for a in applications])
    items = [
        {
            "id": a.id,
            "job_id": a.job_id,
            "applicant_id": a.applicant_id,
            "cover_letter": a.cover_letter,
            "created_at": a.created_at,
            "applicant": profile_summary(profiles.get(a.applicant_id), a.applicant_id),
        }
        for a in applications
    ]
    return items, total

def get_job_statistics(db: Session) -> dict:
    by_status = dict(db.query(Job.status, func.count(Job.id)).group_by(Job.status).all())
    by_type = dict(db.query(Job.job_type, func.count(Job.id)).group_by(Job.job_type).all())
    return {
        "total": sum(by_status.values()),
        "open": by_status.get("open", 0),
        "closed": by_status.get("closed", 0),
        "filled": by_status.get("filled", 0),
        "by_type": by_type,
    }
