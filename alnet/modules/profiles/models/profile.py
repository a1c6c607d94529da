import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, String, DateTime, Text, Integer, ForeignKey
from sqlalchemy.orm import relationship

from alnet.db.session import Base
from alnet.db.types import StringList

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    profile_type = Column(String(20), default="student", nullable=False, index=True)  # student, alumni
    bio = Column(Text, nullable=True)
    headline = Column(String(255), nullable=True)
    profile_photo_url = Column(String, nullable=True)
    phone_number = Column(String(50), nullable=True)

    # Location
    location = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)

    # Links
    linkedin_url = Column(String, nullable=True)
    github_url = Column(String, nullable=True)
    portfolio_url = Column(String, nullable=True)

    # Career
    current_company = Column(String(255), nullable=True)
    current_position = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)
    skills = Column(StringList, default=list)
    years_of_experience = Column(Integer, nullable=True)

    # Education
    graduation_year = Column(Integer, nullable=True)
    degree_type = Column(String(100), nullable=True)
    department_or_course = Column(String(255), nullable=True)

    # Mentorship and visibility
    is_public = Column(Boolean, default=True, nullable=False)
    seeking_mentorship = Column(Boolean, default=False, nullable=False)
    offering_mentorship = Column(Boolean, default=False, nullable=False)
    mentorship_topics = Column(StringList, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="profile")
