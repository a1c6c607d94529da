import uuid
from datetime import datetime

from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey

from alnet.db.session import Base
from alnet.db.types import StringList

class Startup(Base):
    __tablename__ = "startups"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    tagline = Column(String(255), nullable=True)
    logo = Column(String, nullable=True)
    website = Column(String, nullable=True)
    industry = Column(String(255), nullable=True)
    stage = Column(String(20), default="idea", nullable=False)  # idea, mvp, early_stage, growth, scaling
    funding_stage = Column(String(20), default="bootstrapped", nullable=False)  # bootstrapped ... series_c_plus
    status = Column(String(20), default="pending", nullable=False, index=True)  # pending, approved, rejected
    founded_date = Column(DateTime, nullable=True)
    location = Column(String(255), nullable=True)
    team_members = Column(StringList, default=list)
    team_size = Column(Integer, nullable=True)
    technologies = Column(StringList, default=list)
    pitch_deck = Column(String, nullable=True)
    linkedin_url = Column(String, nullable=True)
    twitter_url = Column(String, nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    achievements = Column(Text, nullable=True)
    looking_for = Column(String(255), nullable=True)
    review_note = Column(Text, nullable=True)
    founder_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
