"""
Profile database model - one row per profile, sub-lists kept in JSON columns
"""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String

from portfolio.app.db.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    profession = Column(String(255), nullable=True)

    skills = Column(JSON, default=list)  # ["Python", ...]
    projects = Column(JSON, default=list)  # [{"name": ..., "link": ...}]
    socials = Column(JSON, default=list)  # [{"platform": ..., "link": ...}]

    profile_picture = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
