from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, JSON, UniqueConstraint
from sqlalchemy.sql import func
from .db import Base

class Job(Base):
    __tablename__ = "jobs"
    id = Column(Integer, primary_key=True)
    external_id = Column(String(200), nullable=False, index=True)
    title = Column(String(500), nullable=False, index=True)
    company = Column(String(300), nullable=False, index=True)
    company_logo = Column(String(1000), nullable=True)
    location_type = Column(String(50), nullable=False, default="Remote", index=True)
    level = Column(String(120), nullable=True, index=True)
    tech_tags = Column(JSON, nullable=False, default=list)
    url = Column(String(1000), nullable=False)
    source = Column(String(50), nullable=False, index=True)
    salary = Column(String(200), nullable=True)
    posted_date = Column(DateTime(timezone=True), nullable=True, index=True)
    description = Column(Text, nullable=True)
    job_type = Column(String(100), nullable=True)

    status = Column(String(20), nullable=True, index=True)
    lifecycle_status = Column(String(20), nullable=False, default="new", index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("external_id", "source", name="uq_job_external_source"),
    )


class FetchLog(Base):
    __tablename__ = "fetch_logs"
    id = Column(Integer, primary_key=True)
    source = Column(String(50), nullable=False, index=True)
    jobs_found = Column(Integer, nullable=False, default=0)
    jobs_added = Column(Integer, nullable=False, default=0)
    success = Column(Boolean, nullable=False, default=True)
    error = Column(Text, nullable=True)
    fetched_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)


class HarvestingSettings(Base):
    __tablename__ = "settings"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(200), nullable=True, unique=True)
    whitelisted_titles = Column(JSON, nullable=False, default=list)
    harvesting_mode = Column(String(10), nullable=False, default="fuzzy")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
