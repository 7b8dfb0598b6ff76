from sqlalchemy import Column, String, DateTime, JSON, Index
from datetime import datetime
from neuraladapt.database import Base

class StoredWorkoutPlan(Base):
    __tablename__ = "workout_plans"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)

    program_name = Column(String(255), nullable=False)

    # Intake as submitted, and the generated plan once attached
    request_payload = Column(JSON, nullable=False)
    response_payload = Column(JSON, nullable=True)

    # Path of the exported .xlsx, if one was written
    artifact_path = Column(String(1024), nullable=True)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    __table_args__ = (
        Index("ix_workout_plans_user_created", "user_id", "created_at"),
    )
