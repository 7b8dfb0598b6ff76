from sqlalchemy import Column, String, Boolean, DateTime
from datetime import datetime
from neuraladapt.database import Base

class FeatureSelection(Base):
    __tablename__ = "feature_selections"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), unique=True, nullable=False)

    # Optional modules the user has switched on
    workout_programmer = Column(Boolean, nullable=False, default=True)
    journaling = Column(Boolean, nullable=False, default=False)
    calendar = Column(Boolean, nullable=False, default=False)

    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)
