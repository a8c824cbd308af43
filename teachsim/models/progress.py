"""Progress model: one per user. Aggregated session stats and the four skill scores."""
from sqlalchemy import BigInteger, Column, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from teachsim.db.session import Base


class Progress(Base):
    __tablename__ = "progress"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    total_sessions = Column(Integer, nullable=False, default=0)
    completed_scenarios = Column(Integer, nullable=False, default=0)
    average_score = Column(Integer, nullable=False, default=0)  # 0-100
    total_time_spent = Column(BigInteger, nullable=False, default=0)  # sum of session durations
    streak = Column(Integer, nullable=False, default=0)  # consecutive days
    last_session_date = Column(DateTime(timezone=True), nullable=True)

    # Skills 0-100; NULL means never initialized (treated as 50)
    empathy = Column(Integer, nullable=True, default=0)
    conflict_resolution = Column(Integer, nullable=True, default=0)
    boundary_keeping = Column(Integer, nullable=True, default=0)
    patience = Column(Integer, nullable=True, default=0)

    user = relationship("User", back_populates="progress")
