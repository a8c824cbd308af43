"""TrainingSession model: append-only log of completed sessions per user."""
from sqlalchemy import BigInteger, Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from teachsim.db.session import Base


class TrainingSession(Base):
    __tablename__ = "training_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    scenario_id = Column(String(128), nullable=True)
    score = Column(Integer, nullable=False)  # 0-100
    duration = Column(BigInteger, nullable=False)  # milliseconds from the browser client
    # skills_gained: JSON object {skill_name: value}
    skills_gained_json = Column(Text, nullable=False, default="{}")
    completed_at = Column(DateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="sessions")
