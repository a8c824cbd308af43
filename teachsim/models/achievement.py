"""Achievement model: one row per unlocked badge; never updated after insert."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from teachsim.db.session import Base


class Achievement(Base):
    __tablename__ = "achievements"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="uq_achievements_user_achievement"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    achievement_id = Column(String(64), nullable=False)  # first_session, empathy_master, ...
    unlocked_at = Column(DateTime(timezone=True), nullable=False)
    # denormalized so a renamed catalogue entry does not rewrite history
    title = Column(String(255), nullable=False)
    description = Column(String(512), nullable=False)
    icon = Column(String(16), nullable=False)

    user = relationship("User", back_populates="achievements")
