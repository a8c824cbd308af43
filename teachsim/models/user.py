"""User model: login credentials plus the public profile fields."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from teachsim.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=False)
    photo_url = Column(String(1024), nullable=True)
    role = Column(String(32), nullable=False, default="student")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    progress = relationship("Progress", back_populates="user", uselist=False)
    achievements = relationship("Achievement", back_populates="user", order_by="Achievement.id")
    sessions = relationship("TrainingSession", back_populates="user", order_by="TrainingSession.id")
