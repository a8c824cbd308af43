"""SQLAlchemy declarative base and model imports for Alembic."""
from teachsim.db.session import Base

# Import all models so Alembic can see them
from teachsim.models.achievement import Achievement  # noqa: F401
from teachsim.models.progress import Progress  # noqa: F401
from teachsim.models.training_session import TrainingSession  # noqa: F401
from teachsim.models.user import User  # noqa: F401

__all__ = ["Base", "User", "Progress", "Achievement", "TrainingSession"]
