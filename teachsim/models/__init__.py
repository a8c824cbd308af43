from teachsim.models.user import User
from teachsim.models.progress import Progress
from teachsim.models.achievement import Achievement
from teachsim.models.training_session import TrainingSession

__all__ = ["User", "Progress", "Achievement", "TrainingSession"]
