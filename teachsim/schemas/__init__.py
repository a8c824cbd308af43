from teachsim.schemas.auth import LoginSchema, RegisterSchema, UserOutSchema
from teachsim.schemas.profile import (
    AchievementSchema,
    AchievementStatusSchema,
    ProfileOutSchema,
    ProfileUpdateSchema,
    ProgressSchema,
    SkillsSchema,
)
from teachsim.schemas.session import (
    SessionDeletedSchema,
    SessionOutSchema,
    SessionSavedSchema,
    SessionSubmitSchema,
)

__all__ = [
    "AchievementSchema",
    "AchievementStatusSchema",
    "LoginSchema",
    "ProfileOutSchema",
    "ProfileUpdateSchema",
    "ProgressSchema",
    "RegisterSchema",
    "SessionDeletedSchema",
    "SessionOutSchema",
    "SessionSavedSchema",
    "SessionSubmitSchema",
    "SkillsSchema",
    "UserOutSchema",
]
