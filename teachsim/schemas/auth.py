"""Pydantic schemas for register / login bodies."""
from pydantic import BaseModel


class RegisterSchema(BaseModel):
    email: str
    password: str
    display_name: str | None = None


class LoginSchema(BaseModel):
    email: str
    password: str


class UserOutSchema(BaseModel):
    id: int
    email: str
    display_name: str

    class Config:
        from_attributes = True
