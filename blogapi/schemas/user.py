from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    image: str | None = None

class UserCreate(UserBase):
    password: str = Field(..., min_length=6)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    image: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True

class AuthorSummary(BaseModel):
    """Public view of a post or comment author"""
    id: str
    name: str

    class Config:
        from_attributes = True
