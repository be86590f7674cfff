# backend/schemas/user.py
from pydantic import BaseModel, Field
from typing import Optional

# Shared properties for user models
class UserBase(BaseModel):
    username: str = Field(min_length=1)

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str = Field(min_length=1)

# Schema for user registration requests
class UserCreate(UserBase):
    password: str = Field(min_length=1)

# Schema for partial account updates
class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[str] = Field(default=None, min_length=1)

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: str

    class Config:
        from_attributes = True

# Schema for JWT authentication token response
class Token(BaseModel):
    token: str
    token_type: str = "bearer"
