from typing import Optional
from pydantic import BaseModel

class LoginRequest(BaseModel):
    username: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    expires_in: int

class SessionStatus(BaseModel):
    authenticated: bool
    role: Optional[str] = None
