"""
Schemas de autenticação e usuários
"""

from pydantic import BaseModel, validator
from typing import List, Optional

from frota.models.admin import ROLES


class LoginByName(BaseModel):
    name: str
    password: str


class UserCreate(BaseModel):
    name: str
    password: str
    email: Optional[str] = None
    roles: List[str] = []

    @validator('roles', each_item=True)
    def validate_role(cls, v):
        if v not in ROLES:
            raise ValueError(f"role must be one of {list(ROLES)}")
        return v
