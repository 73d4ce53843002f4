from enum import Enum
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class UserRole(str, Enum):
    farmer = "farmer"
    customer = "customer"


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str = Field(index=True, unique=True)
    phone: Optional[str] = None
    role: UserRole
    can_login: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
