"""
User and team models.

Users and teams are administered outside this service; the complaint
lifecycle only reads them and bumps their counters.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum


class UserRole(str, Enum):
    CITIZEN = "citizen"
    ADMIN = "admin"
    STAFF = "staff"


REPORTER_ROLES = (UserRole.CITIZEN.value, UserRole.ADMIN.value, UserRole.STAFF.value)
OPERATOR_ROLES = (UserRole.ADMIN.value, UserRole.STAFF.value)


class TeamStatus(str, Enum):
    ACTIVE = "Active"
    BREAK = "Break"


class Actor(BaseModel):
    """Authenticated caller as supplied by the auth dependency."""
    id: str = Field(..., description="User ID from the token subject")
    role: str = Field(..., description="citizen | admin | staff")


class User(BaseModel):
    """Stored user document (only the fields this service touches)."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.CITIZEN
    eco_points: int = Field(default=0, ge=0, alias="ecoPoints")
    complaints_count: int = Field(default=0, ge=0, alias="complaintsCount")

    class Config:
        populate_by_name = True


class Team(BaseModel):
    """Response team with its advisory workload counters."""
    name: str = Field(..., min_length=1)
    status: str = Field(default=TeamStatus.ACTIVE.value, description="Active | Break | ...")
    active_tasks: int = Field(default=0, alias="activeTasks")
    completed: int = Field(default=0)
    members: List[str] = Field(default_factory=list, description="Member user IDs")

    class Config:
        populate_by_name = True
