"""
Pydantic models for citizen complaints.
These models handle validation for complaint submission, lifecycle
requests and responses.

Internally the services work with snake_case dict records; the JSON
surface keeps the camelCase field names the frontend already sends.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from enum import Enum


class ComplaintStatus(str, Enum):
    """
    Complaint lifecycle states.

    open → in_progress → resolved (open → resolved is also allowed).
    """
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ComplaintCreate(BaseModel):
    """
    Model for creating a new complaint (incoming POST request).

    Title is optional at the schema level so a missing title is reported
    as {"error": "Title is required"} instead of a pydantic 422.
    Coordinates accept any JSON value and are normalized by the service.
    """
    title: Optional[str] = Field(None, description="Short summary of the issue")
    description: Optional[str] = Field(None, description="What the citizen observed")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Uploaded photo of the issue")
    longitude: Optional[Any] = Field(None, description="Longitude, non-numeric values fall back to 0")
    latitude: Optional[Any] = Field(None, description="Latitude, non-numeric values fall back to 0")
    category: Optional[str] = Field(None, description="Defaults to Garbage Collection")
    priority: Optional[str] = Field(None, description="Low | Medium | High, other labels are kept and scored lowest")

    class Config:
        populate_by_name = True
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "title": "Overflowing bin",
                "description": "Bin near the bus stop has not been emptied for three days.",
                "imageUrl": "https://example.com/bin.jpg",
                "longitude": 73.8077,
                "latitude": 18.5074,
                "category": "Garbage Collection",
                "priority": "High",
            }
        }


class AssignRequest(BaseModel):
    """Assign a complaint to a response team."""
    team: Optional[str] = Field(None, description="Team name, validated by the service")


class ResolveRequest(BaseModel):
    """Resolve a complaint. Proof is validated by the service, not the schema."""
    proof_image_url: Optional[str] = Field(None, alias="proofImageUrl", description="Photo proving the cleanup")

    class Config:
        populate_by_name = True


class PersonSummary(BaseModel):
    """Display attributes joined onto complaint listings."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


class GeoPoint(BaseModel):
    type: str = "Point"
    coordinates: List[float] = Field(default_factory=lambda: [0.0, 0.0], description="[longitude, latitude]")


class ComplaintResponse(BaseModel):
    """
    Model for complaint responses (what API returns).
    Identity fields hold either a raw user id or, in listings, a PersonSummary.
    """
    id: str = Field(..., description="Document ID")
    user_id: Union[PersonSummary, str] = Field(..., alias="userId", description="Creator")
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    category: str
    priority: str
    severity_score: int = Field(..., alias="severityScore")
    location: GeoPoint = Field(default_factory=GeoPoint)
    status: ComplaintStatus
    assigned_team: Optional[str] = Field(None, alias="assignedTeam")
    assigned_by: Optional[Union[PersonSummary, str]] = Field(None, alias="assignedBy")
    resolved_by: Optional[Union[PersonSummary, str]] = Field(None, alias="resolvedBy")
    proof_image_url: Optional[str] = Field(None, alias="proofImageUrl")
    status_history: List[Dict] = Field(default_factory=list, alias="statusHistory")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @classmethod
    def from_record(cls, record: Dict) -> "ComplaintResponse":
        return cls.model_validate(record)
