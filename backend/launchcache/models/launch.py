from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator


class LaunchRecord(BaseModel):
    id: str
    name: str
    date_utc: datetime
    success: Optional[bool] = None
    upcoming: bool = False
    flight_number: Optional[int] = None
    rocket: Optional[str] = None
    details: Optional[str] = None
    webcast: Optional[str] = None

    @field_validator("date_utc")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @classmethod
    def from_spacex(cls, doc: Dict[str, Any]) -> "LaunchRecord":
        """Map a SpaceX v4 launch document onto the fields we filter and render."""
        links = doc.get("links") or {}
        return cls(
            id=doc["id"],
            name=doc["name"],
            date_utc=doc["date_utc"],
            success=doc.get("success"),
            upcoming=bool(doc.get("upcoming", False)),
            flight_number=doc.get("flight_number"),
            rocket=doc.get("rocket"),
            details=doc.get("details"),
            webcast=links.get("webcast"),
        )


class LaunchQueryResult(BaseModel):
    count: int
    filters: Dict[str, Any]
    launches: List[LaunchRecord]

    def render(self) -> str:
        """Indented JSON body served to clients and stored in the response cache."""
        return self.model_dump_json(indent=2)
