"""Participant data model."""
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Participant:
    """Registered workshop participant."""

    id: str
    name: str
    email: str
    institute: str
    registration_date: str  # en-IN locale date, e.g. "29/1/2026"

    def __post_init__(self):
        """Validate participant data."""
        if not self.id or not self.id.strip():
            raise ValueError("Participant ID cannot be empty")

        if not self.name or not self.name.strip():
            raise ValueError("Name cannot be empty")

        if not self.email or not self.email.strip():
            raise ValueError("Email cannot be empty")

        if not self.institute or not self.institute.strip():
            raise ValueError("Institute cannot be empty")

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match against name or ID."""
        needle = query.lower()
        return needle in self.name.lower() or needle in self.id.lower()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the field names of the stored JSON."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "institute": self.institute,
            "registrationDate": self.registration_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Participant":
        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            institute=data["institute"],
            registration_date=data.get("registrationDate", ""),
        )
