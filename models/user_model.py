from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

# Columns a user may change from the settings screen
EDITABLE_FIELDS = (
    "full_name",
    "phone",
    "date_of_birth",
    "gender",
    "medical_conditions",
    "allergies",
    "emergency_contact_name",
    "emergency_contact_phone",
)


@dataclass
class UserProfile:
    user_id: str
    full_name: str = ""
    phone: str = ""
    date_of_birth: Optional[str] = None
    gender: str = ""
    medical_conditions: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)
    emergency_contact_name: str = ""
    emergency_contact_phone: str = ""
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UserProfile":
        return cls(
            id=row.get("id"),
            user_id=row.get("user_id"),
            full_name=row.get("full_name") or "",
            phone=row.get("phone") or "",
            date_of_birth=row.get("date_of_birth"),
            gender=row.get("gender") or "",
            medical_conditions=list(row.get("medical_conditions") or []),
            allergies=list(row.get("allergies") or []),
            emergency_contact_name=row.get("emergency_contact_name") or "",
            emergency_contact_phone=row.get("emergency_contact_phone") or "",
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    @classmethod
    def blank_row(cls, user_id: str) -> Dict[str, Any]:
        """Insert payload for a profile that does not exist yet."""
        return {
            "user_id": user_id,
            "full_name": "",
            "phone": "",
            "gender": "",
            "medical_conditions": [],
            "allergies": [],
            "emergency_contact_name": "",
            "emergency_contact_phone": "",
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def editable_updates(updates: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in (updates or {}).items() if k in EDITABLE_FIELDS}
