from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass
class Disease:
    name: str
    probability: int  # 0-100
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Disease":
        return cls(
            name=data.get("name", ""),
            probability=int(data.get("probability", 0)),
            description=data.get("description", ""),
        )


@dataclass
class MedicineInfo:
    """Medicine description as shown to the user after a scan."""
    medicine_name: str
    description: str
    uses: str
    side_effects: str
    dosage: str

    def to_dict(self) -> Dict[str, Any]:
        # camelCase is what the mobile client reads
        return {
            "medicineName": self.medicine_name,
            "description": self.description,
            "uses": self.uses,
            "sideEffects": self.side_effects,
            "dosage": self.dosage,
        }


@dataclass
class DiagnosisRequest:
    symptoms: str
    diet: str = ""
    location: str = ""


@dataclass
class DiagnosisResponse:
    possible_diseases: List[Disease]
    recommendations: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "possibleDiseases": [d.to_dict() for d in self.possible_diseases],
            "recommendations": self.recommendations,
        }


@dataclass
class ScanResult:
    """Row of the scan_results table."""
    user_id: str
    medicine_name: str
    description: str
    uses: str
    side_effects: str
    dosage: str
    image_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_medicine_info(cls, user_id: str, info: MedicineInfo, image_url: Optional[str] = None) -> "ScanResult":
        return cls(
            user_id=user_id,
            image_url=image_url,
            medicine_name=info.medicine_name,
            description=info.description,
            uses=info.uses,
            side_effects=info.side_effects,
            dosage=info.dosage,
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ScanResult":
        return cls(
            id=row.get("id"),
            user_id=row.get("user_id"),
            image_url=row.get("image_url"),
            medicine_name=row.get("medicine_name", ""),
            description=row.get("description", ""),
            uses=row.get("uses", ""),
            side_effects=row.get("side_effects", ""),
            dosage=row.get("dosage", ""),
            created_at=row.get("created_at"),
        )

    def to_row(self) -> Dict[str, Any]:
        row = asdict(self)
        # id and created_at are assigned by the database
        row.pop("id")
        row.pop("created_at")
        return row

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DiagnosisResult:
    """Row of the diagnosis_results table."""
    user_id: str
    symptoms: str
    diet: str
    location: str
    possible_diseases: List[Disease] = field(default_factory=list)
    recommendations: str = ""
    id: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_response(cls, user_id: str, request: DiagnosisRequest, response: DiagnosisResponse) -> "DiagnosisResult":
        return cls(
            user_id=user_id,
            symptoms=request.symptoms,
            diet=request.diet,
            location=request.location,
            possible_diseases=list(response.possible_diseases),
            recommendations=response.recommendations,
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "DiagnosisResult":
        diseases = row.get("possible_diseases") or []
        return cls(
            id=row.get("id"),
            user_id=row.get("user_id"),
            symptoms=row.get("symptoms", ""),
            diet=row.get("diet", ""),
            location=row.get("location", ""),
            possible_diseases=[Disease.from_dict(d) for d in diseases if isinstance(d, dict)],
            recommendations=row.get("recommendations", ""),
            created_at=row.get("created_at"),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "symptoms": self.symptoms,
            "diet": self.diet,
            "location": self.location,
            "possible_diseases": [d.to_dict() for d in self.possible_diseases],
            "recommendations": self.recommendations,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_row()
        data["id"] = self.id
        data["created_at"] = self.created_at
        return data
