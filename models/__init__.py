from .record_model import (
    Disease,
    MedicineInfo,
    DiagnosisRequest,
    DiagnosisResponse,
    ScanResult,
    DiagnosisResult,
)
from .user_model import UserProfile, EDITABLE_FIELDS, editable_updates

__all__ = [
    "Disease",
    "MedicineInfo",
    "DiagnosisRequest",
    "DiagnosisResponse",
    "ScanResult",
    "DiagnosisResult",
    "UserProfile",
    "EDITABLE_FIELDS",
    "editable_updates",
]
