from .generative import GenerativeApiError, GenerativeLanguageClient, extract_json_object
from .medicine_agent import MedicineInfoClient, parse_medicine_response
from .diagnosis_agent import DiagnosisClient, parse_diagnosis_response, fallback_diagnosis
from .vision import VisionClient, extract_medicine_name

__all__ = [
    "GenerativeApiError",
    "GenerativeLanguageClient",
    "extract_json_object",
    "MedicineInfoClient",
    "parse_medicine_response",
    "DiagnosisClient",
    "parse_diagnosis_response",
    "fallback_diagnosis",
    "VisionClient",
    "extract_medicine_name",
]
