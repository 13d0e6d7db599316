import logging
from typing import Any, Optional

from models import MedicineInfo
from .generative import GenerativeApiError, GenerativeLanguageClient, extract_json_object

logger = logging.getLogger(__name__)

MEDICINE_PROMPT = """
You are a pharmacist assistant. Give general, non-personalised information about the medicine "{name}".

Respond with strict JSON only, no markdown and no extra text, using exactly these keys:
{{
  "medicineName": "Official or common name of the medicine",
  "description": "What the medicine is and its active ingredient",
  "uses": "What the medicine is commonly used to treat",
  "sideEffects": "Common and serious side effects",
  "dosage": "Typical adult dosage guidance"
}}

If you do not recognise the medicine, still return the JSON object and say so in the description.
Important: This is for informational purposes only and should not replace professional medical advice.
"""


def fallback_fields(name: str) -> dict:
    return {
        "medicineName": name or "Unknown Medicine",
        "description": (
            f"No detailed description available for {name or 'this medicine'}. "
            "Please consult a healthcare provider or pharmacist."
        ),
        "uses": "Consult a healthcare provider for proper usage information.",
        "sideEffects": "Please refer to the package insert or consult a healthcare provider for side effects information.",
        "dosage": "Follow the dosage instructions on the package or as prescribed by a healthcare provider.",
    }


def fallback_medicine_info(name: str) -> MedicineInfo:
    f = fallback_fields(name)
    return MedicineInfo(
        medicine_name=f["medicineName"],
        description=f["description"],
        uses=f["uses"],
        side_effects=f["sideEffects"],
        dosage=f["dosage"],
    )


def _text_field(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, list):
        items = [str(v).strip() for v in value if str(v).strip()]
        if items:
            return ", ".join(items)
    return None


def parse_medicine_response(text: str, name: str) -> MedicineInfo:
    """Build MedicineInfo from model output, defaulting each missing field on its own."""
    defaults = fallback_fields(name)
    parsed = extract_json_object(text)
    if parsed is None:
        logger.warning("Could not parse medicine info for %r; using fallback", name)
        parsed = {}

    values = {}
    for key, default in defaults.items():
        values[key] = _text_field(parsed.get(key)) or default

    return MedicineInfo(
        medicine_name=values["medicineName"],
        description=values["description"],
        uses=values["uses"],
        side_effects=values["sideEffects"],
        dosage=values["dosage"],
    )


class MedicineInfoClient:
    def __init__(self, llm: Optional[GenerativeLanguageClient] = None):
        self.llm = llm or GenerativeLanguageClient()

    @staticmethod
    def build_prompt(name: str) -> str:
        return MEDICINE_PROMPT.format(name=name)

    def fetch_medicine_info(self, name: str) -> MedicineInfo:
        """Like get_medicine_info, but lets GenerativeApiError through."""
        text = self.llm.generate(self.build_prompt(name))
        return parse_medicine_response(text, name)

    def get_medicine_info(self, name: str) -> MedicineInfo:
        try:
            return self.fetch_medicine_info(name)
        except GenerativeApiError as e:
            logger.warning("Medicine info request failed for %r: %s", name, e)
            return fallback_medicine_info(name)
