import logging
import re
from typing import Any, Dict, List, Optional

import requests

from config import Config
from models import MedicineInfo
from .generative import GenerativeApiError
from .medicine_agent import MedicineInfoClient

logger = logging.getLogger(__name__)

UNKNOWN_MEDICINE = "Unknown Medicine"
NOT_DETECTED_NAME = "Medicine Not Clearly Detected"

# Dosage units, dosage forms and words printed on most packages
NAME_STOPLIST = {
    "mg", "mcg", "ml", "g", "gm", "iu", "kg", "units",
    "tablet", "tablets", "tab", "tabs", "capsule", "capsules", "caps",
    "syrup", "suspension", "solution", "injection", "cream", "gel",
    "ointment", "drops", "spray", "powder", "lotion",
    "oral", "film", "coated", "extended", "release", "chewable",
    "take", "use", "each", "contains", "keep", "store", "out", "reach",
    "children", "dosage", "dose", "directions", "warning", "warnings",
    "only", "for", "with", "and", "the", "usp", "rx", "pack", "strip",
}
DOSE_TOKEN = re.compile(r"^\d+([.,]\d+)?\s*(mg|mcg|ml|g|gm|iu|%)?$", re.IGNORECASE)
MAX_NAME_LINES = 5


def not_detected() -> MedicineInfo:
    return MedicineInfo(
        medicine_name=NOT_DETECTED_NAME,
        description=(
            "We could not read the text on the package. "
            "Try again with a sharper, well-lit photo of the front of the package."
        ),
        uses="Please consult a pharmacist or healthcare provider to identify this medicine.",
        side_effects="Unknown. Do not take a medicine you cannot identify.",
        dosage="Unknown. Do not take a medicine you cannot identify.",
    )


def _candidate_tokens(text: str) -> List[str]:
    lines = [ln.strip() for ln in (text or "").splitlines() if ln.strip()][:MAX_NAME_LINES]
    tokens = []
    for line in lines:
        for raw in line.split():
            token = raw.strip(".,:;!?()[]{}\"'*/\\|-+®™©")
            if not token:
                continue
            if token.lower() in NAME_STOPLIST or DOSE_TOKEN.match(token):
                continue
            tokens.append(token)
    return tokens


def extract_medicine_name(text: str) -> str:
    """
    Best-effort product name from package OCR text.

    First capitalized token longer than 3 characters, else the first token
    longer than 4 characters, else UNKNOWN_MEDICINE. Only the first few
    lines are looked at since brand names are printed at the top.
    """
    tokens = _candidate_tokens(text)
    for token in tokens:
        if len(token) > 3 and token[0].isupper():
            return token
    for token in tokens:
        if len(token) > 4:
            return token
    return UNKNOWN_MEDICINE


def strip_data_url(image_base64: str) -> str:
    # "data:image/jpeg;base64,...." -> "...."
    if not isinstance(image_base64, str):
        return ""
    if image_base64.startswith("data:") and "," in image_base64:
        return image_base64.split(",", 1)[1]
    return image_base64


def basic_medicine_info(name: str, detected_text: str, labels: List[str]) -> MedicineInfo:
    """Response built straight from OCR output when the language model is unavailable."""
    snippet = " ".join(detected_text.split())[:100]
    description = f"Medicine identified from package text: {snippet}"
    labels = [label for label in labels if isinstance(label, str)]
    if labels:
        description += f" (detected: {', '.join(labels[:5])})"
    return MedicineInfo(
        medicine_name=name,
        description=description,
        uses="Consult a healthcare provider for proper usage information.",
        side_effects="Please refer to the package insert for complete side effects information.",
        dosage="Follow dosage instructions on the package or as prescribed by a healthcare provider.",
    )


class VisionClient:
    """Google Cloud Vision text + label detection, enriched by the medicine-info client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        medicine_client: Optional[MedicineInfoClient] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else Config.GOOGLE_CLOUD_VISION_API_KEY
        self.api_url = api_url or Config.VISION_API_URL
        self.medicine_client = medicine_client or MedicineInfoClient()
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else Config.HTTP_TIMEOUT

    @staticmethod
    def build_payload(image_base64: str) -> Dict[str, Any]:
        return {
            "requests": [
                {
                    "image": {"content": image_base64},
                    "features": [
                        {"type": "TEXT_DETECTION", "maxResults": 10},
                        {"type": "LABEL_DETECTION", "maxResults": 10},
                    ],
                }
            ]
        }

    def annotate(self, image_base64: str) -> Optional[Dict[str, Any]]:
        """Return the first annotate response, or None on any transport or shape problem."""
        try:
            response = self.session.post(
                self.api_url,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=self.build_payload(image_base64),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Vision API request failed: %s", e)
            return None

        if not response.ok:
            logger.error("Vision API returned HTTP %s", response.status_code)
            return None

        try:
            data = response.json()
        except ValueError:
            logger.error("Vision API returned a non-JSON body")
            return None

        responses = data.get("responses") if isinstance(data, dict) else None
        if not isinstance(responses, list) or not responses or not isinstance(responses[0], dict):
            logger.warning("Vision API response has no annotations")
            return None
        return responses[0]

    def analyze_medicine(self, image_base64: str) -> MedicineInfo:
        """Identify the medicine in a base64 image. Never raises."""
        annotation = self.annotate(strip_data_url(image_base64))
        if annotation is None:
            return not_detected()

        text_annotations = annotation.get("textAnnotations")
        if not isinstance(text_annotations, list) or not text_annotations or not isinstance(text_annotations[0], dict):
            logger.info("No text detected on package")
            return not_detected()

        detected_text = text_annotations[0].get("description")
        if not isinstance(detected_text, str) or not detected_text.strip():
            return not_detected()

        label_annotations = annotation.get("labelAnnotations")
        if not isinstance(label_annotations, list):
            label_annotations = []
        labels = [
            label["description"]
            for label in label_annotations
            if isinstance(label, dict) and isinstance(label.get("description"), str) and label["description"]
        ]

        name = extract_medicine_name(detected_text)
        logger.info("Package text suggests medicine %r", name)

        try:
            return self.medicine_client.fetch_medicine_info(name)
        except GenerativeApiError as e:
            logger.warning("Medicine enrichment failed for %r, using OCR-only result: %s", name, e)
            return basic_medicine_info(name, detected_text, labels)
