import logging
from typing import Any, List, Optional

from models import Disease, DiagnosisRequest, DiagnosisResponse
from .generative import GenerativeApiError, GenerativeLanguageClient, extract_json_object

logger = logging.getLogger(__name__)

DEFAULT_CONDITION_NAME = "Unknown Condition"
DEFAULT_CONDITION_DESCRIPTION = "No description available"
DEFAULT_RECOMMENDATIONS = "Please consult a healthcare provider for proper diagnosis."

DIAGNOSIS_PROMPT = """
As a medical AI assistant, analyze the following patient information and provide possible diagnoses:

Symptoms: {symptoms}
Diet: {diet}
Location: {location}

Please provide:
1. A list of 3-5 possible diseases with probability percentages (0-100)
2. Brief descriptions for each disease
3. General health recommendations

Format your response as JSON:
{{
  "diseases": [
    {{
      "name": "Disease Name",
      "probability": 75,
      "description": "Brief description"
    }}
  ],
  "recommendations": "General recommendations text"
}}

Important: This is for informational purposes only and should not replace professional medical advice.
"""


def clamp_probability(value: Any) -> int:
    """Coerce a model-supplied probability to an int in [0, 100]; junk becomes 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return int(round(max(0.0, min(100.0, number))))


def fallback_diagnosis(request: DiagnosisRequest) -> DiagnosisResponse:
    diseases = [
        Disease(
            name="General Health Assessment Needed",
            probability=50,
            description="Your symptoms need a professional evaluation to determine the underlying cause.",
        ),
        Disease(
            name="Viral Infection",
            probability=30,
            description="Many common symptoms are caused by viral infections that usually resolve with rest and fluids.",
        ),
        Disease(
            name="Stress-Related Condition",
            probability=20,
            description="Stress, poor sleep and lifestyle factors can cause or worsen a wide range of symptoms.",
        ),
    ]
    recommendations = (
        f"Based on the symptoms you reported ({request.symptoms or 'not provided'}), "
        f"your diet ({request.diet or 'not provided'}) and your location ({request.location or 'not provided'}), "
        "we could not generate a detailed analysis. Please consult a healthcare provider for a proper evaluation. "
        "Seek urgent care if your symptoms get worse."
    )
    return DiagnosisResponse(possible_diseases=diseases, recommendations=recommendations)


def _normalize_disease(item: dict) -> Disease:
    name = item.get("name")
    description = item.get("description")
    return Disease(
        name=name.strip() if isinstance(name, str) and name.strip() else DEFAULT_CONDITION_NAME,
        probability=clamp_probability(item.get("probability")),
        description=(
            description.strip() if isinstance(description, str) and description.strip()
            else DEFAULT_CONDITION_DESCRIPTION
        ),
    )


def parse_diagnosis_response(text: str, request: DiagnosisRequest) -> DiagnosisResponse:
    parsed = extract_json_object(text)
    if parsed is None:
        logger.warning("Diagnosis response had no parsable JSON object; using fallback")
        return fallback_diagnosis(request)

    raw_diseases = parsed.get("diseases")
    if not isinstance(raw_diseases, list):
        logger.warning("Diagnosis response is missing a 'diseases' list; using fallback")
        return fallback_diagnosis(request)

    diseases: List[Disease] = [_normalize_disease(d) for d in raw_diseases if isinstance(d, dict)]
    if not diseases:
        logger.warning("Diagnosis response contained no usable diseases; using fallback")
        return fallback_diagnosis(request)

    recommendations = parsed.get("recommendations")
    if not isinstance(recommendations, str) or not recommendations.strip():
        recommendations = DEFAULT_RECOMMENDATIONS

    return DiagnosisResponse(possible_diseases=diseases, recommendations=recommendations.strip())


class DiagnosisClient:
    def __init__(self, llm: Optional[GenerativeLanguageClient] = None):
        self.llm = llm or GenerativeLanguageClient()

    @staticmethod
    def build_prompt(request: DiagnosisRequest) -> str:
        return DIAGNOSIS_PROMPT.format(
            symptoms=request.symptoms,
            diet=request.diet,
            location=request.location,
        )

    def get_diagnosis(self, request: DiagnosisRequest) -> DiagnosisResponse:
        """Ask the model for candidate conditions. Never raises."""
        try:
            text = self.llm.generate(self.build_prompt(request))
        except GenerativeApiError as e:
            logger.warning("Diagnosis request failed: %s", e)
            return fallback_diagnosis(request)
        return parse_diagnosis_response(text, request)
