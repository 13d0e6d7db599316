import pytest

from ai import GenerativeApiError, GenerativeLanguageClient, MedicineInfoClient, parse_medicine_response
from ai.medicine_agent import fallback_medicine_info
from fakes import FakeResponse, FakeSession, gemini_response, medicine_json


def make_client(*responses):
    return MedicineInfoClient(GenerativeLanguageClient(api_key="k", session=FakeSession(*responses)))


def test_prompt_embeds_name_and_asks_for_json():
    prompt = MedicineInfoClient.build_prompt("Ibuprofen")
    assert '"Ibuprofen"' in prompt
    for key in ("medicineName", "description", "uses", "sideEffects", "dosage"):
        assert key in prompt


def test_parse_complete_response():
    info = parse_medicine_response(
        '{"medicineName": "Ibuprofen", "description": "NSAID", "uses": "Pain", '
        '"sideEffects": "Stomach upset", "dosage": "200-400 mg"}',
        "IBUPROFEN",
    )
    assert info.medicine_name == "Ibuprofen"
    assert info.side_effects == "Stomach upset"
    assert info.dosage == "200-400 mg"


def test_parse_fills_missing_fields_one_by_one():
    info = parse_medicine_response('{"description": "NSAID", "uses": ["Pain", "Fever"], "dosage": ""}', "Ibuprofen")
    fallback = fallback_medicine_info("Ibuprofen")

    assert info.medicine_name == "Ibuprofen"
    assert info.description == "NSAID"
    assert info.uses == "Pain, Fever"
    assert info.side_effects == fallback.side_effects
    assert info.dosage == fallback.dosage


def test_parse_without_json_returns_fallback():
    assert parse_medicine_response("I am not sure what that is.", "Xyz") == fallback_medicine_info("Xyz")


def test_fallback_mentions_healthcare_provider():
    info = fallback_medicine_info("Xyz")
    assert "healthcare provider" in info.uses


def test_get_medicine_info_uses_model_output():
    info = make_client(medicine_json("Paracetamol")).get_medicine_info("PARACETAMOL")
    assert info.medicine_name == "Paracetamol"
    assert info.uses == "Pain and fever."


def test_get_medicine_info_falls_back_on_http_error():
    info = make_client(FakeResponse(503, {})).get_medicine_info("Paracetamol")
    assert info == fallback_medicine_info("Paracetamol")


def test_fetch_medicine_info_lets_api_errors_through():
    with pytest.raises(GenerativeApiError):
        make_client(FakeResponse(403, {})).fetch_medicine_info("Paracetamol")


def test_fetch_medicine_info_does_not_raise_on_bad_json():
    info = make_client(gemini_response("{broken")).fetch_medicine_info("Paracetamol")
    assert info == fallback_medicine_info("Paracetamol")
