import pytest

from ai import DiagnosisClient, GenerativeLanguageClient, MedicineInfoClient, VisionClient
from app import create_app
from fakes import FakeSupabase, FakeSession


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def vision_session():
    return FakeSession()


@pytest.fixture
def llm_session():
    return FakeSession()


@pytest.fixture
def app(supabase, vision_session, llm_session):
    app = create_app({"TESTING": True, "RATELIMIT_ENABLED": False})
    llm = GenerativeLanguageClient(api_key="test-key", session=llm_session)
    app.extensions["vision_client"] = VisionClient(
        api_key="test-key",
        medicine_client=MedicineInfoClient(llm),
        session=vision_session,
    )
    app.extensions["diagnosis_client"] = DiagnosisClient(llm)
    app.extensions["supabase_anon"] = lambda: supabase
    app.extensions["supabase_user"] = lambda token, refresh_token=None: supabase
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(supabase):
    response = supabase.auth.sign_up({"email": "ada@example.com", "password": "s3cret!"})
    return {
        "Authorization": f"Bearer {response.session.access_token}",
        "X-Refresh-Token": response.session.refresh_token,
    }


@pytest.fixture
def user_id(supabase, auth_headers):
    return supabase.auth.users["ada@example.com"][1].id
