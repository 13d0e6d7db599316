import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Hosted backend (auth + tables)
    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_KEY = os.getenv("SUPABASE_KEY")

    # Google Cloud Vision
    GOOGLE_CLOUD_VISION_API_KEY = os.getenv("GOOGLE_CLOUD_VISION_API_KEY")
    VISION_API_URL = os.getenv("VISION_API_URL", "https://vision.googleapis.com/v1/images:annotate")

    # Google AI Studio (generative language)
    GOOGLE_AI_STUDIO_API_KEY = os.getenv("GOOGLE_AI_STUDIO_API_KEY")
    GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta").rstrip("/")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-pro")
    GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", 0.7))
    GEMINI_TOP_K = int(os.getenv("GEMINI_TOP_K", 40))
    GEMINI_TOP_P = float(os.getenv("GEMINI_TOP_P", 0.95))
    GEMINI_MAX_TOKENS = int(os.getenv("GEMINI_MAX_TOKENS", 1024))

    HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", 30))

    RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "60 per minute")
    RATE_LIMIT_AI = os.getenv("RATE_LIMIT_AI", "10 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
