import os

# Keep tests deterministic and offline-safe.
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["GEMINI_MODEL"] = "gemini-test-model"
os.environ["GEMINI_BASE_URL"] = "https://gemini.invalid/v1beta"
os.environ["ALLOWED_ORIGIN"] = "https://frontend.example.com"
os.environ["LOG_JSON"] = "false"
