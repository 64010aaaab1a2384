import os

# Settings are read once at import time, so the environment must be set
# before anything from flowpilot is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["DEBUG"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_DEFAULT_USERS"] = "false"
os.environ["SECRET_KEY"] = "test-access-secret-0123456789abcdef"
os.environ["REFRESH_SECRET_KEY"] = "test-refresh-secret-0123456789abcdef"
os.environ.pop("GEMINI_API_KEY", None)
