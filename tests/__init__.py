import os

# Settings are read at import time, so the test environment is fixed before rentflow loads
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "x" * 48)
os.environ.setdefault("NOTIFICATION_PURGE_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
