import os

# settings are read at import time; keep every test off a real MySQL server
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-0123456789")
os.environ.setdefault("COOKIE_SECURE", "true")
