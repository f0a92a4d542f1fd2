import os

# Must run before mrp.core.config is imported: keep the suite on SQLite
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("MODERATION_REQUIRES_ROLE", "false")
