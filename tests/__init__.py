"""Test package. Settings require DATABASE_URL, so point it at in-memory SQLite before any app import."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
