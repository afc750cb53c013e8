"""Column types portable between Postgres (production) and SQLite (tests)."""

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on Postgres, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")
