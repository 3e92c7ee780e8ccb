"""Global pytest configuration."""

import os

# Blank credentials and the database before any imports so tests use the
# in-memory stores and mock providers and never reach external services.
for _var in ("DATABASE_URL", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "OCR_SPACE_API_KEY"):
    os.environ[_var] = ""
