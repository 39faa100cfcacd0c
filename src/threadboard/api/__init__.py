"""FastAPI adapter over the discussion engine."""
