"""HTTP surface: FastAPI application and resolver routes."""
