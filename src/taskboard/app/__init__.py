"""FastAPI service exposing the task board resources."""
