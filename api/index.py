# Serverless entrypoint: the platform's Python runtime serves this ASGI `app`.
from marks_lookup.main import app  # noqa: F401
