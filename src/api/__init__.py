"""
FastAPI Todo App backend package.

The application instance lives in ``src.api.main:app``; run it with any ASGI
server, e.g. ``uvicorn src.api.main:app``.
"""
