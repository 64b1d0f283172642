"""Apiary HTTP server package.

Entry point:
    uvicorn apiary.server.main:create_app --factory --host 0.0.0.0 --port 8080
"""
