# Middleware package init
"""
HTMLVault Backend — Middleware Package
========================================

Middleware Chain (order matters!):
    Request → [Body Size] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Body Size FIRST: oversized uploads are refused before anything reads them
    2. Request ID: correlation id for every later log line
    3. Logging: records status and duration with that id
    4. GZip / CORS: FastAPI's stock middleware
"""
