# Routes package init
"""
HTMLVault Backend — API Routes Package
========================================

Route Inventory:
    - content.py: POST   /api/upload
                  GET    /api/content
                  GET    /api/content/{id}
                  PUT    /api/content/{id}
                  DELETE /api/content/{id}
    - health.py:  GET    /health

Routes stay thin: they extract path and body values, call the service, and
pick the status code. Validation and SQL live in the service layer.
"""
