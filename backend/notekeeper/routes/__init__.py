# Routes package init
"""
Notekeeper Backend: API Routes Package
=======================================

Route Inventory:
    - auth.py:    POST /signup, POST /login            (public)
    - notes.py:   /notes, /notes/{id}, pin, archive    (bearer token required)
    - health.py:  GET /health                          (public)

Routes stay thin: extract input, call a service, shape the response.
Ownership checks live in the services; token checks live in the
router-level guard (notekeeper.middleware.auth).
"""
