# Routes package init
"""
CuriousDog Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:       POST /api/auth/register, POST /api/auth/login
    - users.py:      /api/users/me (GET, PATCH), /api/users/me/picture (POST),
                     GET /api/users/{id}, GET /api/files/{path}
    - questions.py:  POST/GET /api/users/{id}/questions, GET /api/questions,
                     GET /api/questions/me, PATCH /api/questions/{id}/answer
    - health.py:     GET /health

Design Principle:
    Routes are THIN: they pull fields out of the request, resolve the
    authenticated Actor through a dependency, call a service, and return its
    result. Authorization rules live in the services.
"""
