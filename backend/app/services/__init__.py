# Services package init
"""
CuriousDog Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and repositories (persistence).
How:   Services accept a database session plus explicit actor ids, apply
       business rules, and return Pydantic response models.

Service Inventory:
    - QuestionService: question lifecycle, feeds, anonymity at the read boundary
    - UserService:     registration, login, profiles, profile pictures
    - AuthService:     bcrypt password hashes and JWT access tokens
    - FileService:     profile picture validation, storage, and cleanup
"""
