"""
CuriousDog Backend — Repositories (Data Access Layer)
=======================================================

What:  Thin wrappers around SQLAlchemy queries for each table.
Who:   Used only by services; routes never touch repositories directly.

Repository Inventory:
    - UserRepository:     the user directory (exists, profile lookup, insert, update)
    - QuestionRepository: the question store (insert, find, conditional answer, pages)

Repositories are bound to one AsyncSession and never commit; the session
owner (get_db_session, or a test fixture) decides when to commit.
"""
