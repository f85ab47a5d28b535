"""
credential_service package

This package contains the backend logic for the credential service.
It includes:

- FastAPI application and startup lifespan (`main.py`)
- SQLAlchemy model, engine and schema creation (`models.py`, `db.py`, `schema.py`)
- Data access and credential rules (`store.py`, `service.py`)
- bcrypt password hashing (`auth.py`)
- Pydantic request/response schemas (`schemas.py`)
"""
