"""
Shared models.

- domain/: enums used across entities, schemas and services
- io/: Pydantic request and response schemas for the HTTP API
"""
