"""UniPivot.

Backend for the UniPivot nonprofit: member accounts and grades, reading club
and seminar programs with registration, attendance and deposit refunds,
donations, a point ledger, book reports, published content, site design
management with change history and restore points, and back office
calendar, project and document records.

Core subpackages
----------------

- ``unipivot.core``: configuration-independent building blocks such as the
  database layer (entities and repositories), request/response schemas and
  pure business rules.
- ``unipivot.server``: the FastAPI application, its routers, services,
  middleware and exception handlers.
"""
