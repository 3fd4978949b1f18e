"""
Book Review Service — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the external backends.
How:   Services receive the database session and the caller's
       SessionContext on every call and hold no per-request state.

Service Inventory:
    - AuthService:    REST client for the external auth provider
    - session:        SessionContext lifecycle and the AccessGate dependency
    - CatalogService: filtered / sorted / paginated listing + filter options
    - ReviewService:  book detail, own-review lookup, review submission
    - BookService:    book creation
"""
