"""
Book Review Service — Application Package
==========================================

A thin async web service over two external collaborators: a hosted
relational database (base tables + a rating aggregate view) and a managed
auth provider.

Architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, access gate
    ├─────────────────────────────────────┤
    │   Services (flows) + Presenters     │  ← validation, query building, view models
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM / view + Pydantic
    ├─────────────────────────────────────┤
    │   Database + Auth provider client   │  ← async SQLAlchemy sessions, httpx
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
