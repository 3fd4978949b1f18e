"""
Book Review Service — Middleware Package
=========================================

Middleware Chain:
    Request → [Request ID] → [Access Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID stored in a ContextVar and echoed in X-Request-ID
    2. Access Logging: method, path, status, duration, with the request ID
"""
