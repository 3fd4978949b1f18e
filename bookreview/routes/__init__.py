"""
Book Review Service — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - session.py: GET  /api/session                 (gate view for the caller)
                  POST /api/session/sign-out        (end the session)
    - books.py:   GET  /api/books                   (catalog page)
                  GET  /api/books/filters           (genre / author options)
                  POST /api/books                   (add a book)
                  GET  /api/books/{id}              (book detail + reviews)
                  POST /api/books/{id}/reviews      (create or update own review)
    - health.py:  GET  /health                      (service health check)

Routes stay thin: extract input, call a service, set status and headers.
Every /api/books route sits behind the AccessGate.
"""
