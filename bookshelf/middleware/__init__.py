"""
Bookshelf — Middleware Package
===============================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [Request deadline] → Route Handler

The request id is set before the access log line is written, and the access
log also records the 500 produced when the deadline expires.
"""
