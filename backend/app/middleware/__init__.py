# Middleware package init
"""
CallBoard Backend — Middleware Package
========================================

Middleware chain (outermost first):
    Request → [Request ID] → [Access log] → [CORS] → Route Handler

The request ID is assigned before the access log runs so every log line of a
request, including the access line, carries the same ID.
"""
