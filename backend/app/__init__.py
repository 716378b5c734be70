"""
CallBoard Backend — Application Package Initializer
=====================================================

Layered layout:

    ┌─────────────────────────────────────┐
    │   routes/        HTTP concerns      │
    ├─────────────────────────────────────┤
    │   services/      business rules     │
    ├─────────────────────────────────────┤
    │   models/ + schemas/  data shapes   │
    ├─────────────────────────────────────┤
    │   database.py    async sessions     │
    └─────────────────────────────────────┘

External dependencies: PostgreSQL and an imgbb-compatible image host.
"""

__version__ = "1.0.0"
