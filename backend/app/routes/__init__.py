# Routes package init
"""
CallBoard Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:    /auth/register, /auth/login, /auth/logout
    - users.py:   /user, /user/creators, /user/avatar, /user/{userId}
    - calls.py:   /call and its sub-paths (listings, favourites, browsing)
    - health.py:  GET /health

Routes stay thin: they extract request data, call a service and return its
result. Business rules live in app.services.
"""
