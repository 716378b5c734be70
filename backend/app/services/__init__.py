# Services package init
"""
CallBoard Backend — Services Layer
====================================

What:  Business logic between the routes (HTTP) and the database.

Service Inventory:
    - AuthService: register, login, logout, bearer-token authentication
    - UserService: profiles, avatar upload/reset, team roster
    - CallService: listings, favourites, browsing and search
    - ImageHostService: image validation and upload to the external host
    - catalog: static category, banner and roster data
"""
