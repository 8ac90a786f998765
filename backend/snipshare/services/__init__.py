# Services package init
"""
SnipShare — Services Layer
===========================

What:  Business rules between the route handlers (HTTP) and the models (persistence).
How:   Each service is a plain class with a module-level singleton. Methods take
       the request's AsyncSession as their first argument and raise
       snipshare.exceptions errors; routes decide how those become pages.

Service Inventory:
    - PasswordService: bcrypt hashing and verification off the event loop
    - AccountService:  registration, login/logout session binding, ownership checks
    - SnippetService:  snippet CRUD and maintenance of the owned-id list
"""
