# Services package init
"""
AEDCheck Backend — Services Layer
==================================

What:  Business logic between the routes (HTTP) and the database.
Why:   Routes stay thin; every scope decision, masking step and state
       transition lives here, where it can be tested without HTTP.
How:   Each service is a stateless class with a module-level singleton.
       Sessions are passed in per call; nothing is held between requests.

Service Inventory:
    - auth_service:       session tokens, current-user dependency
    - equipment_query:    EquipmentFilter → SQL WHERE clauses
    - equipment_service:  scoped list / detail / nearby / expiry summary
    - inspection_service: inspection CRUD and approval workflow
    - user_service:       account approval, device assignment
    - cache:              TTLCache used for the expiry summary
"""
