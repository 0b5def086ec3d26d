# Routes package init
"""
AEDCheck Backend — API Routes Package
======================================

What:  HTTP route handlers that accept requests and return responses.
How:   One module per resource. Every /api route depends on
       get_current_profile; the scope itself is resolved in the services.

Route Inventory:
    - health.py:      GET  /health
    - me.py:          GET  /api/me/scope
    - equipment.py:   GET  /api/equipment, /nearby, /summary, /{serial}
    - inspections.py: GET/POST /api/inspections
                      GET/PATCH/DELETE /api/inspections/{id}
                      POST /api/inspections/{id}/approve, /reject
    - admin_users.py: POST /api/admin/users/{id}/approve
                      PUT  /api/admin/users/{id}/devices

Routes are THIN: parse the request, call a service, set headers.
"""
