"""
TravelMemory Backend — API Routes Package
==========================================

Route Inventory:
    - trips.py:   /trip, /trip/{id}   (trip CRUD)
    - metrics.py: GET /metrics        (Prometheus exposition)
    - health.py:  GET /hello          (static text)
                  GET /health         (connector status, uptime)

Routes stay thin: read the request, call a service, shape the response.
"""
