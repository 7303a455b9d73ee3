"""
TravelMemory Backend — Services Layer
======================================

Service Inventory:
    - TripService: CRUD passthrough over the `trips` collection
"""
