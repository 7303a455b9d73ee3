"""
TravelMemory Backend — Application Package Initializer
======================================================

What: Marks the `travel_memory` directory as a Python package.
Who:  Used by uvicorn (`travel_memory.main:app`), the CLI (`python -m travel_memory`)
      and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │     Routes (trip, metrics, hello)   │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (TripService)      │  ← CRUD passthrough, error mapping
    ├─────────────────────────────────────┤
    │            Schemas (Pydantic)       │  ← API contracts
    ├─────────────────────────────────────┤
    │   Database (MongoConnector, pymongo)│  ← single long-lived connection
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
