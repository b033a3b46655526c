"""
cube-api Application Package

Directory Structure:
├── routers/           # FastAPI route handlers
├── schemas/           # Pydantic models for API requests/responses
│   └── api_schemas.py # HTTP request/response structures
├── domain/            # Entities, block catalog, graph rules, errors, events
├── application/       # Graph store, device registry, simulation, deployment
├── dependencies.py    # Runtime container and FastAPI providers
└── config.py          # Application configuration

Runtime Objects:
1. **Graph Store**: sketches, the current sketch and its uncommitted canvas
2. **Device Registry**: devices with their sensor and actuator readings
3. **Simulation Engine**: ticks synthetic sensor values while running
4. **Deployment Pipeline**: walks the current sketch through staged deployment

All state lives in memory for the lifetime of the process; each application
instance owns one set of runtime objects.
"""
