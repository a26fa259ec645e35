"""
Feature modules for the distributor portal backend.

Each module is self-contained with its own:
- models.py: Pydantic models for data transfer
- repository.py: Supabase queries for the module's tables
- service.py: Business logic implementation
- exceptions.py: Module-specific exceptions

Routes live in api.routes and reach services through api.dependencies.
"""
