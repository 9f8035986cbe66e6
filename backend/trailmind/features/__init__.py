"""
Feature modules for the TrailMind engine.

Each feature is a self-contained module with:
- schemas.py - Pydantic records (serializable, immutable where possible)
- service.py - Business logic
- calculators/ or helper modules - Calculation logic (optional)
"""
