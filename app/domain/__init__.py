"""
Domain layer containing core business logic and domain services.

Submodules:
- billing: Plan catalog and entitlement filtering.
- live: Live streaming channel lifecycle.
- utils: Domain-specific utilities (e.g., ID generation).
"""
