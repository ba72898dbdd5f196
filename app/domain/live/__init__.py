"""
Live streaming domain logic.

Includes:
- channel: Channel provisioning, lifecycle transitions and decommission.
"""
