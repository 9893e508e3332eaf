"""
Import all models from their respective modules.
"""

from fleet_tracker.models.fleet import Vehicle, Trip

# Export all models
__all__ = [
    "Vehicle",
    "Trip",
]
