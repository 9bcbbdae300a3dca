"""
Image migration between OpenShift-backed container registries.

This package provides the building blocks used by the migration workflow:
- Inventory of image streams in source namespaces
- Tag selection (all tags or the N most recent)
- Work list planning and resumable, per-image copy execution
- Destination repository provisioning through the Quay API
"""

__version__ = "1.0.0"
