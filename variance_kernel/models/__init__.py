"""ORM models for variance analysis."""

from variance_kernel.models.project import ProjectModel

__all__ = ["ProjectModel"]
