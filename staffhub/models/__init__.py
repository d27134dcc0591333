"""
SQLAlchemy models for StaffHub.

All models are imported here for easy access and to ensure
they are registered with the declarative base.
"""

from staffhub.models.base import Base, LookupMixin
from staffhub.models.lookups import (
    Horizontal,
    SeniorityLevel,
    ProjectStatus,
    ClientSector,
    Location,
    LOOKUP_MODELS,
)
from staffhub.models.calendar_event import CompanyCalendarEvent
from staffhub.models.role import Role
from staffhub.models.client import Client
from staffhub.models.resource import Resource
from staffhub.models.skill import (
    Skill,
    SkillCategory,
    SkillMacroCategory,
    SkillCategoryLink,
    CategoryMacroLink,
    ResourceSkill,
)
from staffhub.models.project import Project
from staffhub.models.staffing import Assignment, Allocation
from staffhub.models.resource_request import ResourceRequest
from staffhub.models.interview import Interview
from staffhub.models.leave import LeaveType, LeaveRequest
from staffhub.models.app_user import AppUser, RolePermission
from staffhub.models.import_history import ImportHistory, ImportStatus

__all__ = [
    # Base
    "Base",
    "LookupMixin",
    # Configuration dimensions
    "Horizontal",
    "SeniorityLevel",
    "ProjectStatus",
    "ClientSector",
    "Location",
    "LOOKUP_MODELS",
    "CompanyCalendarEvent",
    # Core entities
    "Role",
    "Client",
    "Resource",
    "Project",
    # Skills
    "Skill",
    "SkillCategory",
    "SkillMacroCategory",
    "SkillCategoryLink",
    "CategoryMacroLink",
    "ResourceSkill",
    # Staffing
    "Assignment",
    "Allocation",
    # Recruitment & operations
    "ResourceRequest",
    "Interview",
    "LeaveType",
    "LeaveRequest",
    # Security
    "AppUser",
    "RolePermission",
    # Import tracking
    "ImportHistory",
    "ImportStatus",
]
