"""
Configuration dimension tables (horizontals, seniority levels, statuses,
client sectors, locations).
"""

from staffhub.models.base import Base, LookupMixin


class Horizontal(LookupMixin, Base):
    __tablename__ = "horizontals"


class SeniorityLevel(LookupMixin, Base):
    __tablename__ = "seniority_levels"


class ProjectStatus(LookupMixin, Base):
    __tablename__ = "project_statuses"


class ClientSector(LookupMixin, Base):
    __tablename__ = "client_sectors"


class Location(LookupMixin, Base):
    __tablename__ = "locations"


# Payload key -> dimension model
LOOKUP_MODELS: dict[str, type[LookupMixin]] = {
    "horizontals": Horizontal,
    "seniority_levels": SeniorityLevel,
    "project_statuses": ProjectStatus,
    "client_sectors": ClientSector,
    "locations": Location,
}
