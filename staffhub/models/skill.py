"""
Skill taxonomy models: skills, categories, macro categories and the
resource <-> skill association.
"""

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from staffhub.models.base import Base


class Skill(Base):
    __tablename__ = "skills"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )
    is_certification: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
    )

    def __repr__(self) -> str:
        return f"<Skill(name={self.name!r})>"


class SkillCategory(Base):
    __tablename__ = "skill_categories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )


class SkillMacroCategory(Base):
    __tablename__ = "skill_macro_categories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )


class SkillCategoryLink(Base):
    """Skill <-> category (many-to-many)."""

    __tablename__ = "skill_skill_category_map"

    skill_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("skills.id", ondelete="CASCADE"),
        primary_key=True,
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("skill_categories.id", ondelete="CASCADE"),
        primary_key=True,
    )


class CategoryMacroLink(Base):
    """Category <-> macro category (many-to-many)."""

    __tablename__ = "skill_category_macro_map"

    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("skill_categories.id", ondelete="CASCADE"),
        primary_key=True,
    )
    macro_category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("skill_macro_categories.id", ondelete="CASCADE"),
        primary_key=True,
    )


class ResourceSkill(Base):
    """Skill held by a resource, with optional level and validity dates."""

    __tablename__ = "resource_skills"

    resource_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("resources.id", ondelete="CASCADE"),
        primary_key=True,
    )
    skill_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("skills.id", ondelete="CASCADE"),
        primary_key=True,
    )
    level: Mapped[int | None] = mapped_column(Integer)
    acquisition_date: Mapped[date | None] = mapped_column(Date)
    expiration_date: Mapped[date | None] = mapped_column(Date)
