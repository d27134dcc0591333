"""
Users and page permissions importer.

Existing users are updated in place (role, linked resource, active flag);
new users get the configured default password, hashed once per run, and
must change it at first login. Permissions are merged on (role, page).
"""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import update
from werkzeug.security import generate_password_hash

from staffhub.models import AppUser, RolePermission
from staffhub.services.imports.base import BaseImporter, ImportContext, register_importer
from staffhub.services.imports.normalizer import clean_text, normalize_key, to_bool
from staffhub.services.imports.writer import ConflictPolicy

logger = logging.getLogger(__name__)

USER_COLUMNS = [
    "id",
    "username",
    "password_hash",
    "role",
    "resource_id",
    "is_active",
    "must_change_password",
    "created_at",
]
DEFAULT_USER_ROLE = "SIMPLE"


def _role(value: Any) -> str:
    text = clean_text(value)
    return " ".join(text.upper().split()) if text else DEFAULT_USER_ROLE


@register_importer
class UsersPermissionsImporter(BaseImporter):
    import_type = "users_permissions"

    def run(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        self._import_users(ctx, payload)
        self._import_permissions(ctx, payload)

    def _import_users(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        resolver = ctx.resolver
        new_users: dict[UUID, dict[str, Any]] = {}
        updates: dict[UUID, dict[str, Any]] = {}
        password_hash = None
        created_at = datetime.now(timezone.utc)

        for record in self.records(ctx, payload, "users"):
            username = clean_text(self.cell(record, "Username", "User"))
            if not username:
                ctx.warn("User row without a username skipped.")
                continue

            resource_label = clean_text(self.cell(record, "Resource", "Email"))
            resource_id = resolver.resolve_resource(resource_label) if resource_label else None
            if resource_label and resource_id is None:
                ctx.warn(f"User '{username}': resource '{resource_label}' not found, left unlinked.", skip=False)

            values = {
                "role": _role(self.cell(record, "Role")),
                "resource_id": resource_id,
                "is_active": to_bool(self.cell(record, "Active", "Is Active"), default=True),
            }

            user_id, _ = resolver.app_users.resolve_or_create(username)
            if user_id in new_users or user_id in updates:
                ctx.warn(f"User '{username}' appears more than once; the later row wins.", skip=False)

            if resolver.app_users.is_new(username):
                if password_hash is None:
                    password_hash = generate_password_hash(ctx.settings.default_user_password)
                new_users[user_id] = {
                    "id": user_id,
                    "username": normalize_key(username),
                    "password_hash": password_hash,
                    "must_change_password": True,
                    "created_at": created_at,
                    **values,
                }
            else:
                updates[user_id] = values

        for user_id, values in updates.items():
            ctx.db.execute(update(AppUser).where(AppUser.id == user_id).values(**values))
        ctx.stats.written += len(updates)

        ctx.write(AppUser, USER_COLUMNS, list(new_users.values()), ConflictPolicy.none)
        logger.info(f"Users: {len(new_users)} created, {len(updates)} updated")

    def _import_permissions(self, ctx: ImportContext, payload: dict[str, Any]) -> None:
        rows: dict[tuple, dict[str, Any]] = {}
        for record in self.records(ctx, payload, "permissions"):
            role = clean_text(self.cell(record, "Role"))
            page = clean_text(self.cell(record, "Page", "Page Path"))
            if not role or not page:
                ctx.warn("Permission row skipped: role and page are required.")
                continue
            role = _role(role)
            rows[(role, page)] = {
                "role": role,
                "page_path": page,
                "is_allowed": to_bool(self.cell(record, "Allowed", "Is Allowed")),
            }

        ctx.write(
            RolePermission,
            ["role", "page_path", "is_allowed"],
            list(rows.values()),
            ConflictPolicy.merge,
            ["role", "page_path"],
            ["is_allowed"],
        )
