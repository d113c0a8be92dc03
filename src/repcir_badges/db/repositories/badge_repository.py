"""SQLite-backed repositories for the badge catalog and earned badges."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .base import BadgeDefinitionRepository, UserBadgeRepository
from .sqlite_base import SQLiteRepository, parse_datetime
from ...catalog import DEFAULT_BADGES, build_definitions
from ...exceptions import (
    BadgeAlreadyEarnedError,
    DatabaseError,
    FeaturedBadgeLimitError,
    UserBadgeNotFoundError,
)
from ...models.badges import BadgeDefinition, UserBadge, criteria_to_dict


logger = logging.getLogger(__name__)


class SQLiteBadgeDefinitionRepository(SQLiteRepository, BadgeDefinitionRepository):
    """
    Badge catalog stored in the badge_definitions table.

    Criteria are stored as camelCase JSON documents and validated on read;
    rows that fail validation are skipped with a warning.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        super().__init__(db_path)

    def _row_to_dict(self, row: sqlite3.Row) -> Dict[str, Any]:
        try:
            criteria = json.loads(row["criteria_json"] or "{}")
        except json.JSONDecodeError:
            logger.warning(f"Badge {row['id']} has malformed criteria JSON")
            criteria = {}
        return {
            "id": row["id"],
            "name": row["name"],
            "description": row["description"],
            "icon": row["icon"],
            "image_url": row["image_url"],
            "category": row["category"],
            "tier": row["tier"],
            "criteria": criteria,
            "criteria_description": row["criteria_description"],
            "is_active": bool(row["is_active"]),
            "is_automatic": bool(row["is_automatic"]),
            "display_order": row["display_order"],
        }

    def list_definitions(self) -> List[BadgeDefinition]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT * FROM badge_definitions ORDER BY display_order, id"
            ).fetchall()
        return build_definitions(self._row_to_dict(row) for row in rows)

    def get(self, badge_id: str) -> Optional[BadgeDefinition]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM badge_definitions WHERE id = ?",
                (badge_id,)
            ).fetchone()
        if not row:
            return None
        definitions = build_definitions([self._row_to_dict(row)])
        return definitions[0] if definitions else None

    def upsert(self, definition: BadgeDefinition) -> BadgeDefinition:
        """Insert or replace one badge definition."""
        with self._get_connection() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO badge_definitions
                (id, name, description, icon, image_url, category, tier,
                 criteria_json, criteria_description, is_automatic, is_active,
                 display_order)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, self._definition_params(definition))
        return definition

    def seed(self, rows: Optional[Iterable[Dict[str, Any]]] = None) -> int:
        """
        Insert catalog rows that are not in the table yet.

        Existing rows are left untouched, so seeding is idempotent.

        Args:
            rows: Catalog rows; defaults to the built-in DEFAULT_BADGES

        Returns:
            Number of newly inserted definitions
        """
        definitions = build_definitions(DEFAULT_BADGES if rows is None else rows)
        inserted = 0
        try:
            with self._get_connection() as conn:
                for definition in definitions:
                    cursor = conn.execute("""
                        INSERT OR IGNORE INTO badge_definitions
                        (id, name, description, icon, image_url, category, tier,
                         criteria_json, criteria_description, is_automatic, is_active,
                         display_order)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """, self._definition_params(definition))
                    inserted += cursor.rowcount
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to seed badge catalog: {e}", operation="seed")

        logger.info(f"Seeded {inserted} new badge definitions ({len(definitions)} in catalog)")
        return inserted

    @staticmethod
    def _definition_params(definition: BadgeDefinition) -> tuple:
        return (
            definition.id,
            definition.name,
            definition.description,
            definition.icon,
            definition.image_url,
            definition.category.value,
            definition.tier.value,
            json.dumps(criteria_to_dict(definition.criteria)),
            definition.criteria_description,
            1 if definition.is_automatic else 0,
            1 if definition.is_active else 0,
            definition.display_order,
        )


class SQLiteUserBadgeRepository(SQLiteRepository, UserBadgeRepository):
    """
    Earned badges stored in the user_badges table.

    The unique index on (user_id, badge_id) is the source of truth for
    "already earned"; concurrent inserts for the same pair resolve to one row.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        super().__init__(db_path)

    def _row_to_user_badge(self, row: sqlite3.Row) -> UserBadge:
        metadata = json.loads(row["metadata_json"]) if row["metadata_json"] else {}
        return UserBadge(
            user_id=row["user_id"],
            badge_id=row["badge_id"],
            earned_at=parse_datetime(row["earned_at"]),
            metadata=metadata,
            is_featured=bool(row["is_featured"]),
            display_order=row["display_order"],
        )

    def get(self, user_id: str, badge_id: str) -> Optional[UserBadge]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM user_badges WHERE user_id = ? AND badge_id = ?",
                (user_id, badge_id)
            ).fetchone()
        return self._row_to_user_badge(row) if row else None

    def list_for_user(self, user_id: str) -> List[UserBadge]:
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM user_badges
                WHERE user_id = ?
                ORDER BY display_order, earned_at
            """, (user_id,)).fetchall()
        return [self._row_to_user_badge(row) for row in rows]

    def count_featured(self, user_id: str) -> int:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM user_badges WHERE user_id = ? AND is_featured = 1",
                (user_id,)
            ).fetchone()
        return row[0]

    def insert(self, user_badge: UserBadge) -> UserBadge:
        try:
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO user_badges
                    (user_id, badge_id, earned_at, display_order, is_featured, metadata_json)
                    VALUES (?, ?, ?, ?, ?, ?)
                """, (
                    user_badge.user_id,
                    user_badge.badge_id,
                    user_badge.earned_at.isoformat(),
                    user_badge.display_order,
                    1 if user_badge.is_featured else 0,
                    json.dumps(user_badge.metadata or {}, default=str),
                ))
        except sqlite3.IntegrityError:
            raise BadgeAlreadyEarnedError(user_badge.user_id, user_badge.badge_id)
        return user_badge

    def set_featured(
        self,
        user_id: str,
        badge_id: str,
        is_featured: bool,
        limit: int,
    ) -> UserBadge:
        with self._get_connection() as conn:
            # Take the write lock before counting so two toggles cannot both pass the cap
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT * FROM user_badges WHERE user_id = ? AND badge_id = ?",
                (user_id, badge_id)
            ).fetchone()
            if not row:
                raise UserBadgeNotFoundError(user_id, badge_id)

            current = self._row_to_user_badge(row)
            if current.is_featured == is_featured:
                return current

            if is_featured:
                featured = conn.execute(
                    "SELECT COUNT(*) FROM user_badges WHERE user_id = ? AND is_featured = 1",
                    (user_id,)
                ).fetchone()[0]
                if featured >= limit:
                    raise FeaturedBadgeLimitError(limit)

            conn.execute(
                "UPDATE user_badges SET is_featured = ? WHERE user_id = ? AND badge_id = ?",
                (1 if is_featured else 0, user_id, badge_id)
            )
        return current.model_copy(update={"is_featured": is_featured})

    def set_display_order(self, user_id: str, badge_ids: Sequence[str]) -> int:
        updated = 0
        with self._get_connection() as conn:
            for position, badge_id in enumerate(badge_ids):
                cursor = conn.execute(
                    "UPDATE user_badges SET display_order = ? WHERE user_id = ? AND badge_id = ?",
                    (position, user_id, badge_id)
                )
                updated += cursor.rowcount
        return updated
