"""PostgreSQL-backed progress store (schema in migrations/001_progress_engine.sql)"""
import logging
from typing import List, Optional

import psycopg
from psycopg.types.json import Jsonb

from momentum.db.connection import Database
from momentum.db.store import ProgressStore
from momentum.exceptions import wrap_external_exception
from momentum.models.challenge import Challenge
from momentum.models.progress import ProgressState
from momentum.models.win import Win

logger = logging.getLogger(__name__)


class PostgresProgressStore(ProgressStore):
    """Progress store on a psycopg connection pool"""

    def __init__(self, database: Database):
        self.db = database

    async def load_state(self, user_id: str) -> ProgressState:
        """
        Get user progress (fresh state if the user has none yet)
        """
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT total_xp, current_streak, last_active_day
                        FROM user_progress
                        WHERE user_id = %s
                        """,
                        (user_id,)
                    )
                    row = await cur.fetchone()

                    await cur.execute(
                        "SELECT badge_id FROM user_badges WHERE user_id = %s",
                        (user_id,)
                    )
                    badge_rows = await cur.fetchall()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="load_state", user_id=user_id)

        if not row:
            return ProgressState(user_id=user_id)

        return ProgressState(
            user_id=user_id,
            total_xp=row["total_xp"],
            current_streak=row["current_streak"],
            last_active_day=row["last_active_day"],
            earned_badges={r["badge_id"] for r in badge_rows},
        )

    async def save_outcome(
        self,
        user_id: str,
        state: ProgressState,
        wins: List[Win],
        unlocked_badges: List[str],
        challenge: Optional[Challenge] = None
    ) -> None:
        """
        Persist progress, badges, wins and the changed challenge in one transaction
        """
        try:
            async with self.db.connection() as conn:
                async with conn.transaction():
                    async with conn.cursor() as cur:
                        await cur.execute(
                            """
                            INSERT INTO user_progress (user_id, total_xp, current_streak, last_active_day)
                            VALUES (%s, %s, %s, %s)
                            ON CONFLICT (user_id) DO UPDATE
                            SET total_xp = EXCLUDED.total_xp,
                                current_streak = EXCLUDED.current_streak,
                                last_active_day = EXCLUDED.last_active_day,
                                updated_at = CURRENT_TIMESTAMP
                            """,
                            (user_id, state.total_xp, state.current_streak, state.last_active_day)
                        )

                        for badge_id in unlocked_badges:
                            await cur.execute(
                                """
                                INSERT INTO user_badges (user_id, badge_id)
                                VALUES (%s, %s)
                                ON CONFLICT (user_id, badge_id) DO NOTHING
                                """,
                                (user_id, badge_id)
                            )

                        for win in wins:
                            await cur.execute(
                                """
                                INSERT INTO wins (id, user_id, description, size, emotion,
                                                  category, goal_id, action_id, created_at)
                                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                                """,
                                (
                                    win.id, user_id, win.description, win.size.value, win.emotion,
                                    win.category, win.goal_id, win.action_id, win.created_at
                                )
                            )

                        if challenge is not None:
                            await self._upsert_challenge(cur, user_id, challenge)
        except psycopg.Error as e:
            raise wrap_external_exception(
                e,
                operation="save_outcome",
                user_id=user_id,
                context={"wins": len(wins), "badges": unlocked_badges}
            )

        logger.info(
            f"Saved progress for user {user_id}: {state.total_xp} XP, "
            f"{len(wins)} new win(s), {len(unlocked_badges)} new badge(s)"
        )

    async def list_wins(self, user_id: str) -> List[Win]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT id, description, size, emotion, category, goal_id, action_id, created_at
                        FROM wins
                        WHERE user_id = %s
                        ORDER BY created_at DESC
                        """,
                        (user_id,)
                    )
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="list_wins", user_id=user_id)

        return [Win(**{**row, "id": str(row["id"])}) for row in rows]

    async def save_challenge(self, user_id: str, challenge: Challenge) -> None:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await self._upsert_challenge(cur, user_id, challenge)
                await conn.commit()
        except psycopg.Error as e:
            raise wrap_external_exception(
                e, operation="save_challenge", user_id=user_id, context={"challenge_id": challenge.id}
            )

    async def get_challenge(self, user_id: str, challenge_id: str) -> Optional[Challenge]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "SELECT payload FROM challenges WHERE user_id = %s AND id = %s",
                        (user_id, challenge_id)
                    )
                    row = await cur.fetchone()
        except psycopg.Error as e:
            raise wrap_external_exception(
                e, operation="get_challenge", user_id=user_id, context={"challenge_id": challenge_id}
            )

        return Challenge.model_validate(row["payload"]) if row else None

    async def list_challenges(self, user_id: str) -> List[Challenge]:
        try:
            async with self.db.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "SELECT payload FROM challenges WHERE user_id = %s ORDER BY started_at DESC",
                        (user_id,)
                    )
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            raise wrap_external_exception(e, operation="list_challenges", user_id=user_id)

        return [Challenge.model_validate(row["payload"]) for row in rows]

    @staticmethod
    async def _upsert_challenge(cur, user_id: str, challenge: Challenge) -> None:
        await cur.execute(
            """
            INSERT INTO challenges (id, user_id, is_active, is_completed, started_at, payload)
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (id) DO UPDATE
            SET is_active = EXCLUDED.is_active,
                is_completed = EXCLUDED.is_completed,
                payload = EXCLUDED.payload,
                updated_at = CURRENT_TIMESTAMP
            """,
            (
                challenge.id, user_id, challenge.is_active, challenge.is_completed,
                challenge.started_at, Jsonb(challenge.model_dump(mode="json"))
            )
        )
