"""API routes for the progress engine"""
import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from momentum import config
from momentum.api.auth import verify_api_key
from momentum.api.middleware import limiter
from momentum.api.models import (
    ActionCompletionRequest,
    BadgeResponse,
    ChallengeAcceptRequest,
    ChallengeCompleteRequest,
    GoalProgressRequest,
    HealthCheckResponse,
    InteractionRequest,
    OutcomeResponse,
    ProgressResponse,
    WinLogRequest,
)
from momentum.db.connection import db
from momentum.gamification.challenges import get_challenge_templates
from momentum.models.challenge import Challenge, ChallengeDuration
from momentum.models.goal import GoalCategory
from momentum.models.progress import AggregateSnapshot
from momentum.models.win import Win
from momentum.services.container import get_container
from momentum.services.gamification_service import GamificationService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service() -> GamificationService:
    return get_container().gamification_service


# ============================================
# Reads
# ============================================

@router.get("/api/v1/users/{user_id}/progress", response_model=ProgressResponse)
@limiter.limit(config.READ_RATE_LIMIT)
async def get_progress(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Get user XP, level and streak"""
    return ProgressResponse(**await service.get_progress(user_id))


@router.get("/api/v1/users/{user_id}/badges", response_model=BadgeResponse)
@limiter.limit(config.READ_RATE_LIMIT)
async def get_badges(
    request: Request,
    user_id: str,
    total_actions_completed: int = 0,
    weekend_actions_completed: int = 0,
    total_wins: int = 0,
    has_big_win: bool = False,
    total_challenges_completed: int = 0,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """
    Get earned badges and progress toward locked ones

    Counter query parameters feed the progress of locked badges.
    """
    snapshot = AggregateSnapshot(
        total_actions_completed=total_actions_completed,
        weekend_actions_completed=weekend_actions_completed,
        total_wins=total_wins,
        has_big_win=has_big_win,
        total_challenges_completed=total_challenges_completed,
    )
    badges = await service.get_badges(user_id, snapshot)
    return BadgeResponse(user_id=user_id, **badges)


@router.get("/api/v1/users/{user_id}/wins", response_model=List[Win])
@limiter.limit(config.READ_RATE_LIMIT)
async def list_wins(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Get the user's wins, newest first"""
    return await service.list_wins(user_id)


@router.get("/api/v1/users/{user_id}/challenges", response_model=List[Challenge])
@limiter.limit(config.READ_RATE_LIMIT)
async def list_challenges(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Get the user's accepted challenges"""
    return await service.list_challenges(user_id)


@router.get("/api/v1/challenges/templates", response_model=List[Challenge])
@limiter.limit(config.READ_RATE_LIMIT)
async def list_challenge_templates(
    request: Request,
    duration: ChallengeDuration,
    focus_areas: List[GoalCategory] = Query(default=[]),
    api_key: str = Depends(verify_api_key)
):
    """Challenges available for the given focus areas, ready to accept"""
    templates = get_challenge_templates(duration, set(focus_areas))
    return [template.to_challenge() for template in templates]


# ============================================
# Triggers
# ============================================

@router.post("/api/v1/users/{user_id}/actions/complete", response_model=OutcomeResponse)
@limiter.limit(config.WRITE_RATE_LIMIT)
async def complete_action(
    request: Request,
    user_id: str,
    body: ActionCompletionRequest,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Record a completed micro-action"""
    outcome = await service.record_action_completion(user_id, body.snapshot, body.completed_at)
    return OutcomeResponse.from_outcome(outcome)


@router.post("/api/v1/users/{user_id}/wins", response_model=OutcomeResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(config.WRITE_RATE_LIMIT)
async def log_win(
    request: Request,
    user_id: str,
    body: WinLogRequest,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Log a user-authored win"""
    outcome = await service.record_win_logged(user_id, body.to_win(), body.snapshot)
    return OutcomeResponse.from_outcome(outcome)


@router.post("/api/v1/users/{user_id}/challenges/accept", response_model=Challenge, status_code=status.HTTP_201_CREATED)
@limiter.limit(config.WRITE_RATE_LIMIT)
async def accept_challenge(
    request: Request,
    user_id: str,
    body: ChallengeAcceptRequest,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Accept a challenge"""
    challenge = await service.accept_challenge(user_id, body.challenge)
    if challenge is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Challenge {body.challenge.id} cannot be accepted"
        )
    return challenge


@router.post("/api/v1/users/{user_id}/challenges/{challenge_id}/complete", response_model=OutcomeResponse)
@limiter.limit(config.WRITE_RATE_LIMIT)
async def complete_challenge(
    request: Request,
    user_id: str,
    challenge_id: str,
    body: ChallengeCompleteRequest,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Complete an accepted challenge"""
    outcome = await service.record_challenge_completion(
        user_id,
        challenge_id,
        body.snapshot,
        reflection=body.reflection,
        completed_at=body.completed_at
    )
    if not outcome.applied:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Challenge {challenge_id} cannot be completed"
        )
    return OutcomeResponse.from_outcome(outcome)


@router.post("/api/v1/users/{user_id}/challenges/{challenge_id}/abandon", response_model=Challenge)
@limiter.limit(config.WRITE_RATE_LIMIT)
async def abandon_challenge(
    request: Request,
    user_id: str,
    challenge_id: str,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Abandon an accepted challenge"""
    challenge = await service.abandon_challenge(user_id, challenge_id)
    if challenge is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Challenge {challenge_id} cannot be abandoned"
        )
    return challenge


@router.post("/api/v1/users/{user_id}/interactions", response_model=OutcomeResponse)
@limiter.limit(config.WRITE_RATE_LIMIT)
async def log_interaction(
    request: Request,
    user_id: str,
    body: InteractionRequest,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Record a relationship interaction"""
    outcome = await service.record_interaction(
        user_id,
        body.interaction,
        body.relationship,
        body.all_relationships,
        snapshot=body.snapshot
    )
    return OutcomeResponse.from_outcome(outcome)


@router.post("/api/v1/users/{user_id}/goals/progress", response_model=OutcomeResponse)
@limiter.limit(config.WRITE_RATE_LIMIT)
async def goal_progress(
    request: Request,
    user_id: str,
    body: GoalProgressRequest,
    api_key: str = Depends(verify_api_key),
    service: GamificationService = Depends(get_service)
):
    """Check a goal for a newly crossed milestone"""
    outcome = await service.record_goal_progress(
        user_id,
        body.goal,
        body.previous_progress,
        snapshot=body.snapshot
    )
    return OutcomeResponse.from_outcome(outcome)


# ============================================
# Operations
# ============================================

@router.get("/api/health", response_model=HealthCheckResponse)
async def health_check():
    """Health check endpoint (no auth); degraded when the Postgres store is unreachable"""
    healthy = True
    if config.STORE_BACKEND == "postgres":
        healthy = await db.ping()

    return HealthCheckResponse(
        status="healthy" if healthy else "degraded",
        store=config.STORE_BACKEND,
        timestamp=datetime.now(timezone.utc)
    )


@router.get("/metrics")
async def metrics_endpoint():
    """Expose Prometheus metrics"""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
