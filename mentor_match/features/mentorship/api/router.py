"""
Mentorship routes.

Recommendations for the signed-in mentee, a read-only mentorship overview,
the request/accept/decline lifecycle and embedding refresh.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mentor_match.auth.verify import current_user_id
from mentor_match.config import settings
from mentor_match.db.helpers import DatabaseError
from mentor_match.features.mentorship.domain import (
    EmbeddingProviderError,
    MatchNotFoundError,
    MatchStatus,
    MenteeNotFoundError,
    MentorshipRequestError,
    RecommendationInputError,
)
from mentor_match.features.mentorship.pipeline.recommendation import (
    RecommendationService,
    recommendation_service,
)
from mentor_match.features.mentorship.repository import MentorDirectoryRepository
from mentor_match.features.mentorship.services import (
    EmbeddingService,
    MentorshipService,
    mentorship_request_service,
    profile_embedding_service,
)
from mentor_match.infrastructure.observability.logging import get_logger
from mentor_match.models.api.mentorship_request import MentorshipRequestCreate
from mentor_match.models.api.mentorship_response import (
    EmbeddingUpdateResponse,
    MatchActionResponse,
    MenteeOverviewResponse,
    MentorOverviewResponse,
    MentorshipOverviewResponse,
    MentorshipRequestResponse,
    PendingRequestResponse,
    RecommendationResponse,
    RecommendationsListResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/mentorship", tags=["mentorship"])


def get_recommendation_service() -> RecommendationService:
    return recommendation_service


def get_mentorship_service() -> MentorshipService:
    return mentorship_request_service


def get_embedding_service() -> EmbeddingService:
    return profile_embedding_service


def get_mentor_directory():
    return MentorDirectoryRepository


def _database_unavailable(e: DatabaseError, user_id: str) -> HTTPException:
    logger.error(
        "Mentorship database operation failed",
        user_id=user_id,
        operation=e.operation,
        error=str(e),
    )
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Mentorship data temporarily unavailable",
    )


@router.get("/recommendations", response_model=RecommendationsListResponse)
async def get_recommendations(
    limit: int = Query(
        default=settings.RECOMMENDATION_LIMIT, ge=1, le=settings.RECOMMENDATION_MAX_LIMIT
    ),
    user_id: str = Depends(current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """Generate (or refresh) mentor recommendations for the signed-in mentee."""
    try:
        recommendations = await service.generate_recommendations(user_id, limit)
    except MenteeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except RecommendationInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_unavailable(e, user_id)

    return RecommendationsListResponse(
        mentee_id=user_id,
        recommendations=[
            RecommendationResponse(
                mentor_id=entry.mentor_id,
                score=entry.score,
                priority=entry.priority,
                from_existing=entry.from_existing,
                has_requested=entry.has_requested,
            )
            for entry in recommendations
        ],
        total_count=len(recommendations),
        generated_at=datetime.now(UTC),
    )


@router.get("/overview", response_model=MentorshipOverviewResponse)
async def get_mentorship_overview(
    user_id: str = Depends(current_user_id),
    service: MentorshipService = Depends(get_mentorship_service),
):
    """Active and pending mentorships for both roles; reads cached suggestions only."""
    try:
        overview = await service.overview(user_id)
    except DatabaseError as e:
        raise _database_unavailable(e, user_id)

    mentor = None
    if overview.mentor is not None:
        mentor = MentorOverviewResponse(
            active_mentee_ids=overview.mentor.active_mentee_ids,
            pending_requests=[
                PendingRequestResponse(
                    match_id=record.match_id,
                    mentee_user_id=record.requestor_user_id,
                    message=record.message,
                )
                for record in overview.mentor.pending_requests
            ],
        )

    mentee = None
    if overview.mentee is not None:
        mentee = MenteeOverviewResponse(
            active_mentor_ids=overview.mentee.active_mentor_ids,
            pending_mentor_ids=overview.mentee.pending_mentor_ids,
            suggested_mentor_ids=overview.mentee.suggested_mentor_ids,
        )

    return MentorshipOverviewResponse(user_id=user_id, mentor=mentor, mentee=mentee)


@router.post(
    "/requests",
    response_model=MentorshipRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_mentorship_request(
    request: MentorshipRequestCreate,
    user_id: str = Depends(current_user_id),
    service: MentorshipService = Depends(get_mentorship_service),
):
    """Ask a mentor for mentorship."""
    try:
        match_id = await service.request_mentorship(
            user_id, request.mentor_user_id, request.message
        )
    except MentorshipRequestError as e:
        status_code = {
            MentorshipRequestError.DUPLICATE: status.HTTP_409_CONFLICT,
            MentorshipRequestError.MENTOR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
        }.get(e.reason, status.HTTP_400_BAD_REQUEST)
        raise HTTPException(status_code=status_code, detail=str(e))
    except DatabaseError as e:
        raise _database_unavailable(e, user_id)

    return MentorshipRequestResponse(match_id=match_id, mentor_user_id=request.mentor_user_id)


async def _resolve_request(
    service: MentorshipService, match_id: int, user_id: str, new_status: MatchStatus
) -> MatchActionResponse:
    try:
        if new_status == MatchStatus.ACCEPTED:
            await service.accept_request(match_id, user_id)
        else:
            await service.decline_request(match_id, user_id)
    except MatchNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DatabaseError as e:
        raise _database_unavailable(e, user_id)

    return MatchActionResponse(match_id=match_id, status=new_status.value)


@router.post("/requests/{match_id}/accept", response_model=MatchActionResponse)
async def accept_mentorship_request(
    match_id: int,
    user_id: str = Depends(current_user_id),
    service: MentorshipService = Depends(get_mentorship_service),
):
    """Mentor accepts one of their pending requests."""
    return await _resolve_request(service, match_id, user_id, MatchStatus.ACCEPTED)


@router.post("/requests/{match_id}/decline", response_model=MatchActionResponse)
async def decline_mentorship_request(
    match_id: int,
    user_id: str = Depends(current_user_id),
    service: MentorshipService = Depends(get_mentorship_service),
):
    """Mentor declines one of their pending requests."""
    return await _resolve_request(service, match_id, user_id, MatchStatus.DECLINED)


@router.post("/embeddings/mentor", response_model=EmbeddingUpdateResponse)
async def refresh_mentor_embeddings(
    user_id: str = Depends(current_user_id),
    directory=Depends(get_mentor_directory),
    service: EmbeddingService = Depends(get_embedding_service),
):
    """Rebuild the signed-in mentor's embeddings from their stored profile."""
    try:
        mentor = await directory.get_mentor(user_id)
        if mentor is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mentor not found")
        embeddings = await service.embed_mentor(mentor)
    except EmbeddingProviderError as e:
        logger.error("Mentor embedding failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Embedding provider unavailable"
        )
    except DatabaseError as e:
        raise _database_unavailable(e, user_id)

    return EmbeddingUpdateResponse(
        user_id=user_id,
        role=embeddings.role.value,
        fields_embedded=_embedded_fields(embeddings),
    )


@router.post("/embeddings/mentee", response_model=EmbeddingUpdateResponse)
async def refresh_mentee_embeddings(
    user_id: str = Depends(current_user_id),
    directory=Depends(get_mentor_directory),
    service: EmbeddingService = Depends(get_embedding_service),
    recommendations: RecommendationService = Depends(get_recommendation_service),
):
    """Rebuild the signed-in mentee's embeddings, then regenerate recommendations."""
    try:
        mentee = await directory.get_mentee(user_id)
        if mentee is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mentee not found")
        embeddings = await service.embed_mentee(mentee)
        generated = await recommendations.generate_recommendations(user_id)
    except EmbeddingProviderError as e:
        logger.error("Mentee embedding failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Embedding provider unavailable"
        )
    except DatabaseError as e:
        raise _database_unavailable(e, user_id)

    return EmbeddingUpdateResponse(
        user_id=user_id,
        role=embeddings.role.value,
        fields_embedded=_embedded_fields(embeddings),
        recommendations_generated=len(generated),
    )


def _embedded_fields(embeddings) -> list[str]:
    return [
        name
        for name in ("profile", "why_interested", "hope_to_gain")
        if getattr(embeddings, name) is not None
    ]
