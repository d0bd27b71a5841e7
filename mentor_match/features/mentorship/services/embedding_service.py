"""
Embedding service - turns mentor/mentee application answers into vectors.

Texts are assembled from profile fields, embedded through an
``EmbeddingProvider`` and stored as one embedding set per (user, role).
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Protocol

import numpy as np
import openai
from openai import AsyncOpenAI

from mentor_match.config import settings
from mentor_match.features.mentorship.domain import (
    EmbeddingProviderError,
    EmbeddingSet,
    Mentee,
    Mentor,
    UserRole,
)
from mentor_match.features.mentorship.repository import EmbeddingRepository
from mentor_match.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

MENTOR_PROFILE_DEFAULT = "mentor-profile"
MENTEE_PROFILE_DEFAULT = "mentee-profile"
MENTEE_WHY_INTERESTED_DEFAULT = "mentee-why-interested"


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> np.ndarray: ...

    async def embed_batch(self, texts: Sequence[str]) -> list[np.ndarray]: ...


class OpenAIEmbeddingProvider:
    """Embedding provider backed by the OpenAI embeddings endpoint."""

    def __init__(self, client: AsyncOpenAI | None = None):
        self.model = settings.OPENAI_EMBEDDING_MODEL
        self.dimensions = settings.EMBEDDING_DIMENSIONS
        self.client = client or self._initialize_client()

    def _initialize_client(self) -> AsyncOpenAI:
        if not settings.OPENAI_API_KEY:
            raise EmbeddingProviderError(
                "OPENAI_API_KEY not configured in settings", recoverable=False
            )

        logger.info(
            "OpenAI embedding client initialized",
            model=self.model,
            dimensions=self.dimensions,
            timeout=settings.EMBEDDING_TIMEOUT_SECONDS,
        )
        return AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.EMBEDDING_TIMEOUT_SECONDS,
        )

    async def embed(self, text: str) -> np.ndarray:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: Sequence[str]) -> list[np.ndarray]:
        if not texts:
            return []

        start = time.perf_counter()
        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=list(texts),
                dimensions=self.dimensions,
            )
        except openai.RateLimitError as e:
            logger.warning("OpenAI embedding rate limited", error=str(e))
            raise EmbeddingProviderError(f"Rate limited: {e}", recoverable=True) from e
        except openai.APITimeoutError as e:
            logger.warning("OpenAI embedding request timed out", error=str(e))
            raise EmbeddingProviderError(f"Request timed out: {e}", recoverable=True) from e
        except openai.AuthenticationError as e:
            logger.error("OpenAI authentication failed", error=str(e))
            raise EmbeddingProviderError(f"Authentication failed: {e}", recoverable=False) from e
        except openai.OpenAIError as e:
            logger.error("OpenAI embedding request failed", error=str(e))
            raise EmbeddingProviderError(f"Embedding request failed: {e}") from e

        # Responses carry an index per input; order by it rather than trusting list order
        items = sorted(response.data, key=lambda item: item.index)
        vectors = [np.asarray(item.embedding, dtype=np.float64) for item in items]

        logger.debug(
            "Embeddings created",
            model=self.model,
            count=len(vectors),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return vectors


def build_text(value: str | Sequence[str] | None, default: str = "") -> str:
    """Join list answers with spaces; fall back to ``default`` for empty input."""
    if isinstance(value, (list, tuple)):
        return " ".join(part for part in value if part)
    return value or default


def _join_present(*parts: str | None) -> str:
    return " ".join(part for part in parts if part)


def mentor_texts(mentor: Mentor) -> dict[str, str]:
    return {
        "why_interested": build_text(mentor.why_interested_responses),
        "profile": _join_present(
            build_text(mentor.strengths),
            build_text(mentor.personal_interests),
            mentor.career_advice,
        )
        or MENTOR_PROFILE_DEFAULT,
    }


def mentee_texts(mentee: Mentee) -> dict[str, str]:
    return {
        "why_interested": _join_present(mentee.learning_goals, mentee.role_model_inspiration)
        or MENTEE_WHY_INTERESTED_DEFAULT,
        "hope_to_gain": build_text(mentee.hope_to_gain_responses),
        "profile": _join_present(
            mentee.personal_interests,
            mentee.role_model_inspiration,
            build_text(mentee.mentor_qualities),
        )
        or MENTEE_PROFILE_DEFAULT,
    }


class EmbeddingService:
    def __init__(
        self,
        provider: EmbeddingProvider | None = None,
        repository=EmbeddingRepository,
    ):
        self._provider = provider
        self.repository = repository

    @property
    def provider(self) -> EmbeddingProvider:
        # Built lazily so the app starts without an OpenAI key
        if self._provider is None:
            self._provider = OpenAIEmbeddingProvider()
        return self._provider

    async def embed_mentor(self, mentor: Mentor) -> EmbeddingSet:
        return await self._embed_and_save(mentor.user_id, UserRole.MENTOR, mentor_texts(mentor))

    async def embed_mentee(self, mentee: Mentee) -> EmbeddingSet:
        return await self._embed_and_save(mentee.user_id, UserRole.MENTEE, mentee_texts(mentee))

    async def _embed_and_save(
        self, user_id: str, role: UserRole, texts: dict[str, str]
    ) -> EmbeddingSet:
        """
        Embed the non-empty texts in one batch and upsert the result.

        Empty texts (no answers given) yield no vector; the stored vector
        for that field, if any, is kept.
        """
        fields = [name for name, text in texts.items() if text]
        vectors = await self.provider.embed_batch([texts[name] for name in fields])
        if len(vectors) != len(fields):
            raise EmbeddingProviderError(
                f"Expected {len(fields)} embeddings, provider returned {len(vectors)}"
            )

        embeddings = EmbeddingSet(user_id=user_id, role=role, **dict(zip(fields, vectors)))
        await self.repository.upsert(embeddings)

        logger.info(
            "Embeddings created or updated",
            user_id=user_id,
            role=role.value,
            fields=fields,
        )
        return embeddings


profile_embedding_service = EmbeddingService()
