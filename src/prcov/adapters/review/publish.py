"""Idempotent publishing of an annotation plan through a review-system client.

The HTTP client itself lives outside prcov; anything implementing :class:`ReviewClient`
can be used. Comments are recognised as ours by the hidden markers embedded in their
bodies, so re-running on a new commit updates comments instead of piling up duplicates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from prcov import logger as _package_logger
from prcov.engine.plan import GLOBAL_COMMENT_MARKER, INLINE_COMMENT_MARKER
from prcov.errors import PublishError

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable, Sequence

    from prcov.model.annotations import AnnotationPlan, AnnotationRequest, SummaryComment


@dataclass(frozen=True, slots=True)
class ReviewComment:
    """A comment as reported by the review system.

    For inline comments ``line`` is the last commented line and ``start_line`` the first
    one, or ``None`` for single-line comments.
    """

    id: int | str
    body: str | None
    path: str | None = None
    start_line: int | None = None
    line: int | None = None

    def has_marker(self, marker: str) -> bool:
        return bool(self.body) and marker in (self.body or "")

    def matches(self, annotation: AnnotationRequest) -> bool:
        first = self.start_line if self.start_line is not None else self.line
        return self.path == annotation.file and first == annotation.start_line and self.line == annotation.end_line


class ReviewClient(Protocol):
    def list_inline_comments(self) -> Sequence[ReviewComment]: ...

    def create_inline_comment(
        self,
        *,
        commit_sha: str | None,
        path: str,
        start_line: int,
        end_line: int,
        body: str,
    ) -> ReviewComment: ...

    def update_inline_comment(self, comment_id: int | str, body: str) -> None: ...

    def delete_inline_comment(self, comment_id: int | str) -> None: ...

    def list_global_comments(self) -> Sequence[ReviewComment]: ...

    def create_global_comment(self, body: str) -> ReviewComment: ...

    def update_global_comment(self, comment_id: int | str, body: str) -> None: ...


@dataclass(slots=True)
class PublishResult:
    created: list[int | str] = field(default_factory=list)
    updated: list[int | str] = field(default_factory=list)
    deleted: list[int | str] = field(default_factory=list)
    summary_id: int | str | None = None


class InlineCommentPublisher:
    """Create or update one inline comment per annotation and delete stale ones."""

    def __init__(
        self,
        client: ReviewClient,
        *,
        commit_sha: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._commit_sha = commit_sha
        self._logger = logger or _package_logger.getChild("publish")

    def publish(self, annotations: Iterable[AnnotationRequest], result: PublishResult | None = None) -> PublishResult:
        result = result or PublishResult()
        existing = [c for c in self._client.list_inline_comments() if c.has_marker(INLINE_COMMENT_MARKER)]
        self._logger.debug("found %d existing coverage comments", len(existing))

        kept: set[int | str] = set()
        for annotation in annotations:
            self._logger.debug(
                "posting inline comment for %s: %d–%d",
                annotation.file,
                annotation.start_line,
                annotation.end_line,
            )
            match = next((c for c in existing if c.id not in kept and c.matches(annotation)), None)
            if match is not None:
                self._client.update_inline_comment(match.id, annotation.body)
                kept.add(match.id)
                result.updated.append(match.id)
            else:
                created = self._client.create_inline_comment(
                    commit_sha=self._commit_sha,
                    path=annotation.file,
                    start_line=annotation.start_line,
                    end_line=annotation.end_line,
                    body=annotation.body,
                )
                result.created.append(created.id)

        stale = [c.id for c in existing if c.id not in kept]
        if stale:
            self._logger.debug("deleting %d stale coverage comments", len(stale))
        for comment_id in stale:
            self._client.delete_inline_comment(comment_id)
            result.deleted.append(comment_id)
        return result


class GlobalCommentPublisher:
    """Update the marker-tagged summary comment, or create it if missing."""

    def __init__(self, client: ReviewClient, *, logger: logging.Logger | None = None) -> None:
        self._client = client
        self._logger = logger or _package_logger.getChild("publish")

    def publish(self, summary: SummaryComment) -> int | str:
        existing = next(
            (c for c in self._client.list_global_comments() if c.has_marker(GLOBAL_COMMENT_MARKER)),
            None,
        )
        if existing is not None:
            self._logger.debug("updating summary comment %s", existing.id)
            self._client.update_global_comment(existing.id, summary.body)
            return existing.id
        created = self._client.create_global_comment(summary.body)
        self._logger.debug("created summary comment %s", created.id)
        return created.id


def publish_plan(
    plan: AnnotationPlan,
    client: ReviewClient,
    *,
    commit_sha: str | None = None,
    logger: logging.Logger | None = None,
) -> PublishResult:
    """Publish inline annotations, then the summary. Client failures raise :class:`PublishError`."""
    try:
        result = InlineCommentPublisher(client, commit_sha=commit_sha, logger=logger).publish(plan.annotations)
        result.summary_id = GlobalCommentPublisher(client, logger=logger).publish(plan.summary)
    except PublishError:
        raise
    except Exception as exc:
        msg = f"failed to publish coverage comments: {exc}"
        raise PublishError(msg) from exc
    return result


__all__ = [
    "GlobalCommentPublisher",
    "InlineCommentPublisher",
    "PublishResult",
    "ReviewClient",
    "ReviewComment",
    "publish_plan",
]
