from .publish import (
    GlobalCommentPublisher,
    InlineCommentPublisher,
    PublishResult,
    ReviewClient,
    ReviewComment,
    publish_plan,
)

__all__ = [
    "GlobalCommentPublisher",
    "InlineCommentPublisher",
    "PublishResult",
    "ReviewClient",
    "ReviewComment",
    "publish_plan",
]
