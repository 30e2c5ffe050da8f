from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from prstate.model import Review, ReviewComment, TimelineEvent, TimelineEventKind
from prstate.util import find_last

IsBot = Callable[[Any], bool]

_reopen_kinds = (TimelineEventKind.reopened, TimelineEventKind.ready_for_review)


def get_reopened_date(timeline: Sequence[TimelineEvent]) -> Optional[datetime]:
    """When the PR was last reopened, or switched from draft to ready."""
    event = find_last(timeline, lambda e: e.kind in _reopen_kinds)
    return event.created_at if event is not None else None


def _last_review_comment(reviews: Sequence[Review]) -> Optional[ReviewComment]:
    for review in reversed(reviews):
        comment = find_last(review.comments, lambda c: bool(c.author))
        if comment is not None:
            return comment
    return None


def get_last_commentish_activity_date(
    timeline: Sequence[TimelineEvent], reviews: Sequence[Review], is_bot: IsBot
) -> Optional[datetime]:
    issue_comment = find_last(
        timeline,
        lambda e: e.kind == TimelineEventKind.issue_comment
        and e.created_at is not None
        and not is_bot(e),
    )
    review_comment = _last_review_comment(reviews)

    dates = [
        item.created_at for item in (issue_comment, review_comment) if item is not None
    ]
    if not dates:
        return None
    return max(dates)


def get_last_maintainer_blessing_date(
    timeline: Sequence[TimelineEvent], is_bot: IsBot
) -> Optional[datetime]:
    # The column the card moved away from is not checked: any non-bot move
    # between project columns counts as a blessing.
    event = find_last(
        timeline,
        lambda e: e.kind == TimelineEventKind.moved_columns_in_project and not is_bot(e),
    )
    return event.created_at if event is not None else None
