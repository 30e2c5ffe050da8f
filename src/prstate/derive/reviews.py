from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Set

from prstate.model import (
    ApprovalFlags,
    AuthorAssociation,
    Review,
    ReviewState,
    StaleReview,
)

_maintainer_associations = (AuthorAssociation.member, AuthorAssociation.owner)


@dataclass
class ReviewAnalysis:
    last_review_date: Optional[datetime] = None
    reviewers_with_stale_reviews: List[StaleReview] = field(default_factory=list)
    approval_flags: ApprovalFlags = ApprovalFlags.none
    is_changes_requested: bool = False


def analyze_reviews(
    reviews: Sequence[Review],
    *,
    head_commit_oid: str,
    pr_author: str,
    is_owner: Callable[[str], bool],
) -> ReviewAnalysis:
    """Split reviews into current (head commit) and stale ones.

    ``reviews`` is ordered oldest to newest and is walked backwards, so the
    first review seen for a reviewer is their latest one. A reviewer who has
    reviewed the head commit is never reported as stale. For each stale
    commit only the latest review is kept.
    """
    analysis = ReviewAnalysis()
    has_up_to_date_review: Set[str] = set()
    stale_by_commit: Dict[str, StaleReview] = {}

    for review in reversed(reviews):
        if review.commit_oid is None or not review.author:
            continue
        if review.author == pr_author:
            continue

        if review.commit_oid != head_commit_oid:
            abbr_oid = review.commit_abbr_oid or review.commit_oid[:7]
            if review.author not in has_up_to_date_review and abbr_oid not in stale_by_commit:
                stale_by_commit[abbr_oid] = StaleReview(
                    reviewer=review.author,
                    reviewed_abbr_oid=abbr_oid,
                    date=review.submitted_at,
                )
            continue

        if review.author in has_up_to_date_review:
            continue

        has_up_to_date_review.add(review.author)
        if analysis.last_review_date is None or review.submitted_at > analysis.last_review_date:
            analysis.last_review_date = review.submitted_at

        if review.state == ReviewState.changes_requested:
            analysis.is_changes_requested = True
        elif review.state == ReviewState.approved:
            if review.author_association in _maintainer_associations:
                analysis.approval_flags |= ApprovalFlags.maintainer
            elif is_owner(review.author):
                analysis.approval_flags |= ApprovalFlags.owner
            else:
                analysis.approval_flags |= ApprovalFlags.other

    analysis.reviewers_with_stale_reviews = list(stale_by_commit.values())
    return analysis


def has_dismissed_review(reviews: Sequence[Review]) -> bool:
    return any(r.state == ReviewState.dismissed for r in reviews)
