from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, List, Literal, Mapping, Optional, TypeVar

import pydantic
from pydantic.alias_generators import to_camel

from prstate.model import (
    AuthorAssociation,
    CheckSuite,
    Comment,
    Commit,
    RawSnapshot,
    Review,
    ReviewComment,
    ReviewState,
    TimelineEvent,
    TimelineEventKind,
)

T = TypeVar("T")


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(
        extra="ignore", alias_generator=to_camel, populate_by_name=True
    )


class Connection(Model, Generic[T]):
    nodes: Optional[List[Optional[T]]] = None

    def items(self) -> List[T]:
        return [n for n in self.nodes or [] if n is not None]


def _items(connection: Optional[Connection[T]]) -> List[T]:
    return connection.items() if connection is not None else []


class Actor(Model):
    login: str


class App(Model):
    name: Optional[str] = None


class GqlCheckSuite(Model):
    app: Optional[App] = None
    conclusion: Optional[str] = None
    url: Optional[str] = None


class GqlCommit(Model):
    oid: str
    abbreviated_oid: str
    pushed_date: Optional[datetime] = None
    committed_date: Optional[datetime] = None
    check_suites: Optional[Connection[GqlCheckSuite]] = None


class CommitNode(Model):
    commit: GqlCommit


class PrFile(Model):
    path: str


class TimelineItem(Model):
    typename: str = pydantic.Field(alias="__typename")
    created_at: Optional[datetime] = None
    actor: Optional[Actor] = None
    author: Optional[Actor] = None


class GqlReviewComment(Model):
    author: Optional[Actor] = None
    created_at: datetime


class ReviewCommit(Model):
    oid: str
    abbreviated_oid: str


class GqlReview(Model):
    author: Optional[Actor] = None
    author_association: AuthorAssociation = AuthorAssociation.none
    commit: Optional[ReviewCommit] = None
    submitted_at: Optional[datetime] = None
    state: ReviewState
    comments: Optional[Connection[GqlReviewComment]] = None


class IssueComment(Model):
    author: Optional[Actor] = None
    body: str = ""
    created_at: Optional[datetime] = None


class PullRequest(Model):
    number: int
    author: Optional[Actor] = None
    author_association: AuthorAssociation = AuthorAssociation.none
    state: Literal["OPEN", "CLOSED", "MERGED"]
    is_draft: bool = False
    head_ref_oid: str
    mergeable: Literal["MERGEABLE", "CONFLICTING", "UNKNOWN"] = "UNKNOWN"
    commits: Optional[Connection[CommitNode]] = None
    files: Optional[Connection[PrFile]] = None
    timeline_items: Optional[Connection[TimelineItem]] = None
    reviews: Optional[Connection[GqlReview]] = None
    comments: Optional[Connection[IssueComment]] = None


class Repository(Model):
    pull_request: Optional[PullRequest] = None


class PrQueryData(Model):
    repository: Optional[Repository] = None


_timeline_kinds = {
    "ReopenedEvent": TimelineEventKind.reopened,
    "ReadyForReviewEvent": TimelineEventKind.ready_for_review,
    "IssueComment": TimelineEventKind.issue_comment,
    "MovedColumnsInProjectEvent": TimelineEventKind.moved_columns_in_project,
}


def _login(actor: Optional[Actor]) -> Optional[str]:
    return actor.login if actor is not None else None


def _to_commit(node: CommitNode) -> Optional[Commit]:
    commit = node.commit
    pushed_date = commit.pushed_date or commit.committed_date
    if pushed_date is None:
        return None
    return Commit(
        oid=commit.oid,
        abbreviated_oid=commit.abbreviated_oid,
        pushed_date=pushed_date,
        check_suites=[
            CheckSuite(
                app_name=suite.app.name if suite.app is not None else None,
                conclusion=suite.conclusion,
                url=suite.url,
            )
            for suite in _items(commit.check_suites)
        ],
    )


def _to_timeline_event(item: TimelineItem) -> TimelineEvent:
    return TimelineEvent(
        kind=_timeline_kinds.get(item.typename, TimelineEventKind.other),
        created_at=item.created_at,
        actor=_login(item.actor) or _login(item.author),
    )


def _to_review(review: GqlReview) -> Optional[Review]:
    if review.submitted_at is None:
        return None
    return Review(
        author=_login(review.author),
        author_association=review.author_association,
        commit_oid=review.commit.oid if review.commit is not None else None,
        commit_abbr_oid=(
            review.commit.abbreviated_oid if review.commit is not None else None
        ),
        submitted_at=review.submitted_at,
        state=review.state,
        comments=[
            ReviewComment(author=_login(c.author), created_at=c.created_at)
            for c in _items(review.comments)
        ],
    )


def snapshot_from_pull_request(pr: PullRequest) -> RawSnapshot:
    commits = [_to_commit(node) for node in _items(pr.commits)]
    reviews = [_to_review(r) for r in _items(pr.reviews)]
    return RawSnapshot(
        number=pr.number,
        author=_login(pr.author),
        author_association=pr.author_association,
        state=pr.state.lower(),
        is_draft=pr.is_draft,
        head_ref_oid=pr.head_ref_oid,
        commits=[c for c in commits if c is not None],
        files=[f.path for f in _items(pr.files)],
        timeline=[_to_timeline_event(item) for item in _items(pr.timeline_items)],
        reviews=[r for r in reviews if r is not None],
        comments=[
            Comment(author=_login(c.author), body=c.body, created_at=c.created_at)
            for c in _items(pr.comments)
        ],
        mergeable=pr.mergeable.lower(),
    )


def snapshot_from_graphql(data: Mapping[str, Any]) -> Optional[RawSnapshot]:
    """Normalize the ``data`` of a PR query response.

    Returns ``None`` when the repository has no such pull request.
    """
    parsed = PrQueryData.model_validate(data)
    if parsed.repository is None or parsed.repository.pull_request is None:
        return None
    return snapshot_from_pull_request(parsed.repository.pull_request)
