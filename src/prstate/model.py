from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum, IntFlag
from typing import Annotated, Any, List, Literal, Optional, Union

import pydantic
from pydantic import BeforeValidator, PlainSerializer


def _parse_utc_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        dt = datetime.fromisoformat(raw)
    else:
        raise ValueError(f"Unsupported datetime value type: {type(value)!r}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _format_utc_datetime(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


UTCDateTime = Annotated[
    datetime,
    BeforeValidator(_parse_utc_datetime),
    PlainSerializer(_format_utc_datetime, return_type=str, when_used="always"),
]


class Model(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(extra="forbid", frozen=True)


class FileKind(str, Enum):
    test = "test"
    definition = "definition"
    markdown = "markdown"
    package_meta = "package-meta"
    package_meta_ok = "package-meta-ok"
    infrastructure = "infrastructure"


class CIResult(str, Enum):
    pass_ = "pass"
    fail = "fail"
    pending = "pending"
    missing = "missing"


class ApprovalFlags(IntFlag):
    none = 0
    other = 1 << 0
    owner = 1 << 1
    maintainer = 1 << 2


class DangerLevel(str, Enum):
    scoped_and_tested = "ScopedAndTested"
    scoped_and_untested = "ScopedAndUntested"
    scoped_and_configuration = "ScopedAndConfiguration"
    multiple_packages_edited = "MultiplePackagesEdited"
    infrastructure = "Infrastructure"


class PopularityLevel(str, Enum):
    well_liked = "Well-liked by everyone"
    popular = "Popular"
    critical = "Critical"


class ReviewState(str, Enum):
    pending = "PENDING"
    commented = "COMMENTED"
    approved = "APPROVED"
    changes_requested = "CHANGES_REQUESTED"
    dismissed = "DISMISSED"


class AuthorAssociation(str, Enum):
    collaborator = "COLLABORATOR"
    contributor = "CONTRIBUTOR"
    first_timer = "FIRST_TIMER"
    first_time_contributor = "FIRST_TIME_CONTRIBUTOR"
    mannequin = "MANNEQUIN"
    member = "MEMBER"
    none = "NONE"
    owner = "OWNER"


class TimelineEventKind(str, Enum):
    reopened = "reopened"
    ready_for_review = "ready_for_review"
    issue_comment = "issue_comment"
    moved_columns_in_project = "moved_columns_in_project"
    other = "other"


# Normalized input


class TimelineEvent(Model):
    kind: TimelineEventKind
    created_at: Optional[UTCDateTime] = None
    actor: Optional[str] = None


class ReviewComment(Model):
    author: Optional[str] = None
    created_at: UTCDateTime


class Review(Model):
    author: Optional[str] = None
    author_association: AuthorAssociation = AuthorAssociation.none
    commit_oid: Optional[str] = None
    commit_abbr_oid: Optional[str] = None
    submitted_at: UTCDateTime
    state: ReviewState
    comments: List[ReviewComment] = pydantic.Field(default_factory=list)


class Comment(Model):
    author: Optional[str] = None
    body: str = ""
    created_at: Optional[UTCDateTime] = None


class CheckSuite(Model):
    app_name: Optional[str] = None
    conclusion: Optional[str] = None
    url: Optional[str] = None


class Commit(Model):
    oid: str
    abbreviated_oid: str
    pushed_date: UTCDateTime
    check_suites: List[CheckSuite] = pydantic.Field(default_factory=list)


class RawSnapshot(Model):
    number: int
    author: Optional[str] = None
    author_association: AuthorAssociation = AuthorAssociation.none
    state: Literal["open", "closed", "merged"] = "open"
    is_draft: bool = False
    head_ref_oid: str
    commits: List[Commit] = pydantic.Field(default_factory=list)
    files: List[str] = pydantic.Field(default_factory=list)
    timeline: List[TimelineEvent] = pydantic.Field(default_factory=list)
    reviews: List[Review] = pydantic.Field(default_factory=list)
    comments: List[Comment] = pydantic.Field(default_factory=list)
    mergeable: Literal["mergeable", "conflicting", "unknown"] = "unknown"

    @property
    def head_commit(self) -> Optional[Commit]:
        for commit in self.commits:
            if commit.oid == self.head_ref_oid:
                return commit
        return None

    def __str__(self) -> str:
        return f"PR(#{self.number})"


# Derived output


class FileInfo(Model):
    path: str
    kind: FileKind
    package: Optional[str] = None


class StaleReview(Model):
    reviewer: str
    reviewed_abbr_oid: str
    date: UTCDateTime


class BotFail(Model):
    type: Literal["fail"] = "fail"
    message: str


class BotError(Model):
    type: Literal["error"] = "error"
    pr_number: int
    message: str
    author: Optional[str] = None


class BotEnsureRemovedFromProject(Model):
    type: Literal["remove"] = "remove"
    pr_number: int
    message: str


class BotNoPackages(Model):
    type: Literal["no_packages"] = "no_packages"
    pr_number: int


class PrInfo(Model):
    type: Literal["info"] = "info"

    now: UTCDateTime
    pr_number: int
    head_commit_oid: str
    head_commit_abbr_oid: str
    author: str
    author_is_owner: bool
    owners: List[str]
    merge_is_requested: bool
    ci_result: CIResult
    ci_url: Optional[str] = None
    has_merge_conflict: bool
    last_push_date: UTCDateTime
    last_comment_date: UTCDateTime
    last_review_date: Optional[UTCDateTime] = None
    reopened_date: Optional[UTCDateTime] = None
    reviewers_with_stale_reviews: List[StaleReview]
    review_link: str
    is_changes_requested: bool
    approval_flags: ApprovalFlags
    danger_level: DangerLevel
    staleness_in_days: int = pydantic.Field(ge=0)
    any_package_is_new: bool
    maintainer_blessed: bool
    has_dismissed_review: bool
    is_first_contribution: bool
    popularity_level: PopularityLevel
    packages: List[str]
    files: List[FileInfo]


Result = Annotated[
    Union[BotFail, BotError, BotEnsureRemovedFromProject, BotNoPackages, PrInfo],
    pydantic.Field(discriminator="type"),
]

result_adapter: pydantic.TypeAdapter = pydantic.TypeAdapter(Result)
