from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import functools
import inspect
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence, Union

from typing_extensions import assert_never

from prstate import config
from prstate.derive.files import categorize_file, get_packages_touched
from prstate.derive.levels import get_ci_result, get_danger_level, get_popularity_level
from prstate.derive.owners import FetchFile, Header, get_owners_of_packages, parse_header_or_fail
from prstate.derive.reviews import analyze_reviews, has_dismissed_review
from prstate.derive.timeline import (
    get_last_commentish_activity_date,
    get_last_maintainer_blessing_date,
    get_reopened_date,
)
from prstate.github.api import API
from prstate.logger import logger
from prstate.metric import derivation_counter, file_fetch_counter
from prstate.model import (
    AuthorAssociation,
    BotEnsureRemovedFromProject,
    BotError,
    BotFail,
    BotNoPackages,
    FileInfo,
    PrInfo,
    RawSnapshot,
    Result,
)
from prstate.util import days_since, is_bot_actor

GetDownloads = Callable[
    [Sequence[str]], Union[Mapping[str, int], Awaitable[Mapping[str, int]]]
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def describe_result(result: Result) -> str:
    match result:
        case BotFail():
            return f"fail: {result.message}"
        case BotError():
            return f"error on #{result.pr_number}: {result.message}"
        case BotEnsureRemovedFromProject():
            return f"remove #{result.pr_number}: {result.message}"
        case BotNoPackages():
            return f"no packages in #{result.pr_number}"
        case PrInfo():
            return (
                f"info on #{result.pr_number}: packages={result.packages} "
                f"danger={result.danger_level.value} ci={result.ci_result.value}"
            )
        case _:
            assert_never(result)


def author_says_ready_to_merge(snapshot: RawSnapshot) -> bool:
    return any(
        comment.author == snapshot.author
        and comment.body.strip().casefold().startswith("ready to merge")
        for comment in snapshot.comments
    )


class PrStateDeriver:
    """Turns a :class:`RawSnapshot` of one PR into exactly one result.

    All network access goes through the injected collaborators, so the same
    snapshot, collaborator answers and clock always produce the same result.
    """

    def __init__(
        self,
        *,
        fetch_file: FetchFile,
        get_downloads: GetDownloads,
        parse_header: Callable[[str], Header] = parse_header_or_fail,
        is_bot: Callable[[Any], bool] = is_bot_actor,
        now: Callable[[], datetime] = _utcnow,
        repository: str = config.GITHUB_REPOSITORY,
    ):
        self.fetch_file = fetch_file
        self.get_downloads = get_downloads
        self.parse_header = parse_header
        self.is_bot = is_bot
        self.now = now
        self.repository = repository

    @classmethod
    def from_github(cls, api: API, get_downloads: GetDownloads, **kwargs) -> "PrStateDeriver":
        return cls(
            fetch_file=api.fetch_file,
            get_downloads=get_downloads,
            repository=api.repository,
            **kwargs,
        )

    async def derive(self, snapshot: Optional[RawSnapshot]) -> Result:
        result = await self._derive(snapshot)
        derivation_counter.labels(result=result.type).inc()
        logger.info("Derived %s", describe_result(result))
        return result

    async def _fetch_head_file(self, head_oid: str, path: str) -> Optional[str]:
        file_fetch_counter.labels(purpose="config").inc()
        return await self.fetch_file(f"{head_oid}:{path}")

    async def _classify_files(self, head_oid: str, paths: Sequence[str]) -> List[FileInfo]:
        tasks = [
            asyncio.ensure_future(
                categorize_file(path, functools.partial(self._fetch_head_file, head_oid, path))
            )
            for path in paths
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # the first failure wins, the remaining fetches are cancelled
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _downloads(self, packages: Sequence[str]) -> Mapping[str, int]:
        downloads = self.get_downloads(packages)
        if inspect.isawaitable(downloads):
            downloads = await downloads
        return downloads

    async def _derive(self, snapshot: Optional[RawSnapshot]) -> Result:
        if snapshot is None:
            return BotFail(message="No PR with this number exists")

        pr_number = snapshot.number
        if snapshot.author is None:
            return BotError(pr_number=pr_number, message="PR author does not exist")
        author = snapshot.author

        def error(message: str) -> BotError:
            return BotError(pr_number=pr_number, message=message, author=author)

        head_commit = snapshot.head_commit
        if head_commit is None:
            return error("No head commit found")

        if snapshot.state != "open":
            return BotEnsureRemovedFromProject(pr_number=pr_number, message="PR is not active")
        if snapshot.is_draft:
            return BotEnsureRemovedFromProject(pr_number=pr_number, message="PR is a draft")

        files = await self._classify_files(head_commit.oid, snapshot.files)
        packages = get_packages_touched(files)
        logger.debug("pr=%d files=%d packages=%s", pr_number, len(files), packages)
        if len(packages) == 0:
            return BotNoPackages(pr_number=pr_number)

        owner_info = await get_owners_of_packages(
            packages, self.fetch_file, self.parse_header
        )
        if owner_info.error is not None:
            return error(owner_info.error)
        owners = owner_info.owners
        logger.debug(
            "pr=%d owners=%s any_package_is_new=%s",
            pr_number,
            owners,
            owner_info.any_package_is_new,
        )

        def is_owner(login: str) -> bool:
            return any(o.lower() == login.lower() for o in owners)

        reviews = analyze_reviews(
            snapshot.reviews,
            head_commit_oid=head_commit.oid,
            pr_author=author,
            is_owner=is_owner,
        )

        now = self.now()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        last_push_date = head_commit.pushed_date
        last_comment_date = (
            get_last_commentish_activity_date(snapshot.timeline, snapshot.reviews, self.is_bot)
            or last_push_date
        )
        reopened_date = get_reopened_date(snapshot.timeline)
        last_blessing = get_last_maintainer_blessing_date(snapshot.timeline, self.is_bot)
        staleness = min(
            days_since(date or last_push_date, now)
            for date in (last_push_date, last_comment_date, reopened_date, reviews.last_review_date)
        )

        ci_result, ci_url = get_ci_result(head_commit)
        popularity_level = get_popularity_level(await self._downloads(packages))
        logger.debug(
            "pr=%d ci=%s popularity=%s staleness=%d",
            pr_number,
            ci_result.value,
            popularity_level.value,
            staleness,
        )

        return PrInfo(
            now=now,
            pr_number=pr_number,
            head_commit_oid=head_commit.oid,
            head_commit_abbr_oid=head_commit.abbreviated_oid,
            author=author,
            author_is_owner=is_owner(author),
            owners=owners,
            merge_is_requested=author_says_ready_to_merge(snapshot),
            ci_result=ci_result,
            ci_url=ci_url,
            has_merge_conflict=snapshot.mergeable == "conflicting",
            last_push_date=last_push_date,
            last_comment_date=last_comment_date,
            last_review_date=reviews.last_review_date,
            reopened_date=reopened_date,
            reviewers_with_stale_reviews=reviews.reviewers_with_stale_reviews,
            review_link=f"https://github.com/{self.repository}/pull/{pr_number}/files",
            is_changes_requested=reviews.is_changes_requested,
            approval_flags=reviews.approval_flags,
            danger_level=get_danger_level(files),
            staleness_in_days=staleness,
            any_package_is_new=owner_info.any_package_is_new,
            maintainer_blessed=last_blessing is not None and last_blessing > last_push_date,
            has_dismissed_review=has_dismissed_review(snapshot.reviews),
            is_first_contribution=(
                snapshot.author_association == AuthorAssociation.first_time_contributor
            ),
            popularity_level=popularity_level,
            packages=packages,
            files=files,
        )


async def derive_state_for_pr(
    snapshot: Optional[RawSnapshot],
    fetch_file: FetchFile,
    get_downloads: GetDownloads,
    now: Callable[[], datetime] = _utcnow,
) -> Result:
    deriver = PrStateDeriver(fetch_file=fetch_file, get_downloads=get_downloads, now=now)
    return await deriver.derive(snapshot)
