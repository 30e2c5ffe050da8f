from __future__ import annotations

from typing import Mapping, Optional, Sequence, Tuple

from prstate.derive.files import get_packages_touched
from prstate.model import (
    CheckSuite,
    CIResult,
    Commit,
    DangerLevel,
    FileInfo,
    FileKind,
    PopularityLevel,
)

CRITICAL_POPULARITY_THRESHOLD = 5_000_000
NORMAL_POPULARITY_THRESHOLD = 200_000

CI_APP_NAME = "GitHub Actions"


def get_danger_level(files: Sequence[FileInfo]) -> DangerLevel:
    if any(f.kind == FileKind.infrastructure for f in files):
        return DangerLevel.infrastructure
    packages = get_packages_touched(files)
    if len(packages) == 0:
        return DangerLevel.infrastructure
    elif len(packages) > 1:
        return DangerLevel.multiple_packages_edited
    elif any(f.kind == FileKind.package_meta for f in files):
        return DangerLevel.scoped_and_configuration
    elif any(f.kind == FileKind.test for f in files):
        return DangerLevel.scoped_and_tested
    else:
        return DangerLevel.scoped_and_untested


def get_popularity_level(downloads_per_package: Mapping[str, int]) -> PopularityLevel:
    level = PopularityLevel.well_liked
    for downloads in downloads_per_package.values():
        if downloads > CRITICAL_POPULARITY_THRESHOLD:
            return PopularityLevel.critical
        elif downloads > NORMAL_POPULARITY_THRESHOLD:
            level = PopularityLevel.popular
    return level


def _find_ci_suite(commit: Commit) -> Optional[CheckSuite]:
    for suite in commit.check_suites:
        if suite.app_name is not None and CI_APP_NAME in suite.app_name:
            return suite
    return None


def get_ci_result(head_commit: Commit) -> Tuple[CIResult, Optional[str]]:
    suite = _find_ci_suite(head_commit)
    if suite is None:
        return CIResult.missing, None
    conclusion = (suite.conclusion or "").upper()
    if conclusion == "SUCCESS":
        return CIResult.pass_, None
    if conclusion in ("FAILURE", "SKIPPED", "TIMED_OUT"):
        return CIResult.fail, suite.url
    return CIResult.pending, None
