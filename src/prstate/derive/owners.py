from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

from prstate import config
from prstate.logger import logger
from prstate.metric import file_fetch_counter, owner_parse_error_counter


class HeaderParseError(Exception):
    pass


@dataclass(frozen=True)
class Contributor:
    name: str
    url: str
    github_username: Optional[str] = None


@dataclass(frozen=True)
class Header:
    library_name: str
    library_major_version: int
    library_minor_version: int
    projects: List[str]
    contributors: List[Contributor]
    typescript_version: Optional[str] = None


class FetchFile(Protocol):
    def __call__(
        self, revisioned_path: str, max_bytes: Optional[int] = None
    ) -> Awaitable[Optional[str]]:
        ...


_title_re = re.compile(
    r"^Type definitions for (?:non-npm package )?(?P<name>.+) (?P<major>\d+)\.(?P<minor>\d+)$"
)
_field_re = re.compile(r"^ (?P<key>[A-Za-z][A-Za-z ]*): ?(?P<value>.*)$")
_contributor_re = re.compile(r"^(?P<name>.+?)\s*<(?P<url>[^>]+)>$")
_github_url_re = re.compile(r"^https?://github\.com/(?P<user>[\w-]+)/?$")


def _parse_contributors(value: str) -> List[Contributor]:
    contributors = []
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        match = _contributor_re.match(entry)
        if match is None:
            raise HeaderParseError(f"Malformed contributor '{entry}'")
        url = match["url"].strip()
        user = _github_url_re.match(url)
        contributors.append(
            Contributor(
                name=match["name"],
                url=url,
                github_username=user["user"] if user else None,
            )
        )
    return contributors


def parse_header_or_fail(content: str) -> Header:
    """Parse the ``// Type definitions for ...`` block of an ``index.d.ts``.

    Continuation lines (``//`` followed by two or more spaces) extend the
    previous field, which is how multi-line ``Definitions by`` lists are
    written.
    """
    lines = content.lstrip("\ufeff").splitlines()
    body = []
    for line in lines:
        if not line.startswith("//") or line.startswith("///"):
            break
        body.append(line[2:].rstrip())

    if not body:
        raise HeaderParseError("File has no header comment")

    title = _title_re.match(body[0].strip())
    if title is None:
        raise HeaderParseError(
            "Header must begin with 'Type definitions for <name> <major>.<minor>'"
        )

    fields: dict = {}
    last_key = None
    for line in body[1:]:
        if line.startswith("  ") and last_key is not None:
            fields[last_key] += " " + line.strip()
            continue
        match = _field_re.match(line)
        if match is None:
            if line.strip() == "":
                continue
            raise HeaderParseError(f"Unexpected header line '//{line}'")
        last_key = match["key"].strip()
        fields[last_key] = match["value"].strip()

    for required in ("Project", "Definitions by", "Definitions"):
        if required not in fields:
            raise HeaderParseError(f"Missing '{required}' in header")

    # continuation lines are joined with spaces, commas still separate entries
    contributors = _parse_contributors(
        re.sub(r">\s+(?=[^,\s])", ">, ", fields["Definitions by"])
    )
    if not contributors:
        raise HeaderParseError("Header lists no contributors")

    return Header(
        library_name=title["name"],
        library_major_version=int(title["major"]),
        library_minor_version=int(title["minor"]),
        projects=[p.strip() for p in fields["Project"].split(",") if p.strip()],
        contributors=contributors,
        typescript_version=fields.get("TypeScript Version"),
    )


@dataclass
class OwnerInfo:
    owners: List[str] = field(default_factory=list)
    any_package_is_new: bool = False
    error: Optional[str] = None


async def fetch_package_header(package: str, fetch_file: FetchFile) -> Optional[str]:
    index_dts = f"{config.BASE_BRANCH}:types/{package}/index.d.ts"
    file_fetch_counter.labels(purpose="owner_header").inc()
    return await fetch_file(index_dts, config.OWNER_HEADER_MAX_BYTES)


async def get_owners_of_packages(
    packages: Sequence[str],
    fetch_file: FetchFile,
    parse_header: Callable[[str], Header] = parse_header_or_fail,
) -> OwnerInfo:
    """Collect the owners of all ``packages`` from their ``index.d.ts`` headers.

    Packages are resolved one at a time so that the first unparsable header
    stops any further fetches. A package without ``index.d.ts`` on the base
    branch is new and contributes no owners.
    """
    info = OwnerInfo()
    for package in packages:
        content = await fetch_package_header(package, fetch_file)
        if content is None:
            logger.debug("Package %s has no index.d.ts, treating as new", package)
            info.any_package_is_new = True
            continue
        try:
            header = parse_header(content)
        except Exception as e:
            owner_parse_error_counter.inc()
            logger.warning("Failed to parse header of package %s: %s", package, e)
            return OwnerInfo(
                any_package_is_new=info.any_package_is_new,
                error=f"error parsing owners: {e}",
            )
        for contributor in header.contributors:
            handle = contributor.github_username
            if handle and handle not in info.owners:
                info.owners.append(handle)
    return info
