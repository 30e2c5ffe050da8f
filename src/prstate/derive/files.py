from __future__ import annotations

from enum import Enum
import json
import re
from typing import Awaitable, Callable, List, Optional, Sequence

from prstate.logger import logger
from prstate.model import FileInfo, FileKind

ContentGetter = Callable[[], Awaitable[Optional[str]]]

_package_file_re = re.compile(r"^types/(.*?)/.*?[^/](?:\.(d\.ts|tsx?|md))?$")

_recommended_tslint = {"extends": "dtslint/dt.json"}


class ConfigFile(Enum):
    other_files = "OTHER_FILES.txt"
    tslint = "tslint.json"

    @classmethod
    def from_path(cls, path: str) -> Optional["ConfigFile"]:
        basename = path.rsplit("/", 1)[-1]
        try:
            return cls(basename)
        except ValueError:
            return None


def other_files_ok(contents: str) -> bool:
    # every listed path must have non-empty, non-dot-only segments
    return len(contents) > 0 and all(
        line == ""
        or all(len(part) > 0 and part.strip(".") != "" for part in line.split("/"))
        for line in contents.split("\n")
    )


def tslint_ok(contents: str) -> bool:
    try:
        return json.loads(contents) == _recommended_tslint
    except ValueError:
        return False


def config_contents_ok(config_file: ConfigFile, contents: str) -> bool:
    match config_file:
        case ConfigFile.other_files:
            return other_files_ok(contents)
        case ConfigFile.tslint:
            return tslint_ok(contents)


async def config_ok(path: str, get_contents: ContentGetter) -> bool:
    config_file = ConfigFile.from_path(path)
    if config_file is None:
        return False
    contents = await get_contents()
    if contents is None:
        logger.debug("No contents for config file %s", path)
        return False
    return config_contents_ok(config_file, contents)


async def categorize_file(path: str, get_contents: ContentGetter) -> FileInfo:
    found = _package_file_re.match(path)
    if found is None:
        return FileInfo(path=path, kind=FileKind.infrastructure)
    package, suffix = found.groups()
    if suffix == "d.ts":
        kind = FileKind.definition
    elif suffix in ("ts", "tsx"):
        kind = FileKind.test
    elif suffix == "md":
        kind = FileKind.markdown
    elif await config_ok(path, get_contents):
        kind = FileKind.package_meta_ok
    else:
        kind = FileKind.package_meta
    return FileInfo(path=path, kind=kind, package=package)


def get_packages_touched(files: Sequence[FileInfo]) -> List[str]:
    packages: List[str] = []
    for f in files:
        if f.package is not None and f.package not in packages:
            packages.append(f.package)
    return packages
