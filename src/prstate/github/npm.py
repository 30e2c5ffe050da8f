from typing import Dict, Sequence

import aiocache
import aiohttp

from prstate import config
from prstate.logger import logger
from prstate.metric import api_call_count


def types_package_name(package: str) -> str:
    return f"@types/{package}"


@aiocache.cached(
    ttl=config.NPM_DOWNLOADS_TTL,
    key_builder=lambda fn, session, package: f"npm_downloads_{package}",
)
async def get_monthly_download_count(session: aiohttp.ClientSession, package: str) -> int:
    url = f"{config.NPM_API_URL}/downloads/point/last-month/{types_package_name(package)}"
    api_call_count.labels(service="npm").inc()
    logger.debug("Get monthly downloads: %s", url)
    async with session.get(url) as response:
        if response.status == 404:
            return 0
        response.raise_for_status()
        data = await response.json()
    return int(data.get("downloads", 0))


class NpmDownloads:
    """Download counts for the ``@types`` packages touched by a PR."""

    def __init__(self, session: aiohttp.ClientSession):
        self.session = session

    async def __call__(self, packages: Sequence[str]) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for package in packages:
            counts[package] = await get_monthly_download_count(self.session, package)
        return counts
