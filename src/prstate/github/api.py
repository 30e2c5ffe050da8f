from typing import Optional, Union
import base64

from gidgethub import BadRequest
from gidgethub.abc import GitHubAPI
from gidgethub.sansio import accept_format
import pydantic

from prstate import config
from prstate.logger import logger
from prstate.metric import api_call_count


class Content(pydantic.BaseModel):
    type: str
    # "none" for files over 1 MB, which come without content
    encoding: str = "none"
    size: int
    name: str
    path: str
    content: str = ""
    sha: str

    @property
    def is_inlined(self) -> bool:
        return self.encoding == "base64"

    def decoded_bytes(self) -> bytes:
        if self.encoding != "base64":
            raise ValueError(f"Unknown encoding {self.encoding}")
        return base64.b64decode(self.content)


class API:
    gh: GitHubAPI
    repository: str

    call_count: int

    def __init__(self, gh: GitHubAPI, repository: str = config.GITHUB_REPOSITORY):
        self.gh = gh
        self.repository = repository
        self.call_count = 0

    @property
    def repo_url(self) -> str:
        return f"/repos/{self.repository}"

    def _contents_url(self, path: str, ref: str) -> str:
        return f"{self.repo_url}/contents/{path}?ref={ref}"

    async def get_content(self, path: str, ref: str) -> Content:
        self.call_count += 1
        api_call_count.labels(service="github").inc()
        url = self._contents_url(path, ref)
        logger.debug("Get file content: %s", url)
        return Content.model_validate(await self.gh.getitem(url))

    async def get_raw_content(self, path: str, ref: str) -> bytes:
        self.call_count += 1
        api_call_count.labels(service="github").inc()
        url = self._contents_url(path, ref)
        logger.debug("Get raw file content: %s", url)
        data: Union[str, bytes] = await self.gh.getitem(
            url, accept=accept_format(media="raw", json=False)
        )
        if isinstance(data, str):
            return data.encode("utf-8")
        return data

    async def fetch_file(
        self, revisioned_path: str, max_bytes: Optional[int] = None
    ) -> Optional[str]:
        """Fetch ``<revision>:<path>``, returning ``None`` if it does not exist."""
        ref, _, path = revisioned_path.partition(":")
        if not path:
            raise ValueError(f"Expected '<revision>:<path>', got {revisioned_path!r}")
        try:
            content = await self.get_content(path, ref)
            if content.type != "file":
                return None
            if content.is_inlined:
                data = content.decoded_bytes()
            else:
                logger.debug("%s is %d bytes, fetching raw", revisioned_path, content.size)
                data = await self.get_raw_content(path, ref)
        except BadRequest as e:
            if e.status_code == 404:
                logger.debug("File %s not found", revisioned_path)
                return None
            raise e

        if max_bytes is not None:
            data = data[:max_bytes]
        return data.decode("utf-8", errors="ignore")
