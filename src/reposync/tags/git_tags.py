import asyncio
import os

from reposync.main.exceptions import HostError
from reposync.main.logging import get_logger
from reposync.tags.tag import RemoteTag, parse_ls_remote

logger = get_logger(__name__)


class GitTagFetcher:
    """Lists remote tags with ``git ls-remote``; nothing is cloned."""

    def __init__(self, timeout: float = 60.0, git_binary: str = "git"):
        self.timeout = timeout
        self.git_binary = git_binary

    async def fetch(self, clone_url: str) -> list[RemoteTag]:
        proc = await asyncio.create_subprocess_exec(
            self.git_binary,
            "ls-remote",
            "--tags",
            clone_url,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
        )

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise HostError(
                f"git ls-remote timed out after {self.timeout}s for {clone_url}"
            ) from exc

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="ignore").strip()
            raise HostError(f"git ls-remote failed for {clone_url}: {message}")

        tags = parse_ls_remote(stdout.decode("utf-8", errors="ignore"))
        logger.debug(
            "Listed remote tags",
            extra={"clone_url": clone_url, "tag_count": len(tags)},
        )
        return tags
