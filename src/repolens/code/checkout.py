"""Shallow repository checkouts in a temporary workspace."""

import asyncio
import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from git import Repo as GitRepo
from git.exc import GitCommandError


logger = logging.getLogger(__name__)

MAX_REPO_SIZE = 100 * 1024 * 1024
CLEANUP_RETRIES = 3
CLEANUP_BACKOFF = 0.5

_NOT_FOUND_MARKERS = (
    "not found",
    "does not exist",
    "could not read username",
    "authentication failed",
)


class CheckoutError(Exception):
    """Raised when a repository cannot be checked out."""


class RepositoryUnavailableError(CheckoutError):
    """Raised when the repository does not exist or is not public."""


class RepositoryTooLargeError(CheckoutError):
    """Raised when a checkout exceeds the configured size cap."""


@dataclass(frozen=True)
class Checkout:
    """A local working copy of a remote repository."""

    path: Path
    repo_name: str


def extract_repo_name(url: str) -> str:
    """Get the repository name from its URL."""
    match = re.search(r"/([^/]+)\.git$", url) or re.search(r"/([^/]+)/?$", url)
    return match.group(1) if match else "unknown-repo"


def directory_size(path: Path) -> int:
    """Total size in bytes of regular files below ``path``."""
    return sum(
        entry.stat().st_size
        for entry in path.rglob("*")
        if entry.is_file() and not entry.is_symlink()
    )


class RepositoryCloner:
    """Clone repositories into per-job directories and remove them afterwards."""

    def __init__(self, base_dir: Path | str, max_repo_size: int = MAX_REPO_SIZE):
        """Initialize the cloner.

        Args:
            base_dir: Directory that receives one subdirectory per checkout
            max_repo_size: Largest accepted checkout, in bytes
        """
        self.base_dir = Path(base_dir)
        self.max_repo_size = max_repo_size

    def clone(self, repository_url: str) -> Checkout:
        """Shallow-clone a repository.

        Args:
            repository_url: Public HTTPS URL of the repository

        Returns:
            Checkout describing the working copy

        Raises:
            RepositoryUnavailableError: If the repository cannot be reached
            RepositoryTooLargeError: If the checkout exceeds the size cap
            CheckoutError: For any other clone failure
        """
        target = self.base_dir / uuid4().hex
        target.mkdir(parents=True, exist_ok=True)
        repo_name = extract_repo_name(repository_url)

        logger.info(f"Cloning repository: {repository_url}")
        try:
            GitRepo.clone_from(
                repository_url,
                target,
                depth=1,
                single_branch=True,
                env={"GIT_TERMINAL_PROMPT": "0"},
            )
        except GitCommandError as e:
            self._remove_quietly(target)
            message = str(e).lower()
            if any(marker in message for marker in _NOT_FOUND_MARKERS):
                raise RepositoryUnavailableError(
                    "Repository not found or not accessible. "
                    "Please check the URL and ensure the repository is public."
                ) from e
            raise CheckoutError(f"Failed to clone repository: {e}") from e

        size = directory_size(target)
        if size > self.max_repo_size:
            self._remove_quietly(target)
            raise RepositoryTooLargeError(
                f"Repository is too large ({size // (1024 * 1024)}MB). "
                f"Maximum size allowed is {self.max_repo_size // (1024 * 1024)}MB."
            )

        logger.info(f"Repository cloned successfully: {repo_name}")
        return Checkout(path=target, repo_name=repo_name)

    async def cleanup(
        self,
        path: Path | str,
        retries: int = CLEANUP_RETRIES,
        backoff: float = CLEANUP_BACKOFF,
    ) -> bool:
        """Remove a checkout directory, retrying with exponential backoff.

        Never raises; a directory that survives every attempt is logged.

        Returns:
            True if the directory is gone
        """
        path = Path(path)
        for attempt in range(1, retries + 1):
            if not path.exists():
                return True
            try:
                await asyncio.to_thread(shutil.rmtree, path)
                logger.info(f"Cleaned up temporary directory: {path}")
                return True
            except OSError as e:
                logger.warning(f"Cleanup attempt {attempt}/{retries} failed for {path}: {e}")
                if attempt < retries:
                    await asyncio.sleep(backoff * 2 ** (attempt - 1))

        logger.error(f"Giving up on removing {path} after {retries} attempts")
        return not path.exists()

    @staticmethod
    def _remove_quietly(path: Path) -> None:
        shutil.rmtree(path, ignore_errors=True)
