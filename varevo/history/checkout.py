"""
Materialize product-line commits with git.
"""
import subprocess
from pathlib import Path

from varevo.errors import CheckoutError
from varevo.schemas.history import Commit
from varevo.utils.logger import get_logger

logger = get_logger(__name__)


class GitCheckout:
    """
    Checks out commits of a local clone in place.

    Only one checkout may be active at a time: generation for a commit must
    finish before the next ``checkout`` call.
    """

    def __init__(self, repo_path: Path | str, clean: bool = False):
        self.repo_path = Path(repo_path)
        self.clean = clean

    def _git(self, *args: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ["git", "-C", str(self.repo_path), *args],
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise CheckoutError(f"Failed to run git: {e}") from e

    def checkout(self, commit: Commit) -> Path:
        """
        Returns:
            Path: root of the materialized sources

        Raises:
            CheckoutError: not a git repository, git is missing or the checkout failed
        """
        self.checkout_id(commit.id)
        return self.repo_path

    def checkout_id(self, commit_id: str) -> None:
        if not (self.repo_path / ".git").exists():
            raise CheckoutError(f"Not a git repository: {self.repo_path}")

        result = self._git("checkout", "--force", "--quiet", commit_id)
        if result.returncode != 0:
            raise CheckoutError(f"Checkout of {commit_id} failed: {result.stderr.strip()}")

        if self.clean:
            result = self._git("clean", "-fdxq")
            if result.returncode != 0:
                raise CheckoutError(f"Cleaning after checkout of {commit_id} failed: {result.stderr.strip()}")

        logger.info(f"Checked out {commit_id[:8]}")
