"""File-backed credential cache.

Holds at most one credential as JSON, like spotipy's token cache file.
"""

from pathlib import Path

from pydantic import ValidationError

from .logging import get_logger
from .models import Credential

logger = get_logger(__name__)


class CredentialStore:
    """Single-credential JSON file store."""

    def __init__(self, path: Path):
        """Initialize the store.

        Args:
            path: Path of the JSON credential file
        """
        self.path = Path(path)

    def load(self) -> Credential | None:
        """Read the stored credential; an unreadable file counts as no credential."""
        if not self.path.exists():
            return None

        try:
            return Credential.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("credential_cache_unreadable", path=str(self.path), error=str(e))
            return None

    def save(self, credential: Credential) -> None:
        """Replace the stored credential."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(credential.model_dump_json(indent=2), encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug("credential_cache_chmod_failed", path=str(self.path))
        logger.debug("credential_saved", path=str(self.path))

    def clear(self) -> None:
        """Forget the stored credential (logout)."""
        self.path.unlink(missing_ok=True)
        logger.info("credential_cleared", path=str(self.path))
