"""
Token persistence for Strava OAuth.

TokenStore is the pluggable persistence boundary: the client only ever calls
get() and set(). Two implementations ship with the package:

- MemoryTokenStore: process-local, nothing written to disk
- FileTokenStore: plaintext JSON file with user-only permissions
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..exceptions import TokenStorageError
from ..models import OAuthToken

logger = logging.getLogger(__name__)


class TokenStore(ABC):
    """Pluggable persistence for the current OAuth token."""

    @abstractmethod
    def get(self) -> Optional[OAuthToken]:
        """
        Return the stored token.

        Returns:
            OAuthToken if one is stored, None otherwise
        """
        pass

    @abstractmethod
    def set(self, token: OAuthToken) -> None:
        """
        Replace the stored token.

        Args:
            token: Token to persist
        """
        pass


class MemoryTokenStore(TokenStore):
    """Keeps the token in memory for the lifetime of the process."""

    def __init__(self, token: Optional[OAuthToken] = None):
        self._token = token

    def get(self) -> Optional[OAuthToken]:
        return self._token

    def set(self, token: OAuthToken) -> None:
        self._token = token


class FileTokenStore(TokenStore):
    """
    File-based token storage (plaintext JSON).

    The file is rewritten on every set() and chmod'ed to 600. Reads go to
    disk every time; there is no in-memory cache.
    """

    def __init__(self, token_file: str):
        """
        Initialize token storage.

        Args:
            token_file: Path to token storage file (e.g. ~/.strava/tokens.json)
        """
        self.token_file = Path(token_file).expanduser()
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Create parent directory if needed."""
        self.token_file.parent.mkdir(parents=True, exist_ok=True)

    def _set_secure_permissions(self) -> None:
        """Set file permissions to user-only read/write (600)."""
        try:
            self.token_file.chmod(0o600)
            logger.debug(f"Set secure permissions (600) on {self.token_file}")
        except (OSError, PermissionError) as e:
            logger.warning(f"Could not set secure permissions: {e}")

    def get(self) -> Optional[OAuthToken]:
        return self.load()

    def set(self, token: OAuthToken) -> None:
        self.save(token)

    def save(self, token: OAuthToken) -> None:
        """
        Save token to file.

        Args:
            token: Token to save

        Raises:
            TokenStorageError: If the file cannot be written
        """
        try:
            with open(self.token_file, "w") as f:
                json.dump(token.to_dict(), f, indent=2)

            self._set_secure_permissions()

            logger.info(f"Token saved to {self.token_file}")
        except (IOError, OSError) as e:
            logger.error(f"Failed to save token: {e}")
            raise TokenStorageError(f"Failed to save token: {e}") from e

    def load(self) -> Optional[OAuthToken]:
        """
        Load token from file.

        Returns:
            OAuthToken if the file exists and holds a JSON object, None otherwise

        Notes:
            - Returns None if file doesn't exist (normal on first run)
            - Returns None if file is corrupted (logs warning)
        """
        if not self.token_file.exists():
            logger.debug(f"No token file found at {self.token_file}")
            return None

        try:
            with open(self.token_file, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(
                f"Invalid token file at {self.token_file}, "
                f"will need re-authorization: {e}"
            )
            return None
        except (IOError, OSError) as e:
            logger.warning(f"Could not read token file: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Token file at {self.token_file} does not hold an object")
            return None

        logger.debug(f"Token loaded from {self.token_file}")
        return OAuthToken.from_json(data)

    def delete(self) -> bool:
        """
        Delete token file.

        Returns:
            True if file was deleted, False if file didn't exist

        Raises:
            TokenStorageError: If the file exists but cannot be removed
        """
        if self.token_file.exists():
            try:
                self.token_file.unlink()
                logger.info(f"Token file deleted: {self.token_file}")
                return True
            except (OSError, PermissionError) as e:
                logger.error(f"Failed to delete token file: {e}")
                raise TokenStorageError(f"Failed to delete token file: {e}") from e

        logger.debug(f"Token file does not exist: {self.token_file}")
        return False

    def exists(self) -> bool:
        """True if the token file exists."""
        return self.token_file.exists()
