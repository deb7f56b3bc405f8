"""Storage of the V2 API access token."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from ..core import config_store
from ..core.models import ConfigError

logger = logging.getLogger(__name__)


class AbstractStore(ABC):
    """
    Holds an access token and its expiry date.

    A token is considered valid until a safety margin before its expiry.
    """

    #: Margin before the expiry date after which a token is considered expired
    EXPIRY_MARGIN = timedelta(seconds=60)

    def __init__(self):
        self.access_token: str | None = None
        self.expiry_date: datetime | None = None

    def get_access_token(self) -> str | None:
        return self.access_token

    def set_access_token(self, token: str | None) -> None:
        self.access_token = token

    def get_expiry_date(self) -> datetime | None:
        return self.expiry_date

    def set_expiry_date(self, date: datetime | None) -> None:
        self.expiry_date = date

    def has_access_token(self) -> bool:
        return bool(self.access_token)

    def is_valid(self) -> bool:
        """Check if there is a token which is not expired yet."""
        if not self.has_access_token() or self.expiry_date is None:
            return False

        return datetime.now(timezone.utc) + self.EXPIRY_MARGIN < self.expiry_date

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        self.access_token = data.get("access_token")
        expiry_date = data.get("expiry_date")
        self.expiry_date = datetime.fromisoformat(expiry_date) if expiry_date else None

    @abstractmethod
    def reload(self) -> None:
        """Read the storage and load its contents if existing."""
        pass

    @abstractmethod
    def save(self) -> bool:
        """
        Persist the current token.

        Returns:
            True on success
        """
        pass


class NoStore(AbstractStore):
    """Keeps the token in memory only."""

    def reload(self) -> None:
        pass

    def save(self) -> bool:
        return True


class FileStore(AbstractStore):
    """Keeps the token in a JSON file of the configuration directory."""

    def __init__(self, profile: str = "default"):
        super().__init__()
        self.profile = profile
        self.reload()

    def reload(self) -> None:
        try:
            self.load_dict(config_store.load_json(self.profile, "token"))
        except ConfigError:
            logger.debug(f"No stored access token for profile '{self.profile}'")

    def save(self) -> bool:
        config_store.save_json(self.profile, "token", self.to_dict())
        return True


class CustomStore(AbstractStore):
    """Lets the developer provide the loading and saving logic."""

    def __init__(
        self,
        load_callback: Callable[["CustomStore"], None],
        save_callback: Callable[["CustomStore"], bool],
    ):
        """
        Args:
            load_callback: Called with the store to fill it
            save_callback: Called with the store to persist it
        """
        super().__init__()
        self.load_callback = load_callback
        self.save_callback = save_callback
        self.reload()

    def reload(self) -> None:
        self.load_callback(self)

    def save(self) -> bool:
        return self.save_callback(self)
