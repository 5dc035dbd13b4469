from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from secretgrid.domain.models import RemotePage


@dataclass(frozen=True)
class CredentialContext:
    """Profile/region pair handed to the source factory untouched."""

    profile: Optional[str] = None
    region: Optional[str] = None


class ISource(ABC):
    """Interface for the remote, token-paged secrets store."""

    @abstractmethod
    def list_page(self, continuation_token: Optional[Any], page_size: int) -> RemotePage:
        """
        Return the page that starts at *continuation_token* (``None`` for the first page).
        Raises ``FetchError`` when the store cannot be reached.
        """
        pass

    @abstractmethod
    def get_item_detail(self, item_id: str) -> str:
        """Return the secret value for *item_id* as text. Raises ``FetchError`` on failure."""
        pass
