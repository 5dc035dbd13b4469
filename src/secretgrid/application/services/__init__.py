from .dispatch import FetchDispatcher, ImmediateDispatcher, QueuedDispatcher
from .remote_page_cache import RemotePageCache

__all__ = ["FetchDispatcher", "ImmediateDispatcher", "QueuedDispatcher", "RemotePageCache"]
