from .json_source import JsonFileSource, load_fixture
from .memory_source import InMemorySource

__all__ = ["InMemorySource", "JsonFileSource", "load_fixture"]
