"""Grid browser for token-paged secret lists."""

__version__ = "0.1.0"
