"""rustydocs - index a Rust repository, document it and ask it questions."""

__version__ = "0.1.0"
