"""tag-finder: compile boolean tag queries into SQL over a tagged file index."""

__version__ = "0.3.0"
