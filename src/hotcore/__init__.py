"""Hot Core: a single circulating token that scores its holder and melts if held too long."""

__version__ = "1.0.0"
