"""MatchReel: football highlight review and export service."""
__version__ = "1.0.0"
