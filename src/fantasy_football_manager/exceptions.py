class FfmException(Exception):
    """Base class for exceptions raised by fantasy_football_manager."""
