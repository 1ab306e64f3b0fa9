from dataclasses import dataclass


@dataclass(frozen=True)
class FfmError:
    message: str


@dataclass(frozen=True)
class IngestError(FfmError):
    source_type: str
    source_detail: str
    target_table: str
    inserted: int = 0
    updated: int = 0


@dataclass(frozen=True)
class RefreshError(FfmError):
    job: str
    sport: str | None = None
    season: int | None = None


@dataclass(frozen=True)
class ConfigError(FfmError):
    """Invalid or missing configuration values."""
