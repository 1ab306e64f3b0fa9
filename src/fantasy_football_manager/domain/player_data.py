from dataclasses import dataclass


@dataclass(frozen=True)
class EspnPlayerData:
    espn_player_id: int
    sport: str
    season: int
    full_name: str
    first_name: str | None = None
    last_name: str | None = None
    team: str | None = None
    position: str | None = None
    jersey_number: int | None = None
    injury_status: str | None = None
    percent_owned: float | None = None
    percent_started: float | None = None
    average_points: float | None = None
    total_points: float | None = None
    last_fetched_at: str | None = None
    latest_outlook: str | None = None
    outlook_week: int | None = None
    news_date: str | None = None
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class FpPlayerData:
    fp_player_id: str
    sport: str
    season: int
    full_name: str
    first_name: str | None = None
    last_name: str | None = None
    team: str | None = None
    position: str | None = None
    jersey_number: int | None = None
    latest_headline: str | None = None
    latest_analysis: str | None = None
    news_date: str | None = None
    id: int | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class UpsertCounts:
    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.updated
