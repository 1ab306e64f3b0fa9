from dataclasses import dataclass


@dataclass(frozen=True)
class PipelineStep:
    name: str
    success: bool
    detail: str = ""


@dataclass(frozen=True)
class PipelineResult:
    sport: str
    season: int
    success: bool
    steps: tuple[PipelineStep, ...] = ()
    error: str | None = None
