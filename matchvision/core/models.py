from dataclasses import dataclass, field, asdict
from typing import List, Optional

HOME_PLACEHOLDER = "Home Team"
AWAY_PLACEHOLDER = "Away Team"
SCORE_PLACEHOLDER = "?"


@dataclass
class ContentLine:
    text: str
    bullet: bool = False


@dataclass
class Section:
    title: Optional[str] = None
    lines: List[ContentLine] = field(default_factory=list)
    is_major: bool = False

    @property
    def bulleted(self) -> bool:
        return any(line.bullet for line in self.lines)

    def to_api(self) -> dict:
        d = asdict(self)
        d["bulleted"] = self.bulleted
        return d


@dataclass
class ScorePanel:
    home_team: str = ""
    away_team: str = ""
    home_score: str = ""
    away_score: str = ""
    winner: Optional[str] = None  # "home" | "away" | None

    @property
    def home_label(self) -> str:
        return self.home_team or HOME_PLACEHOLDER

    @property
    def away_label(self) -> str:
        return self.away_team or AWAY_PLACEHOLDER

    @property
    def score_label(self) -> str:
        return f"{self.home_score or SCORE_PLACEHOLDER} - {self.away_score or SCORE_PLACEHOLDER}"

    def to_api(self) -> dict:
        return {
            "home_team": self.home_label,
            "away_team": self.away_label,
            "home_score": self.home_score or SCORE_PLACEHOLDER,
            "away_score": self.away_score or SCORE_PLACEHOLDER,
            "score": self.score_label,
            "winner": self.winner,
        }


@dataclass
class ParsedPresentation:
    """Best-effort structured view over free-text match analysis.

    Every field is optional; missing data is shown with placeholders.
    """
    home_team: str = ""
    away_team: str = ""
    home_score: str = ""
    away_score: str = ""
    winner: Optional[str] = None
    sections: List[Section] = field(default_factory=list)

    @property
    def has_score(self) -> bool:
        return bool(self.home_score or self.away_score)

    @property
    def score_panel(self) -> Optional[ScorePanel]:
        if not self.has_score:
            return None
        return ScorePanel(
            home_team=self.home_team,
            away_team=self.away_team,
            home_score=self.home_score,
            away_score=self.away_score,
            winner=self.winner,
        )

    def to_api(self) -> dict:
        panel = self.score_panel
        return {
            "score_panel": panel.to_api() if panel else None,
            "sections": [s.to_api() for s in self.sections],
        }
