# matchvision/services/analysis_formatter.py
"""
Turn free-text match analysis into a ParsedPresentation.

The heuristics here are deliberately loose regexes over whatever the vision
model wrote. They will misfire on odd input (list numbers read as a score,
team names containing "and"); that is accepted and kept reproducible.
parse() never raises.
"""
from __future__ import annotations
from typing import List, Optional, Tuple
import re

from matchvision.core.models import ContentLine, ParsedPresentation, Section

# Split before "1. " style numbers or before a blank line + "HEADER:" line.
# Zero-width, so the marker stays at the head of the next section.
_SECTION_SPLIT_RX = re.compile(r"(?=[0-9]+\.\s|\n\n[A-Z][^a-z\n:]+:)")

# Alternative A: "score ... 2 ... 1", alternative B: "2 ... 1 ... score"
_SCORE_RX = re.compile(
    r"score[^0-9]+([0-9]+)[^0-9]+([0-9]+)|([0-9]+)[^0-9]+([0-9]+)[^0-9]+score",
    re.I | re.ASCII,
)

_TEAMS_RX = re.compile(
    r"teams[^a-z]+([A-Za-z\s]+)(?:vs\.?|versus|and|playing against)([A-Za-z\s]+)",
    re.I | re.ASCII,
)

_MAJOR_RX = re.compile(r"[0-9]+\.\s|[A-Z][^a-z\n:]+:")
_TITLE_RX = re.compile(r"([0-9]+\.\s[^\n]+|[A-Z][^a-z\n:]+:)")

_BULLET = "- "


def split_sections(text: str) -> List[str]:
    # re.split leaves an empty head when the text itself starts with a marker
    return [s for s in _SECTION_SPLIT_RX.split(text or "") if s]


def extract_score(text: str) -> Tuple[str, str]:
    """Return (home, away) digit strings from the first score-like match, or ("", "")."""
    m = _SCORE_RX.search(text or "")
    if not m:
        return ("", "")
    if m.group(1) and m.group(2):
        return (m.group(1), m.group(2))
    if m.group(3) and m.group(4):
        return (m.group(3), m.group(4))
    return ("", "")


def find_teams_section(sections: List[str]) -> Optional[str]:
    for s in sections:
        low = s.lower()
        if "teams:" in low or "1. teams" in low:
            return s
    return None


def extract_teams(sections: List[str]) -> Tuple[str, str]:
    section = find_teams_section(sections)
    if section is None:
        return ("", "")
    m = _TEAMS_RX.search(section)
    if not m:
        return ("", "")
    return (m.group(1).strip(), m.group(2).strip())


def decide_winner(home_score: str, away_score: str) -> Optional[str]:
    if not (home_score and away_score):
        return None
    try:
        home, away = int(home_score), int(away_score)
    except ValueError:
        return None
    if home > away:
        return "home"
    if home < away:
        return "away"
    return None


def is_major_section(section: str) -> bool:
    return _MAJOR_RX.match(section.strip()) is not None


def build_section(raw: str) -> Section:
    major = is_major_section(raw)
    title: Optional[str] = None
    content = raw

    if major:
        # matched on the untrimmed text: a "\n\nHEADER:" piece keeps no title
        m = _TITLE_RX.match(raw)
        if m:
            title = m.group(0)
            content = raw[len(title):].strip()

    lines: List[ContentLine] = []
    for line in content.split("\n"):
        t = line.strip()
        if t.startswith(_BULLET):
            lines.append(ContentLine(text=t[len(_BULLET):], bullet=True))
        elif t:
            lines.append(ContentLine(text=t))

    return Section(title=title, lines=lines, is_major=major)


def parse(text: str) -> ParsedPresentation:
    text = text or ""
    sections = split_sections(text)
    home_score, away_score = extract_score(text)
    home_team, away_team = extract_teams(sections)

    return ParsedPresentation(
        home_team=home_team,
        away_team=away_team,
        home_score=home_score,
        away_score=away_score,
        winner=decide_winner(home_score, away_score),
        sections=[build_section(s) for s in sections],
    )


def render_markdown(presentation: ParsedPresentation) -> str:
    """Plain-text rendering: score line first, then sections in source order."""
    out: List[str] = []
    panel = presentation.score_panel
    if panel is not None:
        home = f"**{panel.home_label}**" if panel.winner == "home" else panel.home_label
        away = f"**{panel.away_label}**" if panel.winner == "away" else panel.away_label
        out.append(f"{home}  {panel.score_label}  {away}")
        out.append("")

    for section in presentation.sections:
        if section.title:
            out.append(f"### {section.title}")
        bulleted = section.bulleted
        for line in section.lines:
            if bulleted and line.bullet:
                out.append(f"- {line.text}")
            else:
                out.append(line.text)
        out.append("")

    return "\n".join(out).strip() + ("\n" if out else "")
