"""Parsers turning free-form model output into structured findings.

Model output is loosely formatted, so every parser is best-effort: it
returns ``None`` (or the supplied default) when nothing usable is found
and lets the caller decide whether to re-prompt.
"""

import re
from typing import Optional

from ..models import Claim, ContentAnalysis, Pattern, ProcessedContent, QuerySuggestion, Relationship

_LIST_MARKER = re.compile(r"^(?:[-*•]+|\d{1,2}[.)])\s*")
_MARKDOWN = re.compile(r"^#+\s*|\*\*")
_QUESTION_START = re.compile(r"^(what|how|why|when|where|which)\b", re.IGNORECASE)
_CONFIDENCE = re.compile(r"\(?\s*confidence:\s*([01](?:\.\d+)?)\s*\)?", re.IGNORECASE)
_EVIDENCE_LABEL = re.compile(r"^evidence:\s*", re.IGNORECASE)
_PATTERN = re.compile(r"^(consensus|disagreement|trend):", re.IGNORECASE)
_RELATIONSHIP = re.compile(
    r"(.+?)\s+(relates to|influences|affects|depends on|correlates with)\s+(.+)",
    re.IGNORECASE,
)
_SCORE = re.compile(r"(?<![\d.])[01]?\.\d+")

HEADING_MAX_LENGTH = 60
HEADING_MAX_WORDS = 5


def clean_line(line: str) -> str:
    """Strip markdown emphasis, headings and list markers."""
    line = _MARKDOWN.sub("", line.strip())
    line = _LIST_MARKER.sub("", line)
    return line.strip()


def extract_lines(text: str) -> list[str]:
    return [cleaned for cleaned in (clean_line(l) for l in text.splitlines()) if cleaned]


def _too_long_for_heading(line: str) -> bool:
    return len(line) > HEADING_MAX_LENGTH or len(line.split()) > HEADING_MAX_WORDS


def _heading(line: str) -> Optional[str]:
    """Classify a short heading line, or return None for content lines."""
    if _too_long_for_heading(line) or line.endswith("?"):
        return None
    lower = line.lower().rstrip(":")
    if "content analysis" in lower:
        return "analysis"
    if "follow-up" in lower or "follow up" in lower or "question" in lower:
        return "question"
    if "key learning" in lower or "insight" in lower or "finding" in lower:
        return "learning"
    return None


def _analysis_heading(line: str) -> Optional[str]:
    if _too_long_for_heading(line):
        return None
    lower = line.lower()
    for section, keyword in (
        ("claims", "claims"),
        ("methodologies", "methodolog"),
        ("patterns", "patterns"),
        ("relationships", "relationships"),
    ):
        if keyword in lower:
            return section
    return None


def parse_queries(text: str) -> list[QuerySuggestion]:
    """
    Extract research queries from a model response.

    Questions starting with an interrogative are preferred; when none are
    present, plain statements are turned into questions.
    """
    lines = extract_lines(text)

    questions = [l for l in lines if "?" in l and _QUESTION_START.match(l)]
    if questions:
        return [
            QuerySuggestion(query=q, research_goal=f"Research and analyze: {q.rstrip('?')}")
            for q in questions
        ]

    statements = [l for l in lines if "?" not in l]
    return [
        QuerySuggestion(
            query=f"What are the details of {s}?",
            research_goal=f"Research and analyze: {s}",
        )
        for s in statements
    ]


def parse_processed_content(text: str) -> Optional[ProcessedContent]:
    """
    Parse learnings, follow-up questions and analysis sections.

    Returns:
        ProcessedContent, or None if no learnings or questions were found
    """
    learnings: list[str] = []
    questions: list[str] = []
    analysis = ContentAnalysis()

    section: Optional[str] = None
    analysis_section: Optional[str] = None
    pending_claim: Optional[Claim] = None

    for line in extract_lines(text):
        heading = _heading(line)
        if heading:
            section = heading
            analysis_section = None
            continue

        if section == "analysis":
            sub = _analysis_heading(line)
            if sub:
                analysis_section = sub
                continue

            if analysis_section == "claims":
                match = _CONFIDENCE.search(line)
                if _EVIDENCE_LABEL.match(line):
                    # Labelled evidence belongs to the open claim, else the last one
                    target = pending_claim or (analysis.claims[-1] if analysis.claims else None)
                    evidence = _EVIDENCE_LABEL.sub("", line)
                    if target is not None and evidence:
                        target.evidence.append(evidence)
                elif match:
                    confidence = float(match.group(1))
                    statement = _CONFIDENCE.sub("", line).strip(" -:")
                    if len(statement) > 20:
                        # Inline confidence: the line is a claim of its own
                        if pending_claim is not None:
                            pending_claim.confidence = 0.5
                            analysis.claims.append(pending_claim)
                            pending_claim = None
                        analysis.claims.append(Claim(statement=statement, confidence=confidence))
                    elif pending_claim is not None:
                        pending_claim.confidence = confidence
                        analysis.claims.append(pending_claim)
                        pending_claim = None
                elif pending_claim is not None:
                    pending_claim.evidence.append(line)
                elif len(line) > 20:
                    pending_claim = Claim(statement=line, confidence=0.0)

            elif analysis_section == "methodologies":
                if len(line) > 10:
                    analysis.methodologies.append(line)

            elif analysis_section == "patterns":
                match = _PATTERN.match(line)
                if match and len(line) > 20:
                    analysis.patterns.append(Pattern(
                        type=match.group(1).lower(),
                        description=line[match.end():].strip(),
                    ))

            elif analysis_section == "relationships":
                match = _RELATIONSHIP.match(line)
                if match:
                    analysis.relationships.append(Relationship(
                        concept1=match.group(1).strip(),
                        relationship=match.group(2).strip().lower(),
                        concept2=match.group(3).strip(),
                    ))

        elif section == "learning" and len(line) > 20:
            learnings.append(line)
        elif section == "question" and "?" in line:
            questions.append(line)

    # Claim left open without a confidence line
    if pending_claim is not None:
        pending_claim.confidence = 0.5
        analysis.claims.append(pending_claim)

    if not learnings and not questions:
        return None

    return ProcessedContent(
        learnings=learnings,
        follow_up_questions=questions,
        analysis=None if analysis.is_empty() else analysis,
    )


def extract_score(text: str, default: float = 0.5) -> float:
    """
    First decimal fraction in ``text``, clamped to [0, 1].

    This is a hint, not a measurement: models do not reliably emit a clean
    number, so anything unparseable yields ``default``.
    """
    match = _SCORE.search(text or "")
    if not match:
        return default
    try:
        value = float(match.group(0))
    except ValueError:
        return default
    return min(1.0, max(0.0, value))
