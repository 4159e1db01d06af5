"""Prompts for query generation, content analysis, scoring and summaries."""

from datetime import datetime, timezone
from typing import Optional, Sequence

from ..models import AnalysisOptions, ContentAnalysis, QueryHints


def system_prompt(now: Optional[datetime] = None) -> str:
    """System prompt shared by all research calls."""
    now = now or datetime.now(timezone.utc)
    return f"""You are an expert researcher. Today is {now.date().isoformat()}. Follow these instructions when responding:
- You may be asked to research subjects that are after your knowledge cutoff; assume the user is right when presented with news.
- The user is a highly experienced analyst; be as detailed as possible and make sure your response is correct.
- Be highly organized and proactive: anticipate needs and suggest directions the user didn't think about.
- Mistakes erode trust, so be accurate and thorough.
- Value good arguments over authorities; the source is irrelevant.
- Flag speculation and predictions clearly."""


QUERY_TYPE_DESCRIPTIONS = {
    "comparative": "- Comparative queries that contrast different approaches/viewpoints",
    "temporal": "- Temporal queries that explore changes over time",
    "methodological": "- Methodological queries that investigate specific techniques/methods",
    "consensus": "- Consensus queries that identify areas of agreement/disagreement",
}

STRICT_FORMAT_SUFFIX = (
    "\n\nPlease ensure your response is clear and structured. Each point should be on a new line "
    "and be a complete, meaningful statement."
)


def build_query_prompt(
    query: str,
    count: int,
    prior_findings: Sequence[str] = (),
    hints: Optional[QueryHints] = None,
) -> str:
    """
    Build the prompt asking for follow-up research queries.

    Args:
        query: Topic to branch from
        count: Number of queries wanted
        prior_findings: Learnings gathered so far
        hints: Knowledge gaps, timeframe and query types to steer generation

    Returns:
        Prompt text
    """
    hints = hints or QueryHints()
    types = "\n".join(
        QUERY_TYPE_DESCRIPTIONS[t] for t in hints.query_types if t in QUERY_TYPE_DESCRIPTIONS
    )

    prompt = f"""Analyze this research topic: "{query}"

Generate {count} diverse research queries that will help uncover comprehensive insights. Write each query as a question on its own line.

Query types to generate:
{types}

Requirements:
1. Each query should be specific and focused
2. Each query should start with What, How, Why, When, Where, or Which
3. Ensure queries build upon each other
4. Avoid redundant or overlapping queries"""

    if prior_findings:
        prompt += "\n\nConsider these previous findings:\n" + "\n".join(f"- {f}" for f in prior_findings)
    if hints.knowledge_gaps:
        prompt += "\n\nAddress these knowledge gaps:\n" + "\n".join(f"- {g}" for g in hints.knowledge_gaps)
    if hints.timeframe:
        prompt += f"\n\nFocus on this timeframe: {hints.timeframe}"

    return prompt


def build_processing_prompt(
    query: str,
    content: Sequence[str],
    num_learnings: int,
    num_follow_up_questions: int,
    options: AnalysisOptions,
) -> str:
    """Build the prompt extracting learnings, analysis and follow-up questions."""
    areas = set(options.focus_areas)
    sections = []
    if "claims" in areas:
        sections.append("   - Key claims and their supporting evidence\n   - Confidence level for each claim (confidence: 0-1)")
    if "methodologies" in areas:
        sections.append("   - Methodologies and approaches used\n   - Effectiveness of different methods")
    if "patterns" in areas:
        sections.append(
            "   - Patterns of consensus or disagreement, each line starting with consensus:, disagreement: or trend:"
        )
    if "relationships" in areas:
        sections.append("   - Relationships between key concepts (A relates to/influences/affects/depends on B)")

    detail = "Be exhaustive and cite specific figures." if options.depth == "detailed" else "Be concise."
    joined = "\n".join(f"---\n{text}\n---" for text in content)

    return f"""Analyze the following content about "{query}":

Content:
{joined}

Extract and analyze the following:

1. Key Learnings (at least {num_learnings}):
   - Focus on specific facts, data points, and relationships
   - Each learning should be a complete, meaningful statement
   - Include technical details when available
   - Avoid generic or obvious statements

2. Content Analysis:
{chr(10).join(sections)}

3. Follow-up Questions (at least {num_follow_up_questions}):
   - Questions should explore aspects not fully covered
   - Each question should start with What, How, Why, When, Where, or Which
   - Questions should be specific and detailed

{detail}
Format your response with clear sections for "Key Learnings:", "Content Analysis:", and "Follow-up Questions:" headings."""


def build_relevance_prompt(candidate_query: str, root_query: str) -> str:
    """Prompt asking for a single 0-1 relevance rating."""
    return (
        f'Rate the relevance of "{candidate_query}" to the original query "{root_query}" '
        "on a scale of 0-1. Reply with the score as a decimal (for example 0.75) on the first line, "
        "followed by a one-sentence justification."
    )


def build_summary_prompt(
    query: str,
    learnings: Sequence[str],
    analysis: Optional[ContentAnalysis] = None,
) -> str:
    """Prompt for the narrative summary of a finished run."""
    findings = "\n".join(f"{i + 1}. {l}" for i, l in enumerate(learnings))

    insights = ""
    if analysis is not None:
        lines = [f"- {p.type}: {p.description}" for p in analysis.patterns]
        lines += [f"- Methodology: {m}" for m in analysis.methodologies]
        if lines:
            insights = "\nContent Analysis Insights:\n" + "\n".join(lines) + "\n"

    return f"""Write a comprehensive narrative summary about {query} based on these key findings:

{findings}
{insights}
Requirements:
1. Write in a clear, engaging style
2. Organize information logically
3. Connect related concepts
4. Highlight key relationships and implications
5. Maintain technical accuracy
6. Break into paragraphs for readability
7. Synthesize patterns and trends
8. Note areas of consensus and disagreement

Do not include any introductory text like "Here's a summary" or "Based on the findings". Just write the narrative directly."""
