"""Core data types for research runs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Literal, Optional

AnalysisDepth = Literal["basic", "detailed"]
FocusArea = Literal["claims", "methodologies", "patterns", "relationships"]
PatternType = Literal["consensus", "disagreement", "trend"]


class StrategyKind(str, Enum):
    """Exploration strategy selected for a run."""
    LINEAR = "linear"          # depth chains with breadth halving
    BEST_FIRST = "best_first"  # relevance-ordered frontier


@dataclass
class Claim:
    """A claim extracted from content, with supporting evidence."""
    statement: str
    evidence: list[str] = field(default_factory=list)
    confidence: float = 0.5


@dataclass
class Pattern:
    """A consensus, disagreement or trend observed across content."""
    type: PatternType
    description: str


@dataclass
class Relationship:
    """A directed relationship between two concepts."""
    concept1: str
    concept2: str
    relationship: str


@dataclass
class ContentAnalysis:
    """Structured analysis attached to processed content."""
    claims: list[Claim] = field(default_factory=list)
    methodologies: list[str] = field(default_factory=list)
    patterns: list[Pattern] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.claims or self.methodologies or self.patterns or self.relationships)


@dataclass
class QuerySuggestion:
    """A generated search query and what it is meant to find out."""
    query: str
    research_goal: str


@dataclass
class QueryHints:
    """Context that steers query generation towards open questions."""
    knowledge_gaps: list[str] = field(default_factory=list)
    timeframe: Optional[str] = None
    query_types: tuple[str, ...] = ("comparative",)


@dataclass
class ProcessedContent:
    """Findings extracted from retrieved content."""
    learnings: list[str] = field(default_factory=list)
    follow_up_questions: list[str] = field(default_factory=list)
    analysis: Optional[ContentAnalysis] = None


@dataclass
class NodeContent:
    """Raw material retrieved for a node, kept only until it is scored."""
    text: str = ""
    images: list[str] = field(default_factory=list)
    pdfs: list[str] = field(default_factory=list)


@dataclass(eq=False)
class ExplorationNode:
    """
    A unit of exploration work: one query plus everything learned from it.

    Children are owned by their parent and only ever created from an
    explored node, so the nodes form a tree rooted at the user's query.
    """
    query: str
    relevance_score: float = 0.0
    explored: bool = False
    children: list["ExplorationNode"] = field(default_factory=list)
    learnings: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    content: Optional[NodeContent] = None
    analysis: Optional[ContentAnalysis] = None
    depth: int = 0  # distance from the root

    def mark_explored(self) -> None:
        self.explored = True

    def iter_tree(self):
        """Depth-first, pre-order walk over this node and its descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class AnalysisOptions:
    """Which aspects of content to analyse, and how thoroughly."""
    focus_areas: tuple[FocusArea, ...] = ("claims", "patterns")
    depth: AnalysisDepth = "basic"


@dataclass
class AnalysisProgress:
    """Counters for structured analysis."""
    processed_sources: int = 0
    identified_patterns: int = 0
    extracted_claims: int = 0


@dataclass
class ResearchProgress:
    """Mutable counters for a running research task."""
    current_depth: int = 0
    total_depth: int = 0
    current_breadth: int = 0
    total_breadth: int = 0
    total_queries: int = 0
    completed_queries: int = 0
    current_query: Optional[str] = None
    analysis: Optional[AnalysisProgress] = None


ProgressObserver = Callable[[ResearchProgress], None]


@dataclass(frozen=True)
class ResearchConfig:
    """
    Parameters for one research run. Frozen once the run starts.

    ``query_delay`` and ``node_delay`` default to the configured settings
    when left as ``None``.
    """
    query: str
    breadth: int
    depth: int
    on_progress: Optional[ProgressObserver] = None
    analysis: Optional[AnalysisOptions] = None
    strategy: StrategyKind = StrategyKind.LINEAR
    concurrent_chains: bool = False
    query_delay: Optional[float] = None
    node_delay: Optional[float] = None


@dataclass
class Synthesis:
    """Global view folded from the run's analysis."""
    patterns: dict[str, list[str]] = field(default_factory=dict)            # pattern type -> descriptions
    consensus: dict[str, int] = field(default_factory=dict)                 # pattern type -> occurrences
    methodologies: set[str] = field(default_factory=set)
    relationships: dict[str, set[str]] = field(default_factory=dict)        # concept1 -> related concepts
    confidence_levels: dict[str, float] = field(default_factory=dict)       # claim statement -> confidence


@dataclass
class ResearchResult:
    """Final output of a research run. Learnings and sources hold no duplicates."""
    learnings: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    analysis: Optional[ContentAnalysis] = None
    synthesis: Optional[Synthesis] = None
    models: dict[str, str] = field(default_factory=dict)
