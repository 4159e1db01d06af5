"""Tests for result aggregation and synthesis."""

import pytest

from deep_research.exploration import build_synthesis, collect_tree, dedupe, merge_analysis, merge_results
from deep_research.models import (
    Claim,
    ContentAnalysis,
    ExplorationNode,
    Pattern,
    Relationship,
    ResearchResult,
)


class TestDedupe:
    """Tests for dedupe."""

    @pytest.mark.unit
    def test_keeps_first_occurrence_order(self):
        """Exact duplicates removed, first-seen order preserved."""
        assert dedupe(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    @pytest.mark.unit
    def test_exact_equality_only(self):
        """Near-duplicates are kept."""
        assert dedupe(["Fact", "fact", "Fact "]) == ["Fact", "fact", "Fact "]


class TestCollectTree:
    """Tests for collect_tree."""

    @pytest.mark.unit
    def test_depth_first_order(self):
        """A subtree is collected before the next sibling."""
        root = ExplorationNode(query="root", learnings=["r"], sources=["s0"])
        a = ExplorationNode(query="a", learnings=["a"], sources=["s1"])
        a1 = ExplorationNode(query="a1", learnings=["a1"])
        b = ExplorationNode(query="b", learnings=["b"], sources=["s1"])
        a.children = [a1]
        root.children = [a, b]

        learnings, sources = collect_tree(root)

        assert learnings == ["r", "a", "a1", "b"]
        assert sources == ["s0", "s1", "s1"]


class TestMergeAnalysis:
    """Tests for merge_analysis."""

    @pytest.mark.unit
    def test_merge_semantics(self):
        """Claims, patterns, relationships appended; methodologies unioned."""
        target = ContentAnalysis(
            claims=[Claim(statement="c1")],
            methodologies=["survey"],
            patterns=[Pattern(type="trend", description="p1")],
        )
        incoming = ContentAnalysis(
            claims=[Claim(statement="c1")],
            methodologies=["survey", "meta-analysis"],
            patterns=[Pattern(type="trend", description="p1")],
            relationships=[Relationship("cost", "adoption", "influences")],
        )

        merged = merge_analysis(target, incoming)

        assert merged is target
        assert len(merged.claims) == 2
        assert merged.methodologies == ["survey", "meta-analysis"]
        assert len(merged.patterns) == 2
        assert len(merged.relationships) == 1


class TestMergeResults:
    """Tests for merge_results."""

    @pytest.mark.unit
    def test_removes_duplicates(self):
        """Learnings and sources contain no duplicates after merging."""
        results = [
            ResearchResult(learnings=["x", "shared"], sources=["u1", "u0"]),
            ResearchResult(learnings=["shared", "y"], sources=["u0", "u2"]),
        ]

        merged = merge_results(results)

        assert merged.learnings == ["x", "shared", "y"]
        assert merged.sources == ["u1", "u0", "u2"]
        assert merged.analysis is None

    @pytest.mark.unit
    def test_merges_analysis(self):
        """Branch analyses fold into one."""
        results = [
            ResearchResult(analysis=ContentAnalysis(claims=[Claim(statement="a")])),
            ResearchResult(),
            ResearchResult(analysis=ContentAnalysis(claims=[Claim(statement="b")])),
        ]

        merged = merge_results(results)

        assert [c.statement for c in merged.analysis.claims] == ["a", "b"]


class TestBuildSynthesis:
    """Tests for build_synthesis."""

    @pytest.mark.unit
    def test_synthesis_tables(self):
        """Patterns grouped and counted, relationships and confidences indexed."""
        analysis = ContentAnalysis(
            claims=[
                Claim(statement="Costs are falling", confidence=0.6),
                Claim(statement="Costs are falling", confidence=0.8),
            ],
            methodologies=["field trial", "field trial"],
            patterns=[
                Pattern(type="consensus", description="Safety improved"),
                Pattern(type="consensus", description="Density improved"),
                Pattern(type="disagreement", description="Timeline to market"),
            ],
            relationships=[
                Relationship("cost", "adoption", "influences"),
                Relationship("cost", "policy", "depends on"),
            ],
        )

        synthesis = build_synthesis(analysis)

        assert synthesis.patterns["consensus"] == ["Safety improved", "Density improved"]
        assert synthesis.consensus == {"consensus": 2, "disagreement": 1}
        assert synthesis.methodologies == {"field trial"}
        assert synthesis.relationships == {"cost": {"adoption", "policy"}}
        assert synthesis.confidence_levels == {"Costs are falling": 0.8}
