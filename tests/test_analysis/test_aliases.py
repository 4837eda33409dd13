"""Tests for the alias grouping passes."""

from __future__ import annotations

from doccheck.analysis.aliases import build_alias_groups
from doccheck.config import Settings
from doccheck.constants import AliasRule


class TestBuildAliasGroups:
    def test_case_variants_and_shared_invocation(
        self, make_corpus, entry_point_docs
    ) -> None:
        corpus = make_corpus(entry_point_docs)
        conflicts = build_alias_groups(corpus.registry)
        assert conflicts == []
        (group,) = corpus.registry.groups()
        assert group.members == {"hyper", "hyperdev", "HyperDev"}

    def test_case_variant_rule_recorded(self, make_corpus) -> None:
        corpus = make_corpus({
            "a.md": "Run `hyper-dev` or `hyperdev` or `hyperdev`.\n",
        })
        build_alias_groups(corpus.registry)
        group = corpus.registry.group_of("hyper-dev")
        assert group is not None
        assert group.rule == AliasRule.CASE_VARIANT
        assert group.canonical == "hyperdev"

    def test_declared_aliases(self, make_corpus) -> None:
        corpus = make_corpus({
            "a.md": "Use `hypergen` here.\n",
            "b.md": "Use `hg` here.\n",
        })
        build_alias_groups(
            corpus.registry, {"hypergen": ["hg", "never-used"]}
        )
        group = corpus.registry.group_of("hg")
        assert group is not None
        assert group.rule == AliasRule.DECLARED
        assert group.canonical == "hypergen"
        assert group.members == {"hypergen", "hg"}

    def test_declared_alias_needs_two_used_names(self, make_corpus) -> None:
        corpus = make_corpus({"a.md": "Use `hypergen` here.\n"})
        build_alias_groups(corpus.registry, {"hypergen": ["hg"]})
        assert corpus.registry.groups() == []

    def test_unrelated_terms_stay_apart(self, make_corpus) -> None:
        corpus = make_corpus({
            "a.md": "Run `hyper init` and `plan`.\n",
            "b.md": "Run `other build`.\n",
        })
        build_alias_groups(corpus.registry)
        assert corpus.registry.groups() == []

    def test_shared_path_alone_does_not_merge(self, make_corpus) -> None:
        corpus = make_corpus({
            "a.md": "Run `npm install`.\n",
            "b.md": "Run `pnpm install`.\n",
        })
        build_alias_groups(corpus.registry)
        assert corpus.registry.groups() == []

    def test_configured_entry_points_sharing_a_path_merge(
        self, make_corpus
    ) -> None:
        corpus = make_corpus({
            "a.md": "Run `hypergen init`.\n",
            "b.md": "Run `hg init`.\n",
        })
        build_alias_groups(
            corpus.registry, entry_points=["hypergen", "hg"]
        )
        group = corpus.registry.group_of("hg")
        assert group is not None
        assert group.rule == AliasRule.SHARED_INVOCATION
        assert group.members == {"hg", "hypergen"}

    def test_conflict_reported_not_raised(self, make_corpus) -> None:
        corpus = make_corpus(
            {
                "a.md": "Run `hypergen init`.\n",
                "b.md": "Run `HyperGen init`.\n",
                "c.md": "Run `hg init`.\n",
                "d.md": "The `hgen` tool.\n",
            },
            Settings(
                aliases={"hgen": ["hg"]},
                entry_points=["hypergen", "hg"],
            ),
        )
        conflicts = build_alias_groups(
            corpus.registry,
            corpus.settings.aliases,
            corpus.settings.entry_points,
        )
        assert len(conflicts) == 1
        assert conflicts[0].canonicals == ("hgen", "HyperGen")
        assert conflicts[0].rules == (
            AliasRule.DECLARED,
            AliasRule.CASE_VARIANT,
        )
        # Both groups survive intact
        assert corpus.registry.group_of("hg") is not None
        assert corpus.registry.group_of("hg") is not (
            corpus.registry.group_of("hypergen")
        )

    def test_grouping_is_repeatable(
        self, make_corpus, entry_point_docs
    ) -> None:
        first = make_corpus(entry_point_docs)
        second = make_corpus(dict(reversed(entry_point_docs.items())))
        build_alias_groups(first.registry)
        build_alias_groups(second.registry)
        assert [
            (g.canonical, sorted(g.members)) for g in first.registry.groups()
        ] == [
            (g.canonical, sorted(g.members))
            for g in second.registry.groups()
        ]
