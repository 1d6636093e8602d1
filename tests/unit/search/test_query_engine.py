"""
Unit tests for QueryEngine

Tests:
- Query normalization
- Exact / prefix / substring tiers and their precedence
- Inert empty queries
"""

import pytest

from conftest import GETNAME_SCOPES
from shard_search.domain.index.entities import Entry, MatchStrength, Shard, Target
from shard_search.domain.index.services import QueryEngine, SubstringScope
from shard_search.infrastructure.loaders import ShardParser


def make_shard(*keys, shard_id="all_6"):
    return Shard(
        shard_id=shard_id,
        entries=tuple(
            Entry(key=k, label=k, targets=(Target(name=k, locator=f"{k}.html"),))
            for k in keys
        ),
    )


@pytest.fixture
def g_shard(registry, generated_shard_text):
    return ShardParser(registry).parse("all_6", generated_shard_text)


@pytest.mark.parametrize("raw, expected", [
    ("getName", "getname"),
    ("  GetName  ", "getname"),
    ("operator   new", "operator new"),
    ("\tget\n name ", "get name"),
    ("", ""),
    ("   ", ""),
    (None, ""),
])
def test_normalize(raw, expected):
    assert QueryEngine.normalize(raw) == expected


@pytest.mark.parametrize("key, query, expected", [
    ("getname", "getname", MatchStrength.EXACT),
    ("getnames", "getname", MatchStrength.PREFIX),
    ("getname", "name", MatchStrength.SUBSTRING),
    ("getname", "xname", None),
    ("getname", "", None),
])
def test_classify(key, query, expected):
    assert QueryEngine.classify(key, query) == expected


def test_exact_match_keeps_all_overloads_in_order(query_engine, g_shard):
    matches = query_engine.match("getname", g_shard)
    by_key = {m.entry.key: m for m in matches}

    assert by_key["getname"].strength == MatchStrength.EXACT
    assert [t.scope for t in by_key["getname"].entry.targets] == GETNAME_SCOPES
    assert by_key["getnames"].strength == MatchStrength.PREFIX


def test_prefix_match(query_engine, g_shard):
    matches = query_engine.match("getn", g_shard)
    strengths = {m.entry.key: m.strength for m in matches}

    assert strengths == {
        "getname": MatchStrength.PREFIX,
        "getnames": MatchStrength.PREFIX,
        "getnode": MatchStrength.PREFIX,
    }


def test_unrelated_query_does_not_match(query_engine, g_shard):
    keys = [m.entry.key for m in query_engine.match("xname", g_shard)]
    assert "getname" not in keys
    assert keys == []


def test_substring_match_inside_key(query_engine, g_shard):
    matches = query_engine.match("field", g_shard)
    assert [(m.entry.key, m.strength) for m in matches] == [
        ("getfield", MatchStrength.SUBSTRING),
        ("getfields", MatchStrength.SUBSTRING),
    ]


def test_raw_query_is_normalized_before_matching(query_engine, g_shard):
    matches = query_engine.match("  GETNAME ", g_shard)
    assert matches[0].entry.key == "getname"
    assert matches[0].strength == MatchStrength.EXACT


@pytest.mark.parametrize("query", ["", "   ", "\t\n"])
def test_empty_query_matches_nothing(query_engine, g_shard, query):
    assert query_engine.match(query, g_shard) == []


def test_matches_preserve_shard_order(query_engine):
    shard = make_shard("gaa", "gab", "gba", "gca")
    assert [m.entry.key for m in query_engine.match("a", shard)] == ["gaa", "gab", "gba", "gca"]


@pytest.mark.parametrize("query", ["g", "ge", "get", "getf", "getfield", "etf", "ield", "s"])
def test_tiers_are_monotone(query_engine, g_shard, query):
    """Exact ⊆ exact-or-prefix ⊆ any tier, for the same query and shard"""
    matches = query_engine.match(query, g_shard)
    exact = {m.entry.key for m in matches if m.strength == MatchStrength.EXACT}
    prefix_or_better = {m.entry.key for m in matches if m.strength <= MatchStrength.PREFIX}
    any_tier = {m.entry.key for m in matches}

    assert exact <= prefix_or_better <= any_tier
    assert all(k.startswith(query) for k in prefix_or_better)
    assert all(query in k for k in any_tier)
    assert any_tier == {k for k in g_shard.keys if query in k}


def test_match_many_concatenates_in_shard_order(query_engine):
    first = make_shard("gamma", "ogam", shard_id="all_6")
    second = make_shard("program", shard_id="all_f")
    matches = query_engine.match_many("gam", [first, second])
    assert [m.entry.key for m in matches] == ["gamma", "ogam"]

    matches = query_engine.match_many("gra", [first, second])
    assert [m.entry.key for m in matches] == ["program"]


def test_substring_scope_defaults_to_home_shard():
    assert QueryEngine().substring_scope == SubstringScope.HOME_SHARD
    assert QueryEngine("all_shards").substring_scope == SubstringScope.ALL_SHARDS
