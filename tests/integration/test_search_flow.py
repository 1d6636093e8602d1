"""
Integration tests for the end-to-end search flow

Drives a factory-built session against shard files on disk, the way a
search box drives it keystroke by keystroke.
"""

import json

import pytest

from conftest import GETNAME_SCOPES, load_fixture
from shard_search import SearchEngineFactory
from shard_search.application.session import SessionState
from shard_search.config import SearchSettings
from shard_search.domain.index.entities import MatchStrength
from shard_search.errors import ShardIdMismatchError


@pytest.fixture
def site_dir(tmp_path):
    (tmp_path / "all_6.js").write_text(load_fixture("all_6.js"), encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(site_dir):
    return SearchSettings(local_directory=str(site_dir))


async def run_query(session, text):
    session.submit_query(text)
    await session.drain()
    return session.results


@pytest.mark.asyncio
async def test_exact_prefix_and_miss(settings):
    session = await SearchEngineFactory.open_session(settings)

    exact = await run_query(session, "getname")
    assert exact.rows[0].key == "getname"
    assert exact.rows[0].strength == MatchStrength.EXACT
    assert [t.scope for t in exact.rows[0].targets] == GETNAME_SCOPES

    prefix = await run_query(session, "getn")
    getname = next(r for r in prefix.rows if r.key == "getname")
    assert getname.strength == MatchStrength.PREFIX
    assert [t.scope for t in getname.targets] == GETNAME_SCOPES

    miss = await run_query(session, "xname")
    assert all(r.key != "getname" for r in miss.rows)

    await session.close()


@pytest.mark.asyncio
async def test_empty_query_fetches_nothing(settings):
    session = await SearchEngineFactory.open_session(settings)
    loader = session.use_case.loader

    results = await run_query(session, "")

    assert results.rows == []
    assert session.state == SessionState.IDLE
    assert loader.loaded_shard_ids() == []
    assert loader.fetch_count("all_6") == 0


@pytest.mark.asyncio
async def test_failed_fetch_retried_on_next_keystroke(tmp_path):
    session = await SearchEngineFactory.open_session(SearchSettings(local_directory=str(tmp_path)))

    first = await run_query(session, "getf")
    assert first.is_unavailable
    assert first.unavailable_shards == ["all_6"]

    # The shard becomes reachable again
    (tmp_path / "all_6.js").write_text(load_fixture("all_6.js"), encoding="utf-8")

    second = await run_query(session, "getfi")
    assert not second.is_unavailable
    assert [r.key for r in second.rows] == ["getfield", "getfields"]
    assert session.use_case.loader.fetch_count("all_6") == 2


@pytest.mark.asyncio
async def test_exact_before_prefix_in_generated_shard(settings):
    session = await SearchEngineFactory.open_session(settings)

    results = await run_query(session, "getfield")

    assert [(r.key, r.strength) for r in results.rows] == [
        ("getfield", MatchStrength.EXACT),
        ("getfields", MatchStrength.PREFIX),
    ]


@pytest.mark.asyncio
async def test_manifest_checked_when_enabled(site_dir):
    (site_dir / "searchdata.json").write_text(json.dumps({"buckets": ["a-m", "n-z"]}), encoding="utf-8")
    settings = SearchSettings(local_directory=str(site_dir), verify_manifest=True)

    with pytest.raises(ShardIdMismatchError):
        await SearchEngineFactory.open_session(settings)


@pytest.mark.asyncio
async def test_substring_across_all_shards(site_dir):
    (site_dir / "all_5.js").write_text(
        "var searchData=\n[\n  ['fieldtype',['FieldType',['../classFieldType.html',1,'FieldType']]]\n];\n",
        encoding="utf-8",
    )
    (site_dir / "all_12.js").write_text(
        "var searchData=\n[\n  ['setfield',['setField',['../classX.html#a1',1,'X::setField()']]]\n];\n",
        encoding="utf-8",
    )
    session = await SearchEngineFactory.open_session(
        SearchSettings(local_directory=str(site_dir), substring_scope="all_shards")
    )

    results = await run_query(session, "field")

    assert [(r.key, r.shard_id) for r in results.rows] == [
        ("fieldtype", "all_5"),
        ("getfield", "all_6"),
        ("getfields", "all_6"),
        ("setfield", "all_12"),
    ]
    assert results.rows[0].strength == MatchStrength.PREFIX
    assert results.status.value == "ok"
    assert "all_0" in results.unavailable_shards
