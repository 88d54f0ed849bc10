"""Tests for Knowledge Base."""

from pathlib import Path

import pytest

from cluegraph.config import ErrorCode
from cluegraph.domains.clues import Clue, Solution

from .models import SolvedClueRecord
from .store import KnowledgeBase

CLUE = Clue.parse("Capital of France [5]")


def scored(text: str, score: float = 0.5) -> Solution:
    solution = Solution.from_text(text)
    solution.score = score
    return solution


@pytest.fixture
def kb_path(tmp_path: Path) -> Path:
    return tmp_path / "kb" / "knowledge_base.rdf"


@pytest.fixture
async def knowledge_base(kb_path: Path):
    """Fresh knowledge base backed by a temporary file."""
    kb = KnowledgeBase(kb_path)
    yield kb
    await kb.close()


async def test_merge_and_lookup(knowledge_base: KnowledgeBase):
    """Test merged solutions can be looked up."""
    added = await knowledge_base.merge(CLUE, [scored("Paris")])

    assert added == 1
    assert await knowledge_base.lookup(CLUE) == ["Paris"]


async def test_merge_is_idempotent(knowledge_base: KnowledgeBase):
    """Test merging the same solution twice stores it once."""
    await knowledge_base.merge(CLUE, [scored("Paris")])
    added = await knowledge_base.merge(CLUE, [scored("Paris"), scored("Paris")])

    assert added == 0
    assert await knowledge_base.lookup(CLUE) == ["Paris"]
    stats = await knowledge_base.stats()
    assert stats.clue_count == 1
    assert stats.solution_count == 1


async def test_merge_is_additive(knowledge_base: KnowledgeBase):
    """Test new solutions are appended to an existing clue record."""
    await knowledge_base.merge(CLUE, [scored("Paris")])
    await knowledge_base.merge(CLUE, [scored("Lyons")])

    assert await knowledge_base.lookup(CLUE) == ["Paris", "Lyons"]
    assert (await knowledge_base.stats()).clue_count == 1


async def test_structure_distinguishes_clues(knowledge_base: KnowledgeBase):
    """Test the same text with another structure is another clue."""
    other = Clue.parse("Capital of France [2, 3]")
    await knowledge_base.merge(CLUE, [scored("Paris")])

    assert await knowledge_base.lookup(other) == []


async def test_non_positive_scores_ignored(knowledge_base: KnowledgeBase):
    """Test unscored solutions are never recorded."""
    added = await knowledge_base.merge(CLUE, [scored("Paris", 0.0), scored("Lille", -1.0)])

    assert added == 0
    assert await knowledge_base.lookup(CLUE) == []
    assert (await knowledge_base.stats()).clue_count == 0


async def test_persist_and_reload(knowledge_base: KnowledgeBase, kb_path: Path):
    """Test persisted records survive a reload."""
    knowledge_base.merge(CLUE, [scored("Paris")])
    assert await knowledge_base.persist() is True
    assert kb_path.exists()

    reloaded = KnowledgeBase(kb_path, create_if_missing=False)
    try:
        assert await reloaded.lookup(CLUE) == ["Paris"]
        assert reloaded.enabled
    finally:
        await reloaded.close()


async def test_missing_file_disables_store(kb_path: Path):
    """Test a missing file without create_if_missing disables the store."""
    kb = KnowledgeBase(kb_path, create_if_missing=False)
    try:
        assert await kb.merge(CLUE, [scored("Paris")]) == 0
        assert await kb.persist() is False
        assert await kb.lookup(CLUE) == []
        assert not kb.enabled
        assert not kb_path.exists()
        assert kb.last_error.code == ErrorCode.STORAGE_READ_FAILED
    finally:
        await kb.close()


async def test_corrupt_file_disables_store(kb_path: Path):
    """Test an unreadable file disables the store instead of raising."""
    kb_path.parent.mkdir(parents=True)
    kb_path.write_text("<rdf:RDF this is not xml", encoding="utf-8")
    kb = KnowledgeBase(kb_path)
    try:
        assert await kb.merge(CLUE, [scored("Paris")]) == 0
        assert not kb.enabled
        assert kb.last_error.code == ErrorCode.STORAGE_READ_FAILED
        assert kb.last_error.details["path"] == str(kb_path)
    finally:
        await kb.close()
    assert kb_path.read_text(encoding="utf-8") == "<rdf:RDF this is not xml"


async def test_persist_failure_keeps_memory(tmp_path: Path):
    """Test a failed write is reported and leaves the records intact."""
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    kb = KnowledgeBase(blocker / "knowledge_base.rdf")
    try:
        await kb.merge(CLUE, [scored("Paris")])
        assert await kb.persist() is False
        assert await kb.lookup(CLUE) == ["Paris"]
        assert kb.last_error.code == ErrorCode.STORAGE_WRITE_FAILED
    finally:
        await kb.close()


async def test_finished_and_join(knowledge_base: KnowledgeBase):
    """Test the finished signal tracks outstanding requests."""
    assert knowledge_base.finished

    future = knowledge_base.merge(CLUE, [scored("Paris")])
    assert not knowledge_base.finished

    await knowledge_base.join()
    assert knowledge_base.finished
    assert future.done()


async def test_concurrent_merges_serialised(knowledge_base: KnowledgeBase):
    """Test many overlapping merges record each text once."""
    futures = [knowledge_base.merge(CLUE, [scored("Paris"), scored(f"City{i % 3}")]) for i in range(10)]
    await knowledge_base.join()

    assert sum(f.result() for f in futures) == 4
    assert sorted(await knowledge_base.lookup(CLUE)) == ["City0", "City1", "City2", "Paris"]


async def test_close_with_persist(kb_path: Path):
    """Test closing can persist pending merges."""
    kb = KnowledgeBase(kb_path)
    kb.merge(CLUE, [scored("Paris")])

    assert await kb.close(persist=True) is True
    assert kb_path.exists()


def test_record_identity():
    """Test records compare by clue text and structure."""
    stored = SolvedClueRecord(
        clue_text="Capital of France",
        structure_text="[5]",
        clue_uri="http://cluegraph.org/kb#clue-1",
        solution_texts=["Paris"],
    )
    probe = SolvedClueRecord(clue_text="Capital of France", structure_text="[5]")

    assert stored.same_clue(probe)
    assert not stored.add_solution("Paris")
    assert stored.add_solution("Lyons")
