from tests.fakes.fake_store import FakeKnowledgeStore

__all__ = ["FakeKnowledgeStore"]
