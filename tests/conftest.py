"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.curriculum.loader import HierarchyLoader  # noqa: E402
from src.curriculum.store import MemoryResourceStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (API over a content tree)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# ========================================
# Content builders
# ========================================


def build_store(domains, definitions=None, exam="Test Exam", extra_guideline_domains=()):
    """
    Build a MemoryResourceStore from a compact description.

    ``domains`` is a list of dicts:
        {"id": "d1", "title": "Domain 1", "order": 1,
         "topics": [{"id": "t1", "title": "Topic 1",
                     "pages": [{"id": "p1", "title": "Page 1", "blocks": [...]}],
                     "quiz": {"questions": [...]} or None}]}
    """
    store = MemoryResourceStore()
    store.put(("definitions",), {"definitions": definitions or {}})

    guideline_domains = []
    for domain in domains:
        entry = {"id": domain["id"], "title": domain["title"]}
        if "order" in domain:
            entry["order"] = domain["order"]
        guideline_domains.append(entry)

        store.put(
            ("domains", domain["id"], "outline"),
            {
                "domain": domain["title"],
                "topics": [{"id": t["id"], "title": t["title"]} for t in domain.get("topics", [])],
            },
        )
        for topic in domain.get("topics", []):
            pages = topic.get("pages", [])
            store.put(
                ("domains", domain["id"], topic["id"], "outline"),
                {"pages": [{"id": p["id"], "title": p["title"]} for p in pages]},
            )
            for page in pages:
                store.put(
                    ("domains", domain["id"], topic["id"], page["id"], "content"),
                    {"blocks": page.get("blocks", [{"type": "paragraph", "text": page["title"]}])},
                )
            if topic.get("quiz") is not None:
                store.put(("domains", domain["id"], topic["id"], "quiz"), topic["quiz"])

    guideline_domains.extend(extra_guideline_domains)
    store.put(
        ("guideline",),
        {
            "exam": exam,
            "description": "Test description",
            "studyTips": ["Tip one"],
            "domains": guideline_domains,
        },
    )
    return store


def write_tree(root: Path, store: MemoryResourceStore) -> Path:
    """Write a MemoryResourceStore out in the on-disk content layout."""
    from src.curriculum.store import FileResourceStore

    files = FileResourceStore(root)
    for path in store.resources:
        target = files.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(store.read(path), encoding="utf-8")
    return root


def question(text="Q?", options=("A", "B"), correct=0, explanation=None):
    data = {"question": text, "options": list(options), "correct": correct}
    if explanation is not None:
        data["explanation"] = explanation
    return data


# ========================================
# Fixtures
# ========================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def make_store():
    """Factory fixture for build_store."""
    return build_store


@pytest.fixture
def make_question():
    """Factory fixture for raw question dicts."""
    return question


@pytest.fixture
def chain_store():
    """
    Two domains: domain 0 has one topic with two pages and a one-question
    quiz; domain 1 has one topic with one page and no quiz.
    """
    return build_store(
        [
            {
                "id": "d0",
                "title": "Domain Zero",
                "order": 1,
                "topics": [
                    {
                        "id": "t0",
                        "title": "Topic Zero",
                        "pages": [{"id": "p0", "title": "Page A"}, {"id": "p1", "title": "Page B"}],
                        "quiz": {"questions": [question("Pick A", ("A", "B"), 0)]},
                    }
                ],
            },
            {
                "id": "d1",
                "title": "Domain One",
                "order": 2,
                "topics": [{"id": "t0", "title": "Topic One", "pages": [{"id": "p0", "title": "Page C"}]}],
            },
        ],
        definitions={"access control": "Limits access.", "control": "A safeguard."},
    )


@pytest.fixture
def chain_curriculum(chain_store):
    return HierarchyLoader(chain_store).load()


@pytest.fixture
def two_question_curriculum():
    """One topic, one page, a two-question quiz."""
    store = build_store(
        [
            {
                "id": "d0",
                "title": "Domain",
                "topics": [
                    {
                        "id": "t0",
                        "title": "Topic",
                        "pages": [{"id": "p0", "title": "Only page"}],
                        "quiz": {
                            "questions": [
                                question("First", ("yes", "no"), 0),
                                question("Second", ("yes", "no"), 1, explanation="Because."),
                            ]
                        },
                    }
                ],
            }
        ]
    )
    return HierarchyLoader(store).load()


@pytest.fixture
def content_dir(tmp_path, chain_store):
    """The chain curriculum written to disk."""
    return write_tree(tmp_path / "data", chain_store)


@pytest.fixture
def isolated_settings(monkeypatch, tmp_path):
    """Point settings at temp state and clear the settings cache around the test."""
    from config import get_settings

    monkeypatch.setenv("STATE_FILE", str(tmp_path / "state" / "state.json"))
    monkeypatch.setenv("QUIZ_ADVANCE_DELAY_SECONDS", "0")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()

