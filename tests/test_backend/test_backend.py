"""
Tests for discovery, the filesystem backend and per-user settings.

Covers:
- parse_description: front matter, description line, fallback, default
- discover: both roots, auxiliary files, commands, sorting
- ProjectBackend: config seeding/round-trip, relocation, delete, file access
- settings: load/save under a patched HOME
"""

import json
from pathlib import Path

import pytest

from skillboard.config.schema import CategoryConfig
from skillboard.core.engine import CurationEngine
from skillboard.settings import load_settings, set_project_path, settings_path
from skillboard.units.backend import BackendError, ProjectBackend, RelocationError
from skillboard.units.discovery import NO_DESCRIPTION, discover, parse_description
from skillboard.units.models import UnitKind


def _make_skill(root: Path, name: str, body: str = "", files: tuple[str, ...] = ()) -> Path:
    skill_dir = root / name
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text(body or f"---\nname: {name}\ndescription: {name} helper\n---\n\nBody.")
    for f in files:
        (skill_dir / f).write_text("aux")
    return skill_dir


@pytest.fixture
def project(tmp_path: Path) -> Path:
    claude = tmp_path / ".claude"
    _make_skill(claude / "skills", "pdf", files=("forms.md",))
    _make_skill(claude / "skills", "docx")
    (claude / "skills" / "docx" / "scripts").mkdir()
    _make_skill(claude / "disabled-skills", "xlsx")
    (claude / "commands").mkdir(parents=True)
    (claude / "commands" / "commit.md").write_text("description: Write a commit message\n")
    (claude / "disabled-commands").mkdir(parents=True)
    (claude / "disabled-commands" / "review.md").write_text("# Review\nReview the diff.\n")
    return tmp_path


@pytest.fixture
def backend(project: Path) -> ProjectBackend:
    return ProjectBackend(project)


# ── Tests: parse_description ─────────────────────────────────────────


class TestParseDescription:
    def test_front_matter(self):
        assert parse_description("---\nname: x\ndescription: Fill PDF forms\n---\nBody") == "Fill PDF forms"

    def test_description_line(self):
        assert parse_description("# Title\ndescription: \"Quoted\"\n") == "Quoted"

    def test_first_content_line(self):
        assert parse_description("# Title\n\n---\nFirst real line\nSecond") == "First real line"

    def test_fallback_truncated(self):
        assert parse_description("x" * 150) == "x" * 100

    def test_empty(self):
        assert parse_description("") == NO_DESCRIPTION
        assert parse_description("# Only a heading\n") == NO_DESCRIPTION


# ── Tests: discovery ─────────────────────────────────────────────────


class TestDiscovery:
    def test_skills_from_both_roots(self, project: Path):
        claude = project / ".claude"
        units = discover(claude / "skills", claude / "disabled-skills", UnitKind.SKILL)
        assert [(u.name, u.enabled) for u in units] == [("docx", True), ("pdf", True), ("xlsx", False)]
        assert units[1].description == "pdf helper"

    def test_auxiliary_files_directories_first(self, project: Path):
        claude = project / ".claude"
        (claude / "skills" / "docx" / "a.md").write_text("aux")
        docx = discover(claude / "skills", claude / "disabled-skills", UnitKind.SKILL)[0]
        assert [(f.name, f.is_directory) for f in docx.files] == [("scripts", True), ("a.md", False)]

    def test_directory_without_skill_md_ignored(self, project: Path):
        claude = project / ".claude"
        (claude / "skills" / "empty").mkdir()
        names = [u.name for u in discover(claude / "skills", claude / "disabled-skills", UnitKind.SKILL)]
        assert "empty" not in names

    def test_commands(self, project: Path):
        claude = project / ".claude"
        (claude / "commands" / "notes.txt").write_text("ignored")
        units = discover(claude / "commands", claude / "disabled-commands", UnitKind.COMMAND)
        assert [(u.name, u.enabled, u.description) for u in units] == [
            ("commit", True, "Write a commit message"),
            ("review", False, "Review the diff."),
        ]
        assert all(u.files == () for u in units)

    def test_missing_roots(self, tmp_path: Path):
        assert discover(tmp_path / "a", tmp_path / "b", UnitKind.SKILL) == []


# ── Tests: config persistence ────────────────────────────────────────


class TestConfig:
    def test_seeds_default_when_missing(self, backend: ProjectBackend):
        config = backend.load_config()
        assert config.categories == {"Uncategorized": []}
        assert config.command_categories == {"Uncategorized": []}
        data = json.loads(backend.config_path.read_text())
        assert data["categories"] == {"Uncategorized": []}
        assert data["commandCategories"] == {"Uncategorized": []}

    def test_seeds_default_when_broken(self, backend: ProjectBackend):
        backend.config_path.write_text("{not json")
        assert backend.load_config().categories == {"Uncategorized": []}

    def test_custom_default_category(self, project: Path):
        assert ProjectBackend(project, default_category="Inbox").load_config().categories == {"Inbox": []}

    def test_reads_camel_case_and_ignores_unknown_keys(self, backend: ProjectBackend):
        backend.config_path.write_text(json.dumps({
            "categories": {"B": ["pdf"], "A": []},
            "categoryOrder": ["A", "B"],
            "loadSlashCommands": False,
            "someFutureKey": 1,
        }))
        config = backend.load_config()
        assert list(config.categories) == ["B", "A"]
        assert config.category_order == ["A", "B"]
        assert config.load_slash_commands is False
        assert config.command_categories == {}

    def test_null_fields(self, backend: ProjectBackend):
        backend.config_path.write_text(json.dumps({"categories": None, "categoryOrder": None}))
        config = backend.load_config()
        assert config.categories == {}
        assert config.category_order == []

    def test_save_round_trip(self, backend: ProjectBackend):
        config = CategoryConfig(categories={"Z": ["a"], "A": []}, category_order=["Z", "A"])
        backend.save_config(config)
        assert backend.load_config() == config

    def test_no_project(self):
        with pytest.raises(BackendError, match="Project path not set"):
            ProjectBackend(None).load_units()


# ── Tests: relocation and delete ─────────────────────────────────────


class TestRelocation:
    def test_disable_skill(self, backend: ProjectBackend, project: Path):
        backend.relocate_unit("pdf", False)
        assert (project / ".claude" / "disabled-skills" / "pdf" / "forms.md").exists()
        assert not (project / ".claude" / "skills" / "pdf").exists()

    def test_enable_command(self, backend: ProjectBackend, project: Path):
        backend.relocate_unit("review", True, UnitKind.COMMAND)
        assert (project / ".claude" / "commands" / "review.md").exists()

    def test_missing_source_is_noop(self, backend: ProjectBackend):
        backend.relocate_unit("pdf", True)

    def test_creates_missing_roots(self, tmp_path: Path):
        _make_skill(tmp_path / ".claude" / "skills", "solo")
        ProjectBackend(tmp_path).relocate_unit("solo", False)
        assert (tmp_path / ".claude" / "disabled-skills" / "solo" / "SKILL.md").exists()

    def test_target_exists(self, backend: ProjectBackend, project: Path):
        _make_skill(project / ".claude" / "disabled-skills", "pdf")
        with pytest.raises(RelocationError, match="Failed to move 'pdf'"):
            backend.relocate_unit("pdf", False)

    def test_delete_skill(self, backend: ProjectBackend, project: Path):
        backend.delete_unit("xlsx")
        assert not (project / ".claude" / "disabled-skills" / "xlsx").exists()

    def test_delete_command(self, backend: ProjectBackend, project: Path):
        backend.delete_unit("commit", UnitKind.COMMAND)
        assert not (project / ".claude" / "commands" / "commit.md").exists()

    def test_delete_missing(self, backend: ProjectBackend):
        with pytest.raises(BackendError, match="not found"):
            backend.delete_unit("nope")


# ── Tests: auxiliary files ───────────────────────────────────────────


class TestFiles:
    def test_read_write(self, backend: ProjectBackend, project: Path):
        path = str(project / ".claude" / "skills" / "pdf" / "forms.md")
        backend.write_file(path, "updated")
        assert backend.read_file(path) == "updated"

    def test_read_missing(self, backend: ProjectBackend, project: Path):
        with pytest.raises(BackendError, match="Failed to read file"):
            backend.read_file(str(project / "missing.md"))

    def test_list_directory(self, backend: ProjectBackend, project: Path):
        entries = backend.list_directory(str(project / ".claude" / "skills" / "docx"))
        assert [e.name for e in entries] == ["scripts", "SKILL.md"]

    def test_list_not_a_directory(self, backend: ProjectBackend, project: Path):
        with pytest.raises(BackendError, match="Not a directory"):
            backend.list_directory(str(project / "nope"))


# ── Tests: engine over the real filesystem ───────────────────────────


class TestEngineOnDisk:
    def test_toggle_then_reload_agrees(self, backend: ProjectBackend):
        with CurationEngine(backend) as engine:
            engine.reload()
            engine.toggle_unit("pdf")
            local = engine.get_unit("pdf")
            engine.reload()
            assert engine.get_unit("pdf") == local

    def test_layout_persisted(self, backend: ProjectBackend):
        with CurationEngine(backend) as engine:
            engine.reload()
            engine.add_category("Docs")
            engine.move_unit_to_category("pdf", "Docs")
        data = json.loads(backend.config_path.read_text())
        assert data["categories"]["Docs"] == ["pdf"]
        assert data["categoryOrder"] == ["Uncategorized", "Docs"]


# ── Tests: settings ──────────────────────────────────────────────────


class TestSettings:
    @pytest.fixture(autouse=True)
    def home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        monkeypatch.setenv("HOME", str(tmp_path))
        return tmp_path

    def test_defaults_when_missing(self):
        assert load_settings().project_path is None

    def test_set_project_path(self, home: Path):
        project = home / "work"
        project.mkdir()
        set_project_path(project)
        assert settings_path() == home / ".skillboard" / "settings.json"
        assert load_settings().project_path == str(project.resolve())

    def test_broken_file(self, home: Path):
        settings_path().parent.mkdir()
        settings_path().write_text("[]")
        assert load_settings().project_path is None
