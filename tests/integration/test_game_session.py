"""
Integration Tests for GameSession
=================================

Purpose
-------
Exercise a fully wired session end to end: YAML configuration from disk,
detection sources, progression, quests, snapshots and reset.

Testing Strategy
----------------
- Real collaborators everywhere; only the clock is faked
- YAML written to tmp_path so tests never depend on the repository config
- Environment overrides applied with monkeypatch and reloaded into Config
"""

from datetime import timedelta

import pytest

from refactor_rpg.core.config.config import Config
from refactor_rpg.domain.models.quest import QuestStatus
from refactor_rpg.domain.models.refactoring import ActionCategory
from refactor_rpg.modules.quest.starter import STARTER_QUEST_IDS
from refactor_rpg.modules.session.context import GameSession


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "gameplay.yaml").write_text(
        "detection:\n  dedup_window_ms: 2000\nprogression:\n  xp_curve:\n    base: 50\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def env_window(monkeypatch):
    """Set DEDUP_WINDOW_MS in the environment for the duration of a test."""

    def _apply(value: str) -> None:
        monkeypatch.setenv("DEDUP_WINDOW_MS", value)
        Config.reload()

    yield _apply
    monkeypatch.undo()
    Config.reload()


# ============================================================================
# CONFIGURATION
# ============================================================================


@pytest.mark.integration
class TestSessionConfiguration:
    """Test how a session resolves its settings."""

    def test_yaml_settings_applied(self, config_dir, clock):
        # Act
        session = GameSession(config_dir=config_dir, clock=clock)
        session.handle("ExtractClass", origin_file="Order.kt")

        # Assert
        assert session.gate.window == timedelta(milliseconds=2000)
        # 15 XP with base 50 is level 1; level 2 starts at floor(50 * 2 ** 1.5) = 141
        assert session.progression.xp_threshold(2) == 141
        assert session.progress().level == 1

    def test_explicit_window_wins(self, config_dir, clock, env_window):
        env_window("900")

        session = GameSession(config_dir=config_dir, clock=clock, dedup_window_ms=100)

        assert session.gate.window == timedelta(milliseconds=100)

    def test_environment_window_beats_yaml(self, config_dir, clock, env_window):
        env_window("900")

        session = GameSession(config_dir=config_dir, clock=clock)

        assert session.gate.window == timedelta(milliseconds=900)

    def test_yaml_window_without_environment(self, config_dir, clock, monkeypatch):
        monkeypatch.delenv("DEDUP_WINDOW_MS", raising=False)
        Config.reload()

        session = GameSession(config_dir=config_dir, clock=clock)

        assert session.gate.window == timedelta(milliseconds=2000)


# ============================================================================
# GAMEPLAY
# ============================================================================


@pytest.mark.integration
class TestSessionGameplay:
    """Test a realistic editing session."""

    def test_mixed_sources_session(self, session, clock):
        # Arrange
        refactoring = session.refactoring_source()
        actions = session.action_source()
        commands = session.command_source()

        # Act
        refactoring.refactoring_done("refactoring.extractMethod", "parseLine", "Parser.kt")
        actions.action_performed("ExtractMethod", file_name="Parser.kt")  # overlap, dropped
        clock.advance(seconds=1)
        actions.action_performed("RenameElement", file_name="Main.java")  # native, skipped
        actions.action_performed("SimplifyBooleanExpression", file_name="Rules.kt")
        clock.advance(seconds=1)
        commands.command_finished("Decompose Conditional")
        clock.advance(seconds=1)
        commands.command_finished("Reformat Code")

        # Assert
        progress = session.progress()
        assert progress.action_count == 4
        assert progress.stats_for(ActionCategory.LOGIC).action_count == 2
        daily = session.quests.get_quest("daily-logic-drill")
        assert daily.objectives[0].current_count == 2
        assert daily.status is QuestStatus.IN_PROGRESS

    def test_save_and_resume(self, session, clock, config_manager, event_bus):
        # Arrange
        for _ in range(3):
            session.handle("ExtractMethod", origin_file="A.kt")
            clock.advance(seconds=1)
        saved = (session.progress_snapshot(), session.quest_snapshot())

        # Act
        resumed = GameSession(config_manager, event_bus, profile_id="resumed", clock=clock)
        resumed.restore(*saved)
        for _ in range(2):
            resumed.handle("ExtractMethod", origin_file="A.kt")
            clock.advance(seconds=1)

        # Assert
        assert resumed.quests.get_quest("extract-expert").status is QuestStatus.COMPLETED
        assert resumed.progress().total_xp == 450

    def test_reset_restores_fresh_profile(self, session, clock, event_bus, mocker):
        # Arrange
        for _ in range(6):
            session.handle("Rename", origin_file="A.kt")
            clock.advance(seconds=1)
        listener = mocker.Mock()
        event_bus.subscribe("progress.changed", listener, identifier="reset-spy")
        quest_listener = mocker.Mock()
        event_bus.subscribe("quest.changed", quest_listener, identifier="reset-quest-spy")

        # Act
        session.reset()

        # Assert
        assert session.progress().total_xp == 0
        assert session.progress().action_count == 0
        assert session.completed_quests() == ()
        assert {q.id for q in session.active_quests()} == set(STARTER_QUEST_IDS)
        assert listener.call_args.args[0]["progress"].total_xp == 0
        published = quest_listener.call_args.args[0]
        assert {q.id for q in published["active"]} == set(STARTER_QUEST_IDS)
        assert published["completed"] == ()
        assert session.handle("Rename", origin_file="A.kt").accepted
