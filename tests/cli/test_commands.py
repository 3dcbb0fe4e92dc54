"""Integration tests for CLI commands via typer.testing.CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from lifesim.assistant.service import AssistantService
from lifesim.cli import assistant_cmd
from lifesim.cli.main import app
from lifesim.core.store import LifeStore

from ..assistant.fakes import FakeCompletionClient

runner = CliRunner()


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    """Empty working directory."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def initialized(project_dir):
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    return project_dir


def invoke_json(args):
    result = runner.invoke(app, [*args, "--format", "json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


@pytest.fixture
def fake_assistant(monkeypatch):
    """Route assistant commands to a canned completion."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    client = FakeCompletionClient()
    monkeypatch.setattr(
        assistant_cmd, "service_factory", lambda: AssistantService(client_factory=lambda key: client)
    )
    return client


class TestInit:
    def test_init(self, project_dir):
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert (project_dir / ".life-sim" / "goals.json").is_file()

    def test_init_twice_fails(self, initialized):
        assert runner.invoke(app, ["init"]).exit_code == 1

    def test_init_uses_home_env(self, project_dir, tmp_path, monkeypatch):
        home = tmp_path / "data"
        monkeypatch.setenv("LIFE_SIM_HOME", str(home))
        assert runner.invoke(app, ["init"]).exit_code == 0
        assert (home / ".life-sim" / "tasks.json").is_file()
        assert not (project_dir / ".life-sim").exists()

    def test_commands_need_store(self, project_dir):
        result = runner.invoke(app, ["goal", "list"])
        assert result.exit_code == 1

    def test_found_from_subdirectory(self, initialized, monkeypatch):
        sub = initialized / "nested" / "deeper"
        sub.mkdir(parents=True)
        monkeypatch.chdir(sub)
        assert runner.invoke(app, ["goal", "list", "--format", "json"]).exit_code == 0


class TestStatus:
    def test_status_json(self, initialized):
        data = invoke_json(["status"])
        assert data["goal_count"] == 0
        assert data["avatar"] in ("IDLE", "RESTING")

    def test_status_text(self, initialized):
        result = runner.invoke(app, ["status", "--format", "text"])
        assert result.exit_code == 0
        assert "Focus today" in result.output


class TestGoals:
    def test_add_list_show(self, initialized):
        goal = invoke_json(["goal", "add", "Learn Spanish", "-d", "B1 by summer", "-t", "2025-06-01"])
        assert goal["targetDate"] == "2025-06-01"
        goals = invoke_json(["goal", "list"])
        assert [g["title"] for g in goals] == ["Learn Spanish"]
        shown = invoke_json(["goal", "show", goal["id"][:8]])
        assert shown["goal"]["id"] == goal["id"]
        assert shown["tasks"] == []

    def test_bad_date(self, initialized):
        result = runner.invoke(app, ["goal", "add", "X", "--target-date", "soon"])
        assert result.exit_code == 1

    def test_update_inactive(self, initialized):
        goal = invoke_json(["goal", "add", "Old"])
        updated = invoke_json(["goal", "update", goal["id"], "--title", "New", "--inactive"])
        assert updated["title"] == "New"
        assert updated["isActive"] is False
        assert invoke_json(["goal", "list", "--active"]) == []

    def test_rm_reports_linked_tasks(self, initialized):
        goal = invoke_json(["goal", "add", "Doomed"])
        invoke_json(["task", "add", "Child", "--goal", goal["id"]])
        data = invoke_json(["goal", "rm", goal["id"]])
        assert data["linked_tasks"] == 1

    def test_unknown_goal(self, initialized):
        assert runner.invoke(app, ["goal", "show", "nope"]).exit_code == 1


class TestTasks:
    def test_add_defaults(self, initialized):
        task = invoke_json(["task", "add", "Laundry"])
        assert task["status"] == "PLANNED"
        assert task["type"] == "SIDE"

    def test_add_type_case_insensitive(self, initialized):
        task = invoke_json(["task", "add", "Stretch", "--type", "daily"])
        assert task["type"] == "DAILY"

    def test_add_bad_type(self, initialized):
        assert runner.invoke(app, ["task", "add", "X", "--type", "epic"]).exit_code == 1

    def test_default_type_from_config(self, initialized):
        assert runner.invoke(app, ["config", "set", "default_task_type", "MAINTENANCE"]).exit_code == 0
        assert invoke_json(["task", "add", "Fix sink"])["type"] == "MAINTENANCE"

    def test_status_done_and_list_filter(self, initialized):
        task = invoke_json(["task", "add", "Ship"])
        done = invoke_json(["task", "status", task["id"], "done"])
        assert done["status"] == "DONE"
        assert "completedAt" in done
        assert [t["id"] for t in invoke_json(["task", "list", "--status", "DONE"])] == [task["id"]]
        assert invoke_json(["task", "list", "--active"]) == []

    def test_link_and_unlink(self, initialized):
        goal = invoke_json(["goal", "add", "Health"])
        task = invoke_json(["task", "add", "Walk"])
        assert invoke_json(["task", "link", task["id"], goal["id"]])["goalArcId"] == goal["id"]
        assert "goalArcId" not in invoke_json(["task", "link", task["id"]])

    def test_rm(self, initialized):
        task = invoke_json(["task", "add", "Gone"])
        invoke_json(["task", "rm", task["id"]])
        assert invoke_json(["task", "list"]) == []


class TestFocus:
    def test_start_switch_done(self, initialized):
        a = invoke_json(["task", "add", "A"])
        b = invoke_json(["task", "add", "B"])
        invoke_json(["focus", "start", a["id"]])
        invoke_json(["focus", "start", b["id"]])
        tasks = {t["id"]: t for t in invoke_json(["task", "list"])}
        assert tasks[a["id"]]["status"] == "PLANNED"
        assert tasks[b["id"]]["status"] == "IN_PROGRESS"

        done = invoke_json(["focus", "done", b["id"]])
        assert done["status"] == "DONE"
        assert invoke_json(["focus", "stop"]) == {"session": None}

    def test_pause(self, initialized):
        task = invoke_json(["task", "add", "P"])
        invoke_json(["focus", "start", task["id"]])
        data = invoke_json(["focus", "pause", task["id"]])
        assert data["session"]["taskId"] == task["id"]

    def test_history(self, initialized):
        task = invoke_json(["task", "add", "H"])
        invoke_json(["focus", "start", task["id"]])
        invoke_json(["focus", "stop"])
        days = invoke_json(["history"])
        assert len(days) == 1
        assert days[0]["tasksCompleted"] == 1


class TestConfig:
    def test_set_get_list(self, initialized):
        assert runner.invoke(app, ["config", "set", "model", "gpt-4o"]).exit_code == 0
        assert invoke_json(["config", "get", "model"]) == {"key": "model", "value": "gpt-4o"}
        assert invoke_json(["config", "list"]) == {"model": "gpt-4o"}

    def test_unknown_key(self, initialized):
        assert runner.invoke(app, ["config", "set", "color", "blue"]).exit_code == 1

    def test_bad_task_type(self, initialized):
        assert runner.invoke(app, ["config", "set", "default_task_type", "EPIC"]).exit_code == 1


class TestAssistant:
    def test_ask_applies_with_yes(self, initialized, fake_assistant):
        fake_assistant.content = json.dumps({
            "assistantMessage": "Created your goal",
            "operations": [{"type": "CREATE_GOAL", "payload": {"title": "Learn Spanish"}}],
        })
        result = runner.invoke(app, ["assistant", "ask", "I want to learn Spanish", "--yes"])
        assert result.exit_code == 0, result.output
        assert "Created your goal" in result.output
        assert "Created 1 goal" in result.output
        assert [g.title for g in LifeStore.at(initialized).goals.list()] == ["Learn Spanish"]

    def test_ask_declined(self, initialized, fake_assistant):
        fake_assistant.content = json.dumps({
            "assistantMessage": "Shall I?",
            "operations": [{"type": "CREATE_GOAL", "payload": {"title": "Maybe"}}],
        })
        result = runner.invoke(app, ["assistant", "ask", "hmm"], input="n\n")
        assert result.exit_code == 0
        assert LifeStore.at(initialized).goals.list() == []

    def test_ask_sends_store_context(self, initialized, fake_assistant):
        task = invoke_json(["task", "add", "Existing"])
        fake_assistant.content = json.dumps({
            "assistantMessage": "ok",
            "operations": [{"type": "DELETE_TASK", "payload": {"taskId": task["id"]}}],
        })
        data = invoke_json(["assistant", "ask", "delete it", "--yes"])
        assert data["results"] == [{"success": True, "message": 'Deleted task "Existing"'}]
        assert task["id"] in fake_assistant.calls[0]["messages"][1]["content"]

    def test_ask_without_key(self, initialized, fake_assistant, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY")
        result = runner.invoke(app, ["assistant", "ask", "hi"])
        assert result.exit_code == 1

    def test_import_file(self, initialized, fake_assistant, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("Learn Spanish: download an app")
        fake_assistant.content = json.dumps({
            "summary": "1 goal, 1 task",
            "operations": [
                {"type": "CREATE_GOAL", "payload": {"title": "Learn Spanish"}},
                {"type": "CREATE_TASK", "payload": {"title": "Download app", "goalArcId": "TEMP_GOAL_1"}},
            ],
        })
        data = invoke_json(["assistant", "import", str(notes), "--yes"])
        assert data["result"] == {"goalsCreated": 1, "tasksCreated": 1, "errors": []}
        store = LifeStore.at(initialized)
        assert store.tasks.list()[0].goal_arc_id == store.goals.list()[0].id
