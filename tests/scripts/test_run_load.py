from __future__ import annotations

import sys
from pathlib import Path

import pytest

from application.executor.load_runner import RunSummary, StepRecord
from scripts import run_load

PLAN = """
base_url: https://umami.example
pages: [/en]
login: {username: plan-user, password: plan-pass}
"""


@pytest.fixture
def plan_file(tmp_path: Path) -> Path:
    path = tmp_path / "plan.yaml"
    path.write_text(PLAN, encoding="utf-8")
    return path


@pytest.fixture
def no_env_file(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(run_load, "ENV_FILE", tmp_path / "absent.env")
    monkeypatch.delenv("LOAD_EGGS_USER", raising=False)
    monkeypatch.delenv("LOAD_EGGS_PASS", raising=False)


def test_run_load_applies_overrides_and_exits_zero(monkeypatch, capsys, plan_file, no_env_file) -> None:
    # Arrange
    captured = {}

    def fake_run(self, plan):
        captured["plan"] = plan
        return RunSummary(steps=(StepRecord(user=0, iteration=0, name="GET /en", ok=True, elapsed_ms=3),))

    monkeypatch.setattr(run_load.LoadRunner, "run", fake_run)
    monkeypatch.setattr(run_load, "setup_console_logging", lambda level: None)
    monkeypatch.setenv("LOAD_EGGS_PASS", "env-pass")
    monkeypatch.setattr(sys, "argv", ["run_load.py", "--plan", str(plan_file), "--users", "5", "--iterations", "2"])

    # Act
    with pytest.raises(SystemExit) as excinfo:
        run_load.main()

    # Assert
    plan = captured["plan"]
    assert plan.users == 5
    assert plan.iterations == 2
    assert plan.login.username == "plan-user"
    assert plan.login.password == "env-pass"
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "Steps: 1" in out
    assert "Failed: 0" in out


def test_run_load_exits_one_on_failed_step(monkeypatch, capsys, plan_file, no_env_file) -> None:
    # Arrange
    def fake_run(self, plan):
        return RunSummary(
            steps=(
                StepRecord(
                    user=1,
                    iteration=0,
                    name="GET /en",
                    ok=False,
                    elapsed_ms=3,
                    error_message="https://umami.example/en: response status != 200: 500",
                ),
            )
        )

    monkeypatch.setattr(run_load.LoadRunner, "run", fake_run)
    monkeypatch.setattr(sys, "argv", ["run_load.py", "--plan", str(plan_file), "--json-logs"])

    # Act
    with pytest.raises(SystemExit) as excinfo:
        run_load.main()

    # Assert
    assert excinfo.value.code == 1
    assert "user 1 #0 GET /en: https://umami.example/en: response status != 200: 500" in capsys.readouterr().out


def test_run_load_exits_two_on_bad_plan(monkeypatch, capsys, tmp_path: Path, no_env_file) -> None:
    # Arrange
    monkeypatch.setattr(run_load, "setup_console_logging", lambda level: None)
    monkeypatch.setattr(sys, "argv", ["run_load.py", "--plan", str(tmp_path / "missing.yaml")])

    # Act
    with pytest.raises(SystemExit) as excinfo:
        run_load.main()

    # Assert
    assert excinfo.value.code == 2
    assert "ERROR: Plan file not found" in capsys.readouterr().out
