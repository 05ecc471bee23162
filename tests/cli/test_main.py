# Standard library imports
import re

# Third-party imports
import pytest
from typer.testing import CliRunner

# Local application imports
from srscore.cli.main import app, main
from srscore.config import POLICY_ENV_VAR


runner = CliRunner()

NOW = "2024-01-01T10:00:00"


def strip_ansi(text: str) -> str:
    """
    Remove ANSI escape sequences (color and control codes) from text.
    """
    ansi_escape = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")
    return ansi_escape.sub("", text)


def normalize_output(text: str) -> str:
    """
    Strip ANSI codes and table borders, then collapse whitespace runs into single spaces.
    """
    text = strip_ansi(text)
    text = re.sub(r"[─-╿|]", " ", text)
    return re.sub(r"\s+", " ", text).strip()


def invoke(args, **kwargs):
    env = kwargs.pop("env", {})
    env.setdefault(POLICY_ENV_VAR, None)
    return runner.invoke(app, args, env=env, **kwargs)


@pytest.fixture
def three_step_policy(tmp_path):
    policy = tmp_path / "policy.yaml"
    policy.write_text("learning_steps: [1m, 10m, 1h]\neasy_interval: 5\n")
    return policy


# --- grade ---

def test_grade_new_card_good():
    result = invoke(["grade", "good", "--now", NOW])
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "After 'good'" in output
    assert "Learning (step 1)" in output
    assert "2024-01-01T10:01:00+00:00" in output


def test_grade_new_card_easy_graduates():
    result = invoke(["grade", "easy", "--now", NOW])
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "Review" in output
    assert "4 days" in output
    assert "265 (2.65)" in output
    assert "2024-01-05T10:00:00+00:00" in output


def test_grade_review_card_lapse():
    result = invoke(
        ["grade", "again", "--step", "3", "--interval", "10", "--reps", "3", "--now", NOW]
    )
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "Learning (step 2)" in output
    assert "230 (2.30)" in output
    assert "0 / 1" in output


def test_grade_accepts_numeric_rating():
    result = invoke(["grade", "4", "--now", NOW])
    assert result.exit_code == 0
    assert "After 'easy'" in normalize_output(result.stdout)


def test_grade_unknown_token():
    result = invoke(["grade", "meh", "--now", NOW])
    assert result.exit_code == 1
    assert "Invalid grade: 'meh'" in normalize_output(result.stdout)


def test_grade_ease_outside_band():
    result = invoke(["grade", "good", "--ease", "100", "--now", NOW])
    assert result.exit_code == 1
    assert "Invalid ease factor: 100" in normalize_output(result.stdout)


def test_grade_negative_step():
    result = invoke(["grade", "good", "--step", "-1", "--now", NOW])
    assert result.exit_code == 1
    assert "Invalid state" in normalize_output(result.stdout)


def test_grade_bad_timestamp():
    result = invoke(["grade", "good", "--now", "yesterday"])
    assert result.exit_code == 1
    assert "Invalid --now timestamp" in normalize_output(result.stdout)


def test_grade_with_policy_file(three_step_policy):
    result = invoke(
        ["grade", "good", "--step", "2", "--now", NOW, "--policy", str(three_step_policy)]
    )
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "Learning (step 3)" in output
    assert "2024-01-01T11:00:00+00:00" in output


# --- preview ---

def test_preview_new_card():
    result = invoke(["preview"])
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "again 1m" in output
    assert "good 1m" in output
    assert "easy 4d" in output


def test_preview_review_card():
    result = invoke(["preview", "--step", "3", "--interval", "10", "--reps", "3"])
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "again 10m" in output
    assert "hard 2w" in output
    assert "good 4w" in output
    assert "easy 1mo" in output


def test_preview_rejects_graduated_card_without_interval():
    result = invoke(["preview", "--step", "3"])
    assert result.exit_code == 1
    assert "Invalid interval" in normalize_output(result.stdout)


# --- simulate ---

def test_simulate_learning_to_review():
    result = invoke(["simulate", "good", "good", "good", "easy", "--now", NOW])
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "Simulated reviews" in output
    assert "L1" in output
    assert "L2" in output
    assert "265" in output
    assert "3d" in output
    assert "Young" in output


def test_simulate_rejects_unknown_grade():
    result = invoke(["simulate", "good", "nope"])
    assert result.exit_code == 1
    assert "Invalid grade: 'nope'" in normalize_output(result.stdout)


# --- policy ---

def test_policy_defaults():
    result = invoke(["policy"])
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "learning_steps 1m, 10m" in output
    assert "hard_multiplier 1.2" in output
    assert "max_ease 300" in output


def test_policy_from_env_var(three_step_policy):
    result = invoke(["policy"], env={POLICY_ENV_VAR: str(three_step_policy)})
    output = normalize_output(result.stdout)
    assert result.exit_code == 0
    assert "learning_steps 1m, 10m, 1h" in output
    assert "easy_interval 5" in output


def test_policy_invalid_file(tmp_path):
    policy = tmp_path / "policy.yaml"
    policy.write_text("min_ease: 999\n")
    result = invoke(["policy", "--policy", str(policy)])
    assert result.exit_code == 1
    assert "Invalid policy" in normalize_output(result.stdout)


def test_policy_missing_file(tmp_path):
    result = invoke(["policy", "--policy", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1
    assert "Could not read policy file" in normalize_output(result.stdout)


# --- entry point ---

def test_main_reports_unexpected_errors(monkeypatch, capsys):
    def boom():
        raise RuntimeError("kaboom")

    monkeypatch.setattr("srscore.cli.main.app", boom)
    with pytest.raises(SystemExit) as exc_info:
        main()
    assert exc_info.value.code == 1
    assert "UNEXPECTED ERROR: kaboom" in capsys.readouterr().out
