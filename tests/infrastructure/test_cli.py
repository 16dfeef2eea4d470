"""Tests for the click CLI over a temporary JSON store."""

import pytest
from click.testing import CliRunner

from ims.infrastructure.bootstrap import build_container
from ims.infrastructure.cli.main import cli
from ims.infrastructure.config import Settings
from tests.fakes import RecordingAlertSink


@pytest.fixture
def container(tmp_path):
    container = build_container(Settings(data_dir=tmp_path), alerts=RecordingAlertSink())
    return container


def _run(container, *args, actor="admin", input=None):
    return CliRunner().invoke(cli, ["--actor", actor, *args], obj=container, input=input)


@pytest.fixture
def seeded(container):
    assert _run(container, "actor", "add", "admin", "--name", "Ana",
                "--capability", "view", "--capability", "inflow",
                "--capability", "outflow", "--capability", "reconcile").exit_code == 0
    assert _run(container, "actor", "add", "viewer", "--name", "Vera",
                "--capability", "view").exit_code == 0
    result = _run(container, "item", "register", "--name", "Gloves", "--category", "PPE",
                  "--unit", "box", "--quantity", "50", "--minimum", "10")
    assert result.exit_code == 0, result.output
    return container


def _gloves_id(container):
    return container.items.get_by_name("Gloves").id


class TestActorCommands:

    def test_show(self, seeded):
        result = _run(seeded, "actor", "show", "viewer")
        assert "Vera" in result.output
        assert "view" in result.output

    def test_unknown_capability_rejected_by_click(self, container):
        result = _run(container, "actor", "add", "x", "--name", "X", "--capability", "fly")
        assert result.exit_code != 0


class TestItemCommands:

    def test_register_reports_inflow(self, container):
        _run(container, "actor", "add", "admin", "--name", "Ana", "--capability", "inflow")
        result = _run(container, "item", "register", "--name", "Swabs", "--category", "Clinical",
                      "--unit", "un", "--quantity", "100")
        assert "registered" in result.output
        assert "Inflow" in result.output

    def test_list_marks_low_stock(self, seeded):
        gloves = _gloves_id(seeded)
        _run(seeded, "movement", "out", gloves, "45")
        result = _run(seeded, "item", "list", "--low", actor="viewer")
        assert "Gloves" in result.output
        assert "LOW" in result.output

    def test_viewer_cannot_create(self, seeded):
        result = _run(seeded, "item", "create", "--name", "Tape", actor="viewer")
        assert result.exit_code == 1
        assert "[forbidden]" in result.output

    def test_unknown_actor(self, seeded):
        result = _run(seeded, "item", "list", actor="ghost")
        assert result.exit_code == 1
        assert "[not_authenticated]" in result.output


class TestMovementCommands:

    def test_in_out_and_list(self, seeded):
        gloves = _gloves_id(seeded)

        assert _run(seeded, "movement", "in", gloves, "20").exit_code == 0
        out = _run(seeded, "movement", "out", gloves, "65", "--sector", "ER")
        assert "65 issued from 'Gloves'" in out.output

        refused = _run(seeded, "movement", "out", gloves, "10")
        assert refused.exit_code == 1
        assert "[insufficient_stock]" in refused.output

        listing = _run(seeded, "movement", "list", actor="viewer")
        assert listing.output.count("Gloves") == 3


class TestReviewCommands:

    def test_interactive_review(self, seeded):
        # count Gloves as 48, then finish
        result = _run(seeded, "review", "start", "--month", "6", "--year", "2024", input="48\nf\n")

        assert result.exit_code == 0, result.output
        assert "DISCREPANT" in result.output
        assert "0 correct, 1 discrepant" in result.output

        listing = _run(seeded, "review", "list", actor="viewer")
        assert "06/2024" in listing.output

    def test_quit_saves_nothing(self, seeded):
        result = _run(seeded, "review", "start", input="50\nq\n")
        assert "nothing saved" in result.output
        assert seeded.reconciliations.list_all() == []

    def test_finish_without_counts(self, seeded):
        result = _run(seeded, "review", "start", input="f\n")
        assert result.exit_code == 1
        assert "[no_entries_reviewed]" in result.output

    @pytest.mark.parametrize("option, value", [("--month", "13"), ("--year", "3000")])
    def test_bad_period_refused_before_counting(self, seeded, option, value):
        result = _run(seeded, "review", "start", option, value, input="50\nf\n")
        assert result.exit_code == 2
        assert "Count" not in result.output
        assert seeded.reconciliations.list_all() == []

    def test_stats(self, seeded):
        _run(seeded, "review", "start", "--month", "6", "--year", "2024", input="50\nf\n")
        result = _run(seeded, "review", "stats", actor="viewer")
        assert "Accuracy:    100%" in result.output


class TestAuditCommand:

    def test_consistent(self, seeded):
        result = _run(seeded, "audit", actor="viewer")
        assert result.exit_code == 0
        assert "Ledger is consistent." in result.output
