"""CLI tests via click's CliRunner."""
import json

import pytest
from click.testing import CliRunner

from conftest import history_json, opportunity_json
from main import cli

NOW_ISO = "2025-06-01T12:00:00Z"


@pytest.fixture
def files(tmp_path):
    schedule = tmp_path / "schedule.json"
    schedule.write_text(json.dumps([
        opportunity_json(),
        opportunity_json(trackId=51, raceLength=90),
        opportunity_json(seriesId=200, category="oval"),
    ]))
    single = tmp_path / "opportunity.json"
    single.write_text(json.dumps(opportunity_json()))
    history = tmp_path / "history.json"
    history.write_text(json.dumps(history_json()))
    return {"schedule": str(schedule), "single": str(single), "history": str(history), "dir": tmp_path}


@pytest.fixture
def runner():
    return CliRunner()


class TestScoreCommand:
    def test_json_single(self, runner, files):
        result = runner.invoke(cli, [
            "score", files["single"], files["history"], "--mode", "safety_recovery",
            "--now", NOW_ISO, "--json",
        ])
        assert result.exit_code == 0, result.output
        body = json.loads(result.output)
        assert body["seriesId"] == 100
        assert body["score"]["factors"]["safety"] == 91

    def test_json_many(self, runner, files):
        result = runner.invoke(cli, ["score", files["schedule"], files["history"], "--json", "--now", NOW_ISO])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)) == 3

    def test_table_output(self, runner, files):
        result = runner.invoke(cli, ["score", files["single"], files["history"], "--now", NOW_ISO])
        assert result.exit_code == 0, result.output
        assert "Performance" in result.output
        assert "Fatigue Risk" in result.output

    def test_unknown_race_length_is_not_printed_as_nan(self, runner, files):
        single = files["dir"] / "no_length.json"
        single.write_text(json.dumps(opportunity_json(raceLength=None)))
        result = runner.invoke(cli, ["score", str(single), files["history"], "--now", NOW_ISO])
        assert result.exit_code == 0, result.output
        assert "nan" not in result.output

    def test_invalid_mode(self, runner, files):
        result = runner.invoke(cli, ["score", files["single"], files["history"], "--mode", "drift"])
        assert result.exit_code != 0
        assert "Unknown mode" in result.output

    def test_invalid_now(self, runner, files):
        result = runner.invoke(cli, ["score", files["single"], files["history"], "--now", "yesterday"])
        assert result.exit_code != 0

    def test_bad_record_exits_1(self, runner, files):
        bad = files["dir"] / "bad.json"
        bad.write_text(json.dumps({"trackId": 1, "category": "oval"}))
        result = runner.invoke(cli, ["score", str(bad), files["history"]])
        assert result.exit_code == 1
        assert "seriesId" in result.output


class TestRecommendCommand:
    def test_json(self, runner, files):
        result = runner.invoke(cli, [
            "recommend", files["schedule"], files["history"], "--json", "--now", NOW_ISO,
        ])
        assert result.exit_code == 0, result.output
        body = json.loads(result.output)
        assert body["recommendations"][0]["trackId"] == 50
        assert body["metadata"]["total_opportunities"] == 3

    def test_category_and_limit(self, runner, files):
        result = runner.invoke(cli, [
            "recommend", files["schedule"], files["history"],
            "--category", "sports_car", "--max-results", "1", "--json", "--now", NOW_ISO,
        ])
        body = json.loads(result.output)
        assert len(body["recommendations"]) == 1
        assert body["recommendations"][0]["category"] == "sports_car"

    def test_nothing_above_min_score(self, runner, files):
        result = runner.invoke(cli, [
            "recommend", files["schedule"], files["history"], "--min-score", "101",
        ])
        assert result.exit_code == 0, result.output
        assert "No Recommendations" in result.output

    def test_csv_export(self, runner, files):
        csv_path = files["dir"] / "ranked.csv"
        result = runner.invoke(cli, [
            "recommend", files["schedule"], files["history"], "--csv", str(csv_path), "--now", NOW_ISO,
        ])
        assert result.exit_code == 0, result.output
        header = csv_path.read_text().splitlines()[0]
        assert header.startswith("series_id,series_name")

    @pytest.mark.parametrize("limit", ["0", "-3"])
    def test_max_results_must_be_positive(self, runner, files, limit):
        result = runner.invoke(cli, ["recommend", files["schedule"], files["history"], "--max-results", limit])
        assert result.exit_code != 0
        assert "max-results" in result.output

    def test_unknown_race_length_uses_series_average(self, runner, files):
        schedule = files["dir"] / "no_length.json"
        schedule.write_text(json.dumps([opportunity_json(raceLength=None)]))
        result = runner.invoke(cli, ["recommend", str(schedule), files["history"], "--now", NOW_ISO])
        assert result.exit_code == 0, result.output
        assert "nanm" not in result.output

    def test_unknown_category(self, runner, files):
        result = runner.invoke(cli, ["recommend", files["schedule"], files["history"], "--category", "boats"])
        assert result.exit_code != 0


class TestWeightsCommand:
    def test_lists_modes(self, runner):
        result = runner.invoke(cli, ["weights"])
        assert result.exit_code == 0
        assert "safety_recovery" in result.output
        assert "0.30" in result.output


class TestCompareCommand:
    def test_json(self, runner, files):
        result = runner.invoke(cli, [
            "compare", files["schedule"], files["history"], "--json", "--now", NOW_ISO,
        ])
        assert result.exit_code == 0, result.output
        body = json.loads(result.output)
        assert set(body) == {"balanced", "irating_push", "safety_recovery"}
        assert all(len(picks) == 3 for picks in body.values())

    def test_top(self, runner, files):
        result = runner.invoke(cli, [
            "compare", files["schedule"], files["history"], "--top", "1", "--json", "--now", NOW_ISO,
        ])
        assert all(len(picks) == 1 for picks in json.loads(result.output).values())

    def test_table_output(self, runner, files):
        result = runner.invoke(cli, ["compare", files["schedule"], files["history"], "--now", NOW_ISO])
        assert result.exit_code == 0, result.output
        assert "Top Races by Mode" in result.output

    def test_top_must_be_positive(self, runner, files):
        result = runner.invoke(cli, ["compare", files["schedule"], files["history"], "--top", "0"])
        assert result.exit_code != 0
