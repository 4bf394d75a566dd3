"""Tests for reading camelCase records and writing scores back out."""
import json
import math
from datetime import timezone

import pytest

from conftest import history_json, opportunity_json
from raceselect import loader
from raceselect.models import Category, LicenseLevel, Mode, ScoredOpportunity
from raceselect.analysis import engine


class TestOpportunityFromDict:
    def test_camel_case_record(self):
        opp = loader.opportunity_from_dict(opportunity_json())
        assert opp.series_id == 100
        assert opp.track_name == "Laguna Seca"
        assert opp.license_required is LicenseLevel.ROOKIE
        assert opp.category is Category.SPORTS_CAR
        assert opp.race_length == 20
        assert len(opp.time_slots) == 12
        assert opp.global_stats.attrition_rate == 10

    def test_snake_case_keys_accepted(self):
        record = {
            "series_id": 5, "track_id": 6, "category": "oval",
            "race_length": 30, "global_stats": {"avg_incidents_per_race": 3.0},
        }
        opp = loader.opportunity_from_dict(record)
        assert (opp.series_id, opp.track_id) == (5, 6)
        assert opp.global_stats.avg_incidents_per_race == 3.0

    def test_missing_numbers_become_nan(self):
        opp = loader.opportunity_from_dict(opportunity_json(raceLength=None, globalStats={}))
        assert math.isnan(opp.race_length)
        assert math.isnan(opp.global_stats.avg_incidents_per_race)

    def test_malformed_numbers_become_nan(self):
        opp = loader.opportunity_from_dict(opportunity_json(raceLength="long"))
        assert math.isnan(opp.race_length)

    @pytest.mark.parametrize("missing", ["seriesId", "trackId", "category"])
    def test_missing_identifier_raises(self, missing):
        record = opportunity_json()
        del record[missing]
        with pytest.raises(loader.OpportunityDataError, match=missing):
            loader.opportunity_from_dict(record)

    @pytest.mark.parametrize("key, value", [("seriesId", "abc"), ("trackId", [1]), ("seriesId", float("nan"))])
    def test_non_integer_identifier_raises(self, key, value):
        with pytest.raises(loader.OpportunityDataError, match=key):
            loader.opportunity_from_dict(opportunity_json(**{key: value}))

    def test_unknown_category_raises(self):
        with pytest.raises(loader.OpportunityDataError, match="unknown category"):
            loader.opportunity_from_dict(opportunity_json(category="karting"))


class TestHistoryFromDict:
    def test_full_record(self):
        history = loader.history_from_dict(history_json())
        assert history.user_id == "user-1"
        assert history.overall_stats.total_races == 40
        record = history.series_track_history[0]
        assert record.race_count == 10
        assert record.last_race_date.tzinfo is not None
        assert record.last_race_date.astimezone(timezone.utc).day == 29
        lc = history.license_classes[0]
        assert lc.level is LicenseLevel.B
        assert lc.irating == 2100

    def test_empty_history(self):
        history = loader.history_from_dict({"userId": "new"})
        assert history.series_track_history == []
        assert history.license_classes == []
        assert history.overall_stats.total_races == 0

    def test_non_integer_record_identifier_raises(self):
        data = history_json()
        data["seriesTrackHistory"][0]["trackId"] = "laguna"
        with pytest.raises(loader.OpportunityDataError, match="trackId"):
            loader.history_from_dict(data)

    def test_unparseable_date_is_unknown(self):
        data = history_json()
        data["seriesTrackHistory"][0]["lastRaceDate"] = "not a date"
        history = loader.history_from_dict(data)
        assert history.series_track_history[0].last_race_date is None


class TestFiles:
    def test_single_object_or_list(self, tmp_path):
        single = tmp_path / "one.json"
        single.write_text(json.dumps(opportunity_json()))
        many = tmp_path / "many.json"
        many.write_text(json.dumps([opportunity_json(), opportunity_json(trackId=51)]))

        assert len(loader.load_opportunities(str(single))) == 1
        assert [o.track_id for o in loader.load_opportunities(str(many))] == [50, 51]

    def test_load_history(self, tmp_path):
        path = tmp_path / "history.json"
        path.write_text(json.dumps(history_json()))
        assert loader.load_history(str(path)).user_id == "user-1"


class TestOutput:
    def test_score_to_dict_shape(self, clock):
        opp = loader.opportunity_from_dict(opportunity_json())
        history = loader.history_from_dict(history_json())
        out = loader.score_to_dict(engine.score(opp, history, Mode.BALANCED, clock=clock))

        assert set(out) == {
            "overall", "factors", "iRatingRisk", "safetyRatingRisk",
            "reasoning", "dataConfidence", "priorityScore",
        }
        assert set(out["factors"]) == {
            "performance", "safety", "consistency", "predictability",
            "familiarity", "fatigueRisk", "attritionRisk", "timeVolatility",
        }
        assert out["dataConfidence"]["globalStats"] == "high"
        json.dumps(out)

    def test_breakdown_included_on_request(self, clock):
        opp = loader.opportunity_from_dict(opportunity_json())
        history = loader.history_from_dict(history_json())
        out = loader.score_to_dict(
            engine.score(opp, history, Mode.BALANCED, clock=clock), include_breakdown=True,
        )
        assert [b["name"] for b in out["breakdown"]][0] == "performance"
        assert len(out["breakdown"]) == 8

    def test_scored_to_dict_hides_nan_length(self, clock):
        opp = loader.opportunity_from_dict(opportunity_json(raceLength=None))
        history = loader.history_from_dict(history_json())
        scored = ScoredOpportunity(opp, engine.score(opp, history, Mode.BALANCED, clock=clock))
        out = loader.scored_to_dict(scored)
        assert out["raceLength"] is None
        assert out["seriesName"] == "Global Mazda MX-5 Cup"
