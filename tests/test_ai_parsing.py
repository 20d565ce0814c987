"""Unit tests for parsing the refinement response."""

import pytest

from subsidy_matcher.ai.parsing import extract_first_json, parse_refinement_response
from subsidy_matcher.core.exceptions import ParsingError
from subsidy_matcher.matching.schemas import AIFailure, CompactBatch, CompactCandidate


@pytest.fixture
def batch():
    return CompactBatch(items=[
        CompactCandidate(i=0, id="sub-a", t="Aide A", r="Occitanie", p=60),
        CompactCandidate(i=1, id="sub-b", t="Aide B", r="National", p=40),
    ])


class TestExtractFirstJson:
    """Tests for locating JSON inside model output."""

    def test_plain_object(self):
        """Test a bare JSON object."""
        assert extract_first_json('{"matches": []}') == {"matches": []}

    def test_code_fence(self):
        """Test JSON wrapped in prose and a code fence."""
        text = 'Voici le résultat:\n```json\n{"matches": [{"i": 0}]}\n```'
        assert extract_first_json(text) == {"matches": [{"i": 0}]}

    def test_skips_broken_candidates(self):
        """Test the first well-formed value is used."""
        assert extract_first_json("score {pas du json} puis [1, 2]") == [1, 2]

    def test_no_json(self):
        """Test text without JSON raises ParsingError."""
        with pytest.raises(ParsingError):
            extract_first_json("Je ne peux pas répondre.")


class TestParseRefinementResponse:
    """Tests for mapping entries onto the sent batch."""

    def test_adjustment_applied_to_pre_score(self, batch):
        """Test score = p + adj when no score is given."""
        result = parse_refinement_response('{"matches":[{"i":0,"adj":10,"reasons":["Bon secteur"]}]}', batch)

        assert len(result) == 1
        assert result[0].subsidy_id == "sub-a"
        assert result[0].score == 70
        assert result[0].reasons == ["Bon secteur"]

    def test_explicit_score_wins(self, batch):
        """Test an explicit score is used as is."""
        result = parse_refinement_response('{"matches":[{"i":1,"score":88,"adj":-5}]}', batch)
        assert result[0].score == 88

    def test_scores_are_clamped(self, batch):
        """Test scores outside 0-100 are clamped."""
        text = '{"matches":[{"i":0,"adj":80},{"i":1,"score":-5}]}'
        assert [e.score for e in parse_refinement_response(text, batch)] == [100, 0]

    def test_long_key_names(self, batch):
        """Test the long key variants are accepted."""
        text = (
            '{"matches":[{"subsidy_index":1,"match_score":77,"match_reasons":["Région"],'
            '"matching_criteria":["Taille"],"missing_criteria":["CA"],"success_probability":55}]}'
        )
        evaluation = parse_refinement_response(text, batch)[0]

        assert evaluation.subsidy_id == "sub-b"
        assert evaluation.score == 77
        assert evaluation.success_probability == 55
        assert evaluation.matching_criteria == ["Taille"]
        assert evaluation.missing_criteria == ["CA"]

    def test_resolution_by_id(self, batch):
        """Test entries may reference the candidate id."""
        result = parse_refinement_response('{"matches":[{"id":"sub-b","score":50}]}', batch)
        assert result[0].subsidy_id == "sub-b"

    def test_bare_array(self, batch):
        """Test a bare array is read as the matches list."""
        result = parse_refinement_response('[{"i":0,"score":61}]', batch)
        assert result[0].score == 61

    def test_unknown_entries_are_dropped(self, batch):
        """Test entries outside the sent batch are ignored."""
        text = '{"matches":[{"i":5,"score":90},{"id":"sub-zzz","score":90},{"i":0,"score":65}]}'
        result = parse_refinement_response(text, batch)
        assert [e.subsidy_id for e in result] == ["sub-a"]

    def test_duplicates_keep_first(self, batch):
        """Test a candidate is evaluated at most once."""
        text = '{"matches":[{"i":0,"score":65},{"i":0,"score":10}]}'
        result = parse_refinement_response(text, batch)
        assert [e.score for e in result] == [65]

    def test_malformed_entries_are_dropped(self, batch):
        """Test non-object and invalid entries are skipped."""
        text = '{"matches":[1,"x",{"i":"abc"},{"i":1,"score":45}]}'
        assert [e.subsidy_id for e in parse_refinement_response(text, batch)] == ["sub-b"]

    def test_string_reasons(self, batch):
        """Test a single reason string becomes a list."""
        result = parse_refinement_response('{"matches":[{"i":0,"reasons":"Très pertinent"}]}', batch)
        assert result[0].reasons == ["Très pertinent"]
        assert result[0].score == 60

    def test_no_json_is_parse_error(self, batch):
        """Test prose without JSON."""
        result = parse_refinement_response("Désolé, je ne peux pas évaluer.", batch)
        assert isinstance(result, AIFailure)
        assert result.reason == "parse_error"

    def test_empty_is_parse_error(self, batch):
        """Test an empty response."""
        assert parse_refinement_response("", batch).reason == "parse_error"

    def test_missing_matches_list(self, batch):
        """Test an object without matches list."""
        result = parse_refinement_response('{"result": "ok"}', batch)
        assert isinstance(result, AIFailure)
        assert result.reason == "invalid_response"
