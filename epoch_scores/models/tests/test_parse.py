from epoch_scores.models.parse import ParsedValue, ParseError, parse_model
from epoch_scores.models.score import ScoreRowModel


class TestParse:
    def test_parsed_value(self):
        result = parse_model(ScoreRowModel, {"vote_address": "V1", "epoch": "7"}, position=1)

        assert isinstance(result, ParsedValue)
        assert result.value.epoch == 7

    def test_parse_error(self):
        result = parse_model(
            ScoreRowModel, {"vote_address": "V1", "epoch": "seven"}, position=4
        )

        assert isinstance(result, ParseError)
        assert result.position == 4
        assert result.reason.startswith("epoch: ")

    def test_parse_error_lists_every_field(self):
        result = parse_model(ScoreRowModel, {"vote_address": "", "epoch": None})

        assert isinstance(result, ParseError)
        assert result.position is None
        assert "vote_address" in result.reason
        assert "epoch" in result.reason
