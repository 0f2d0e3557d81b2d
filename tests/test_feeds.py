"""Unit tests for feed payload flattening."""
from avdecode.feeds import flatten_atis_feed, flatten_metar_feed, flatten_notam_feed


class TestMetarFeed:
    """Test cases for flatten_metar_feed."""

    def test_first_non_empty_line(self):
        """Test multi-line text payloads."""
        payload = "\nKJFK 121851Z 18010KT 10SM FEW250 28/18 A3000\nKLGA 121851Z 19008KT 10SM"
        assert flatten_metar_feed(payload) == "KJFK 121851Z 18010KT 10SM FEW250 28/18 A3000"

    def test_list_payload(self):
        """Test JSON list payloads."""
        assert flatten_metar_feed(["", "EGLL 121850Z 24012KT"]) == "EGLL 121850Z 24012KT"

    def test_unexpected_payload(self):
        """Test unsupported payloads give empty text."""
        assert flatten_metar_feed({"metar": "EGLL"}) == ""
        assert flatten_metar_feed(None) == ""


class TestAtisFeed:
    """Test cases for flatten_atis_feed."""

    def test_vatsim_record(self):
        """Test text_atis lists are joined."""
        payload = {"callsign": "EGLL_ATIS", "text_atis": ["HEATHROW INFORMATION B", "  RWY 27L  IN USE"]}
        assert flatten_atis_feed(payload) == "HEATHROW INFORMATION B RWY 27L IN USE"

    def test_string_payload(self):
        """Test whitespace is collapsed."""
        assert flatten_atis_feed("INFORMATION  A\nQNH 1013") == "INFORMATION A QNH 1013"

    def test_empty_record(self):
        """Test a record without ATIS text."""
        assert flatten_atis_feed({"callsign": "EGLL_ATIS", "text_atis": None}) == ""


class TestNotamFeed:
    """Test cases for flatten_notam_feed."""

    def test_string_passthrough(self):
        """Test text payloads are returned stripped."""
        assert flatten_notam_feed("  A0001/24 RWY 09 CLSD\r\n") == "A0001/24 RWY 09 CLSD"

    def test_icao_keyed_mapping(self):
        """Test the entry for the requested airport is used."""
        payload = {
            "EGLL": [{"icaoMessage": "A0001/24 RWY 09 CLSD"}, {"raw_text": "A0002/24 TWY A CLSD"}],
            "EGKK": [{"icaoMessage": "A0003/24 ILS U/S"}],
        }
        assert flatten_notam_feed(payload, "egll") == "A0001/24 RWY 09 CLSD\n\nA0002/24 TWY A CLSD"

    def test_wrapped_list(self):
        """Test a 'notams' list of mixed records."""
        payload = {"notams": ["A0001/24 RWY 09 CLSD", {"text": "A0002/24 TWY A CLSD"}, {"id": 3}]}
        assert flatten_notam_feed(payload) == "A0001/24 RWY 09 CLSD\n\nA0002/24 TWY A CLSD"

    def test_single_record(self):
        """Test one record without a wrapper."""
        assert flatten_notam_feed({"raw": "A0001/24 RWY 09 CLSD"}) == "A0001/24 RWY 09 CLSD"

    def test_empty_payloads(self):
        """Test None and unsupported payloads."""
        assert flatten_notam_feed(None) == ""
        assert flatten_notam_feed(42) == ""
