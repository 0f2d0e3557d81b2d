"""Unit tests for the NOTAM decoder."""
import pytest
from datetime import datetime
from avdecode.exceptions import InvalidIcaoError
from avdecode.models.notam import NotamFormat
from avdecode.notam_decoder import (
    NotamDecoder,
    build_notam_summary,
    classify_chunk,
    decode_notams,
    decode_q_line,
    decode_q_position,
    extract_field,
    format_validity,
    split_notam_chunks,
)


class TestChunking:
    """Test cases for splitting and classifying chunks."""

    @pytest.fixture
    def faa_text(self):
        """Three FAA bang-format NOTAMs."""
        return (
            "!JFK 01/012 JFK RWY 04L/22R CLSD 2401011200-2401312359\n"
            "!JFK 01/013 JFK TWY A CLSD\n"
            "!JFK 01/014 JFK ILS RWY 13L U/S"
        )

    def test_bang_lines_split(self, faa_text):
        """Test one chunk per line starting with '!'."""
        assert len(split_notam_chunks(faa_text)) == 3

    def test_bang_continuation_lines(self):
        """Test lines without '!' belong to the preceding chunk."""
        chunks = split_notam_chunks(
            "!JFK 01/012 JFK RWY 04L/22R\nCLSD 2401011200-2401312359\n!JFK 01/013 JFK TWY A CLSD"
        )

        assert len(chunks) == 2
        assert chunks[0].endswith("CLSD 2401011200-2401312359")

    def test_blank_line_split(self):
        """Test paragraphs without '!' lines."""
        text = "A1234/24 RWY 09 CLSD\n\nB5678/24 TWY C CLSD"
        assert split_notam_chunks(text) == ["A1234/24 RWY 09 CLSD", "B5678/24 TWY C CLSD"]

    def test_multiple_blank_lines(self):
        """Test several blank lines count as one separator."""
        assert len(split_notam_chunks("FIRST\n   \n\n\nSECOND")) == 2

    def test_empty_text(self):
        """Test no chunks for empty input."""
        assert split_notam_chunks("") == []

    def test_classify_chunk(self):
        """Test format dispatch."""
        assert classify_chunk("!JFK 01/012 JFK RWY 04L/22R CLSD") == NotamFormat.FAA_BANG
        assert classify_chunk("Q) EGTT/QMRLC/IV/NBO/A/000/999/5321N00216W005") == NotamFormat.ICAO
        assert classify_chunk("A) EGLL B) 2401011200") == NotamFormat.ICAO
        assert classify_chunk("RWY 09 CLSD") == NotamFormat.PLAIN


class TestNotamDecoder:
    """Test cases for NotamDecoder."""

    @pytest.fixture
    def decoder(self):
        """Create decoder instance."""
        return NotamDecoder()

    @pytest.fixture
    def icao_notam(self):
        """ICAO NOTAM with Q-line and B/C validity."""
        return (
            "A1234/24 NOTAMN\n"
            "Q) EGTT/QMRLC/IV/NBO/A/000/999/5321N00216W005\n"
            "A) EGCC B) 2401011200 C) 2401312359\n"
            "E) RWY 05L/23R CLSD DUE WIP."
        )

    @pytest.fixture
    def trigger_notam(self):
        """French trigger NOTAM with F) and G) items."""
        return (
            "R3281/24 NOTAMN\n"
            "Q) LFEE/QRTTT/IV/BO /AW/000/014/4904N00607E003\n"
            "A) LFJL B) 2411280000 C) 2604152359\n"
            "E) TRIGGER NOTAM - AIP SUP 216/24.\n"
            "DRONE ACTIVITY OVER 'METZ-FRESCATY' REQUIRING THE CREATION OF 2 \n"
            "TEMPORARY RESTRICTED AREAS.\n"
            "F) SFC G) 1400FT AMSL"
        )

    def test_faa_bang_notam(self, decoder):
        """Test FAA bang format fields."""
        batch = decoder.decode("!JFK 01/012 JFK RWY 04L/22R CLSD 2401011200-2401312359")
        notam = batch.items[0]

        assert notam.kind == NotamFormat.FAA_BANG
        assert notam.id == "JFK 01/012"
        assert notam.location == "JFK"
        assert notam.validity == "2401011200 to 2401312359"
        assert notam.text == "Runway 04L/22R Closed 2401011200-2401312359"
        assert notam.valid_from == datetime(2024, 1, 1, 12, 0)
        assert notam.valid_to == datetime(2024, 1, 31, 23, 59)

    def test_icao_structured_notam(self, decoder, icao_notam):
        """Test ICAO lettered fields and Q-line decoding."""
        notam = decoder.decode(icao_notam).items[0]

        assert notam.kind == NotamFormat.ICAO
        assert notam.id == "A1234/24"
        assert notam.location == "EGCC"
        assert notam.validity == "2401011200 to 2401312359"
        assert notam.q_line == "EGTT/QMRLC/IV/NBO/A/000/999/5321N00216W005"
        assert notam.altitudes == "FL000 to FL999"
        assert notam.position == "53°21'N 002°16'W within 5 NM"
        assert notam.q_code == "QMRLC"
        assert notam.q_code_subject == "Runway"
        assert notam.q_code_condition == "Closed"
        assert notam.text == "Runway 05L/23R Closed DUE Work in progress."

    def test_items_stop_at_next_marker(self, decoder, trigger_notam):
        """Test E) ends at F) and Q-line fields are trimmed."""
        notam = decoder.decode(trigger_notam).items[0]

        assert notam.id == "R3281/24"
        assert notam.location == "LFJL"
        assert notam.text.startswith("TRIGGER NOTAM - AIP SUP 216/24.")
        assert notam.text.endswith("TEMPORARY RESTRICTED AREAS.")
        assert "SFC" not in notam.text
        assert notam.altitudes == "FL000 to FL014"
        assert notam.position == "49°04'N 006°07'E within 3 NM"
        assert notam.q_code_subject == "Temporary restricted area"
        assert notam.q_code_condition == "Trigger NOTAM"

    def test_permanent_notam(self, decoder):
        """Test C) PERM."""
        notam = decoder.decode("A0001/24 A) EGLL B) 2401011200 C) PERM E) NEW TWY LGT").items[0]

        assert notam.validity == "2401011200 to PERM"
        assert notam.is_permanent is True
        assert notam.valid_to is None
        assert notam.text == "NEW Taxiway Light"

    def test_lower_case_items(self, decoder):
        """Test lower-case item markers are read as an ICAO NOTAM."""
        chunk = (
            "a1234/24 notamn\n"
            "q) egtt/qmrlc/iv/nbo/a/000/999/5321n00216w005\n"
            "a) egcc b) 2401011200 c) 2401312359\n"
            "e) rwy 05l/23r clsd"
        )
        assert classify_chunk(chunk) == NotamFormat.ICAO

        notam = decoder.decode(chunk).items[0]

        assert notam.kind == NotamFormat.ICAO
        assert notam.location == "EGCC"
        assert notam.validity == "2401011200 to 2401312359"
        assert notam.q_code_subject == "Runway"
        assert notam.position == "53°21'N 002°16'W within 5 NM"
        assert notam.text == "rwy 05l/23r clsd"

    def test_start_only_validity(self, decoder):
        """Test B) without C)."""
        notam = decoder.decode("A) EGLL B) 2401011200 E) APRON 3 CLSD").items[0]

        assert notam.validity == "From 2401011200"

    def test_location_falls_back_to_hint(self, decoder):
        """Test the hint fills a missing A) item."""
        notam = decoder.decode("Q) EGTT/QMRLC/IV/NBO/A/000/999/5321N00216W005 E) RWY CLSD", "egll").items[0]

        assert notam.location == "EGLL"

    def test_plain_notam(self, decoder):
        """Test fallback for unstructured text."""
        notam = decoder.decode("A0042/24 RWY 09 CLSD 2401011200 TO 2401020600", "EGLL").items[0]

        assert notam.kind == NotamFormat.PLAIN
        assert notam.id == "A0042/24"
        assert notam.location == "EGLL"
        assert notam.validity == "2401011200 to 2401020600"
        assert notam.text == "A0042/24 Runway 09 Closed 2401011200 TO 2401020600"

    def test_empty_input(self, decoder):
        """Test empty input yields an empty batch."""
        batch = decoder.decode("")

        assert len(batch) == 0
        assert batch.summary == ""

    def test_empty_chunk_dropped(self, decoder):
        """Test a blank chunk parses to None."""
        assert decoder.parse_chunk("   ") is None

    def test_invalid_hint_raises(self, decoder):
        """Test a malformed ICAO hint."""
        with pytest.raises(InvalidIcaoError):
            decoder.decode("RWY 09 CLSD", "TOOLONG")

    def test_batch_summary(self):
        """Test category counts and omitted zero categories."""
        batch = decode_notams(
            "!JFK 01/012 JFK RWY 04L/22R CLSD 2401011200-2401312359\n"
            "!JFK 01/013 JFK TWY A CLSD\n"
            "!JFK 01/014 JFK ILS RWY 13L U/S"
        )

        assert len(batch) == 3
        assert batch.summary == "Total: 3 • Runway-related: 2 • Taxiway-related: 1 • Nav/procedures: 1"
        assert batch.runway_count == 2
        assert batch.taxiway_count == 1
        assert batch.navaid_count == 1

    def test_summary_omits_zero_counts(self):
        """Test a runway-only batch."""
        batch = decode_notams("A0001/24 RWY 09 CLSD")

        assert build_notam_summary(list(batch.items)) == "Total: 1 • Runway-related: 1"
        assert build_notam_summary([]) == ""


class TestQLine:
    """Test cases for Q-line decoding."""

    def test_decode_position(self):
        """Test centre and radius."""
        assert decode_q_position("5321N00216W005") == "53°21'N 002°16'W within 5 NM"

    def test_unrecognised_position_returned_raw(self):
        """Test fallback to the raw value."""
        assert decode_q_position("GARBAGE") == "GARBAGE"

    def test_decode_q_line_fields(self):
        """Test the eight ICAO fields."""
        q_line = decode_q_line("EGTT/QMRLC/IV/NBO/A/000/999/5321N00216W005")

        assert q_line.fir == "EGTT"
        assert q_line.q_code == "QMRLC"
        assert q_line.traffic == "IV"
        assert q_line.purpose == "NBO"
        assert q_line.scope == "A"
        assert q_line.lower == "000"
        assert q_line.upper == "999"
        assert q_line.altitudes == "FL000 to FL999"

    def test_extra_field_form(self):
        """Test a line with an extra leading field decodes the same."""
        q_line = decode_q_line("Q/EGTT/QMRLC/IV/NBO/A/000/999/5321N00216W005")

        assert q_line.lower == "000"
        assert q_line.upper == "999"
        assert q_line.position == "53°21'N 002°16'W within 5 NM"

    def test_too_short(self):
        """Test a line without separators."""
        assert decode_q_line("EGTT") is None

    def test_unknown_q_code(self):
        """Test unmatched codes."""
        q_line = decode_q_line("EGTT/QZZZZ/IV/NBO/A/000/999/5321N00216W005")

        assert q_line.subject == "Unknown (ZZ)"
        assert q_line.condition == "Unknown (ZZ)"


class TestFieldHelpers:
    """Test cases for item extraction and validity formatting."""

    def test_extract_field_same_line(self):
        """Test items on one line."""
        text = "A) EGLL B) 2401011200 C) PERM E) TEXT"

        assert extract_field(text, "A") == "EGLL"
        assert extract_field(text, "C") == "PERM"
        assert extract_field(text, "E") == "TEXT"
        assert extract_field(text, "Q") == ""
        assert extract_field("a) egll b) 2401011200", "A") == "egll"

    def test_format_validity(self):
        """Test all four combinations."""
        assert format_validity("B", "C") == "B to C"
        assert format_validity("B", "") == "From B"
        assert format_validity("", "C") == "Until C"
        assert format_validity("", "") == ""
