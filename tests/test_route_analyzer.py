"""Unit tests for the route analyzer."""
import pytest
from avdecode.config import Config
from avdecode.exceptions import InvalidIcaoError
from avdecode.models.route import RegionFamily, RegionKind, RouteStatus
from avdecode.route_analyzer import (
    analyze_route,
    build_parsed_summary,
    check_route,
    classify_tokens,
    detect_region,
    normalize_route_text,
    suggest_better_route,
    tokenize_route,
)


def _tokens(route):
    return tokenize_route(normalize_route_text(route))


class TestRouteText:
    """Test cases for normalization, region detection and token classes."""

    def test_normalize_strips_prefix_and_newlines(self):
        """Test ROUTE: prefix, line breaks and case."""
        assert normalize_route_text("Route: egll dct\ncpt  ul9") == "EGLL DCT CPT UL9"
        assert normalize_route_text("RTE=CPT") == "CPT"
        assert normalize_route_text(None) == ""

    def test_tokenize(self):
        """Test empty tokens are dropped."""
        assert tokenize_route("EGLL DCT CPT") == ["EGLL", "DCT", "CPT"]
        assert tokenize_route("") == []

    @pytest.mark.parametrize("dep,arr,kind,family", [
        ("EGLL", "KJFK", RegionKind.TRANSATLANTIC, RegionFamily.EUROPE),
        ("KBOS", "EHAM", RegionKind.TRANSATLANTIC, RegionFamily.EUROPE),
        ("KBOS", "LFPG", RegionKind.US, RegionFamily.US),
        ("LFPG", "EDDF", RegionKind.EUROPE, RegionFamily.EUROPE),
        ("KJFK", "CYYZ", RegionKind.US, RegionFamily.US),
        ("", "", RegionKind.UNKNOWN, RegionFamily.EUROPE),
    ])
    def test_detect_region_auto(self, dep, arr, kind, family):
        """Test inference from ICAO prefixes."""
        region = detect_region(dep, arr)

        assert region.kind == kind
        assert region.family == family

    def test_detect_region_labels(self):
        """Test UK involvement changes the Europe label."""
        assert detect_region("EGLL", "KJFK", "auto").uk_involved is True
        assert detect_region("KJFK", "KORD", "auto").kind == RegionKind.US
        assert detect_region("EGLL", "EGCC").label == "UK/Europe"
        assert detect_region("EGLL", "EGCC").uk_involved is True
        assert detect_region("EDDF", "EHAM").label == "Europe"
        assert detect_region("", "").label == "Auto (default)"

    def test_explicit_preference_wins(self):
        """Test uk-eu and us override the ICAO prefixes."""
        assert detect_region("EGLL", "EGCC", "us").kind == RegionKind.US
        assert detect_region("KJFK", "KBOS", "uk-eu").kind == RegionKind.EUROPE

    def test_unknown_preference_falls_back_to_auto(self):
        """Test an unrecognised preference is treated as auto."""
        assert detect_region("KJFK", "KBOS", "mars").kind == RegionKind.US

    def test_classify_tokens(self):
        """Test every bucket."""
        classes = classify_tokens(
            ["N0450F350", "EGLL", "DCT", "CPT", "UL9", "50N020W", "NATA", "5020N", "1A"]
        )

        assert classes.speed_level == ("N0450F350",)
        assert classes.icao == ("EGLL",)
        assert classes.dct == ("DCT",)
        assert classes.waypoint == ("CPT",)
        assert classes.airway == ("UL9",)
        assert classes.coordinate == ("50N020W",)
        assert classes.nat == ("NATA",)
        assert classes.oceanic_waypoint == ("5020N",)
        assert classes.unknown == ("1A",)

    def test_build_parsed_summary(self):
        """Test detected and given airports."""
        tokens = ["EGLL", "DCT", "CPT", "EGCC"]

        assert build_parsed_summary(tokens) == (
            "Detected departure ICAO: EGLL\nDetected arrival ICAO: EGCC\nTokens: 4 (DCT: 1)"
        )
        assert build_parsed_summary(tokens, "EGLL", "EGCC").startswith("Departure: EGLL\nArrival: EGCC")


class TestAnalyzeRoute:
    """Test cases for analyze_route."""

    def test_looks_ok(self):
        """Test a clean UK route."""
        analysis = check_route("EGLL DCT CPT UL9 KENET DCT EGCC", "EGLL", "EGCC")

        assert analysis.status == RouteStatus.LOOKS_OK
        assert analysis.reasons == ()
        assert analysis.dct_count == 2
        assert analysis.suggestions[0] == "Check your vACC preferred routes for your departure/arrival pair."

    def test_heavy_dct_is_likely_reroute(self):
        """Test eight DCT legs in Europe."""
        route = "EGLL " + " ".join(f"DCT {w}" for w in ["AAA", "BBB", "CCC", "DDD", "EEE", "FFF", "GGG", "HHH"])
        analysis = check_route(route, region_pref="uk-eu")

        assert analysis.dct_count == 8
        assert analysis.status == RouteStatus.LIKELY_REROUTE
        assert analysis.reasons[0].startswith("Heavy DCT usage (8x)")

    def test_illegal_characters_invalid(self):
        """Test punctuation makes the route invalid."""
        analysis = check_route("EGLL, DCT CPT")

        assert analysis.status == RouteStatus.INVALID
        assert analysis.status.label == "Invalid format"
        assert analysis.reasons[0] == "Route contains invalid characters in token: EGLL,"

    def test_departure_mismatch(self):
        """Test a route that does not start at the given departure."""
        analysis = check_route("CPT UL9 KENET", dep="EGKK")

        assert "Route does not appear to start at EGKK." in analysis.reasons

    def test_procedure_tokens_flagged(self):
        """Test SID names in the enroute string."""
        analysis = check_route("EGLL CPT3J CPT UL9 KENET EGCC", "EGLL", "EGCC")

        assert any("runway/SID/STAR" in reason for reason in analysis.reasons)
        assert analysis.status == RouteStatus.LIKELY_REROUTE

    def test_transatlantic_without_oceanic_segment(self):
        """Test a missing NAT/coordinate segment."""
        analysis = check_route("EGLL CPT UL9 KENET KJFK", "EGLL", "KJFK")

        assert analysis.region.kind == RegionKind.TRANSATLANTIC
        assert "Transatlantic route has no NAT track or lat/long oceanic points." in analysis.reasons

    def test_transatlantic_with_nat(self):
        """Test a NAT track satisfies the oceanic check."""
        analysis = check_route("EGLL CPT UL9 NATA KJFK", "EGLL", "KJFK")

        assert not any(reason.startswith("Transatlantic") for reason in analysis.reasons)

    def test_oceanic_tokens_on_european_route(self):
        """Test lat/long points on a Europe-only route."""
        analysis = check_route("CPT UL9 50N020W KENET", "EGLL", "EGCC")

        assert any(reason.startswith("Oceanic tokens") for reason in analysis.reasons)

    def test_malformed_nat(self):
        """Test NAT designators of the wrong shape."""
        analysis = check_route("CPT UL9 NATXYZ KENET NATAB")

        assert "NAT token looks unusual: NATXYZ." in analysis.reasons
        assert "NAT token looks unusual: NATAB." in analysis.reasons

    def test_multiple_speed_levels(self):
        """Test more than two speed/level groups."""
        analysis = check_route("N0450F350 CPT N0460F370 UL9 N0470F390 KENET")

        assert "Multiple speed/level tokens found. Usually one is enough." in analysis.reasons

    def test_unrecognized_tokens_listed(self):
        """Test at most eight unknown tokens are listed."""
        analysis = check_route("1A 2A 3A 4A 5A 6A 7A 8A 9A")

        assert "Unrecognized tokens: 1A, 2A, 3A, 4A, 5A, 6A, 7A, 8A…" in analysis.reasons

    @pytest.mark.parametrize("route", ["CPT", "CPT DCT", "DCT DCT DCT", "CPT UL9"])
    def test_short_route_is_invalid(self, route):
        """Test a route with too few meaningful tokens is reported as incomplete."""
        analysis = check_route(route)

        assert analysis.status == RouteStatus.INVALID
        assert "Route is very short. This is likely incomplete." in analysis.reasons

    def test_three_meaningful_tokens_not_short(self):
        """Test the minimum route length."""
        analysis = check_route("CPT UL9 KENET")

        assert analysis.status == RouteStatus.LOOKS_OK
        assert "Route is very short. This is likely incomplete." not in analysis.reasons

    def test_uk_boundary_fix_missing(self):
        """Test long UK routes without a known FIR boundary fix."""
        analysis = check_route("EGLL CPT UL9 ABC UN57 DEF UL612 LFPG", "EGLL", "LFPG")

        assert any(reason.startswith("No common UK FIR entry/exit fix") for reason in analysis.reasons)

    def test_uk_boundary_fix_present(self):
        """Test KONAN satisfies the boundary check."""
        analysis = check_route("EGLL CPT UL9 KONAN UN57 DEF UL612 LFPG", "EGLL", "LFPG")

        assert not any(reason.startswith("No common UK FIR") for reason in analysis.reasons)

    def test_no_airways_in_europe(self):
        """Test a long all-direct route in Europe."""
        analysis = check_route("EDDF AAA BBB CCC DDD EEE EDDM", "EDDF", "EDDM")

        assert analysis.region.kind == RegionKind.EUROPE
        assert analysis.reasons[0].startswith("Route has no airway designators.")
        assert analysis.status == RouteStatus.LOOKS_OK

    def test_us_allows_more_dct(self):
        """Test five DCT legs only give a moderate warning in the US."""
        analysis = check_route("KJFK DCT AAA DCT BBB DCT CCC DCT DDD DCT EEE KLAX", "KJFK", "KLAX")

        assert analysis.reasons == ("Moderate DCT usage (5x). You may get a minor reroute.",)
        assert analysis.status == RouteStatus.LOOKS_OK

    def test_thresholds_from_config(self, monkeypatch):
        """Test DCT thresholds are read from Config."""
        monkeypatch.setattr(Config, 'DCT_WARN_EUROPE', 1)
        monkeypatch.setattr(Config, 'DCT_HEAVY_EUROPE', 2)

        analysis = check_route("EGLL DCT CPT UL9 KENET DCT EGCC", "EGLL", "EGCC")

        assert analysis.status == RouteStatus.LIKELY_REROUTE

    def test_invalid_departure_raises(self):
        """Test a malformed departure code."""
        with pytest.raises(InvalidIcaoError) as exc_info:
            check_route("CPT UL9 KENET", dep="EG")

        assert exc_info.value.role == "Departure"

    def test_summary_and_dict(self):
        """Test rendering helpers."""
        analysis = check_route("EGLL DCT CPT UL9 KENET DCT EGCC", "EGLL", "EGCC")

        assert analysis.summary().startswith("Status: Looks OK")
        data = analysis.to_dict()
        assert data['status'] == "LooksOk"
        assert data['token_classes']['airway'] == ["UL9"]


class TestSuggestBetterRoute:
    """Test cases for suggest_better_route."""

    def test_cleanup(self):
        """Test every cleanup step."""
        tokens = _tokens("EGLL RW27L CPT3J N0450F350 DCT DCT CPT UL9 KENET N0460F370 DCT EGCC")
        suggestion = suggest_better_route(tokens, "EGLL", "EGCC")

        assert suggestion.tokens == ("N0450F350", "DCT", "CPT", "UL9", "KENET")
        assert suggestion.route == "N0450F350 DCT CPT UL9 KENET"
        assert suggestion.notes == (
            "Removed leading departure ICAO (EGLL).",
            "Removed trailing arrival ICAO (EGCC).",
            "Removed runway/SID/STAR/procedure tokens.",
            "Kept only the first speed/level token.",
            "Collapsed repeated DCT and removed DCT at the route ends.",
        )

    def test_too_short_returns_original(self):
        """Test short routes are not modified."""
        suggestion = suggest_better_route(("EGLL", "DCT", "CPT", "EGCC"), "EGLL", "EGCC")

        assert suggestion.tokens == ("EGLL", "DCT", "CPT", "EGCC")
        assert suggestion.notes == ("Route is too short to safely improve; showing original.",)

    def test_repeated_dct_collapses_to_too_short(self):
        """Test endpoints and duplicate DCT are removed before the length check."""
        tokens = ("EGLL", "DCT", "DCT", "WAYPT", "DCT", "EGCC")
        suggestion = suggest_better_route(tokens, "EGLL", "EGCC")

        assert suggestion.tokens == tokens
        assert suggestion.notes == ("Route is too short to safely improve; showing original.",)

    def test_transatlantic_note(self):
        """Test the oceanic reminder."""
        suggestion = suggest_better_route(("EGLL", "CPT", "UL9", "KENET", "KJFK"), "EGLL", "KJFK")

        assert suggestion.route == "CPT UL9 KENET"
        assert suggestion.notes[-1] == (
            "Transatlantic flights usually need an oceanic segment (NAT or lat/long points)."
        )

    def test_europe_dct_note(self):
        """Test the airway preference note when DCT remains."""
        suggestion = suggest_better_route(
            ("AAA", "DCT", "BBB", "DCT", "CCC", "DCT", "DDD"), region=detect_region("EGLL", "EGCC")
        )

        assert suggestion.notes == (
            "UK/Europe tends to prefer airway-structured routes; reduce DCT where possible.",
        )
