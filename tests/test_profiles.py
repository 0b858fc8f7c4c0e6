"""Tests for rule chains and per-document profiles."""

from idscan.extraction.profiles import select_profile
from idscan.extraction.rule_engine import Rule, RuleChain, RuleEngine
from idscan.models import NOT_FOUND, DocumentType
from idscan.utils.config import AppConfig

from fakes import AADHAAR_TEXTS, VOTER_TEXTS


def _never(text: str) -> str | None:
    return None


def _upper(text: str) -> str | None:
    return text.upper() or None


class TestRuleChain:
    """Tests for ordered rule resolution."""

    def test_first_hit_wins(self) -> None:
        chain = RuleChain(
            "name",
            (
                Rule("never", _never, ("a",)),
                Rule("upper", _upper, ("a",)),
                Rule("later", lambda t: "ignored", ("a",)),
            ),
        )
        match = chain.resolve({"a": "ravi"})
        assert match.value == "RAVI"
        assert match.rule_name == "upper"
        assert match.found is True

    def test_exhausted_chain_yields_sentinel(self) -> None:
        chain = RuleChain("name", (Rule("never", _never, ("a",)),))
        match = chain.resolve({"a": "ravi"})
        assert match.value == NOT_FOUND
        assert match.found is False

    def test_rule_joins_its_sources(self) -> None:
        rule = Rule("upper", _upper, ("a", "b", "missing"))
        assert rule.apply({"a": "x", "b": "y"}) == "X\nY\n"

    def test_empty_string_treated_as_miss(self) -> None:
        rule = Rule("empty", lambda t: "", ("a",))
        assert rule.apply({"a": "x"}) is None

    def test_engine_field_order(self) -> None:
        engine = RuleEngine(
            [
                RuleChain("b", (Rule("u", _upper, ("x",)),)),
                RuleChain("a", (Rule("n", _never, ("x",)),)),
            ]
        )
        assert engine.field_names == ("b", "a")
        matches = engine.run({"x": "v"})
        assert matches["b"].value == "V"
        assert matches["a"].value == NOT_FOUND


class TestSelectProfile:
    """Tests for profile selection and record building."""

    def setup_method(self) -> None:
        self.config = AppConfig()

    def test_aadhaar_profile(self) -> None:
        profile = select_profile(DocumentType.AADHAAR, self.config)
        assert profile.display_name == "Aadhaar Card"
        assert profile.region_labels == ("aadhaar-r1", "aadhaar-r2")
        assert profile.field_names == ("name", "dob", "gender", "aadhaar")

    def test_voter_profile(self) -> None:
        profile = select_profile(DocumentType.VOTER, self.config)
        assert profile.display_name == "Voter ID"
        assert profile.region_labels == ("voter-orig", "voter-2x")
        assert profile.field_names == (
            "card_no",
            "name",
            "father_name",
            "gender",
            "dob",
        )

    def test_unknown_uses_aadhaar_layout(self) -> None:
        profile = select_profile(DocumentType.UNKNOWN, self.config)
        assert profile.doc_type is DocumentType.UNKNOWN
        assert profile.display_name == "Aadhaar Card"
        assert profile.region_labels == ("aadhaar-r1", "aadhaar-r2")

    def test_aadhaar_record(self) -> None:
        profile = select_profile(DocumentType.AADHAAR, self.config)
        record = profile.build_record(AADHAAR_TEXTS)
        assert record.doc_type == "Aadhaar Card"
        assert record.name == "Ravi Kumar"
        assert record.dob == "12/03/1990"
        assert record.gender == "Male"
        assert record.aadhaar == "1234 5678 9012"
        assert record.card_no == NOT_FOUND
        assert record.father_name == NOT_FOUND
        assert set(record.raw_texts) == {"aadhaar-r1", "aadhaar-r2"}

    def test_aadhaar_number_read_only_from_number_region(self) -> None:
        profile = select_profile(DocumentType.AADHAAR, self.config)
        record = profile.build_record(
            {"aadhaar-r1": "Ravi Kumar\n1234 5678 9012", "aadhaar-r2": ""}
        )
        assert record.aadhaar == NOT_FOUND

    def test_voter_record(self) -> None:
        profile = select_profile(DocumentType.VOTER, self.config)
        record = profile.build_record(VOTER_TEXTS)
        assert record.doc_type == "Voter ID"
        assert record.card_no == "ABC1234567"
        assert record.name == "Arun Kumar"
        assert record.father_name == "Ramesh Kumar"
        assert record.gender == "Male"
        assert record.dob == "15/08/1985"
        assert record.aadhaar == NOT_FOUND

    def test_voter_gender_prefers_enhanced_pass(self) -> None:
        profile = select_profile(DocumentType.VOTER, self.config)
        record = profile.build_record(
            {"voter-orig": "Sex: Male", "voter-2x": "Sex: Female"}
        )
        assert record.gender == "Female"

    def test_voter_gender_falls_back_to_plain_pass(self) -> None:
        profile = select_profile(DocumentType.VOTER, self.config)
        record = profile.build_record({"voter-orig": "Sex: Male", "voter-2x": ""})
        assert record.gender == "Male"


class TestReferenceCards:
    """Known card readings and the records they must produce."""

    def setup_method(self) -> None:
        self.config = AppConfig()

    def test_clear_aadhaar(self) -> None:
        profile = select_profile(DocumentType.AADHAAR, self.config)
        record = profile.build_record(
            {
                "aadhaar-r1": "GOVERNMENT OF INDIA\nArun Kumar\nDOB: 05/07/1990\nMale",
                "aadhaar-r2": "1234 5678 9012",
            }
        )
        assert record.doc_type == "Aadhaar Card"
        assert record.name == "Arun Kumar"
        assert record.dob == "05/07/1990"
        assert record.gender == "Male"
        assert record.aadhaar == "1234 5678 9012"

    def test_trailing_digit_token_stripped_from_name(self) -> None:
        profile = select_profile(DocumentType.AADHAAR, self.config)
        record = profile.build_record({"aadhaar-r1": "Balavisakan 14"})
        assert record.name == "Balavisakan"

    def test_voter_without_name_label(self) -> None:
        profile = select_profile(DocumentType.VOTER, self.config)
        record = profile.build_record(
            {
                "voter-orig": "ELECTION COMMISSION OF INDIA\nSOL3248432",
                "voter-2x": "Father's Name: Soundararajan",
            }
        )
        assert record.card_no == "SOL3248432"
        assert record.father_name == "Soundararajan"
        assert record.name == NOT_FOUND
