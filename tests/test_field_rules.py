"""Tests for the per-field extraction rules."""

from idscan.extraction import field_rules


class TestNameRules:
    """Tests for name extraction on both card layouts."""

    def test_first_name_line_skips_blacklisted_lines(self) -> None:
        text = "Government of India\nRAVI KUMAR\nDOB: 12/03/1990"
        result = field_rules.first_name_line(text, blacklist=("government", "dob"))
        assert result == "Ravi Kumar"

    def test_first_name_line_none_when_no_candidate(self) -> None:
        assert field_rules.first_name_line("1234\n5678") is None

    def test_labelled_name(self) -> None:
        assert field_rules.labelled_name("Name : Arun Kumar") == "Arun Kumar"

    def test_labelled_name_tolerates_missing_colon(self) -> None:
        assert field_rules.labelled_name("Elector's Name Priya Devi") == "Priya Devi"

    def test_labelled_name_needs_two_tokens(self) -> None:
        assert field_rules.labelled_name("Elector's Name Priya") is None
        assert field_rules.labelled_name("Name: Ravi K.") == "Ravi K."

    def test_labelled_name_skips_relation_lines(self) -> None:
        text = "Father's Name: Ramesh Kumar\nName: Arun Kumar"
        assert field_rules.labelled_name(text) == "Arun Kumar"

    def test_labelled_name_missing(self) -> None:
        assert field_rules.labelled_name("ELECTION COMMISSION") is None


class TestDobRules:
    """Tests for the date-of-birth rule chain members."""

    def test_labelled_dob(self) -> None:
        assert field_rules.labelled_dob("DOB: 5-7-1990") == "05/07/1990"

    def test_labelled_dob_ocr_zero_for_o(self) -> None:
        assert field_rules.labelled_dob("D0B 12/03/1990") == "12/03/1990"

    def test_labelled_dob_date_of_birth(self) -> None:
        text = "Date of Birth: 15/08/1985"
        assert field_rules.labelled_dob(text) == "15/08/1985"

    def test_labelled_dob_rejects_implausible_year(self) -> None:
        assert field_rules.labelled_dob("DOB: 01/01/2035") is None

    def test_tamil_labelled_dob(self) -> None:
        text = "பிறந்த நாள்: 01/02/1975"
        assert field_rules.tamil_labelled_dob(text) == "01/02/1975"

    def test_any_date_line_catches_mangled_label(self) -> None:
        assert field_rules.any_date_line("908: 12/03/1990") == "12/03/1990"

    def test_any_date_line_skips_issue_dates(self) -> None:
        text = "Issue Date: 01/01/2015\n908: 12/03/1990"
        assert field_rules.any_date_line(text) == "12/03/1990"


class TestGenderRule:
    def test_english(self) -> None:
        assert field_rules.gender("Sex: Male") == "Male"

    def test_female_not_read_as_male(self) -> None:
        assert field_rules.gender("Gender / FEMALE") == "Female"

    def test_tamil(self) -> None:
        assert field_rules.gender("பெண் / Female") == "Female"
        assert field_rules.gender("ஆண்") == "Male"

    def test_embedded_word_ignored(self) -> None:
        assert field_rules.gender("Malerkotla") is None


class TestNumberRules:
    """Tests for card number extraction."""

    def test_aadhaar_number_grouped(self) -> None:
        assert field_rules.aadhaar_number("1234 5678 9012") == "1234 5678 9012"

    def test_aadhaar_number_without_spaces(self) -> None:
        assert field_rules.aadhaar_number("No: 123456789012") == "1234 5678 9012"

    def test_aadhaar_number_too_short(self) -> None:
        assert field_rules.aadhaar_number("1234 5678 901") is None

    def test_voter_card_number(self) -> None:
        assert field_rules.voter_card_number("EPIC ABC1234567") == "ABC1234567"

    def test_voter_card_number_rejects_lowercase(self) -> None:
        assert field_rules.voter_card_number("abc1234567") is None


class TestFatherNameRules:
    """Tests for father's name extraction on Voter IDs."""

    def test_labelled_father_name(self) -> None:
        text = "Father's Name: Ramesh Kumar"
        assert field_rules.labelled_father_name(text) == "Ramesh Kumar"

    def test_labelled_father_name_strips_trailing_noise(self) -> None:
        text = "Fathers Name - Ramesh 0."
        assert field_rules.labelled_father_name(text) == "Ramesh"

    def test_father_name_below_label(self) -> None:
        text = "Father's Name\nRAMESH KUMAR\nSex: Male"
        assert field_rules.father_name_below_label(text) == "Ramesh Kumar"

    def test_father_name_below_label_without_label(self) -> None:
        assert field_rules.father_name_below_label("Ramesh Kumar") is None
