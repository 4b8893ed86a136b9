from datetime import date

from medlegal.utils.helpers import calculate_age, display, format_date
from medlegal.utils.validators import parse_case_number, validate_case_number


def test_format_date_prints_day_first():
    assert format_date("2025-03-01") == "01/03/2025"
    assert format_date(date(2024, 12, 25)) == "25/12/2024"
    assert format_date("2025-03-01T10:00:00Z") == "01/03/2025"


def test_format_date_missing_values():
    assert format_date(None) == "N/A"
    assert format_date("not a date") == "N/A"


def test_calculate_age():
    assert calculate_age("1985-04-12", on=date(2025, 4, 11)) == 39
    assert calculate_age("1985-04-12", on=date(2025, 4, 12)) == 40
    assert calculate_age(None) is None


def test_display():
    assert display(None) == "N/A"
    assert display("") == "N/A"
    assert display(True) == "Yes"
    assert display(False) == "No"
    assert display(["Neck", "Back"]) == "Neck, Back"
    assert display([]) == "N/A"
    assert display(3) == "3"


def test_case_number_format():
    assert validate_case_number("MED-2025-001")
    assert validate_case_number("MED-2025-1234")
    assert not validate_case_number("MED-25-001")
    assert not validate_case_number("2025-001")
    assert parse_case_number("MED-2025-007") == ("MED", 2025, 7)
    assert parse_case_number("bad") is None
