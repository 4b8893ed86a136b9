import pytest
from pydantic import ValidationError

from medlegal.core.config import Settings


def test_case_prefix_is_normalized():
    assert Settings(CASE_NUMBER_PREFIX=" rta ").CASE_NUMBER_PREFIX == "RTA"


@pytest.mark.parametrize("prefix", ["MED2", "MED-UK", "MED_", "", "M%"])
def test_case_prefix_must_be_letters(prefix):
    with pytest.raises(ValidationError):
        Settings(CASE_NUMBER_PREFIX=prefix)


def test_cors_origins_accept_json_or_commas():
    assert Settings(CORS_ORIGINS='["http://a.test"]').cors_origins_list == ["http://a.test"]
    assert Settings(CORS_ORIGINS="http://a.test, http://b.test").cors_origins_list == [
        "http://a.test", "http://b.test",
    ]
