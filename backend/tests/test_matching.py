from domain.models import MatchKind, PlaceRecord
from services.matching import (
    CityRegionPrefix,
    CityWordPrefix,
    PostalCodePrefix,
    RegionSubstring,
    city_display,
    word_prefix_match,
)


def _rec(city=None, code=None, zip_code="00000", region_name=None):
    return PlaceRecord(postal_code=zip_code, city_name=city, region_code=code, region_name=region_name)


SOUTH_BURLINGTON = _rec("South Burlington", "VT", "05403")


def test_word_prefix_match_in_order():
    assert word_prefix_match(["south", "bur"], ["south", "burlington"])
    assert not word_prefix_match(["bur", "sou"], ["south", "burlington"])


def test_word_prefix_match_rejects_longer_query():
    assert not word_prefix_match(["coos", "bay", "x"], ["coos", "bay"])
    assert not word_prefix_match([], ["coos"])


def test_city_strategy_word_boundaries():
    assert CityWordPrefix("south bur").matches(SOUTH_BURLINGTON)
    assert CityWordPrefix("SOUTH").matches(SOUTH_BURLINGTON)
    assert not CityWordPrefix("bur sou").matches(SOUTH_BURLINGTON)
    assert not CityWordPrefix("burlington").matches(SOUTH_BURLINGTON)


def test_city_strategy_multi_word_prefix():
    assert CityWordPrefix("coos b").matches(_rec("Coos Bay", "OR"))


def test_city_strategy_tolerates_missing_city():
    assert not CityWordPrefix("bur").matches(_rec(None, "VT"))
    assert not CityWordPrefix("bur").matches(_rec("", "VT"))


def test_city_region_requires_region_prefix():
    strategy = CityRegionPrefix("burlington", "w")
    assert strategy.matches(_rec("Burlington", "WI"))
    assert strategy.matches(_rec("Burlington", "wy"))
    assert not strategy.matches(_rec("Burlington", "VT"))
    # prefix, not substring
    assert not strategy.matches(_rec("Burlington", "IW"))


def test_city_region_tolerates_missing_region_code():
    assert not CityRegionPrefix("burlington", "w").matches(_rec("Burlington", None, region_name="Wisconsin"))


def test_city_key_is_case_insensitive():
    strategy = CityWordPrefix("burl")
    assert strategy.key(_rec("Burlington", "WI")) == strategy.key(_rec("BURLINGTON", "wi"))


def test_city_result_fields():
    result = CityWordPrefix("south").to_result(SOUTH_BURLINGTON)
    assert result.kind == MatchKind.CITY
    assert result.display == "South Burlington, VT"
    assert result.value == "South Burlington, VT"
    assert result.city == "South Burlington"
    assert result.region == "VT"
    assert result.postal_code == "05403"


def test_city_display_falls_back_to_region_name():
    assert city_display(_rec("Toronto", None, region_name="Ontario")) == "Toronto, Ontario"
    assert city_display(_rec("Toronto")) == "Toronto"


def test_postal_prefix_normalizes_case_and_spaces():
    strategy = PostalCodePrefix("k1a 0")
    assert strategy.matches(_rec("Ottawa", "ON", "K1A 0B1"))
    assert not strategy.matches(_rec("Ottawa", "ON", "K1B 0B1"))
    assert not strategy.matches(PlaceRecord(postal_code=None, city_name="Ottawa"))


def test_postal_result_uses_code_as_value():
    result = PostalCodePrefix("054").to_result(_rec("Burlington", "VT", "05401"))
    assert result.kind == MatchKind.POSTAL_CODE
    assert result.value == "05401"
    assert result.display == "05401 - Burlington, VT"


def test_region_substring_matches_mid_word():
    strategy = RegionSubstring("calient")
    assert strategy.matches(PlaceRecord(postal_code="20000", region_name="Aguascalientes"))
    assert not strategy.matches(PlaceRecord(postal_code="44100", region_name="Jalisco"))
    assert not strategy.matches(PlaceRecord(postal_code="44100"))


def test_region_result_fields():
    result = RegionSubstring("jal").to_result(PlaceRecord(postal_code="44100", region_name="Jalisco"))
    assert result.kind == MatchKind.REGION
    assert result.display == "Jalisco"
    assert result.value == "Jalisco"
    assert result.postal_code == "44100"
