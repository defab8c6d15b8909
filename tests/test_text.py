import pytest

from surgery_scheduler.text import collation_key, header_key, normalize, turkish_lower, turkish_upper


def test_empty_input():
    assert normalize(None) == ""
    assert normalize("") == ""
    assert normalize("   ") == ""


def test_turkish_case_folding():
    assert normalize("İSTANBUL") == normalize("istanbul") == "istanbul"
    assert normalize("ISPARTA") == "ısparta"
    assert turkish_upper("çiğdem ılık") == "ÇİĞDEM ILIK"
    assert turkish_lower("ŞEKER") == "şeker"


def test_abbreviations_expand_as_whole_tokens():
    assert normalize("Sağ NX") == "sağ nefrektomi"
    assert normalize("prostat bx") == "prostat biyopsi"
    # not inside longer words
    assert normalize("xnxx") == "xnxx"
    assert normalize("Onx") == "onx"


@pytest.mark.parametrize("value", [
    "  Sol Radikal NX ", "İdrar KÜLTÜRÜ", "Prostat Bx", "nefrektomi", "TUR-P", "ıI İi",
])
def test_idempotent(value):
    once = normalize(value)
    assert normalize(once) == once


def test_header_key_tolerates_dotless_i():
    assert header_key(" HASTA ADI ") == header_key("hasta adi") == header_key("Hasta Adı")
    assert header_key("İDRAR KÜLTÜRÜ") == header_key("idrar kültürü")
    assert header_key(None) == ""


def test_collation_follows_turkish_alphabet():
    words = ["Zeki", "Çetin", "Cem", "Ömer", "Oya", "Ilgaz", "İlker"]
    assert sorted(words, key=collation_key) == ["Cem", "Çetin", "Ilgaz", "İlker", "Oya", "Ömer", "Zeki"]
