import pytest

from deezer_search.domain.classifier import classify
from deezer_search.domain.entities import CatalogKind, CatalogReference


@pytest.mark.parametrize("url, kind, entity_id", [
    ("https://www.deezer.com/fr/playlist/123456", CatalogKind.PLAYLIST, "123456"),
    ("deezer.com/album/7", CatalogKind.ALBUM, "7"),
    ("http://deezer.com/track/3135556", CatalogKind.TRACK, "3135556"),
    ("www.deezer.com/en/track/42?utm_source=share", CatalogKind.TRACK, "42"),
])
def test_classify_accepts_url_variants(url, kind, entity_id):
    assert classify(url) == CatalogReference(kind=kind, id=entity_id)


def test_classify_treats_scheme_www_and_locale_as_optional():
    full = classify("https://www.deezer.com/fr/album/7")
    bare = classify("deezer.com/album/7")
    assert full == bare


@pytest.mark.parametrize("text", [
    "never gonna give you up",
    "",
    "https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC",
    "https://www.deezer.com/fr/artist/27",
    "https://www.deezer.com/album/abc",
    "https://www.deezer.com/french/album/7",
    "see https://www.deezer.com/album/7",
])
def test_classify_returns_none_for_non_catalog_text(text):
    assert classify(text) is None


@pytest.mark.parametrize("value", [None, 123, {"query": "deezer.com/album/7"}])
def test_classify_never_raises_on_non_string_input(value):
    assert classify(value) is None
