from types import SimpleNamespace

from deezer_search.application.results import build_search, track_duration_ms
from deezer_search.domain.entities import LoadType, UnresolvedTrack


def _track(title, duration_ms):
    return UnresolvedTrack(title=title, author="A", duration_ms=duration_ms)


def test_build_search_defaults_to_empty_tracks():
    outcome = build_search(LoadType.LOAD_FAILED)

    assert outcome.tracks == ()
    assert outcome.playlist is None
    assert outcome.exception is None


def test_playlist_summary_sums_track_durations():
    tracks = [_track("a", 1000), _track("b", 2500), _track("c", 0)]

    outcome = build_search(LoadType.PLAYLIST_LOADED, tracks, None, "Mix")

    assert outcome.playlist.name == "Mix"
    assert outcome.playlist.duration == 3500
    assert outcome.tracks == tuple(tracks)


def test_playlist_summary_only_for_non_empty_name():
    assert build_search(LoadType.TRACK_LOADED, [_track("a", 1)], None, None).playlist is None
    assert build_search(LoadType.TRACK_LOADED, [_track("a", 1)], None, "").playlist is None


def test_exception_only_for_non_empty_message():
    failed = build_search(LoadType.LOAD_FAILED, None, "boom")
    assert failed.exception.message == "boom"
    assert failed.exception.severity == "COMMON"

    assert build_search(LoadType.LOAD_FAILED, None, "").exception is None


def test_exception_and_tracks_can_coexist():
    outcome = build_search(LoadType.PLAYLIST_LOADED, [_track("a", 1)], "partial", "Mix")

    assert len(outcome.tracks) == 1
    assert outcome.exception.message == "partial"


def test_string_load_type_is_coerced():
    assert build_search("NO_MATCHES").load_type is LoadType.NO_MATCHES


def test_duration_of_host_tracks_and_missing_values():
    host_track = SimpleNamespace(title="x", author="y", duration=4000)
    assert track_duration_ms(host_track) == 4000
    assert track_duration_ms({"duration": 1500}) == 1500
    assert track_duration_ms(SimpleNamespace(title="no duration")) == 0
    assert track_duration_ms({"duration": None}) == 0

    outcome = build_search(LoadType.PLAYLIST_LOADED, [host_track, _track("a", 1000)], None, "Mixed")
    assert outcome.playlist.duration == 5000


def test_to_json_matches_host_contract():
    outcome = build_search(LoadType.PLAYLIST_LOADED, [_track("a", 1000)], None, "Mix")

    assert outcome.to_json() == {
        "loadType": "PLAYLIST_LOADED",
        "tracks": [{"title": "a", "author": "A", "duration": 1000}],
        "playlist": {"name": "Mix", "duration": 1000},
        "exception": None,
    }
