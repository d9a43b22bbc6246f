"""Save outcomes for interactive and automation callers."""
from datetime import datetime

import pytest
import requests

from tracksaver.auth.manager import SessionState
from tracksaver.history import STATUS_FAIL, STATUS_SUCCESS
from tracksaver.services.save_track_service import (
    SaveOutcome,
    encode_failure,
    encode_success,
    record_history,
    run_shortcut,
    save_current_track,
)
from tracksaver.spotify.models import AddTrackResult

from mocks.fake_http import FakeResponse
from mocks import mock_spotify as sp

PL = "pl1"
TRACKS = f"/playlists/{PL}/tracks"
NOW = "/me/player/currently-playing"


def queue_add(http, existing=()):
    http.queue("GET", NOW, FakeResponse(200, sp.currently_playing()))
    http.queue("GET", TRACKS, FakeResponse(200, sp.page([sp.track_item(t) for t in existing])))
    http.queue("POST", TRACKS, FakeResponse(201, {}))


class TestEncoding:
    def test_success_format(self):
        assert encode_success("Song", "id1") == "Song~success~id1"

    def test_failure_format(self):
        assert encode_failure("boom") == "~~~boom"

    def test_separator_and_newlines_are_escaped(self):
        assert encode_success("A~B\nC", "id") == "A-B C~success~id"
        assert encode_failure("x~y\r\nz") == "~~~x-y  z"


class TestSaveCurrentTrack:
    def test_success(self, app, http):
        queue_add(http)
        outcome = save_current_track(app, PL)
        assert outcome.ok
        assert outcome.to_compact() == "Stub Track~success~track_stub_1"

    def test_duplicate_is_informational(self, app, http):
        queue_add(http, existing=["track_stub_1"])
        outcome = save_current_track(app, PL)
        assert not outcome.ok and outcome.informational
        assert outcome.duplicate.track_name == "Stub Track"
        assert outcome.to_compact() == "~~~Already in playlist"

    def test_nothing_playing(self, app, http):
        http.queue("GET", NOW, FakeResponse(204))
        outcome = save_current_track(app, PL)
        assert outcome.to_compact() == "~~~No track playing"

    def test_unauthorized_signs_out(self, app, http):
        http.queue("GET", NOW, FakeResponse(401))
        outcome = save_current_track(app, PL)
        assert outcome.to_compact() == "~~~Not authorized"
        assert app.auth.state is SessionState.SIGNED_OUT
        assert app.store.has_credentials() is False

    def test_http_error_message(self, app, http):
        http.queue("GET", NOW, FakeResponse(200, sp.currently_playing()))
        http.queue("GET", TRACKS, FakeResponse(200, sp.page([])))
        http.queue("POST", TRACKS, FakeResponse(403))
        outcome = save_current_track(app, PL)
        assert not outcome.ok and not outcome.informational
        assert "403" in outcome.message


class TestRunShortcut:
    def test_uses_slot_active_now(self, app, http):
        app.selection.set("morning", slot=1)
        app.selection.set(PL, slot=2)
        queue_add(http)
        assert run_shortcut(app, now=datetime(2025, 1, 1, 10, 0)) == "Stub Track~success~track_stub_1"
        assert http.calls_to("POST", TRACKS)

    def test_explicit_slot_and_default_fallback(self, app, http):
        app.selection.set(PL)
        queue_add(http)
        assert run_shortcut(app, slot=3).endswith("~success~track_stub_1")

    def test_no_playlist_selected(self, app, http):
        assert run_shortcut(app, now=datetime(2025, 1, 1, 10, 0)) == "~~~No playlist selected"
        assert http.calls == []

    def test_not_signed_in(self, make_app, http):
        app = make_app()
        app.selection.set(PL)
        assert run_shortcut(app) == "~~~Not signed in"
        assert http.calls == []

    def test_invalid_slot_never_raises(self, app):
        result = run_shortcut(app, slot=9)
        assert result.startswith("~~~Invalid slot 9")

    def test_transport_failure_is_encoded(self, app, http):
        app.selection.set(PL)
        http.queue("GET", NOW, requests.ConnectionError("offline"))
        assert run_shortcut(app).startswith("~~~Could not reach Spotify")

    def test_malformed_playlist_page_is_encoded(self, app, http):
        app.selection.set(PL)
        http.queue("GET", NOW, FakeResponse(200, sp.currently_playing()))
        http.queue("GET", TRACKS, FakeResponse(200, {"items": ["x"], "next": None}))
        assert run_shortcut(app).startswith("~~~Decoding failed")
        assert http.calls_to("POST", TRACKS) == []


class TestRecordHistory:
    def test_success_recorded(self, app):
        result = AddTrackResult("id1", "Song", "Artist", "http://img")
        record_history(app, "u1", SaveOutcome(True, "ok", result=result), playlist_name="Mix")
        [entry] = app.history.load("u1")
        assert entry.status == STATUS_SUCCESS
        assert (entry.track_name, entry.artist_name, entry.playlist_name) == ("Song", "Artist", "Mix")

    def test_failure_recorded(self, app):
        record_history(app, "u1", SaveOutcome(False, "Spotify responded with status code 500."))
        assert app.history.load("u1")[0].status == STATUS_FAIL

    @pytest.mark.parametrize("message", ["No track playing", "Already in playlist"])
    def test_informational_not_recorded(self, app, message):
        record_history(app, "u1", SaveOutcome(False, message, informational=True))
        assert app.history.load("u1") == []
