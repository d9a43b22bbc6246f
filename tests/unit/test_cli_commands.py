"""CLI commands driven through CliRunner with a prebuilt container."""
import json

from click.testing import CliRunner

from tracksaver.cli import cli

from mocks.fake_http import TOKEN_URL, FakeResponse, token_response
from mocks import mock_spotify as sp

PL = "mine"
TRACKS = f"/playlists/{PL}/tracks"


def run(app, *args):
    return CliRunner().invoke(cli, list(args), obj=app)


def queue_overview(http):
    http.queue("GET", "/me", FakeResponse(200, sp.me("user123", "Test User")))
    http.queue("GET", "/me/playlists", FakeResponse(200, sp.page([
        sp.playlist(PL, "Mine"),
        sp.playlist("theirs", "Theirs", owner="other"),
    ])))


class TestAuthCommands:
    def test_redirect_uri(self, app):
        result = run(app, 'redirect-uri')
        assert result.exit_code == 0
        assert result.output.splitlines()[0] == 'http://127.0.0.1:9876/callback'

    def test_status_signed_in(self, app):
        result = run(app, 'status')
        assert result.exit_code == 0
        assert 'signed_in' in result.output
        assert 'Refresh token: present' in result.output

    def test_login(self, make_app, http, store):
        app = make_app()
        http.queue("POST", TOKEN_URL, token_response("acc", refresh="ref"))
        result = run(app, 'login')
        assert result.exit_code == 0, result.output
        assert 'Signed in' in result.output
        assert store.read_refresh_token() == 'ref'

    def test_login_when_signed_in_needs_force(self, app, http):
        result = run(app, 'login')
        assert result.exit_code == 0
        assert 'Already signed in' in result.output
        assert http.calls == []

    def test_login_failure_exits_nonzero(self, make_app, http):
        app = make_app()
        http.queue("POST", TOKEN_URL, FakeResponse(400, {"error": "invalid_grant"}))
        result = run(app, 'login')
        assert result.exit_code == 1
        assert '400' in result.output
        assert not app.auth.signed_in

    def test_logout(self, app):
        result = run(app, 'logout')
        assert result.exit_code == 0
        assert not app.store.has_credentials()
        assert 'Not signed in' in run(app, 'logout').output

    def test_config_redacted(self, app):
        result = run(app, 'config', '--section', 'spotify', '--redact')
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data['spotify']['client_id'] == '*** redacted ***'

    def test_config_unknown_section(self, app):
        assert run(app, 'config', '-s', 'nope').exit_code == 2


class TestPlaylistCommands:
    def test_whoami(self, app, http):
        http.queue("GET", "/me", FakeResponse(200, sp.me("user123", "Test User")))
        result = run(app, 'whoami')
        assert result.exit_code == 0
        assert 'Test User (user123)' in result.output

    def test_playlists_lists_editable_and_marks_selected(self, app, http):
        queue_overview(http)
        result = run(app, 'playlists')
        assert result.exit_code == 0
        assert 'Mine' in result.output
        assert 'Theirs' not in result.output
        assert '*' in result.output

    def test_playlists_all(self, app, http):
        queue_overview(http)
        result = run(app, 'playlists', '--all')
        assert 'Theirs' in result.output and 'read-only' in result.output

    def test_select_unselect_selection(self, app):
        assert run(app, 'select', 'pl-a').exit_code == 0
        assert run(app, 'select', 'pl-b', '--slot', '2').exit_code == 0
        assert app.selection.get() == 'pl-a'
        assert app.selection.get(2) == 'pl-b'
        shown = run(app, 'selection').output
        assert 'default: pl-a' in shown
        assert 'slot 2 [08:00-16:00): pl-b' in shown
        assert 'slot 1 [00:00-08:00): pl-a (default)' in shown
        assert run(app, 'unselect', '--slot', '2').exit_code == 0
        assert app.selection.get(2) == ''

    def test_select_invalid_slot(self, app):
        result = run(app, 'select', 'pl', '--slot', '7')
        assert result.exit_code == 2
        assert 'Invalid slot' in result.output

    def test_unauthorized_signs_out(self, app, http):
        http.queue("GET", "/me", FakeResponse(401))
        result = run(app, 'whoami')
        assert result.exit_code == 1
        assert "tracksaver login" in result.output
        assert not app.auth.signed_in

    def test_signed_out_hint(self, make_app):
        result = run(make_app(), 'whoami')
        assert result.exit_code == 1
        assert 'Not signed in' in result.output


class TestTrackCommands:
    def _queue_save(self, http, existing=()):
        queue_overview(http)
        http.queue("GET", "/me/player/currently-playing", FakeResponse(200, sp.currently_playing()))
        http.queue("GET", TRACKS, FakeResponse(200, sp.page([sp.track_item(t) for t in existing])))
        http.queue("POST", TRACKS, FakeResponse(201, {}))

    def test_save_records_history(self, app, http):
        app.selection.set(PL)
        self._queue_save(http)
        result = run(app, 'save')
        assert result.exit_code == 0, result.output
        assert 'Added Stub Track by Stub Artist to Mine' in result.output
        [entry] = app.history.load('user123')
        assert entry.track_name == 'Stub Track' and entry.playlist_name == 'Mine'

        listed = run(app, 'history')
        assert 'Stub Track - Stub Artist -> Mine' in listed.output

    def test_save_duplicate_is_not_an_error(self, app, http):
        app.selection.set(PL)
        self._queue_save(http, existing=['track_stub_1'])
        result = run(app, 'save')
        assert result.exit_code == 0
        assert 'already in Mine' in result.output
        assert http.calls_to("POST", TRACKS) == []
        assert app.history.load('user123') == []

    def test_save_without_selection(self, app, http):
        result = run(app, 'save')
        assert result.exit_code == 1
        assert 'No playlist selected' in result.output
        assert http.calls == []

    def test_shortcut_prints_compact_outcome(self, app, http):
        app.selection.set(PL)
        http.queue("GET", "/me/player/currently-playing", FakeResponse(200, sp.currently_playing()))
        http.queue("GET", TRACKS, FakeResponse(200, sp.page([])))
        http.queue("POST", TRACKS, FakeResponse(201, {}))
        result = run(app, 'shortcut', '--slot', '1')
        assert result.exit_code == 0
        assert result.output.strip() == 'Stub Track~success~track_stub_1'

    def test_shortcut_failure_still_exits_zero(self, app):
        result = run(app, 'shortcut')
        assert result.exit_code == 0
        assert result.output.strip() == '~~~No playlist selected'

    def test_shortcut_bad_config_is_encoded(self, test_config):
        test_config['selection']['boundary_belongs_to'] = 'sideways'
        result = CliRunner().invoke(cli, ['shortcut'], obj=test_config)
        assert result.exit_code == 0
        assert result.exception is None
        assert "~~~Invalid boundary_belongs_to: sideways" in result.output

    def test_history_delete_and_clear(self, app, http):
        from tracksaver.history import HistoryItem

        http.queue("GET", "/me", FakeResponse(200, sp.me("user123")))
        app.history.add('user123', HistoryItem.success('A', 'X'))
        app.history.add('user123', HistoryItem.success('B', 'Y'))
        assert run(app, 'history', '--delete', '0').exit_code == 0
        assert [i.track_name for i in app.history.load('user123')] == ['A']
        assert run(app, 'history', '--delete', '9').exit_code == 2
        assert run(app, 'history', '--clear').exit_code == 0
        assert app.history.load('user123') == []
