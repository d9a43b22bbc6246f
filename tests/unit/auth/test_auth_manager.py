"""Sign-in state machine."""
import pytest

from tracksaver.auth.manager import AuthManager, SessionState
from tracksaver.errors import SessionFailed, SessionStateError


class StubSession:
    def __init__(self, store, fail=None):
        self.store = store
        self.fail = fail
        self.cancelled = False

    def login(self):
        if self.fail:
            raise self.fail
        self.store.save_refresh_token("r")

    def cancel(self):
        self.cancelled = True
        return True


class TestTransitions:
    def test_initial_state_follows_stored_credentials(self, store, signed_in_store):
        assert AuthManager(signed_in_store, StubSession(signed_in_store)).state is SessionState.SIGNED_IN

    def test_initial_state_signed_out_without_credentials(self, store):
        assert AuthManager(store, StubSession(store)).state is SessionState.SIGNED_OUT

    def test_login_success(self, store):
        mgr = AuthManager(store, StubSession(store))
        mgr.login()
        assert mgr.signed_in

    def test_login_failure_returns_to_signed_out(self, store):
        mgr = AuthManager(store, StubSession(store, fail=SessionFailed()))
        with pytest.raises(SessionFailed):
            mgr.login()
        assert mgr.state is SessionState.SIGNED_OUT

    def test_login_while_signed_in_is_rejected(self, signed_in_store):
        mgr = AuthManager(signed_in_store, StubSession(signed_in_store))
        with pytest.raises(SessionStateError):
            mgr.login()

    def test_logout_deletes_credentials(self, signed_in_store):
        mgr = AuthManager(signed_in_store, StubSession(signed_in_store))
        mgr.logout()
        assert mgr.state is SessionState.SIGNED_OUT
        assert signed_in_store.has_credentials() is False

    def test_logout_when_signed_out_is_rejected(self, store):
        with pytest.raises(SessionStateError):
            AuthManager(store, StubSession(store)).logout()

    def test_invalidate_signs_out_and_wipes(self, signed_in_store):
        mgr = AuthManager(signed_in_store, StubSession(signed_in_store))
        mgr.invalidate()
        assert mgr.state is SessionState.SIGNED_OUT
        assert signed_in_store.has_credentials() is False
        mgr.invalidate()  # already signed out: no error

    def test_cancel_login_delegates(self, store):
        session = StubSession(store)
        assert AuthManager(store, session).cancel_login() is True
        assert session.cancelled
