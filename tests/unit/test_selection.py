"""Playlist selection per slot and time-of-day slot resolution."""
from datetime import datetime

import pytest

from tracksaver.selection import PlaylistSelection


def at(hour, minute=0):
    return datetime(2025, 3, 1, hour, minute)


@pytest.fixture
def selection(tmp_path):
    return PlaylistSelection(tmp_path / "selection.json")


class TestStorage:
    def test_unset_is_empty_string(self, selection):
        assert selection.get() == ""
        assert selection.get(2) == ""

    def test_set_get_clear(self, selection):
        selection.set("pl-default")
        selection.set("pl-2", slot=2)
        assert selection.get() == "pl-default"
        assert selection.get(2) == "pl-2"
        selection.clear(2)
        assert selection.get(2) == ""
        assert selection.all() == {"default": "pl-default"}

    def test_persists_across_instances(self, tmp_path):
        PlaylistSelection(tmp_path / "s.json").set("pl", slot=1)
        assert PlaylistSelection(tmp_path / "s.json").get(1) == "pl"

    def test_slot_out_of_range(self, selection):
        with pytest.raises(ValueError):
            selection.set("pl", slot=4)
        with pytest.raises(ValueError):
            selection.get(0)

    def test_empty_playlist_id_rejected(self, selection):
        with pytest.raises(ValueError):
            selection.set("")

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text("[1, 2", encoding="utf-8")
        assert PlaylistSelection(path).all() == {}


class TestActiveSlot:
    @pytest.mark.parametrize("when,slot", [
        (at(0), 1), (at(7, 59), 1), (at(8), 2), (at(15, 30), 2), (at(16), 3), (at(23, 59), 3),
    ])
    def test_boundary_belongs_to_next(self, selection, when, slot):
        assert selection.active_slot(when) == slot

    @pytest.mark.parametrize("when,slot", [
        (at(8), 1), (at(8, 1), 2), (at(16), 2), (at(0), 3), (at(0, 1), 1),
    ])
    def test_boundary_belongs_to_previous(self, tmp_path, when, slot):
        sel = PlaylistSelection(tmp_path / "s.json", boundary_belongs_to="previous")
        assert sel.active_slot(when) == slot

    def test_before_first_start_wraps_to_last_slot(self, tmp_path):
        sel = PlaylistSelection(tmp_path / "s.json", slot_start_hours=[6, 18])
        assert sel.active_slot(at(3)) == 2
        assert sel.active_slot(at(6)) == 1

    def test_invalid_hours(self, tmp_path):
        with pytest.raises(ValueError):
            PlaylistSelection(tmp_path / "s.json", slot_start_hours=[8, 8])
        with pytest.raises(ValueError):
            PlaylistSelection(tmp_path / "s.json", slot_start_hours=[24])
        with pytest.raises(ValueError):
            PlaylistSelection(tmp_path / "s.json", boundary_belongs_to="middle")


class TestResolve:
    def test_explicit_slot(self, selection):
        selection.set("pl-3", slot=3)
        assert selection.resolve(3) == "pl-3"

    def test_time_of_day_slot(self, selection):
        selection.set("morning", slot=1)
        selection.set("day", slot=2)
        assert selection.resolve(now=at(9)) == "day"
        assert selection.resolve(now=at(1)) == "morning"

    def test_falls_back_to_default(self, selection):
        selection.set("fallback")
        assert selection.resolve(2) == "fallback"
        assert selection.resolve(now=at(20)) == "fallback"

    def test_nothing_configured(self, selection):
        assert selection.resolve(now=at(12)) == ""
