from tracksaver.config import load_config


def test_env_override_slot_hours(monkeypatch):
    # Ensure no dotenv auto-loading or prior env variable contamination
    monkeypatch.delenv('TRACKSAVER_ENABLE_DOTENV', raising=False)
    monkeypatch.delenv('TRACKSAVER__SELECTION__SLOT_START_HOURS', raising=False)
    cfg_default = load_config()
    assert cfg_default['selection']['slot_start_hours'] == [0, 8, 16]
    # override with JSON array
    monkeypatch.setenv('TRACKSAVER__SELECTION__SLOT_START_HOURS', '[6, 12, 18, 22]')
    cfg = load_config()
    assert cfg['selection']['slot_start_hours'] == [6, 12, 18, 22]


def test_numeric_looking_client_id_stays_string(monkeypatch):
    monkeypatch.setenv('TRACKSAVER__SPOTIFY__CLIENT_ID', '12345')
    assert load_config()['spotify']['client_id'] == '12345'
