from utils import qr_config
from utils.environment import Environment, detect_environment
from utils.qr_engine import get_generation_engine
from utils.storage_factory import get_storage_factory


def test_get_qr_style_known_theme():
    style = qr_config.get_qr_style("ocean")
    assert style == {"fg": "#0EA5E9", "bg": "#E0F2FE", "name": "ocean"}


def test_get_qr_style_unknown_falls_back():
    style = qr_config.get_qr_style("does-not-exist")
    assert style["name"] == "default"
    assert style["fg"] == "#000000"
    assert qr_config.get_qr_style(None)["name"] == "default"


def test_get_branding_format():
    assert qr_config.get_branding("dark") == {"colors": {"foreground": "#FFFFFF", "background": "#0D0D0D"}}


def test_env_flag(monkeypatch):
    monkeypatch.setenv("QR_TEST_FLAG", " Yes ")
    assert qr_config._env_flag("QR_TEST_FLAG", False) is True
    monkeypatch.setenv("QR_TEST_FLAG", "0")
    assert qr_config._env_flag("QR_TEST_FLAG", True) is False
    monkeypatch.delenv("QR_TEST_FLAG")
    assert qr_config._env_flag("QR_TEST_FLAG", True) is True


def test_detect_environment_follows_config(monkeypatch):
    monkeypatch.setattr(qr_config, "ENABLE_NETWORK", False)
    monkeypatch.setattr(qr_config, "REMOTE_PROBE_TIMEOUT", 1.5)
    env = detect_environment()
    assert isinstance(env, Environment)
    assert env.network is False
    assert env.remote_probe_timeout == 1.5


def test_process_wide_helpers_are_shared():
    assert get_generation_engine() is get_generation_engine()
    assert get_storage_factory() is get_storage_factory()
    assert [s.name for s in get_generation_engine().strategies] == ["qrcode-pil", "google-charts", "qr-server"]
