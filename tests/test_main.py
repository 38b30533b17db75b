# tests/test_main.py
import logging

from multicache import main as main_module


def test_main_runs_examples_on_every_configured_connection(fake_server, client_factory):
    env = {
        "REDIS_CONNECTION_0": "localhost,6379,15,360,default",
        "REDIS_CONNECTION_1": "localhost,6379,5,0,test_a",
    }
    assert main_module.main(env, client_factory=client_factory) == 0
    # every example key is cleaned up again
    assert not fake_server.keyspaces.get(("localhost", 6379, 15))
    assert not fake_server.keyspaces.get(("localhost", 6379, 5))
    assert all(c.closed for c in fake_server.clients)


def test_main_exits_with_error_on_bad_configuration(client_factory, caplog):
    env = {"REDIS_CONNECTION_0": "localhost,6379,0,sixty,default"}
    with caplog.at_level(logging.CRITICAL, logger="multicache.main"):
        assert main_module.main(env, client_factory=client_factory) == 1
    assert "WAS NOT STARTED" in caplog.text


def test_main_exits_with_error_when_redis_is_offline(fake_server, client_factory):
    fake_server.offline.add(("localhost", 6379))
    env = {"REDIS_CONNECTION_0": "localhost,6379,0,60,default"}
    assert main_module.main(env, client_factory=client_factory) == 1


def test_resolve_log_level_falls_back_to_info():
    assert main_module.resolve_log_level("debug") == "DEBUG"
    assert main_module.resolve_log_level("WARNING") == "WARNING"
    assert main_module.resolve_log_level("VERBOSE") == "INFO"


def test_main_with_unknown_log_level_still_returns_exit_code(monkeypatch, client_factory):
    monkeypatch.setattr(main_module, "LOG_LEVEL", "VERBOSE")
    env = {"REDIS_CONNECTION_0": "localhost,6379,0,sixty,default"}
    assert main_module.main(env, client_factory=client_factory) == 1
