"""
Tests for NoPontoApp wiring and the credentials dialog, with Tk widgets
mocked (no display needed) and worker threads captured instead of started.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("tkinter")

from noponto_core.constants import THEME  # noqa: E402
from noponto_core.errors import StorageError  # noqa: E402
from noponto_core.notifier import (  # noqa: E402
    CompositeSink, LoggingSink, Notification, KIND_WARNING, deliver,
)
from noponto_core.popup import OverlaySink  # noqa: E402
from noponto_core.app import NoPontoApp  # noqa: E402


@pytest.fixture
def app():
    app = NoPontoApp(MagicMock(), MagicMock(), manager=MagicMock())
    app._root = MagicMock()
    return app


@pytest.fixture
def widgets():
    with patch("noponto_core.app.tk.Toplevel") as top, \
            patch("noponto_core.app.tk.Label") as label, \
            patch("noponto_core.app.tk.Entry"), \
            patch("noponto_core.app.tk.Frame"), \
            patch("noponto_core.app.tk.Button") as button, \
            patch("noponto_core.app.tk.StringVar", side_effect=lambda value="": MagicMock()):
        yield {"top": top, "label": label, "button": button}


@pytest.fixture
def workers():
    """Targets handed to threading.Thread, in order; tests run them by hand."""
    started = []

    def fake_thread(target, daemon):
        started.append(target)
        return MagicMock()

    with patch("noponto_core.app.threading.Thread", side_effect=fake_thread):
        yield started


def _command(button_mock, text):
    for call in button_mock.call_args_list:
        if call.kwargs.get("text") == text:
            return call.kwargs["command"]
    raise AssertionError(f"no button {text!r}")


def _last_message(widgets):
    return widgets["label"].return_value.config.call_args.kwargs


def _fill(app, config):
    for key, value in config.to_dict().items():
        app._settings_entries[key].get.return_value = value


class TestWiring:

    def test_alerts_go_to_overlay_and_log(self, app):
        app._wire_session()
        assert isinstance(app._sink, CompositeSink)
        kinds = {type(s) for s in app._sink._sinks}
        assert kinds == {OverlaySink, LoggingSink}

    def test_every_alert_is_logged(self, app, caplog):
        app._wire_session()
        with caplog.at_level(logging.INFO, logger="noponto"):
            assert deliver(app._sink, Notification(KIND_WARNING, "Atenção", "3 minutos")) is True
        assert "Atenção" in caplog.text

    def test_session_events_are_logged(self, app, caplog):
        app._wire_session()
        on_warning = app._manager.add_warning_listener.call_args.args[0]
        on_complete = app._manager.add_completion_listener.call_args.args[0]
        with caplog.at_level(logging.INFO, logger="noponto"):
            on_warning("abc", 3)
            on_complete("abc")
        assert "work_almost_complete event (session abc, 3 min left)" in caplog.text
        assert "work_complete event (session abc)" in caplog.text


class TestSettingsDialog:

    def test_credentials_load_on_worker_thread(self, app, widgets, workers, ponto_config):
        app._vault.load_config.return_value = ponto_config
        app._open_settings()
        app._vault.load_config.assert_not_called()
        assert len(workers) == 1

        workers[0]()
        app._vault.load_config.assert_called_once_with()
        app._poll_results()

        shown = {k: v.set.call_args.args[0] for k, v in app._settings_entries.items()}
        assert shown == ponto_config.to_dict()

    def test_nothing_stored_leaves_fields_blank(self, app, widgets, workers):
        app._vault.load_config.return_value = None
        app._open_settings()
        workers[0]()
        app._poll_results()
        assert all(not v.set.called for v in app._settings_entries.values())

    def test_load_failure_is_reported(self, app, widgets, workers):
        app._vault.load_config.side_effect = StorageError("disk gone")
        app._open_settings()
        workers[0]()
        app._poll_results()
        assert _last_message(widgets)["fg"] == THEME["error"]
        assert all(not v.set.called for v in app._settings_entries.values())

    def test_save_runs_on_worker_thread(self, app, widgets, workers, ponto_config):
        app._vault.load_config.return_value = None
        app._open_settings()
        workers[0]()
        app._poll_results()

        _fill(app, ponto_config)
        _command(widgets["button"], "Salvar")()
        app._vault.save_config.assert_not_called()
        assert len(workers) == 2

        workers[1]()
        app._vault.save_config.assert_called_once_with(ponto_config)
        app._poll_results()
        assert _last_message(widgets) == {
            "text": "Configurações salvas com sucesso!", "fg": THEME["success"],
        }
        top = widgets["top"].return_value
        top.after.assert_called_once_with(2000, top.destroy)

    def test_save_failure_keeps_dialog_open(self, app, widgets, workers, ponto_config):
        app._vault.load_config.return_value = None
        app._vault.save_config.side_effect = StorageError("read-only")
        app._open_settings()
        workers[0]()
        app._poll_results()

        _fill(app, ponto_config)
        _command(widgets["button"], "Salvar")()
        workers[1]()
        app._poll_results()
        assert _last_message(widgets)["fg"] == THEME["error"]
        widgets["top"].return_value.after.assert_not_called()

    def test_save_while_load_in_flight_is_refused(self, app, widgets, workers, ponto_config):
        app._open_settings()
        _fill(app, ponto_config)
        _command(widgets["button"], "Salvar")()
        assert len(workers) == 1
        assert _last_message(widgets)["fg"] == THEME["error"]
        app._vault.save_config.assert_not_called()

    def test_blank_fields_are_not_saved(self, app, widgets, workers):
        app._vault.load_config.return_value = None
        app._open_settings()
        workers[0]()
        app._poll_results()
        for var in app._settings_entries.values():
            var.get.return_value = ""
        _command(widgets["button"], "Salvar")()
        assert len(workers) == 1
        assert _last_message(widgets)["text"] == "Todos os campos são obrigatórios!"
