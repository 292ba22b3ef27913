"""
NoPontoApp — the Tkinter main window.

Everything UI-related runs on the Tk main thread and is scheduled with
root.after(). Blocking work (time-card API calls, credential vault load and
save) runs on short-lived worker threads whose results come back through a
queue drained by _poll_results(). Monitor threads reach the UI only via
OverlaySink.
"""

import queue
import threading
import tkinter as tk

from .constants import (
    AGENT_VERSION, THEME, STATUS_REFRESH_MS, SINK_DRAIN_MS, CONFIG_REQUIRED_FIELDS,
    TEST_TITLE, TEST_MESSAGE,
)
from .config import log
from .errors import NoPontoError, ParseError
from .notifier import CompositeSink, LoggingSink, Notification, KIND_TEST, deliver
from .popup import OverlaySink
from .session import SessionManager
from .timemath import (
    WorkPeriodInput, validate_time_sequence, inputs_from_clock_records,
    format_minutes, progress_percent, IMPORT_EMPTY, IMPORT_TOO_MANY,
)
from .vault import PontoConfig

_FIELDS = (("start1", "Início 1"), ("end1", "Fim 1"), ("start2", "Início 2"))


class NoPontoApp:
    """
    Owns the Tk main loop. Schedules:
      _refresh_status() — status label + button state      (every 1s)
      _poll_results()   — worker-thread results → UI        (every 200ms)
    """

    def __init__(self, vault, client, settings=None, manager=None):
        self._vault = vault
        self._client = client
        self._settings = settings or {}
        self._manager = manager
        self._root = None
        self._sink = None
        self._vars = {}
        self._results = queue.Queue()
        self._busy = False
        self._settings_top = None
        self._settings_entries = {}
        self._settings_message = None

    def run(self):
        """Build the window and block on Tk mainloop. Call from main thread."""
        self._root = tk.Tk()
        self._root.title("NoPonto - Controle de Ponto")
        self._root.configure(bg=THEME["bg_window"])
        self._root.resizable(False, False)
        # Closing the window hides it; monitoring keeps running.
        self._root.protocol("WM_DELETE_WINDOW", self._root.withdraw)

        self._wire_session()
        self._build_ui()
        self._root.after(STATUS_REFRESH_MS, self._refresh_status)
        self._root.after(SINK_DRAIN_MS, self._poll_results)

        log.info("NoPonto v%s window started", AGENT_VERSION)
        try:
            self._root.mainloop()
        finally:
            self._manager.stop_session()
            log.info("NoPontoApp shut down.")

    def _wire_session(self):
        # Overlay for the user, log line for every alert.
        self._sink = CompositeSink(OverlaySink(self._root), LoggingSink())
        if self._manager is None:
            self._manager = SessionManager(sink=self._sink, settings=self._settings)
        self._manager.add_warning_listener(
            lambda sid, remaining: log.info(
                "work_almost_complete event (session %s, %d min left)", sid, remaining))
        self._manager.add_completion_listener(
            lambda sid: log.info("work_complete event (session %s)", sid))

    def stop(self):
        try:
            self._root.quit()
        except Exception:
            pass

    # ─── UI construction ─────────────────────────────────────

    def _build_ui(self):
        card = tk.Frame(self._root, bg=THEME["bg_card"], padx=24, pady=20,
                        highlightbackground=THEME["border"], highlightthickness=1)
        card.pack(padx=16, pady=16)

        tk.Label(card, text="Registro de Ponto", font=("Segoe UI", 15, "bold"),
                 fg=THEME["text_primary"], bg=THEME["bg_card"]).grid(
            row=0, column=0, columnspan=3, pady=(0, 12))

        for col, (key, label) in enumerate(_FIELDS):
            tk.Label(card, text=label, fg=THEME["text_secondary"],
                     bg=THEME["bg_card"]).grid(row=1, column=col, padx=6)
            var = tk.StringVar()
            var.trace_add("write", lambda *_: self._validate_inputs())
            self._vars[key] = var
            tk.Entry(card, textvariable=var, width=8, justify="center",
                     font=("Segoe UI", 13)).grid(row=2, column=col, padx=6, pady=(2, 8))

        self._error_label = tk.Label(card, text="", fg=THEME["error"], bg=THEME["bg_card"])
        self._error_label.grid(row=3, column=0, columnspan=3)

        self._toggle_btn = tk.Button(
            card, text="Iniciar monitoramento", bg=THEME["primary"], fg="white",
            activebackground=THEME["primary_hover"], relief="flat", padx=16, pady=6,
            command=self._on_toggle,
        )
        self._toggle_btn.grid(row=4, column=0, columnspan=3, pady=8, sticky="ew")

        self._status_label = tk.Label(card, text="Nenhuma sessão ativa", font=("Segoe UI", 11),
                                      fg=THEME["text_primary"], bg=THEME["bg_card"], justify="left")
        self._status_label.grid(row=5, column=0, columnspan=3, pady=(4, 10))

        actions = tk.Frame(card, bg=THEME["bg_card"])
        actions.grid(row=6, column=0, columnspan=3)
        self._import_btn = tk.Button(actions, text="Importar do PontoMais", relief="flat",
                                     command=self._on_import)
        self._import_btn.pack(side="left", padx=4)
        tk.Button(actions, text="Testar notificação", relief="flat",
                  command=self._on_test_notification).pack(side="left", padx=4)
        tk.Button(actions, text="Configurações", relief="flat",
                  command=self._open_settings).pack(side="left", padx=4)
        tk.Button(actions, text="Sair", relief="flat", command=self.stop).pack(side="left", padx=4)

    def _inputs(self):
        return WorkPeriodInput(*(self._vars[k].get().strip() for k, _ in _FIELDS))

    def _set_inputs(self, inputs):
        for key, _ in _FIELDS:
            self._vars[key].set(getattr(inputs, key))

    def _validate_inputs(self):
        i = self._inputs()
        _, errors = validate_time_sequence(i.start1, i.end1, i.start2)
        if errors:
            names = ", ".join(label for key, label in _FIELDS if key in errors)
            self._error_label.config(text=f"Sequência de horários inválida: {names}")
        else:
            self._error_label.config(text="")

    # ─── Session control ─────────────────────────────────────

    def _on_toggle(self):
        if self._manager.is_monitoring:
            self._manager.stop_session()
            return
        i = self._inputs()
        try:
            self._manager.start_session(i.start1, i.end1, i.start2)
        except ParseError as e:
            self._error_label.config(text=str(e))

    def _refresh_status(self):
        try:
            status = self._manager.get_status()
            if status is None:
                text = "Nenhuma sessão ativa"
            elif status.is_complete:
                text = f"Jornada completa! (saída prevista {status.end_time})"
            else:
                pct = progress_percent(status.remaining_minutes)
                text = (f"Faltam {format_minutes(status.remaining_minutes)}"
                        f" — saída às {status.end_time} ({pct:.0f}%)")
            self._status_label.config(text=text)
            self._toggle_btn.config(
                text="Parar monitoramento" if self._manager.is_monitoring else "Iniciar monitoramento")
        except Exception as e:
            log.error("_refresh_status error: %s", e)
        self._root.after(STATUS_REFRESH_MS, self._refresh_status)

    def _on_test_notification(self):
        deliver(self._sink, Notification(KIND_TEST, TEST_TITLE, TEST_MESSAGE))

    # ─── Worker threads ──────────────────────────────────────

    def _run_async(self, name, fn, *args):
        """Run ``fn`` on a worker; ``_on_<name>_done(ok, value)`` gets the result.
        Returns False (and does nothing) while another call is in flight."""
        if self._busy:
            return False
        self._busy = True

        def do_call():
            try:
                self._results.put((name, True, fn(*args)))
            except Exception as e:
                self._results.put((name, False, e))

        threading.Thread(target=do_call, daemon=True).start()
        return True

    def _poll_results(self):
        try:
            while True:
                try:
                    name, ok, value = self._results.get_nowait()
                except queue.Empty:
                    break
                self._busy = False
                handler = getattr(self, f"_on_{name}_done")
                handler(ok, value)
        except Exception as e:
            log.error("_poll_results error: %s", e, exc_info=True)
        self._root.after(SINK_DRAIN_MS, self._poll_results)

    def _on_import(self):
        if self._manager.is_monitoring:
            self._error_label.config(text="Pare o monitoramento antes de importar novos horários.")
            return
        if self._busy:
            return
        self._import_btn.config(text="Buscando...")
        self._run_async("import", self._client.fetch_today_records_from_vault, self._vault)

    def _on_import_done(self, ok, value):
        self._import_btn.config(text="Importar do PontoMais")
        if not ok:
            log.warning("Import failed: %s", value)
            self._error_label.config(text=f"Erro na importação: {value}")
            return
        result = inputs_from_clock_records(value, self._inputs())
        if result.outcome == IMPORT_EMPTY:
            self._error_label.config(text="Não foram encontrados registros de ponto para hoje.")
        elif result.outcome == IMPORT_TOO_MANY:
            self._error_label.config(
                text=f"Foram encontrados {len(value)} registros. Já foram feitos 4 ou mais hoje.")
        else:
            self._set_inputs(result.inputs)
            log.info("Imported %d clock record(s)", len(value))

    # ─── Credentials dialog ──────────────────────────────────

    def _open_settings(self):
        top = tk.Toplevel(self._root)
        top.title("Configurações da API PontoMais")
        top.configure(bg=THEME["bg_card"], padx=20, pady=16)
        top.resizable(False, False)

        entries = {}
        for row, key in enumerate(CONFIG_REQUIRED_FIELDS):
            tk.Label(top, text=key, bg=THEME["bg_card"], fg=THEME["text_secondary"]).grid(
                row=row, column=0, sticky="w", pady=3)
            var = tk.StringVar(value="")
            tk.Entry(top, textvariable=var, width=42,
                     show="" if key == "employeeId" else "•").grid(row=row, column=1, pady=3)
            entries[key] = var

        message = tk.Label(top, text="", bg=THEME["bg_card"], wraplength=360)
        message.grid(row=len(entries), column=0, columnspan=2, pady=(8, 4))

        self._settings_top = top
        self._settings_entries = entries
        self._settings_message = message

        def collect():
            try:
                return PontoConfig.from_dict({k: v.get().strip() for k, v in entries.items()})
            except NoPontoError:
                message.config(text="Todos os campos são obrigatórios!", fg=THEME["error"])
                return None

        def start(name, fn, arg, pending):
            if self._run_async(name, fn, arg):
                message.config(text=pending, fg=THEME["text_secondary"])
            else:
                message.config(text="Aguarde a operação em andamento.", fg=THEME["error"])

        def on_save():
            config = collect()
            if config is not None:
                start("settings_save", self._vault.save_config, config, "Salvando...")

        def on_test():
            config = collect()
            if config is not None:
                start("api_test", self._client.test_connection, config, "Testando...")

        buttons = tk.Frame(top, bg=THEME["bg_card"])
        buttons.grid(row=len(entries) + 1, column=0, columnspan=2, pady=(6, 0))
        tk.Button(buttons, text="Testar", relief="flat", command=on_test).pack(side="left", padx=4)
        tk.Button(buttons, text="Salvar", relief="flat", bg=THEME["primary"], fg="white",
                  command=on_save).pack(side="left", padx=4)

        if self._run_async("settings_load", self._vault.load_config):
            message.config(text="Carregando...", fg=THEME["text_secondary"])

    def _settings_feedback(self, text, color):
        try:
            if self._settings_message is not None:
                self._settings_message.config(text=text, fg=color)
        except tk.TclError:
            pass  # dialog already closed

    def _on_settings_load_done(self, ok, value):
        if not ok:
            log.error("Could not load saved credentials: %s", value)
            self._settings_feedback("Não foi possível ler as credenciais salvas.", THEME["error"])
            return
        self._settings_feedback("", THEME["text_secondary"])
        if value is None:
            return
        current = value.to_dict()
        try:
            for key, var in self._settings_entries.items():
                var.set(current.get(key, ""))
        except tk.TclError:
            pass

    def _on_settings_save_done(self, ok, value):
        if not ok:
            log.error("Saving credentials failed: %s", value)
            self._settings_feedback("Erro ao salvar configurações!", THEME["error"])
            return
        self._settings_feedback("Configurações salvas com sucesso!", THEME["success"])
        top = self._settings_top
        if top is not None:
            try:
                top.after(2000, top.destroy)
            except tk.TclError:
                pass

    def _on_api_test_done(self, ok, value):
        if ok:
            log.info("Time-card API test response: %s", value[:500])
            self._settings_feedback(
                "Teste realizado com sucesso! Veja o log para a resposta.", THEME["success"])
        else:
            self._settings_feedback(f"Erro no teste: {value}", THEME["error"])
