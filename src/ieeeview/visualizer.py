from __future__ import annotations

import logging
import signal
import time
import tkinter as tk
from typing import Callable

from .usecase import PRECISIONS, Precision, ViewResult, build_view, view_rows

logger = logging.getLogger(__name__)

UI_FONT = ("DejaVu Sans", 13)
UI_FONT_BOLD = ("DejaVu Sans", 13, "bold")
PANEL_TITLE_FONT = ("DejaVu Sans", 14, "bold")
ENTRY_FONT = ("DejaVu Sans Mono", 17, "bold")
VALUE_FONT = ("DejaVu Sans Mono", 13)
HINT_FONT = ("DejaVu Sans Mono", 10)
DEBOUNCE_MS = 30

PANEL_TITLES: dict[str, str] = {
    "float32": "float (IEEE754 binary32)",
    "float64": "double (IEEE754 binary64)",
}

# Superset of what the grammar accepts; the classifier makes the final call.
ALLOWED_CHARS = frozenset("0123456789eE+-.aAiInNfFtTyY")
HINT_TEXT = "Allowed: digits . + - e E NaN Inf Infinity (case-insensitive)"


def _make_copyable_entry(
    parent: tk.Widget,
    variable: tk.StringVar,
    *,
    bg: str,
    fg: str = "#1f2d3d",
) -> tk.Entry:
    entry = tk.Entry(
        parent,
        textvariable=variable,
        relief="flat",
        bd=0,
        highlightthickness=0,
        font=VALUE_FONT,
        fg=fg,
        bg=bg,
        readonlybackground=bg,
        takefocus=0,
    )
    entry.configure(state="readonly")
    return entry


class PrecisionPanel(tk.LabelFrame):
    def __init__(
        self,
        parent: tk.Widget,
        precision: Precision,
        on_text_change: Callable[[Precision, str], None],
    ) -> None:
        super().__init__(
            parent,
            text=PANEL_TITLES[precision],
            font=PANEL_TITLE_FONT,
            bg="#ffffff",
            fg="#22313f",
            bd=1,
            relief="solid",
            padx=10,
            pady=8,
        )
        self.precision = precision
        self._on_text_change = on_text_change
        self._render_cache: tuple[tuple[str, str], ...] | None = None
        self._row_vars: list[tk.StringVar] = []

        self.text_var = tk.StringVar(value="")
        self._build_ui()
        self.text_var.trace_add("write", self._on_var_write)

    def _build_ui(self) -> None:
        input_row = tk.Frame(self, bg="#ffffff")
        input_row.pack(fill="x")

        tk.Label(
            input_row,
            text="Input",
            width=8,
            anchor="w",
            bg="#ffffff",
            fg="#34495e",
            font=UI_FONT_BOLD,
        ).pack(side="left")

        validate_cmd = (self.register(self._validate_insertion), "%d", "%S")
        self.entry = tk.Entry(
            input_row,
            textvariable=self.text_var,
            font=ENTRY_FONT,
            relief="solid",
            bd=1,
            highlightthickness=1,
            highlightbackground="#b8b8b8",
            validate="key",
            validatecommand=validate_cmd,
        )
        self.entry.pack(side="left", fill="x", expand=True)
        self._default_bg = self.entry.cget("bg")
        self.entry.bind("<<Paste>>", self._on_paste)
        self.entry.bind("<Control-u>", self._on_ctrl_u_key)
        self.entry.bind("<Control-U>", self._on_ctrl_u_key)

        tk.Label(
            self,
            text=HINT_TEXT,
            anchor="w",
            bg="#ffffff",
            fg="#6c7a89",
            font=HINT_FONT,
        ).pack(fill="x", pady=(2, 8))

        self.output = tk.Frame(self, bg="#ffffff")
        self.output.pack(fill="both", expand=True)

    @staticmethod
    def _is_allowed_insertion(text: str) -> bool:
        return all(ch in ALLOWED_CHARS for ch in text)

    @staticmethod
    def _filter_allowed(text: str) -> str:
        return "".join(ch for ch in text if ch in ALLOWED_CHARS)

    def _validate_insertion(self, action: str, inserted: str) -> bool:
        # Tk action code 1 is an insertion; deletions always pass.
        if action != "1":
            return True
        return self._is_allowed_insertion(inserted)

    def _on_paste(self, _event: tk.Event) -> str:
        try:
            pasted = self.clipboard_get()
        except tk.TclError:
            return "break"

        filtered = self._filter_allowed(pasted)
        try:
            self.entry.delete(tk.SEL_FIRST, tk.SEL_LAST)
        except tk.TclError:
            pass
        self.entry.insert(tk.INSERT, filtered)
        return "break"

    @staticmethod
    def _on_ctrl_u_key(event: tk.Event) -> str:
        widget = event.widget
        if isinstance(widget, tk.Entry):
            cursor_index = widget.index(tk.INSERT)
            widget.delete(0, cursor_index)
        return "break"

    def _on_var_write(self, *_args) -> None:
        self._on_text_change(self.precision, self.text_var.get())

    def set_invalid(self, is_invalid: bool) -> None:
        if is_invalid:
            self.entry.configure(
                bg="#ffeaea",
                highlightthickness=2,
                highlightbackground="#cc4444",
            )
        else:
            self.entry.configure(
                bg=self._default_bg,
                highlightthickness=1,
                highlightbackground="#b8b8b8",
            )

    @staticmethod
    def _row_colour(state: str) -> str:
        if state == "Invalid":
            return "#cc4444"
        if state == "Incomplete":
            return "#7f8c8d"
        return "#1f2d3d"

    def apply_view(self, view: ViewResult) -> None:
        self.set_invalid(view.state == "Invalid")
        rows = tuple(view_rows(view))
        if self._render_cache == rows:
            return

        shape_changed = (
            self._render_cache is None
            or len(self._render_cache) != len(rows)
            or self._render_cache[0][1] != rows[0][1]
        )
        self._render_cache = rows

        if shape_changed:
            for child in self.output.winfo_children():
                child.destroy()
            self._row_vars = []
            colour = self._row_colour(view.state)
            for label, value in rows:
                row = tk.Frame(self.output, bg="#ffffff")
                row.pack(fill="x", pady=1)
                tk.Label(
                    row,
                    text=label,
                    width=20,
                    anchor="w",
                    bg="#ffffff",
                    fg="#34495e",
                    font=UI_FONT_BOLD,
                ).pack(side="left")
                var = tk.StringVar(value=value)
                _make_copyable_entry(row, var, bg="#ffffff", fg=colour).pack(
                    side="left", fill="x", expand=True, padx=(2, 0)
                )
                self._row_vars.append(var)
            return

        for var, (_label, value) in zip(self._row_vars, rows):
            var.set(value)


class ViewerFrame(tk.Frame):
    def __init__(self, parent: tk.Widget) -> None:
        super().__init__(parent, bg="#f5f7fa")

        self.status_var = tk.StringVar(value="Type a value to inspect its IEEE-754 fields.")
        self.panels: dict[str, PrecisionPanel] = {}
        self._pending_text: dict[str, str] = {}
        self._pending_input_ts: dict[str, float] = {}
        self._debounce_after_ids: dict[str, str] = {}
        self._request_id = 0

        self._build_ui()
        for precision in PRECISIONS:
            self._render(precision, "")

    def _build_ui(self) -> None:
        panels_host = tk.Frame(self, bg="#f5f7fa")
        panels_host.pack(fill="both", expand=True, padx=12, pady=(12, 8))

        for idx, precision in enumerate(PRECISIONS):
            panel = PrecisionPanel(panels_host, precision, self._on_text_change)
            padx = (0, 6) if idx == 0 else (6, 0)
            panel.pack(side="left", fill="both", expand=True, padx=padx)
            panel.entry.bind("<Tab>", self._on_entry_tab, add=True)
            panel.entry.bind("<Shift-Tab>", self._on_entry_shift_tab, add=True)
            panel.entry.bind("<ISO_Left_Tab>", self._on_entry_shift_tab, add=True)
            self.panels[precision] = panel

        status = tk.Label(
            self,
            textvariable=self.status_var,
            bg="#f5f7fa",
            fg="#3f5368",
            anchor="w",
            font=UI_FONT,
        )
        status.pack(fill="x", padx=12, pady=(0, 12))

    def _on_text_change(self, precision: Precision, text: str) -> None:
        self._pending_text[precision] = text
        self._pending_input_ts[precision] = time.perf_counter()
        after_id = self._debounce_after_ids.pop(precision, None)
        if after_id is not None:
            self.after_cancel(after_id)
        self._debounce_after_ids[precision] = self.after(
            DEBOUNCE_MS, self._dispatch_render, precision
        )

    def _dispatch_render(self, precision: Precision) -> None:
        self._debounce_after_ids.pop(precision, None)
        text = self._pending_text.pop(precision, None)
        if text is None:
            return
        input_ts = self._pending_input_ts.pop(precision, time.perf_counter())
        self._render(precision, text, input_ts)

    def _render(self, precision: Precision, text: str, input_ts: float | None = None) -> None:
        self._request_id += 1
        compute_start = time.perf_counter()
        try:
            view = build_view(text, precision)
        except ValueError as exc:
            self.status_var.set(f"Update failed: {exc}")
            return
        compute_end = time.perf_counter()

        self.panels[precision].apply_view(view)
        if view.state == "Invalid":
            self.status_var.set(f"Invalid {precision} input: {view.normalized_text!r}")
        elif view.state == "Incomplete":
            self.status_var.set(f"Waiting for more input ({view.message}).")
        else:
            self.status_var.set(f"{precision}: {view.normalized_text}")
        apply_end = time.perf_counter()

        if input_ts is not None:
            logger.debug(
                "req=%d precision=%s compute_ms=%.2f apply_ms=%.2f total_ms=%.2f",
                self._request_id,
                precision,
                (compute_end - compute_start) * 1000.0,
                (apply_end - compute_end) * 1000.0,
                (apply_end - input_ts) * 1000.0,
            )

    def focus_primary_input(self) -> None:
        self._focus_without_selection(self.panels[PRECISIONS[0]].entry)

    @staticmethod
    def _focus_without_selection(entry: tk.Entry) -> None:
        entry.focus_set()
        try:
            entry.selection_clear()
            entry.icursor(tk.END)
        except tk.TclError:
            return

    def _on_entry_tab(self, event: tk.Event) -> str:
        return self.cycle_entry_focus(reverse=False, widget=event.widget)

    def _on_entry_shift_tab(self, event: tk.Event) -> str:
        return self.cycle_entry_focus(reverse=True, widget=event.widget)

    def cycle_entry_focus(self, reverse: bool, widget: object | None = None) -> str:
        entries = [self.panels[precision].entry for precision in PRECISIONS]
        if widget in entries:
            current_index = entries.index(widget)
            step = -1 if reverse else 1
            target = entries[(current_index + step) % len(entries)]
        else:
            target = entries[-1] if reverse else entries[0]
        self._focus_without_selection(target)
        return "break"

    def destroy(self) -> None:
        for after_id in self._debounce_after_ids.values():
            try:
                self.after_cancel(after_id)
            except tk.TclError:
                pass
        self._debounce_after_ids.clear()
        super().destroy()


class ViewerApp(tk.Tk):
    def __init__(self) -> None:
        super().__init__()
        self.title("IEEE754 Viewer")
        self.geometry("1200x760")
        self.minsize(900, 560)
        self.configure(bg="#f5f7fa")

        self.viewer = ViewerFrame(self)
        self.viewer.pack(fill="both", expand=True)

        self.bind_all("<Escape>", self._on_escape_quit, add=True)
        self._install_signal_handlers()
        self.after(10, self.viewer.focus_primary_input)

    def _install_signal_handlers(self) -> None:
        def _on_sigint(_signum: int, _frame: object) -> None:
            self.after(0, self._quit_app)

        signal.signal(signal.SIGINT, _on_sigint)

    def _quit_app(self) -> None:
        self.quit()
        self.destroy()

    def _on_escape_quit(self, _event: tk.Event) -> str:
        self._quit_app()
        return "break"
