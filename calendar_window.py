"""Single-month mark calendar window (tkinter) with a reason side panel."""

import os
from datetime import date
from tkinter import filedialog, messagebox
from tkinter import font as tkfont
import tkinter as tk

from calendar_logic import (
    GRID_COLUMNS,
    GRID_ROWS,
    WEEKDAY_LABELS,
    DayCell,
    cell_position,
    month_title,
    weekday_label,
)
from exporter import export_filename, export_month
from jp_holidays import HolidayFetcher
from marks import ANNOTATED_KINDS, MarkState, display_reason
from render import (
    BLUE_TEXT,
    CELL_BORDER,
    CELL_H,
    CELL_W,
    RED_TEXT,
    Circle,
    Path,
    cell_fill,
    date_text_color,
    mark_glyph,
)
from settings import load_settings, save_settings
from state import CalendarState

# Colours
ACCENT = "#2563EB"
PANEL_BG = "#F9FAFB"
GRID_BG = "white"
TODAY_BORDER = "#FCD34D"
HINT_FG = "#555555"

PANEL_TITLES = {
    MarkState.CROSS: ("✕", "#EF4444"),
    MarkState.TRIANGLE: ("△", "#CA8A04"),
}


class _ToolTip:
    """Lightweight shared tooltip for holiday labels."""

    __slots__ = ("_root", "_tw")

    def __init__(self, root: tk.Tk) -> None:
        self._root = root
        self._tw: tk.Toplevel | None = None

    def show(self, widget: tk.Widget, text: str) -> None:
        self.hide()
        tw = tk.Toplevel(self._root)
        tw.wm_overrideredirect(True)
        tw.wm_attributes("-topmost", True)
        lbl = tk.Label(
            tw, text=text, bg="#FFFFE0", fg="black",
            relief="solid", borderwidth=1, padx=6, pady=3, justify="left",
        )
        lbl.pack()
        x = widget.winfo_rootx() + widget.winfo_width() // 2
        y = widget.winfo_rooty() + widget.winfo_height() + 2
        tw.wm_geometry(f"+{x}+{y}")
        self._tw = tw

    def hide(self) -> None:
        if self._tw:
            self._tw.destroy()
            self._tw = None


class CalendarWindow:
    """Month grid on the left, Cross/Triangle reason memos on the right."""

    def __init__(self) -> None:
        self.root = tk.Tk()
        self.root.title("Mark Calendar")
        self.root.resizable(True, True)
        self.root.configure(bg=GRID_BG)

        self._setup_fonts()

        settings = load_settings()
        self._export_dir: str | None = settings["export_dir"]
        self._saved_width: int | None = settings["window_width"]
        self._saved_height: int | None = settings["window_height"]

        self.state = CalendarState()
        self._fetcher = HolidayFetcher(
            self._deliver_holidays,
            url_template=settings["holiday_api_url"],
            timeout=settings["holiday_timeout"],
        )

        # Widget-to-date mapping (filled during _refresh)
        self._widget_dates: dict[int, date] = {}
        self._widget_cells: dict[int, DayCell] = {}

        # Reason editor state
        self._editing: tuple[date, MarkState] | None = None
        self._editor: tk.Text | None = None

        self._build_shell()
        self._tooltip = _ToolTip(self.root)
        self._request_holidays()
        self._refresh()

        self.root.bind("<Escape>", self._on_escape)
        self.root.bind("<Configure>", self._on_configure)
        self.root.protocol("WM_DELETE_WINDOW", self.hide)
        self.root.withdraw()

    # ------------------------------------------------------------------
    # Fonts
    # ------------------------------------------------------------------
    def _setup_fonts(self) -> None:
        families = tkfont.families(self.root)
        base = "Yu Gothic UI" if "Yu Gothic UI" in families else "TkDefaultFont"
        self.font_normal = tkfont.Font(family=base, size=10)
        self.font_bold = tkfont.Font(family=base, size=10, weight="bold")
        self.font_small = tkfont.Font(family=base, size=8)
        self.font_header = tkfont.Font(family=base, size=16, weight="bold")
        self.font_nav = tkfont.Font(family=base, size=12, weight="bold")

    # ------------------------------------------------------------------
    # Build shell (once) — nav bar + grid + side panel + footer
    # ------------------------------------------------------------------
    def _build_shell(self) -> None:
        outer = tk.Frame(self.root, bg=GRID_BG)
        outer.pack(padx=8, pady=6, fill="both", expand=True)

        main = tk.Frame(outer, bg=GRID_BG)
        main.pack(side="left", fill="y")

        # Navigation row: ◀  title  Today  Export  ▶
        nav = tk.Frame(main, bg=GRID_BG)
        nav.pack(fill="x", pady=(0, 6))

        btn_prev = tk.Label(nav, text="◀", font=self.font_nav, bg=GRID_BG, cursor="hand2")
        btn_prev.pack(side="left", padx=6)
        btn_prev.bind("<Button-1>", lambda _e: self._navigate(-1))

        self._title_label = tk.Label(nav, font=self.font_header, bg=GRID_BG)
        self._title_label.pack(side="left", padx=12)

        btn_next = tk.Label(nav, text="▶", font=self.font_nav, bg=GRID_BG, cursor="hand2")
        btn_next.pack(side="right", padx=6)
        btn_next.bind("<Button-1>", lambda _e: self._navigate(1))

        btn_export = tk.Label(
            nav, text="Export", font=self.font_bold, bg=GRID_BG, fg=ACCENT, cursor="hand2",
        )
        btn_export.pack(side="right", padx=6)
        btn_export.bind("<Button-1>", lambda _e: self.export_month())

        btn_today = tk.Label(
            nav, text="Today", font=self.font_bold, bg=GRID_BG, fg=ACCENT, cursor="hand2",
        )
        btn_today.pack(side="right", padx=6)
        btn_today.bind("<Button-1>", lambda _e: self._go_today())

        # Weekday header + 6×7 cell pool
        grid = tk.Frame(main, bg=GRID_BG)
        grid.pack()
        for col, label in enumerate(WEEKDAY_LABELS):
            fg = RED_TEXT if col == 0 else BLUE_TEXT if col == 6 else "#333333"
            tk.Label(grid, text=label, font=self.font_bold, bg=GRID_BG, fg=fg).grid(
                row=0, column=col, pady=(0, 2),
            )

        self._cells: list[tk.Canvas] = []
        for i in range(GRID_ROWS * GRID_COLUMNS):
            row, col = cell_position(i)
            cell = tk.Canvas(
                grid, width=CELL_W, height=CELL_H, bg=GRID_BG,
                highlightthickness=0, borderwidth=0, cursor="hand2",
            )
            cell.grid(row=row + 1, column=col, padx=1, pady=1)
            cell.bind("<Button-1>", self._on_cell_click)
            cell.bind("<Enter>", self._on_cell_enter)
            cell.bind("<Leave>", self._on_cell_leave)
            self._cells.append(cell)

        # Footer
        self._footer_label = tk.Label(
            main,
            text="Click a day to cycle ○ → ✕ → △ → none",
            font=self.font_small, bg=GRID_BG, fg=HINT_FG,
        )
        self._footer_label.pack(pady=(6, 0))

        # Reason memos
        self._side = tk.Frame(outer, bg=PANEL_BG, padx=10, pady=8, width=280)
        self._side.pack(side="left", fill="both", expand=True, padx=(10, 0))

    # ------------------------------------------------------------------
    # Refresh grid + side panel from state
    # ------------------------------------------------------------------
    def _refresh(self) -> None:
        self._widget_dates.clear()
        self._widget_cells.clear()
        self._title_label.configure(text=month_title(self.state.year, self.state.month))

        for cell, day in zip(self._cells, self.state.grid()):
            self._draw_cell(cell, day)
            self._widget_dates[id(cell)] = day.date
            self._widget_cells[id(cell)] = day

        self._fill_side_panel()

    def _draw_cell(self, cell: tk.Canvas, day: DayCell) -> None:
        cell.delete("all")
        cell.configure(bg=cell_fill(day))
        border = TODAY_BORDER if day.is_today else CELL_BORDER
        cell.create_rectangle(0, 0, CELL_W - 1, CELL_H - 1, outline=border,
                              width=2 if day.is_today else 1)
        cell.create_text(6, 4, text=str(day.date.day), anchor="nw",
                         fill=date_text_color(day), font=self.font_bold)
        if day.holiday:
            cell.create_text(6, 22, text=day.holiday, anchor="nw", fill=RED_TEXT,
                             font=self.font_small, width=CELL_W - 10)
        glyph = mark_glyph(day.mark, CELL_W - 16, CELL_H - 22)
        if isinstance(glyph, Circle):
            cell.create_oval(glyph.cx - glyph.r, glyph.cy - glyph.r,
                             glyph.cx + glyph.r, glyph.cy + glyph.r,
                             outline=glyph.stroke, width=glyph.stroke_width)
        elif isinstance(glyph, Path):
            for points in glyph.subpaths:
                pts = list(points) + [points[0]] if glyph.closed else list(points)
                cell.create_line(*[c for p in pts for c in p],
                                 fill=glyph.stroke, width=glyph.stroke_width)

    def _fill_side_panel(self) -> None:
        for child in self._side.winfo_children():
            child.destroy()
        self._editor = None

        for kind in ANNOTATED_KINDS:
            symbol, color = PANEL_TITLES[kind]
            hdr = tk.Frame(self._side, bg=PANEL_BG)
            hdr.pack(fill="x", pady=(0, 4))
            tk.Label(hdr, text=symbol, font=self.font_header, bg=PANEL_BG, fg=color).pack(side="left")
            tk.Label(hdr, text=" Reason memos", font=self.font_bold, bg=PANEL_BG).pack(side="left")

            entries = self.state.marks.list_by_kind(kind)
            if not entries:
                tk.Label(
                    self._side, text=f"No {symbol} days", font=self.font_normal,
                    bg=PANEL_BG, fg="#6B7280",
                ).pack(anchor="w", pady=(0, 10))
                continue
            for entry in entries:
                self._add_entry_card(entry.date, kind, entry.reason)
            tk.Frame(self._side, bg=PANEL_BG, height=10).pack()

    def _add_entry_card(self, d: date, kind: MarkState, reason: str) -> None:
        card = tk.Frame(self._side, bg="white", relief="solid", borderwidth=1, padx=6, pady=4)
        card.pack(fill="x", pady=2)

        top = tk.Frame(card, bg="white")
        top.pack(fill="x")
        tk.Label(top, text=weekday_label(d), font=self.font_bold, bg="white").pack(side="left")
        edit = tk.Label(top, text="Edit", font=self.font_small, bg="white", fg=ACCENT, cursor="hand2")
        edit.pack(side="right")
        edit.bind("<Button-1>", lambda _e, d=d, k=kind: self._start_editing(d, k))

        if self._editing == (d, kind):
            editor = tk.Text(card, height=3, width=30, font=self.font_normal, wrap="word")
            editor.insert("1.0", reason)
            editor.pack(fill="x", pady=(4, 2))
            editor.focus_set()
            self._editor = editor
            btns = tk.Frame(card, bg="white")
            btns.pack(anchor="w")
            tk.Button(btns, text="Save", width=6, command=self._save_reason).pack(side="left", padx=(0, 4))
            tk.Button(btns, text="Cancel", width=6, command=self._cancel_editing).pack(side="left")
        else:
            tk.Label(
                card, text=display_reason(reason), font=self.font_normal, bg="white",
                fg="#374151", justify="left", anchor="w", wraplength=240,
            ).pack(fill="x")

    # ------------------------------------------------------------------
    # Reason editing
    # ------------------------------------------------------------------
    def _start_editing(self, d: date, kind: MarkState) -> None:
        self._editing = (d, kind)
        self._fill_side_panel()

    def _save_reason(self) -> None:
        if self._editing and self._editor is not None:
            d, kind = self._editing
            self.state.set_reason(d, kind, self._editor.get("1.0", "end-1c"))
        self._cancel_editing()

    def _cancel_editing(self) -> None:
        self._editing = None
        self._fill_side_panel()

    # ------------------------------------------------------------------
    # Cell events
    # ------------------------------------------------------------------
    def _on_cell_click(self, event: tk.Event) -> None:
        d = self._widget_dates.get(id(event.widget))
        if d is None:
            return
        mark = self.state.toggle_mark(d)
        if self._editing and self._editing[0] == d and self._editing[1] is not mark:
            # The editor only exists while the mark matches its kind
            self._editing = None
        self._refresh()

    def _on_cell_enter(self, event: tk.Event) -> None:
        day = self._widget_cells.get(id(event.widget))
        if day and day.holiday:
            self._tooltip.show(event.widget, day.holiday)

    def _on_cell_leave(self, _event: tk.Event) -> None:
        self._tooltip.hide()

    # ------------------------------------------------------------------
    # Holidays (worker thread -> tk main thread)
    # ------------------------------------------------------------------
    def _request_holidays(self) -> None:
        if self.state.needs_holidays():
            self._fetcher.request(self.state.year)

    def _deliver_holidays(self, year: int, table: dict[str, str]) -> None:
        self.root.after(0, self._apply_holidays, year, table)

    def _apply_holidays(self, year: int, table: dict[str, str]) -> None:
        if self.state.apply_holidays(year, table):
            self._refresh()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export_month(self) -> None:
        filename = export_filename(self.state.year, self.state.month)
        target = filedialog.asksaveasfilename(
            parent=self.root,
            title="Export calendar image",
            initialdir=self._export_dir or os.path.expanduser("~"),
            initialfile=filename,
            defaultextension=".png",
            filetypes=[("PNG image", "*.png")],
        )
        if not target:
            return
        export_month(
            self.state, target,
            lambda message: messagebox.showerror("Export", message, parent=self.root),
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def _navigate(self, direction: int) -> None:
        self.state.navigate_month(direction)
        self._editing = None
        self._request_holidays()
        self._refresh()

    def _go_today(self) -> None:
        self.state.go_today()
        self._editing = None
        self._request_holidays()
        self._refresh()

    # ------------------------------------------------------------------
    # ESC cancels the editor first, then hides
    # ------------------------------------------------------------------
    def _on_escape(self, _event: tk.Event) -> None:
        if self._editing is not None:
            self._cancel_editing()
        else:
            self.hide()

    # ------------------------------------------------------------------
    # Persist window size
    # ------------------------------------------------------------------
    def _on_configure(self, event: tk.Event) -> None:
        if event.widget is not self.root:
            return
        self._saved_width = self.root.winfo_width()
        self._saved_height = self.root.winfo_height()

    def _persist_size(self) -> None:
        settings = load_settings()
        settings["window_width"] = self._saved_width
        settings["window_height"] = self._saved_height
        save_settings(settings)

    # ------------------------------------------------------------------
    # Show / Hide / Toggle
    # ------------------------------------------------------------------
    def toggle(self) -> None:
        if self.root.state() == "withdrawn" or not self.root.winfo_viewable():
            self.show()
        else:
            self.hide()

    def show(self) -> None:
        self._refresh()
        self.root.deiconify()
        self.root.update_idletasks()
        if self._saved_width is not None and self._saved_height is not None:
            self.root.geometry(f"{self._saved_width}x{self._saved_height}")
        self.root.lift()
        self.root.focus_force()

    def hide(self) -> None:
        self._tooltip.hide()
        if self._saved_width is not None and self._saved_height is not None:
            self._persist_size()
        self.root.withdraw()
