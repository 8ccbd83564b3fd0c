from __future__ import annotations

import argparse
import logging
import queue
import sys
import tkinter as tk
from pathlib import Path
from tkinter import messagebox, ttk
from tkinter.scrolledtext import ScrolledText

from PIL import ImageTk

from . import __version__
from .aggregation import (
    UNKNOWN_LABEL,
    category_color,
    chart_buckets,
    daily_items,
    group_counts,
    items_in_window,
    log_rows,
)
from .ai import PROVIDERS, SummaryProvider, build_provider
from .config import Config
from .dates import format_long_date, format_range, format_time, week_range
from .entries import CATEGORY_COLORS, WorklogState
from .errors import StorageError, ValidationError
from .icon import draw_app_icon
from .logger import setup_logger
from .models import ChartBucket
from .paths import database_path, ensure_directories
from .storage import WorklogStore
from .summary import SummaryOutcome, SummaryRequester, user_message

logger = logging.getLogger(__name__)

APP_BG = "#f8fafc"
SIDEBAR_BG = "#0f172a"
SIDEBAR_FG = "#cbd5e1"
SIDEBAR_ACTIVE_BG = "#1e293b"
SIDEBAR_ACTIVE_FG = "#ffffff"
ACCENT = "#2563eb"
MUTED = "#64748b"

VIEW_LABELS = [
    ("daily", "Daily Tracker"),
    ("categories", "Categories"),
    ("weekly", "Weekly Report"),
    ("settings", "Settings"),
]


class WorklogApp(tk.Tk):
    def __init__(self, config: Config, store: WorklogStore, state: WorklogState):
        super().__init__()
        self.title("WorkLog AI")
        self.geometry("1120x760")
        self.minsize(900, 600)
        self.configure(bg=APP_BG)

        self.config_values = config
        self.store = store
        self.worklog = state
        self.events: queue.Queue[tuple[str, object]] = queue.Queue()
        self.summary_requester = SummaryRequester(self._build_provider)

        self._window_icon: ImageTk.PhotoImage | None = None
        self._load_icon()
        self._configure_style()

        self.selected_view = tk.StringVar(value="daily")
        self.status_var = tk.StringVar(value="Ready.")

        self.case_id_var = tk.StringVar()
        self.description_var = tk.StringVar()
        self.daily_category_var = tk.StringVar()
        self.daily_count_var = tk.StringVar(value="0 entries")
        self.daily_date_var = tk.StringVar(value=format_long_date())
        self.daily_error_var = tk.StringVar(value="")
        self._daily_category_ids: list[str] = []
        self._selected_category_id = ""

        self.category_name_var = tk.StringVar()
        self.category_color_var = tk.StringVar(value=CATEGORY_COLORS[0])
        self.category_error_var = tk.StringVar(value="")

        self.week_offset = 0
        self.week_range_var = tk.StringVar()
        self.week_total_var = tk.StringVar()
        self.summary_status_var = tk.StringVar(value="")
        self._weekly_buckets: list[ChartBucket] = []

        self.provider_var = tk.StringVar(value=config.provider)
        self.model_var = tk.StringVar(value=config.model)
        self.api_key_var = tk.StringVar(value=config.api_key)
        self.ollama_url_var = tk.StringVar(value=config.ollama_base_url)
        self.settings_status_var = tk.StringVar(value="")

        self.description_var.trace_add("write", lambda *_: self._update_button_state())

        self._build_shell()
        self._show_view("daily")
        self._refresh_all()
        self.protocol("WM_DELETE_WINDOW", self.destroy)
        self.after(250, self._drain_events)

    def _load_icon(self) -> None:
        self._window_icon = ImageTk.PhotoImage(draw_app_icon(64))
        try:
            self.iconphoto(True, self._window_icon)
        except tk.TclError:
            pass

    def _configure_style(self) -> None:
        style = ttk.Style(self)
        try:
            style.theme_use("clam")
        except tk.TclError:
            pass
        style.configure("TFrame", background=APP_BG)
        style.configure("TLabel", background=APP_BG, foreground="#334155")
        style.configure("TLabelframe", background=APP_BG)
        style.configure("TLabelframe.Label", background=APP_BG, foreground=MUTED)
        style.configure("TButton", padding=(10, 5))
        style.configure("Accent.TButton", padding=(12, 6), foreground="#ffffff", background=ACCENT)
        style.map("Accent.TButton", background=[("disabled", "#cbd5e1"), ("active", "#1d4ed8")])
        style.configure("Title.TLabel", font=("Segoe UI", 22, "bold"), foreground="#0f172a")
        style.configure("Subtle.TLabel", font=("Segoe UI", 10), foreground=MUTED)
        style.configure("Error.TLabel", font=("Segoe UI", 10), foreground="#dc2626")
        style.configure("Treeview", rowheight=28)

    def _build_shell(self) -> None:
        self.columnconfigure(1, weight=1)
        self.rowconfigure(0, weight=1)

        self.sidebar = tk.Frame(self, bg=SIDEBAR_BG, width=200)
        self.sidebar.grid(row=0, column=0, rowspan=2, sticky="ns")
        self.sidebar.grid_propagate(False)

        self.content = ttk.Frame(self)
        self.content.grid(row=0, column=1, sticky="nsew", padx=24, pady=(20, 8))
        self.content.columnconfigure(0, weight=1)
        self.content.rowconfigure(0, weight=1)

        ttk.Label(self, textvariable=self.status_var, style="Subtle.TLabel").grid(
            row=1, column=1, sticky="w", padx=24, pady=(0, 10)
        )

        self._build_sidebar()
        self._build_views()

    def _build_sidebar(self) -> None:
        tk.Label(
            self.sidebar,
            text="WorkLog AI",
            bg=SIDEBAR_BG,
            fg=SIDEBAR_ACTIVE_FG,
            font=("Segoe UI", 15, "bold"),
        ).pack(anchor="w", padx=18, pady=(20, 18))

        self.sidebar_buttons: dict[str, tk.Button] = {}
        for key, label in VIEW_LABELS:
            btn = tk.Button(
                self.sidebar,
                text=label,
                anchor="w",
                bd=0,
                relief=tk.FLAT,
                padx=18,
                pady=8,
                font=("Segoe UI", 11),
                cursor="hand2",
                command=lambda v=key: self._show_view(v),
            )
            btn.pack(fill="x", padx=8, pady=2)
            self.sidebar_buttons[key] = btn

        tk.Frame(self.sidebar, bg=SIDEBAR_BG).pack(fill="both", expand=True)
        tk.Label(
            self.sidebar,
            text=f"v{__version__}",
            bg=SIDEBAR_BG,
            fg=MUTED,
            font=("Segoe UI", 9),
        ).pack(pady=(0, 12))

    def _build_views(self) -> None:
        self.views: dict[str, ttk.Frame] = {}
        for key, _label in VIEW_LABELS:
            frame = ttk.Frame(self.content)
            frame.grid(row=0, column=0, sticky="nsew")
            frame.grid_remove()
            self.views[key] = frame

        self._build_daily_view(self.views["daily"])
        self._build_categories_view(self.views["categories"])
        self._build_weekly_view(self.views["weekly"])
        self._build_settings_view(self.views["settings"])

    def _show_view(self, view_key: str) -> None:
        self.selected_view.set(view_key)
        for key, frame in self.views.items():
            if key == view_key:
                frame.grid()
                frame.tkraise()
            else:
                frame.grid_remove()
        for key, btn in self.sidebar_buttons.items():
            active = key == view_key
            btn.configure(
                bg=SIDEBAR_ACTIVE_BG if active else SIDEBAR_BG,
                fg=SIDEBAR_ACTIVE_FG if active else SIDEBAR_FG,
                activebackground=SIDEBAR_ACTIVE_BG,
                activeforeground=SIDEBAR_ACTIVE_FG,
            )
        if view_key == "daily":
            self._refresh_daily()
        elif view_key == "weekly":
            self._refresh_weekly()

    # Daily view

    def _build_daily_view(self, root: ttk.Frame) -> None:
        root.columnconfigure(0, weight=1)
        root.rowconfigure(3, weight=1)

        header = ttk.Frame(root)
        header.grid(row=0, column=0, sticky="ew", pady=(0, 12))
        header.columnconfigure(0, weight=1)
        ttk.Label(header, text="Daily Tracker", style="Title.TLabel").grid(row=0, column=0, sticky="w")
        ttk.Label(header, textvariable=self.daily_date_var, style="Subtle.TLabel").grid(row=1, column=0, sticky="w")
        ttk.Label(header, textvariable=self.daily_count_var, font=("Segoe UI", 11, "bold")).grid(
            row=0, column=1, rowspan=2, sticky="e"
        )

        form = ttk.LabelFrame(root, text="New entry", padding=10)
        form.grid(row=1, column=0, sticky="ew")
        form.columnconfigure(1, weight=1)

        case_entry = ttk.Entry(form, textvariable=self.case_id_var, width=16)
        case_entry.grid(row=0, column=0, sticky="ew", padx=(0, 8))
        description_entry = ttk.Entry(form, textvariable=self.description_var)
        description_entry.grid(row=0, column=1, sticky="ew", padx=(0, 8))
        description_entry.bind("<Return>", lambda _e: self._add_work_item())
        self.daily_category_combo = ttk.Combobox(
            form,
            textvariable=self.daily_category_var,
            state="readonly",
            width=20,
        )
        self.daily_category_combo.grid(row=0, column=2, sticky="ew", padx=(0, 8))
        self.daily_category_combo.bind("<<ComboboxSelected>>", lambda _e: self._on_daily_category_selected())
        self.add_item_button = ttk.Button(form, text="Add", style="Accent.TButton", command=self._add_work_item)
        self.add_item_button.grid(row=0, column=3)

        ttk.Label(form, text="Case ID", style="Subtle.TLabel").grid(row=1, column=0, sticky="w")
        ttk.Label(form, text="What are you working on?", style="Subtle.TLabel").grid(row=1, column=1, sticky="w")
        ttk.Label(form, text="Category", style="Subtle.TLabel").grid(row=1, column=2, sticky="w")

        ttk.Label(root, textvariable=self.daily_error_var, style="Error.TLabel").grid(
            row=2, column=0, sticky="w", pady=(4, 4)
        )

        list_frame = ttk.Frame(root)
        list_frame.grid(row=3, column=0, sticky="nsew")
        list_frame.columnconfigure(0, weight=1)
        list_frame.rowconfigure(0, weight=1)

        self.daily_tree = ttk.Treeview(
            list_frame,
            columns=("case", "category", "description", "time"),
            show="headings",
        )
        self.daily_tree.heading("case", text="Case")
        self.daily_tree.heading("category", text="Category")
        self.daily_tree.heading("description", text="Description")
        self.daily_tree.heading("time", text="Time")
        self.daily_tree.column("case", width=110, anchor="w")
        self.daily_tree.column("category", width=140, anchor="w")
        self.daily_tree.column("description", width=520, anchor="w")
        self.daily_tree.column("time", width=90, anchor="e")
        self.daily_tree.grid(row=0, column=0, sticky="nsew")
        self.daily_tree.bind("<Delete>", lambda _e: self._delete_selected_work_items())
        scroll = ttk.Scrollbar(list_frame, orient=tk.VERTICAL, command=self.daily_tree.yview)
        self.daily_tree.configure(yscrollcommand=scroll.set)
        scroll.grid(row=0, column=1, sticky="ns")

        self.daily_empty_label = ttk.Label(list_frame, text="No work logged yet today.", style="Subtle.TLabel")

        ttk.Button(root, text="Delete Selected", command=self._delete_selected_work_items).grid(
            row=4, column=0, sticky="e", pady=(8, 0)
        )

    def _refresh_daily(self) -> None:
        categories = self.worklog.categories
        self._selected_category_id = self.worklog.default_category_id(self._selected_category_id)
        self._daily_category_ids = [category.id for category in categories]
        names = [category.name for category in categories]
        self.daily_category_combo.configure(values=names or ["No categories"])
        if self._selected_category_id:
            self.daily_category_var.set(self.worklog.find_category(self._selected_category_id).name)
        else:
            self.daily_category_var.set("No categories")

        by_id = {category.id: category for category in categories}
        for color in {category.color for category in categories}:
            self.daily_tree.tag_configure(_color_tag(color), foreground=color)
        self.daily_tree.delete(*self.daily_tree.get_children())
        today = daily_items(self.worklog.work_items)
        for item in today:
            category = by_id.get(item.category_id)
            self.daily_tree.insert(
                "",
                "end",
                iid=item.id,
                values=(
                    item.case_id,
                    category.name if category else UNKNOWN_LABEL,
                    item.description,
                    format_time(item.timestamp),
                ),
                tags=(_color_tag(category.color),) if category else (),
            )

        self.daily_date_var.set(format_long_date())
        self.daily_count_var.set(f"{len(today)} entr{'y' if len(today) == 1 else 'ies'}")
        if today:
            self.daily_empty_label.place_forget()
        else:
            self.daily_empty_label.place(relx=0.5, rely=0.3, anchor="center")
        self._update_button_state()

    def _on_daily_category_selected(self) -> None:
        index = self.daily_category_combo.current()
        if 0 <= index < len(self._daily_category_ids):
            self._selected_category_id = self._daily_category_ids[index]
        self._update_button_state()

    def _add_work_item(self) -> None:
        try:
            item = self.worklog.add_work_item(
                self.case_id_var.get(),
                self.description_var.get(),
                self._selected_category_id,
            )
        except ValidationError as exc:
            self.daily_error_var.set(str(exc))
            return
        except StorageError as exc:
            self._report_storage_error(exc)
            return
        self.daily_error_var.set("")
        self.case_id_var.set("")
        self.description_var.set("")
        self.status_var.set(f"Logged: {item.description}")
        self._refresh_all()

    def _delete_selected_work_items(self) -> None:
        selected = self.daily_tree.selection()
        if not selected:
            return
        try:
            for item_id in selected:
                self.worklog.delete_work_item(item_id)
        except StorageError as exc:
            self._report_storage_error(exc)
        self._refresh_all()

    # Categories view

    def _build_categories_view(self, root: ttk.Frame) -> None:
        root.columnconfigure(1, weight=1)
        root.rowconfigure(1, weight=1)

        header = ttk.Frame(root)
        header.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 12))
        ttk.Label(header, text="Categories", style="Title.TLabel").pack(anchor="w")
        ttk.Label(header, text="Manage the types of work you track.", style="Subtle.TLabel").pack(anchor="w")

        form = ttk.LabelFrame(root, text="Add New Category", padding=12)
        form.grid(row=1, column=0, sticky="nw", padx=(0, 16))
        ttk.Label(form, text="Name").grid(row=0, column=0, sticky="w")
        name_entry = ttk.Entry(form, textvariable=self.category_name_var, width=28)
        name_entry.grid(row=1, column=0, sticky="ew", pady=(2, 10))
        name_entry.bind("<Return>", lambda _e: self._add_category())

        ttk.Label(form, text="Color Label").grid(row=2, column=0, sticky="w")
        palette = ttk.Frame(form)
        palette.grid(row=3, column=0, sticky="w", pady=(2, 10))
        self.palette_buttons: dict[str, tk.Button] = {}
        for index, color in enumerate(CATEGORY_COLORS):
            btn = tk.Button(
                palette,
                bg=color,
                activebackground=color,
                width=2,
                bd=2,
                relief=tk.FLAT,
                cursor="hand2",
                command=lambda c=color: self._select_category_color(c),
            )
            btn.grid(row=index // 4, column=index % 4, padx=3, pady=3)
            self.palette_buttons[color] = btn
        self._select_category_color(CATEGORY_COLORS[0])

        ttk.Button(form, text="Create Category", style="Accent.TButton", command=self._add_category).grid(
            row=4, column=0, sticky="ew"
        )
        ttk.Label(form, textvariable=self.category_error_var, style="Error.TLabel").grid(
            row=5, column=0, sticky="w", pady=(6, 0)
        )

        list_frame = ttk.Frame(root)
        list_frame.grid(row=1, column=1, sticky="nsew")
        list_frame.columnconfigure(0, weight=1)
        list_frame.rowconfigure(0, weight=1)
        self.category_tree = ttk.Treeview(list_frame, columns=("name", "color", "id"), show="headings")
        self.category_tree.heading("name", text="Name")
        self.category_tree.heading("color", text="Color")
        self.category_tree.heading("id", text="ID")
        self.category_tree.column("name", width=220, anchor="w")
        self.category_tree.column("color", width=100, anchor="w")
        self.category_tree.column("id", width=120, anchor="w")
        self.category_tree.grid(row=0, column=0, sticky="nsew")
        self.category_tree.bind("<Delete>", lambda _e: self._delete_selected_categories())
        self.category_empty_label = ttk.Label(list_frame, text="No categories defined.", style="Subtle.TLabel")

        ttk.Button(root, text="Delete Selected", command=self._delete_selected_categories).grid(
            row=2, column=1, sticky="e", pady=(8, 0)
        )

    def _select_category_color(self, color: str) -> None:
        self.category_color_var.set(color)
        for value, btn in self.palette_buttons.items():
            btn.configure(relief=tk.SUNKEN if value == color else tk.FLAT)

    def _refresh_categories(self) -> None:
        self.category_tree.delete(*self.category_tree.get_children())
        for category in self.worklog.categories:
            self.category_tree.tag_configure(_color_tag(category.color), foreground=category.color)
            self.category_tree.insert(
                "",
                "end",
                iid=category.id,
                values=(category.name, category.color, _short_id(category.id)),
                tags=(_color_tag(category.color),),
            )
        if self.worklog.categories:
            self.category_empty_label.place_forget()
        else:
            self.category_empty_label.place(relx=0.5, rely=0.3, anchor="center")

    def _add_category(self) -> None:
        try:
            category = self.worklog.add_category(self.category_name_var.get(), self.category_color_var.get())
        except ValidationError as exc:
            self.category_error_var.set(str(exc))
            return
        except StorageError as exc:
            self._report_storage_error(exc)
            return
        self.category_error_var.set("")
        self.category_name_var.set("")
        self._select_category_color(CATEGORY_COLORS[0])
        self.status_var.set(f"Created category {category.name}.")
        self._refresh_all()

    def _delete_selected_categories(self) -> None:
        selected = self.category_tree.selection()
        if not selected:
            return
        try:
            for category_id in selected:
                self.worklog.delete_category(category_id)
        except StorageError as exc:
            self._report_storage_error(exc)
        self._refresh_all()

    # Weekly view

    def _build_weekly_view(self, root: ttk.Frame) -> None:
        root.columnconfigure(0, weight=1)
        root.rowconfigure(2, weight=1)
        root.rowconfigure(5, weight=1)
        root.rowconfigure(7, weight=2)

        header = ttk.Frame(root)
        header.grid(row=0, column=0, sticky="ew", pady=(0, 8))
        header.columnconfigure(0, weight=1)
        ttk.Label(header, text="Weekly Report", style="Title.TLabel").grid(row=0, column=0, sticky="w")
        ttk.Label(header, textvariable=self.week_range_var, style="Subtle.TLabel").grid(row=1, column=0, sticky="w")
        nav = ttk.Frame(header)
        nav.grid(row=0, column=1, rowspan=2, sticky="e")
        ttk.Button(nav, text="<", width=3, command=lambda: self._shift_week(-1)).pack(side="left")
        ttk.Button(nav, text="This Week", command=lambda: self._shift_week(None)).pack(side="left", padx=4)
        ttk.Button(nav, text=">", width=3, command=lambda: self._shift_week(1)).pack(side="left")

        ttk.Label(root, textvariable=self.week_total_var, font=("Segoe UI", 11, "bold")).grid(
            row=1, column=0, sticky="w"
        )

        self.chart_canvas = tk.Canvas(root, bg="#ffffff", height=200, highlightthickness=1, highlightbackground="#e2e8f0")
        self.chart_canvas.grid(row=2, column=0, sticky="nsew", pady=(6, 12))
        self.chart_canvas.bind("<Configure>", lambda _e: self._render_chart())

        actions = ttk.Frame(root)
        actions.grid(row=3, column=0, sticky="ew")
        self.summary_button = ttk.Button(
            actions,
            text="Generate AI Summary",
            style="Accent.TButton",
            command=self._generate_summary,
        )
        self.summary_button.pack(side="left")
        ttk.Label(actions, textvariable=self.summary_status_var, style="Subtle.TLabel").pack(side="left", padx=10)

        ttk.Label(root, text="AI Summary", font=("Segoe UI", 11, "bold")).grid(row=4, column=0, sticky="w", pady=(10, 2))
        self.summary_text = ScrolledText(root, wrap=tk.WORD, height=8, state="disabled")
        self.summary_text.grid(row=5, column=0, sticky="nsew")

        ttk.Label(root, text="Detailed Logs", font=("Segoe UI", 11, "bold")).grid(row=6, column=0, sticky="w", pady=(10, 2))
        log_frame = ttk.Frame(root)
        log_frame.grid(row=7, column=0, sticky="nsew")
        log_frame.columnconfigure(0, weight=1)
        log_frame.rowconfigure(0, weight=1)
        self.weekly_tree = ttk.Treeview(
            log_frame,
            columns=("date", "case", "category", "description"),
            show="headings",
            height=8,
        )
        self.weekly_tree.heading("date", text="Date")
        self.weekly_tree.heading("case", text="Case ID")
        self.weekly_tree.heading("category", text="Category")
        self.weekly_tree.heading("description", text="Description")
        self.weekly_tree.column("date", width=110, anchor="w")
        self.weekly_tree.column("case", width=110, anchor="w")
        self.weekly_tree.column("category", width=140, anchor="w")
        self.weekly_tree.column("description", width=480, anchor="w")
        self.weekly_tree.grid(row=0, column=0, sticky="nsew")
        log_scroll = ttk.Scrollbar(log_frame, orient=tk.VERTICAL, command=self.weekly_tree.yview)
        self.weekly_tree.configure(yscrollcommand=log_scroll.set)
        log_scroll.grid(row=0, column=1, sticky="ns")

    def _current_week(self):
        return week_range(self.week_offset)

    def _shift_week(self, delta: int | None) -> None:
        self.week_offset = 0 if delta is None else self.week_offset + delta
        self._set_text(self.summary_text, "")
        self.summary_status_var.set("")
        self._refresh_weekly()

    def _refresh_weekly(self) -> None:
        window = self._current_week()
        items = items_in_window(self.worklog.work_items, window)
        self._weekly_buckets = chart_buckets(group_counts(items, window), self.worklog.categories)
        self.week_range_var.set(format_range(window))
        self.week_total_var.set(f"Total entries: {len(items)}")
        self._render_chart()
        self._render_weekly_log(items)
        self._update_button_state()

    def _render_weekly_log(self, items) -> None:
        categories = self.worklog.categories
        for color in {category_color(categories, item.category_id) for item in items}:
            self.weekly_tree.tag_configure(_color_tag(color), foreground=color)
        self.weekly_tree.delete(*self.weekly_tree.get_children())
        for item, values in zip(items, log_rows(items, categories)):
            self.weekly_tree.insert(
                "",
                "end",
                iid=item.id,
                values=values,
                tags=(_color_tag(category_color(categories, item.category_id)),),
            )

    def _render_chart(self) -> None:
        canvas = self.chart_canvas
        canvas.delete("all")
        width = max(canvas.winfo_width(), 200)
        height = max(canvas.winfo_height(), 160)
        if not self._weekly_buckets:
            canvas.create_text(width / 2, height / 2, text="No work logged this week.", fill=MUTED, font=("Segoe UI", 11))
            return

        margin_x, margin_top, margin_bottom = 40, 20, 36
        plot_height = height - margin_top - margin_bottom
        baseline = height - margin_bottom
        peak = max(bucket.count for bucket in self._weekly_buckets)
        slot = (width - 2 * margin_x) / len(self._weekly_buckets)
        bar_width = min(80, slot * 0.6)

        canvas.create_line(margin_x, baseline, width - margin_x, baseline, fill="#cbd5e1")
        for index, bucket in enumerate(self._weekly_buckets):
            center = margin_x + slot * index + slot / 2
            bar_height = plot_height * bucket.count / peak
            canvas.create_rectangle(
                center - bar_width / 2,
                baseline - bar_height,
                center + bar_width / 2,
                baseline,
                fill=bucket.color,
                outline="",
            )
            canvas.create_text(center, baseline - bar_height - 8, text=str(bucket.count), fill="#334155")
            label = bucket.name if not bucket.orphaned else f"{bucket.name}*"
            canvas.create_text(center, baseline + 14, text=label, fill=MUTED, font=("Segoe UI", 9))

    def _generate_summary(self) -> None:
        window = self._current_week()
        items = items_in_window(self.worklog.work_items, window)
        if not items:
            return
        accepted = self.summary_requester.submit(
            window.start,
            items,
            self.worklog.categories,
            lambda outcome: self.events.put(("summary_done", outcome)),
        )
        if accepted:
            self.summary_status_var.set("Generating summary...")
        self._update_button_state()

    def _on_summary_done(self, outcome: SummaryOutcome) -> None:
        if not self.summary_requester.is_current(outcome, self._current_week().start):
            logger.debug("Discarding stale summary for window starting %s", outcome.key)
            self.summary_status_var.set("")
            return
        if outcome.ok:
            self._set_text(self.summary_text, outcome.text)
            self.summary_status_var.set("Summary generated.")
        else:
            self._set_text(self.summary_text, user_message(outcome.error))
            self.summary_status_var.set("Summary failed.")

    # Settings view

    def _build_settings_view(self, root: ttk.Frame) -> None:
        root.columnconfigure(1, weight=1)
        ttk.Label(root, text="Settings", style="Title.TLabel").grid(row=0, column=0, columnspan=2, sticky="w")
        ttk.Label(root, text="Configure the AI summary provider.", style="Subtle.TLabel").grid(
            row=1, column=0, columnspan=2, sticky="w", pady=(0, 16)
        )

        fields = [
            ("Provider", ttk.Combobox(root, textvariable=self.provider_var, values=list(PROVIDERS), state="readonly")),
            ("Model", ttk.Entry(root, textvariable=self.model_var)),
            ("API Key", ttk.Entry(root, textvariable=self.api_key_var, show="*")),
            ("Ollama URL", ttk.Entry(root, textvariable=self.ollama_url_var)),
        ]
        for row, (label, widget) in enumerate(fields, start=2):
            ttk.Label(root, text=label).grid(row=row, column=0, sticky="w", padx=(0, 12), pady=4)
            widget.grid(row=row, column=1, sticky="ew", pady=4)

        ttk.Label(
            root,
            text="Leave the model empty to use the provider default. Gemini requires an API key.",
            style="Subtle.TLabel",
        ).grid(row=6, column=0, columnspan=2, sticky="w", pady=(4, 12))
        ttk.Button(root, text="Save Settings", style="Accent.TButton", command=self._save_settings).grid(
            row=7, column=0, sticky="w"
        )
        ttk.Label(root, textvariable=self.settings_status_var, style="Subtle.TLabel").grid(
            row=7, column=1, sticky="w", padx=12
        )

    def _save_settings(self) -> None:
        updated = Config(
            data_dir=self.config_values.data_dir,
            provider=self.provider_var.get().strip().lower() or "gemini",
            model=self.model_var.get().strip(),
            api_key=self.api_key_var.get().strip(),
            ollama_base_url=self.ollama_url_var.get().strip(),
            log_level=self.config_values.log_level,
            log_file=self.config_values.log_file,
        )
        try:
            updated.save_settings(self.store)
        except StorageError as exc:
            self._report_storage_error(exc)
            return
        self.config_values = updated
        self.settings_status_var.set(f"Saved. Provider: {updated.provider}.")
        logger.info("Summary provider set to %s", updated.provider)

    def _build_provider(self) -> SummaryProvider:
        return build_provider(self.config_values)

    # Shared

    def _refresh_all(self) -> None:
        self._refresh_daily()
        self._refresh_categories()
        self._refresh_weekly()

    def _drain_events(self) -> None:
        while True:
            try:
                kind, payload = self.events.get_nowait()
            except queue.Empty:
                break
            if kind == "summary_done" and isinstance(payload, SummaryOutcome):
                self._on_summary_done(payload)

        self._update_button_state()
        self.after(250, self._drain_events)

    def _update_button_state(self) -> None:
        can_add = bool(self.description_var.get().strip()) and bool(self._selected_category_id)
        self.add_item_button.configure(state=tk.NORMAL if can_add else tk.DISABLED)
        busy = self.summary_requester.is_busy
        has_items = any(bucket.count for bucket in self._weekly_buckets)
        self.summary_button.configure(state=tk.NORMAL if has_items and not busy else tk.DISABLED)
        self.summary_button.configure(text="Generating..." if busy else "Generate AI Summary")

    def _report_storage_error(self, exc: StorageError) -> None:
        self.status_var.set("Could not save changes.")
        messagebox.showerror("WorkLog", f"Your change was not saved.\n\n{exc}")

    @staticmethod
    def _set_text(widget: ScrolledText, value: str) -> None:
        original_state = str(widget.cget("state"))
        widget.configure(state="normal")
        widget.delete("1.0", "end")
        widget.insert("end", value or "")
        widget.configure(state=original_state)


def _short_id(value: str) -> str:
    return f"{value[:8]}..." if len(value) > 8 else value


def _color_tag(color: str) -> str:
    return f"color-{color.lstrip('#')}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="worklog")
    parser.add_argument("--data-dir", type=Path, help="Directory holding the work log database")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="store_true", help="Print app version and exit")
    args = parser.parse_args(argv)
    if args.version:
        print(__version__)
        return 0

    config = Config.from_env(args.data_dir)
    ensure_directories(config.data_dir)
    setup_logger(args.log_level or config.log_level, config.log_file)

    try:
        store = WorklogStore(database_path(config.data_dir))
        config = config.with_settings(store)
        state = WorklogState.load(store)
    except StorageError as exc:
        logger.error("Cannot start WorkLog: %s", exc)
        print(f"WorkLog could not read its data: {exc}", file=sys.stderr)
        return 1

    logger.info("WorkLog %s started (data=%s, provider=%s)", __version__, config.data_dir, config.provider)
    app = WorklogApp(config, store, state)
    app.mainloop()
    return 0
