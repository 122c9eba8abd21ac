from __future__ import annotations

from typing import TYPE_CHECKING

import gi

from workout_map.controller import FormValues
from workout_map.list_renderer import WorkoutEntry
from workout_map.workouts import WorkoutType

gi.require_versions({"Gtk": "4.0", "Adw": "1"})
from gi.repository import Adw, GLib, Gtk  # noqa: E402

if TYPE_CHECKING:
    from workout_map.controller import SessionController


class WorkoutsPageUI:
    """
    Sidebar with the workout form and the workout list. Implements the form and
    list ports the controller drives; user actions are forwarded to the controller.
    """

    def __init__(self, redisplay_delay_ms: int = 1000):
        self.redisplay_delay_ms = redisplay_delay_ms
        self.controller: SessionController | None = None

        self._revealer: Gtk.Revealer | None = None
        self._type_combo: Gtk.ComboBoxText | None = None
        self._distance: Gtk.Entry | None = None
        self._duration: Gtk.Entry | None = None
        self._cadence: Gtk.Entry | None = None
        self._elevation: Gtk.Entry | None = None
        self._cadence_row: Adw.ActionRow | None = None
        self._elevation_row: Adw.ActionRow | None = None
        self._listbox: Gtk.ListBox | None = None
        self._row_ids: dict[Gtk.ListBoxRow, str] = {}
        self._redisplay_source: int | None = None

    def bind(self, controller: SessionController) -> None:
        self.controller = controller

    # ---- Public: build page ----
    def build_page(self) -> Gtk.Widget:
        outer = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        for m in ("top", "bottom", "start", "end"):
            getattr(outer, f"set_margin_{m}")(12)
        outer.set_size_request(360, -1)

        # Form (hidden until the map is clicked)
        self._revealer = Gtk.Revealer()
        self._revealer.set_transition_type(Gtk.RevealerTransitionType.SLIDE_DOWN)
        self._revealer.set_reveal_child(False)
        self._revealer.set_child(self._build_form())
        outer.append(self._revealer)

        # Workout list
        scroller = Gtk.ScrolledWindow()
        scroller.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)
        scroller.set_vexpand(True)
        self._listbox = Gtk.ListBox()
        self._listbox.set_selection_mode(Gtk.SelectionMode.NONE)
        self._listbox.set_activate_on_single_click(True)
        self._listbox.add_css_class("boxed-list")
        self._listbox.connect("row-activated", self._on_row_activated)
        placeholder = Gtk.Label(label="Click on the map to log a workout")
        placeholder.add_css_class("dim-label")
        for m in ("top", "bottom"):
            getattr(placeholder, f"set_margin_{m}")(24)
        self._listbox.set_placeholder(placeholder)
        scroller.set_child(self._listbox)
        outer.append(scroller)

        # Bottom actions
        actions = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8)
        actions.set_halign(Gtk.Align.CENTER)

        btn_recenter = Gtk.Button.new_with_label("Show All")
        btn_recenter.connect("clicked", lambda *_: self.controller.recenter_clicked())
        actions.append(btn_recenter)

        btn_delete_all = Gtk.Button.new_with_label("Delete All")
        btn_delete_all.add_css_class("destructive-action")
        btn_delete_all.connect("clicked", lambda *_: self.controller.delete_all_clicked())
        actions.append(btn_delete_all)

        outer.append(actions)
        return outer

    def _build_form(self) -> Gtk.Widget:
        group = Adw.PreferencesGroup()
        group.set_title("New Workout")

        type_row = Adw.ActionRow()
        type_row.set_title("Type")
        self._type_combo = Gtk.ComboBoxText()
        self._type_combo.append(WorkoutType.RUNNING.value, "Running")
        self._type_combo.append(WorkoutType.CYCLING.value, "Cycling")
        self._type_combo.set_active_id(WorkoutType.RUNNING.value)
        self._type_combo.set_valign(Gtk.Align.CENTER)
        self._type_combo.connect("changed", self._on_type_changed)
        type_row.add_suffix(self._type_combo)
        group.add(type_row)

        def entry_row(title: str, placeholder: str) -> tuple[Adw.ActionRow, Gtk.Entry]:
            row = Adw.ActionRow()
            row.set_title(title)
            entry = Gtk.Entry()
            entry.set_placeholder_text(placeholder)
            entry.set_input_purpose(Gtk.InputPurpose.NUMBER)
            entry.set_valign(Gtk.Align.CENTER)
            entry.set_width_chars(8)
            entry.connect("activate", self._on_submit)
            row.add_suffix(entry)
            group.add(row)
            return row, entry

        _, self._distance = entry_row("Distance", "km")
        _, self._duration = entry_row("Duration", "min")
        self._cadence_row, self._cadence = entry_row("Cadence", "step/min")
        self._elevation_row, self._elevation = entry_row("Elev Gain", "meters")
        self._elevation_row.set_visible(False)

        buttons = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8)
        buttons.set_halign(Gtk.Align.END)
        buttons.set_margin_top(8)
        btn_cancel = Gtk.Button.new_with_label("Cancel")
        btn_cancel.connect("clicked", lambda *_: self.controller.cancel_form())
        btn_save = Gtk.Button.new_with_label("Save")
        btn_save.add_css_class("suggested-action")
        btn_save.connect("clicked", self._on_submit)
        buttons.append(btn_cancel)
        buttons.append(btn_save)

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        box.append(group)
        box.append(buttons)
        return box

    # ---- WorkoutFormView ----
    def show(self) -> None:
        self._revealer.set_reveal_child(True)
        self._distance.grab_focus()

    def hide(self) -> None:
        # Collapse instantly, then restore the slide animation for the next reveal
        self._revealer.set_transition_type(Gtk.RevealerTransitionType.NONE)
        self._revealer.set_reveal_child(False)
        if self._redisplay_source is not None:
            GLib.source_remove(self._redisplay_source)
        self._redisplay_source = GLib.timeout_add(self.redisplay_delay_ms, self._restore_transition)

    def _restore_transition(self) -> bool:
        self._redisplay_source = None
        self._revealer.set_transition_type(Gtk.RevealerTransitionType.SLIDE_DOWN)
        return False

    def clear(self) -> None:
        for entry in (self._distance, self._duration, self._cadence, self._elevation):
            entry.set_text("")

    def fill(self, values: FormValues) -> None:
        self._type_combo.set_active_id(values.type)
        self._distance.set_text(values.distance)
        self._duration.set_text(values.duration)
        self._cadence.set_text(values.cadence)
        self._elevation.set_text(values.elevation_gain)

    def show_variant_fields(self, workout_type: WorkoutType) -> None:
        running = workout_type is WorkoutType.RUNNING
        self._cadence_row.set_visible(running)
        self._elevation_row.set_visible(not running)

    def lock_type(self, workout_type: WorkoutType | None) -> None:
        if workout_type is not None:
            self._type_combo.set_active_id(workout_type.value)
        self._type_combo.set_sensitive(workout_type is None)

    def values(self) -> FormValues:
        return FormValues(
            type=self._type_combo.get_active_id() or WorkoutType.RUNNING.value,
            distance=self._distance.get_text(),
            duration=self._duration.get_text(),
            cadence=self._cadence.get_text(),
            elevation_gain=self._elevation.get_text(),
        )

    # ---- WorkoutListView ----
    def set_entries(self, entries: list[WorkoutEntry]) -> None:
        self.clear_entries()
        for entry in entries:
            self._listbox.append(self._build_row(entry))

    def prepend_entry(self, entry: WorkoutEntry) -> None:
        self._listbox.prepend(self._build_row(entry))

    def clear_entries(self) -> None:
        child = self._listbox.get_first_child()
        while child is not None:
            nxt = child.get_next_sibling()
            if isinstance(child, Gtk.ListBoxRow):
                self._listbox.remove(child)
            child = nxt
        self._row_ids.clear()

    def _build_row(self, entry: WorkoutEntry) -> Gtk.ListBoxRow:
        row = Gtk.ListBoxRow()
        row.add_css_class("workout")
        row.add_css_class(entry.css_class)

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=6)
        for m in ("top", "bottom", "start", "end"):
            getattr(box, f"set_margin_{m}")(10)

        header = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        title = Gtk.Label(label=entry.title)
        title.add_css_class("heading")
        title.set_xalign(0)
        title.set_hexpand(True)
        header.append(title)

        btn_edit = Gtk.Button.new_from_icon_name("document-edit-symbolic")
        btn_edit.add_css_class("flat")
        btn_edit.set_tooltip_text("Edit")
        btn_edit.connect("clicked", lambda *_: self.controller.edit_clicked(entry.id))
        header.append(btn_edit)

        btn_delete = Gtk.Button.new_from_icon_name("user-trash-symbolic")
        btn_delete.add_css_class("flat")
        btn_delete.set_tooltip_text("Delete")
        btn_delete.connect("clicked", lambda *_: self.controller.delete_clicked(entry.id))
        header.append(btn_delete)
        box.append(header)

        details = Gtk.FlowBox()
        details.set_selection_mode(Gtk.SelectionMode.NONE)
        details.set_max_children_per_line(4)
        details.set_column_spacing(12)
        details.set_can_target(False)
        for d in entry.details:
            details.insert(Gtk.Label(label=f"{d.icon} {d.value} {d.unit}"), -1)
        box.append(details)

        row.set_child(box)
        self._row_ids[row] = entry.id
        return row

    # ---- signals ----
    def _on_submit(self, *_args) -> None:
        self.controller.submit(self.values())

    def _on_type_changed(self, combo: Gtk.ComboBoxText) -> None:
        if self.controller is not None and combo.get_active_id():
            self.controller.type_changed(combo.get_active_id())

    def _on_row_activated(self, _listbox, row: Gtk.ListBoxRow) -> None:
        workout_id = self._row_ids.get(row)
        if workout_id is not None:
            self.controller.workout_selected(workout_id)
