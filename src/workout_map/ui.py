import gi
from loguru import logger

from workout_map.config import APP_ID, AppConfig
from workout_map.controller import SessionController, ViewPorts
from workout_map.database import DatabaseManager
from workout_map.geolocation import request_position
from workout_map.list_renderer import ListRenderer
from workout_map.map_sync import Coords, MapSync
from workout_map.store import WorkoutStore
from workout_map.ui_map import ShumateMapWidget
from workout_map.ui_workouts import WorkoutsPageUI

gi.require_versions({"Gtk": "4.0", "Adw": "1"})

from gi.repository import Adw, Gdk, GObject, Gtk  # noqa: E402

Adw.init()

_PROV = Gtk.CssProvider()
_PROV.load_from_data(b"""
.map-popup { padding: 6px 10px; border-radius: 6px; background-color: #2d3439; color: #ececec; }
.running-popup { border-left: 5px solid #00c46a; }
.cycling-popup { border-left: 5px solid #ffb545; }
.workout--running { border-left: 5px solid #00c46a; }
.workout--cycling { border-left: 5px solid #ffb545; }
""")
Gtk.StyleContext.add_provider_for_display(
    Gdk.Display.get_default(), _PROV, Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION
)


class AlertPresenter:
    """Dismissible modal alerts (close button, Escape or click outside)."""

    def __init__(self, app: "WorkoutMapApp"):
        self.app = app

    def show_alert(self, message: str) -> None:
        dialog = Adw.AlertDialog.new(None, message)
        dialog.add_response("close", "Close")
        dialog.set_close_response("close")
        dialog.present(self.app.window)


class WorkoutMapApp(Adw.Application):
    def __init__(self, config: AppConfig, position: Coords | None = None):
        super().__init__(application_id=APP_ID)
        self.config = config
        self.position = position

        self.window = None
        self.database: DatabaseManager | None = None
        self.controller: SessionController | None = None
        self.map_widget: ShumateMapWidget | None = None
        self.workouts_page: WorkoutsPageUI | None = None

        config.app_dir.mkdir(parents=True, exist_ok=True)

    def do_activate(self):
        if not self.window:
            self._build_ui()
            self._build_session()

            # Markers are placed once the position request comes back
            request_position(
                APP_ID,
                self._on_position,
                self._on_position_error,
                fixed=self.position,
            )

        self.window.present()

    def _build_ui(self):
        self.window = Adw.ApplicationWindow(application=self)
        self.window.connect("close-request", lambda *a: (self.quit(), False)[1])
        self.window.set_title("Workout Map")
        self.window.set_default_size(1280, 800)
        self.window.set_resizable(True)

        toolbar_view = Adw.ToolbarView()
        self.window.set_content(toolbar_view)

        header_bar = Adw.HeaderBar()
        header_bar.set_show_title(True)
        toolbar_view.add_top_bar(header_bar)

        self.workouts_page = WorkoutsPageUI(redisplay_delay_ms=self.config.redisplay_delay_ms)
        self.map_widget = ShumateMapWidget()

        split = Adw.OverlaySplitView()
        split.set_sidebar(self.workouts_page.build_page())
        split.set_content(self.map_widget)
        split.set_min_sidebar_width(320)
        split.set_max_sidebar_width(420)
        toolbar_view.set_content(split)

        # Sidebar becomes an overlay on narrow (mobile) windows
        cond = Adw.BreakpointCondition.parse("max-width: 700sp")
        bp = Adw.Breakpoint.new(cond)
        bp.add_setter(split, "collapsed", True)
        self.window.add_breakpoint(bp)

        toggle = Gtk.ToggleButton()
        toggle.set_icon_name("sidebar-show-symbolic")
        toggle.bind_property(
            "active",
            split,
            "show-sidebar",
            GObject.BindingFlags.BIDIRECTIONAL | GObject.BindingFlags.SYNC_CREATE,
        )
        toggle.set_active(True)
        header_bar.pack_start(toggle)

    def _build_session(self):
        self.database = DatabaseManager(self.config.database_url)
        store = WorkoutStore(self.database)
        ports = ViewPorts(
            form=self.workouts_page,
            alerts=AlertPresenter(self),
            map=self.map_widget,
        )
        self.controller = SessionController(
            store,
            MapSync(),
            ListRenderer(self.workouts_page),
            ports,
            zoom_level=self.config.zoom_level,
            tile_url=self.config.tile_url,
            attribution=self.config.attribution,
        )
        self.workouts_page.bind(self.controller)
        self.controller.start()

    def _on_position(self, coords: Coords) -> None:
        self.controller.on_position(coords)

    def _on_position_error(self, message: str) -> None:
        self.map_widget.show_unavailable(message)
        self.controller.on_position_error(message)

    def do_shutdown(self):
        try:
            if self.database:
                self.database.close()
                logger.debug("Database closed")
        finally:
            # IMPORTANT: chain up by calling the base class with self
            Adw.Application.do_shutdown(self)
