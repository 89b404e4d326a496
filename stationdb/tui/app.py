#!/usr/bin/env python3
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import (
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    Static,
)

from stationdb.core.config import DatabaseConfig, load_config
from stationdb.core.database import StationDatabase
from stationdb.core.errors import StationDBError
from stationdb.core.records import station_countries, station_quality


class StationBrowser(App):
    TITLE = "Station Database"

    CSS = """
    Screen {
        background: black;
    }
    #results-pane {
        width: 55%;
        border: round white;
        padding: 1 1;
    }
    #detail-pane {
        width: 45%;
        border: round white;
        padding: 1 1;
    }
    #status {
        margin-top: 1;
        height: 3;
        border: round white;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "rebuild", "Rebuild"),
        Binding("c", "export_csv", "Export CSV"),
        Binding("j", "export_json", "Export JSON"),
    ]

    term: reactive[str] = reactive("")

    def __init__(self, config: DatabaseConfig):
        super().__init__()
        self.db = StationDatabase(config)
        self._results: list[dict] = []

    # ------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal():
            with Vertical(id="results-pane"):
                yield Label("Search")
                self.search_input = Input(placeholder="Name or call sign…")
                yield self.search_input

                self.results_view = ListView()
                yield self.results_view

            with Vertical(id="detail-pane"):
                yield Label("Station")
                self.detail_view = Static("Select a station.", markup=False)
                yield self.detail_view

                self.status_label = Label("", id="status", markup=False)
                yield self.status_label

        yield Footer()

    def on_mount(self) -> None:
        self.refresh_status()

    def refresh_status(self):
        self.set_status(str(self.db.breakdown()))

    # ------------------------------------------------------------
    # Search
    # ------------------------------------------------------------

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input is not self.search_input:
            return

        self.term = event.value
        self.refresh_search()

    def refresh_search(self):
        q = (self.term or "").strip()
        self.results_view.clear()
        self._results = []

        if not q:
            self.refresh_status()
            return

        try:
            stations = self.db.search(q)
        except StationDBError as e:
            self.set_status(f"Search failed: {e}")
            return

        for st in stations:
            label = (st.get("name") or "Unknown").strip()
            if st.get("callSign"):
                label += f" [{st['callSign']}]"
            label += f" {station_quality(st)} ({station_countries(st, sep=',', empty='UNK')})"
            self.results_view.append(ListItem(Label(label, markup=False)))
            self._results.append(st)

        self.set_status(f"Results: {len(self._results)}")

    def on_list_view_highlighted(self, event: ListView.Highlighted) -> None:
        idx = self.results_view.index
        if idx is None or idx >= len(self._results):
            return

        sid = self._results[idx].get("stationId")
        if not sid:
            self.detail_view.update("Station has no ID.")
            return

        try:
            self.detail_view.update(self.db.detail(str(sid)))
        except StationDBError as e:
            self.detail_view.update(str(e))

    # ------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------

    def action_rebuild(self):
        try:
            self.db.rebuild()
        except StationDBError as e:
            self.set_status(f"Rebuild failed: {e}")
            return
        self.set_status(f"Rebuilt. {self.db.breakdown()}")

    def action_export_csv(self):
        self._export("csv")

    def action_export_json(self):
        self._export("json")

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _export(self, fmt: str):
        try:
            result = self.db.export(fmt)
        except StationDBError as e:
            self.set_status(f"Export failed: {e}")
            return
        self.set_status(f"Exported {result.count} stations to {result.path}")

    def set_status(self, msg: str):
        self.status_label.update(msg)


def main(config: DatabaseConfig | None = None):
    StationBrowser(config or load_config()).run()


if __name__ == "__main__":
    main()
