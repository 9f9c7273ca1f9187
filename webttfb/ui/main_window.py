"""Main window for webttfb."""

import logging
from functools import partial

from PySide6.QtCore import Qt, QThreadPool
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFileDialog,
    QFrame,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QListWidget,
    QMainWindow,
    QPushButton,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from webttfb.models import Criterion, RunOutcome
from webttfb.report import Report, build_report, write_csv
from webttfb.runner import PROBE_MODES, collect
from webttfb.ui.report_model import ReportModel
from webttfb.workers import RunWorker

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window."""

    SORT_OPTIONS = {
        "Status": Criterion.STATUS,
        "Connection time": Criterion.CONNECT,
        "Time to first byte": Criterion.FIRST_BYTE,
        "Total time": Criterion.TOTAL,
    }

    def __init__(
        self,
        domain: str = "example.com",
        criterion: Criterion = Criterion.STATUS,
        mode: str = "remote",
        private: bool = False,
        config: str | None = None,
        timeout: float = 30.0,
    ):
        super().__init__()
        self.setWindowTitle("Website TTFB")
        self.setGeometry(100, 100, 900, 650)

        self.config = config
        self.timeout = timeout

        # Threading for non-blocking runs
        self.thread_pool = QThreadPool.globalInstance()
        self._in_flight = False
        self._current_worker = None

        # Last completed run, kept for re-ranking without probing again
        self._outcome: RunOutcome | None = None
        self._domain = ""
        self.report: Report | None = None

        self.report_model = ReportModel()

        self.setup_ui()

        self.domain_edit.setText(domain)
        self.set_criterion(criterion)
        self.mode_combo.setCurrentText(mode if mode in PROBE_MODES else "remote")
        self.private_check.setChecked(private)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Handle application close event - clean up resources."""
        self._disconnect_worker()
        self.thread_pool.waitForDone(1000)
        super().closeEvent(event)

    def setup_ui(self):
        """Set up the main user interface."""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)

        main_layout = QHBoxLayout(central_widget)
        main_layout.addWidget(self.create_control_panel(), 0)
        main_layout.addWidget(self.create_report_area(), 1)

    def create_control_panel(self):
        """Create the left control panel."""
        panel = QFrame()
        panel.setFrameStyle(QFrame.Box)
        panel.setFixedWidth(250)

        layout = QVBoxLayout(panel)

        target_group = QGroupBox("Target")
        target_layout = QVBoxLayout(target_group)

        self.domain_edit = QLineEdit()
        self.domain_edit.setPlaceholderText("example.com")
        self.domain_edit.returnPressed.connect(self.start_run)
        target_layout.addWidget(self.domain_edit)

        self.private_check = QCheckBox("Hide results from public stats")
        target_layout.addWidget(self.private_check)

        mode_layout = QHBoxLayout()
        mode_layout.addWidget(QLabel("Probe:"))
        self.mode_combo = QComboBox()
        self.mode_combo.addItems(list(PROBE_MODES))
        mode_layout.addWidget(self.mode_combo)
        target_layout.addLayout(mode_layout)

        layout.addWidget(target_group)

        controls_group = QGroupBox("Controls")
        controls_layout = QVBoxLayout(controls_group)

        self.run_button = QPushButton("Run Test")
        self.run_button.clicked.connect(self.start_run)
        controls_layout.addWidget(self.run_button)

        self.export_button = QPushButton("Export CSV")
        self.export_button.clicked.connect(self.export_csv)
        controls_layout.addWidget(self.export_button)

        sort_layout = QHBoxLayout()
        sort_layout.addWidget(QLabel("Sort:"))
        self.sort_combo = QComboBox()
        self.sort_combo.addItems(list(self.SORT_OPTIONS.keys()))
        self.sort_combo.currentTextChanged.connect(self.on_sort_changed)
        sort_layout.addWidget(self.sort_combo)
        controls_layout.addLayout(sort_layout)

        layout.addWidget(controls_group)

        stats_group = QGroupBox("Average")
        stats_layout = QVBoxLayout(stats_group)

        self.connect_label = QLabel("Conn: --")
        self.first_byte_label = QLabel("TTFB: --")
        self.total_label = QLabel("TTL: --")
        self.grade_label = QLabel("Performance: --")

        for label in [self.connect_label, self.first_byte_label, self.total_label, self.grade_label]:
            label.setStyleSheet("padding: 5px; font-family: monospace;")
            stats_layout.addWidget(label)

        layout.addWidget(stats_group)
        layout.addStretch()

        self.status_label = QLabel("Status: Ready")
        self.status_label.setAlignment(Qt.AlignCenter)
        self.status_label.setStyleSheet("font-weight: bold;")
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        return panel

    def create_report_area(self):
        """Create the right area with the ranked table and error list."""
        area = QFrame()
        area.setFrameStyle(QFrame.Box)

        layout = QVBoxLayout(area)

        self.table = QTableView()
        self.table.setModel(self.report_model)
        self.table.setAlternatingRowColors(True)
        self.table.setSelectionBehavior(QTableView.SelectRows)
        self.table.verticalHeader().setVisible(False)

        header = self.table.horizontalHeader()
        for col in range(self.report_model.columnCount() - 1):
            header.setSectionResizeMode(col, QHeaderView.ResizeToContents)
        header.setSectionResizeMode(self.report_model.columnCount() - 1, QHeaderView.Stretch)

        layout.addWidget(self.table, 3)

        layout.addWidget(QLabel("Errors"))
        self.error_list = QListWidget()
        layout.addWidget(self.error_list, 1)

        return area

    def current_criterion(self) -> Criterion:
        return self.SORT_OPTIONS.get(self.sort_combo.currentText(), Criterion.STATUS)

    def set_criterion(self, criterion: Criterion):
        for text, value in self.SORT_OPTIONS.items():
            if value is criterion:
                self.sort_combo.setCurrentText(text)
                return

    def start_run(self):
        """Handle run button click."""
        if self._in_flight:
            return

        domain = self.domain_edit.text().strip()
        if not domain:
            self.status_label.setText("Status: Domain is invalid")
            return

        self._in_flight = True
        self._domain = domain
        self.run_button.setEnabled(False)
        self.status_label.setText("Status: Testing ...")

        run = partial(
            self._collect,
            domain,
            self.mode_combo.currentText(),
            self.private_check.isChecked(),
        )

        worker = RunWorker(run)
        worker.signals.progress.connect(self.on_progress)
        worker.signals.outcome_ready.connect(self.on_outcome_ready)
        worker.signals.error.connect(self.on_run_error)
        worker.signals.finished.connect(self.on_run_finished)

        self._current_worker = worker
        self.thread_pool.start(worker)

    def _collect(self, domain, mode, private, progress):
        return collect(
            domain,
            mode=mode,
            private=private,
            config=self.config,
            timeout=self.timeout,
            progress=progress,
        )

    def on_progress(self, done: int, total: int):
        self.status_label.setText(f"Status: Testing {done:02d}/{total} ...")

    def on_outcome_ready(self, outcome: RunOutcome):
        """Handle a completed run from the worker thread."""
        self._outcome = outcome
        self.show_report(build_report(self._domain, outcome, self.current_criterion()))

        failed = outcome.failure_count
        self.status_label.setText(
            f"Status: Done ({len(outcome.results) - failed} ok, {failed} failed)"
        )

    def on_run_error(self, error_msg: str):
        self.status_label.setText(f"Status: Run failed - {error_msg}")

    def on_run_finished(self):
        """Clear in-flight flag and release the worker."""
        self._disconnect_worker()
        self._in_flight = False
        self.run_button.setEnabled(True)

    def _disconnect_worker(self):
        if self._current_worker is None:
            return
        signals = self._current_worker.signals
        for signal in (signals.progress, signals.outcome_ready, signals.error, signals.finished):
            try:
                signal.disconnect()
            except (RuntimeError, TypeError):
                # Already disconnected
                pass
        self._current_worker = None

    def on_sort_changed(self, text: str):
        """Re-rank the last run with the selected criterion."""
        if self._outcome is None:
            return
        self.show_report(build_report(self._domain, self._outcome, self.current_criterion()))

    def show_report(self, report: Report):
        """Display a report in the table, the summary labels and the error list."""
        self.report = report
        self.report_model.set_report(report)

        summary = report.summary
        self.connect_label.setText(f"Conn: {summary.avg_connect:.3f} s")
        self.first_byte_label.setText(f"TTFB: {summary.avg_first_byte:.3f} s")
        self.total_label.setText(f"TTL: {summary.avg_total:.3f} s")
        self.grade_label.setText(f"Performance: {summary.grade.letter}")
        self.grade_label.setStyleSheet(
            "padding: 5px; font-family: monospace; font-weight: bold; "
            f"background-color: {summary.grade.color};"
        )

        self.error_list.clear()
        for error in report.errors:
            self.error_list.addItem(str(error))

    def export_csv(self):
        """Export the current report to a CSV file."""
        if self.report is None or not self.report.rows:
            self.status_label.setText("Status: No data to export")
            return

        filename, _ = QFileDialog.getSaveFileName(
            self, "Export Report to CSV", "webttfb.csv", "CSV Files (*.csv)"
        )

        if not filename:
            return

        try:
            write_csv(self.report, filename)
            self.status_label.setText("Status: Exported CSV")
        except OSError as e:
            logger.warning("CSV export failed: %s", e)
            self.status_label.setText(f"Status: Export failed - {type(e).__name__}")
