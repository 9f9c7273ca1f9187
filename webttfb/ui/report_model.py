"""Qt model for report rows using model/view pattern."""

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QBrush, QColor

from webttfb.classify import BAND_STYLES
from webttfb.models import Metric
from webttfb.report import Report


class ReportModel(QAbstractTableModel):
    """Table model for the ranked rows of one report.

    Timing cells carry their band color as background; failed rows show a
    dash instead of the zero placeholder.
    """

    METRIC_COLUMNS = {2: Metric.CONNECT, 3: Metric.FIRST_BYTE, 4: Metric.TOTAL}

    def __init__(self, parent=None):
        super().__init__(parent)
        self._rows = []

        self._columns = ["", "Server", "Conn", "TTFB", "TTL", "Location"]

        self._ok = "✔"
        self._failed = "✘"
        self._dash = "--"

    def rowCount(self, parent=QModelIndex()):
        """Return the number of report rows."""
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        """Return the number of columns."""
        if parent.isValid():
            return 0
        return len(self._columns)

    def data(self, index, role=Qt.DisplayRole):
        """Return data for a given cell."""
        if not index.isValid():
            return None

        if index.row() >= len(self._rows) or index.row() < 0:
            return None

        row = self._rows[index.row()]
        col = index.column()
        metric = self.METRIC_COLUMNS.get(col)

        if role == Qt.DisplayRole:
            if col == 0:
                return self._ok if row.succeeded else self._failed
            elif col == 1:
                return row.vantage_id
            elif metric is not None:
                if not row.succeeded:
                    return self._dash
                return f"{row.value(metric):.3f}"
            elif col == 5:
                return row.label

        elif role == Qt.BackgroundRole:
            if metric is not None:
                color = BAND_STYLES[row.bands[metric]].color
                if color:
                    return QBrush(QColor(color))

        elif role == Qt.ForegroundRole:
            if col == 0:
                return QBrush(QColor("#008000" if row.succeeded else "#c00000"))

        elif role == Qt.TextAlignmentRole:
            if metric is not None:
                return Qt.AlignRight | Qt.AlignVCenter
            elif col == 0:
                return Qt.AlignCenter
            else:
                return Qt.AlignLeft | Qt.AlignVCenter

        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        """Return header data."""
        if role == Qt.DisplayRole and orientation == Qt.Horizontal:
            if 0 <= section < len(self._columns):
                return self._columns[section]
        return None

    def flags(self, index):
        """Return item flags (read-only)."""
        if not index.isValid():
            return Qt.NoItemFlags
        return Qt.ItemIsEnabled | Qt.ItemIsSelectable

    def set_report(self, report: Report | None):
        """Replace all rows with the rows of report (None clears)."""
        self.beginResetModel()
        self._rows = list(report.rows) if report is not None else []
        self.endResetModel()

    def clear(self):
        """Clear all rows from the model."""
        self.set_report(None)

    def get_rows(self):
        """Get all rows in ranked order."""
        return list(self._rows)
