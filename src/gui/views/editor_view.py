"""Schema editor: table list, column grid and SQL preview.

All edits go through EditorViewModel -> SchemaStore; the widget rebuilds
itself from the store snapshot whenever it changes.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QFont, QGuiApplication
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QTableWidget,
    QTableWidgetItem,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from domain.models import DBType, Schema
from gui.viewmodels.editor_viewmodel import COLUMN_TYPES, FLAG_FIELDS, EditorViewModel

__all__ = ["EditorView", "GRID_HEADERS"]

GRID_HEADERS = ["Column Name", "Type", "PK", "FK", "UQ", "NN", ""]
_NAME_COL = 0
_TYPE_COL = 1
_FLAG_COLS = {2 + i: field for i, field in enumerate(FLAG_FIELDS.values())}
_DELETE_COL = 6


class EditorView(QWidget):
    def __init__(self, viewmodel: EditorViewModel, parent: QWidget | None = None):
        super().__init__(parent)
        self.setObjectName("EditorView")
        self.vm = viewmodel
        self._refreshing = False
        self._refresh_pending = False
        self._build_ui()
        self._unsubscribe = self.vm.store.subscribe(self._on_schema_changed)
        self.refresh()

    # UI construction --------------------------------------------------------------
    def _build_ui(self) -> None:
        root = QHBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        splitter = QSplitter(Qt.Orientation.Horizontal, self)
        root.addWidget(splitter)

        # Tables sidebar
        side = QWidget(splitter)
        side_layout = QVBoxLayout(side)
        head = QHBoxLayout()
        head.addWidget(QLabel("Tables"))
        head.addStretch(1)
        self.add_table_btn = QToolButton(side)
        self.add_table_btn.setText("+")
        self.add_table_btn.setToolTip("Add table")
        self.add_table_btn.clicked.connect(self._add_table)
        head.addWidget(self.add_table_btn)
        self.delete_table_btn = QToolButton(side)
        self.delete_table_btn.setText("Delete")
        self.delete_table_btn.setToolTip("Delete selected table")
        self.delete_table_btn.clicked.connect(self._delete_selected_table)
        head.addWidget(self.delete_table_btn)
        side_layout.addLayout(head)
        self.table_list = QListWidget(side)
        self.table_list.currentItemChanged.connect(self._on_table_selected)
        side_layout.addWidget(self.table_list)

        # Column editor
        center = QWidget(splitter)
        center_layout = QVBoxLayout(center)
        name_row = QHBoxLayout()
        self.name_edit = QLineEdit(center)
        self.name_edit.setPlaceholderText("table_name")
        self.name_edit.editingFinished.connect(self._rename_table)
        name_row.addWidget(self.name_edit)
        self.column_count_label = QLabel("", center)
        name_row.addWidget(self.column_count_label)
        center_layout.addLayout(name_row)
        self.grid = QTableWidget(0, len(GRID_HEADERS), center)
        self.grid.setHorizontalHeaderLabels(GRID_HEADERS)
        header = self.grid.horizontalHeader()
        header.setSectionResizeMode(_NAME_COL, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(_TYPE_COL, QHeaderView.ResizeMode.ResizeToContents)
        for col in list(_FLAG_COLS) + [_DELETE_COL]:
            header.setSectionResizeMode(col, QHeaderView.ResizeMode.ResizeToContents)
        self.grid.verticalHeader().setVisible(False)
        self.grid.itemChanged.connect(self._on_item_changed)
        center_layout.addWidget(self.grid)
        self.add_column_btn = QPushButton("Add Column", center)
        self.add_column_btn.clicked.connect(self._add_column)
        center_layout.addWidget(self.add_column_btn)
        self.empty_label = QLabel("Select a table to edit schema", center)
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        center_layout.addWidget(self.empty_label)

        # SQL preview
        right = QWidget(splitter)
        right_layout = QVBoxLayout(right)
        sql_head = QHBoxLayout()
        sql_head.addWidget(QLabel("SQL"))
        sql_head.addStretch(1)
        self.dialect_combo = QComboBox(right)
        for d in DBType:
            self.dialect_combo.addItem(d.value)
        self.dialect_combo.setCurrentText(self.vm.dialect.value)
        self.dialect_combo.currentTextChanged.connect(self._on_dialect_changed)
        sql_head.addWidget(self.dialect_combo)
        right_layout.addLayout(sql_head)
        self.sql_preview = QPlainTextEdit(right)
        self.sql_preview.setReadOnly(True)
        self.sql_preview.setFont(QFont("monospace"))
        right_layout.addWidget(self.sql_preview)
        self.copy_btn = QPushButton("Copy SQL", right)
        self.copy_btn.clicked.connect(self.copy_sql)
        right_layout.addWidget(self.copy_btn)

        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 3)
        splitter.setStretchFactor(2, 2)

    # Refresh ------------------------------------------------------------------------
    def _on_schema_changed(self, _schema: Schema) -> None:
        # Deferred: the change may come from a signal of a grid cell that the
        # rebuild is about to delete.
        if not self._refresh_pending:
            self._refresh_pending = True
            QTimer.singleShot(0, self._deferred_refresh)

    def _deferred_refresh(self) -> None:
        self._refresh_pending = False
        self.refresh()

    def refresh(self) -> None:
        self._refreshing = True
        try:
            self._refresh_tables()
            self._refresh_columns()
            self.sql_preview.setPlainText(self.vm.sql())
        finally:
            self._refreshing = False

    def _refresh_tables(self) -> None:
        selected = self.vm.selected_table_id
        self.table_list.clear()
        for table in self.vm.tables():
            item = QListWidgetItem(table.name)
            item.setData(Qt.ItemDataRole.UserRole, table.id)
            self.table_list.addItem(item)
            if table.id == selected:
                self.table_list.setCurrentItem(item)
        self.delete_table_btn.setEnabled(selected is not None)

    def _refresh_columns(self) -> None:
        table = self.vm.selected_table()
        has_table = table is not None
        for w in (self.grid, self.name_edit, self.add_column_btn, self.column_count_label):
            w.setVisible(has_table)
        self.empty_label.setVisible(not has_table)
        self.grid.setRowCount(0)
        if table is None:
            return
        if not self.name_edit.hasFocus():
            self.name_edit.setText(table.name)
        self.column_count_label.setText(f"{len(table.columns)} columns")
        self.grid.setRowCount(len(table.columns))
        for row, col in enumerate(table.columns):
            name_item = QTableWidgetItem(col.name)
            name_item.setData(Qt.ItemDataRole.UserRole, col.id)
            self.grid.setItem(row, _NAME_COL, name_item)

            combo = QComboBox(self.grid)
            combo.setEditable(True)
            combo.addItems(COLUMN_TYPES)
            combo.setCurrentText(col.type)
            combo.textActivated.connect(
                lambda text, cid=col.id: self._set_type(cid, text)
            )
            self.grid.setCellWidget(row, _TYPE_COL, combo)

            for grid_col, flag in _FLAG_COLS.items():
                value = getattr(col, flag)
                checked = (not value) if flag == "is_nullable" else value
                item = QTableWidgetItem()
                item.setFlags(Qt.ItemFlag.ItemIsUserCheckable | Qt.ItemFlag.ItemIsEnabled)
                item.setCheckState(Qt.CheckState.Checked if checked else Qt.CheckState.Unchecked)
                item.setData(Qt.ItemDataRole.UserRole, col.id)
                self.grid.setItem(row, grid_col, item)

            delete = QToolButton(self.grid)
            delete.setText("x")
            delete.setToolTip("Delete column")
            delete.clicked.connect(lambda _=False, cid=col.id: self.vm.delete_column(cid))
            self.grid.setCellWidget(row, _DELETE_COL, delete)

    # Handlers -----------------------------------------------------------------------
    def _on_table_selected(self, current: QListWidgetItem | None, _previous) -> None:
        if self._refreshing:
            return
        self.vm.select(current.data(Qt.ItemDataRole.UserRole) if current else None)
        self.refresh()

    def _add_table(self) -> None:
        self.vm.add_table()
        self.refresh()

    def _delete_selected_table(self) -> None:
        tid = self.vm.selected_table_id
        if tid:
            self.vm.delete_table(tid)
            self.refresh()

    def _rename_table(self) -> None:
        text = self.name_edit.text().strip()
        if text:
            self.vm.rename_selected(text)

    def _add_column(self) -> None:
        self.vm.add_column()

    def _set_type(self, column_id: str, text: str) -> None:
        if not self._refreshing and text:
            self.vm.set_column_type(column_id, text)

    def _on_item_changed(self, item: QTableWidgetItem) -> None:
        if self._refreshing:
            return
        column_id = item.data(Qt.ItemDataRole.UserRole)
        if item.column() == _NAME_COL:
            if item.text().strip():
                self.vm.rename_column(column_id, item.text().strip())
        elif item.column() in _FLAG_COLS:
            self.vm.toggle_flag(column_id, _FLAG_COLS[item.column()])

    def _on_dialect_changed(self, text: str) -> None:
        self.vm.set_dialect(text)
        self.sql_preview.setPlainText(self.vm.sql())

    def copy_sql(self) -> str:
        sql = self.vm.sql()
        clipboard = QGuiApplication.clipboard()
        if clipboard is not None:
            clipboard.setText(sql)
        return sql

    def closeEvent(self, event):  # type: ignore[override]
        self._unsubscribe()
        super().closeEvent(event)


