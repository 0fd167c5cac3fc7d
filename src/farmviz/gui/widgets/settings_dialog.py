from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QLabel,
    QLineEdit,
    QMessageBox,
    QVBoxLayout,
)

from farmviz.core.settings import AppSettings, DEFAULT_UPLOAD_FOLDER


class SettingsDialog(QDialog):
    """Service endpoints and identity. Saved per user profile."""

    def __init__(self, settings: AppSettings, parent=None) -> None:
        super().__init__(parent)
        self.settings = settings
        self.setWindowTitle("Settings")
        self.setMinimumWidth(520)

        root = QVBoxLayout(self)
        root.setContentsMargins(16, 16, 16, 16)
        root.setSpacing(12)

        subtitle = QLabel(
            "Environment variables (FARMVIZ_API_BASE_URL, FARMVIZ_USER_EMAIL, ...) override these values at start-up."
        )
        subtitle.setWordWrap(True)
        root.addWidget(subtitle)

        api_group = QGroupBox("Farm API")
        api_form = QFormLayout(api_group)
        self.api_url_edit = QLineEdit()
        self.api_url_edit.setPlaceholderText("https://example.com/api")
        self.email_edit = QLineEdit()
        self.timeout_spin = QDoubleSpinBox()
        self.timeout_spin.setRange(1.0, 600.0)
        self.timeout_spin.setSuffix(" s")
        api_form.addRow("Base URL", self.api_url_edit)
        api_form.addRow("User e-mail", self.email_edit)
        api_form.addRow("Request timeout", self.timeout_spin)
        root.addWidget(api_group)

        storage_group = QGroupBox("Image Storage (Cloudinary)")
        storage_form = QFormLayout(storage_group)
        self.cloud_name_edit = QLineEdit()
        self.preset_edit = QLineEdit()
        self.folder_edit = QLineEdit()
        self.folder_edit.setPlaceholderText(DEFAULT_UPLOAD_FOLDER)
        storage_form.addRow("Cloud name", self.cloud_name_edit)
        storage_form.addRow("Upload preset", self.preset_edit)
        storage_form.addRow("Folder", self.folder_edit)
        root.addWidget(storage_group)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)

        self._populate_from_settings(self.settings)

    def _populate_from_settings(self, s: AppSettings) -> None:
        self.api_url_edit.setText(s.api_base_url)
        self.email_edit.setText(s.user_email)
        self.timeout_spin.setValue(float(s.request_timeout_seconds))
        self.cloud_name_edit.setText(s.cloudinary_cloud_name)
        self.preset_edit.setText(s.cloudinary_upload_preset)
        self.folder_edit.setText(s.upload_folder)

    def _on_accept(self) -> None:
        url = self.api_url_edit.text().strip()
        if url and not url.startswith(("http://", "https://")):
            QMessageBox.warning(self, "Invalid URL", "Base URL must start with http:// or https://")
            return
        self.settings.api_base_url = url
        self.settings.user_email = self.email_edit.text().strip()
        self.settings.request_timeout_seconds = float(self.timeout_spin.value())
        self.settings.cloudinary_cloud_name = self.cloud_name_edit.text().strip()
        self.settings.cloudinary_upload_preset = self.preset_edit.text().strip()
        self.settings.upload_folder = self.folder_edit.text().strip() or DEFAULT_UPLOAD_FOLDER
        self.settings.save()
        self.accept()
