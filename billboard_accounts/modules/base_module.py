from PySide6.QtCore import QObject
from PySide6.QtWidgets import QWidget


class BaseModule(QObject):
    """A navigable screen: owns its view and exposes it to the main window."""

    title: str = ""

    def get_widget(self) -> QWidget:
        raise NotImplementedError
