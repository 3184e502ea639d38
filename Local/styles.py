"""
Secure Diary Dark Theme Stylesheet
===================================

Dark theme for the PySide6 desktop application. Buttons take a
``class`` property of ``secondary``, ``danger`` or ``success``.
"""

# Color palette
_BG_DARK = "#1a1a2e"
_BG_MEDIUM = "#16213e"
_BG_LIGHT = "#0f3460"
_BG_CARD = "#1e2a4a"
_BG_INPUT = "#0d1b3e"
_ACCENT = "#e94560"
_ACCENT_HOVER = "#ff6b81"
_ACCENT_PRESSED = "#c0392b"
_TEXT_PRIMARY = "#eaeaea"
_TEXT_SECONDARY = "#a0a0b8"
_TEXT_MUTED = "#6c6c80"
_BORDER = "#2a2a4a"
_SUCCESS = "#2ecc71"
_ERROR = "#e74c3c"
_SCROLLBAR_HANDLE = "#4a4a6a"

_ENTRY_FONT = '"Georgia", "Cambria", serif'

STYLESHEET = f"""
QWidget {{
    background-color: {_BG_DARK};
    color: {_TEXT_PRIMARY};
    font-family: "Segoe UI", "SF Pro Display", "Helvetica Neue", sans-serif;
}}

/* ===== Tabs ===== */
QTabWidget::pane {{
    border: 1px solid {_BORDER};
    border-radius: 8px;
    background-color: {_BG_MEDIUM};
    margin-top: -1px;
}}

QTabBar::tab {{
    background-color: {_BG_DARK};
    color: {_TEXT_SECONDARY};
    padding: 8px 16px;
    margin-right: 2px;
    border-top-left-radius: 8px;
    border-top-right-radius: 8px;
    border-bottom: 2px solid transparent;
    font-size: 13px;
}}

QTabBar::tab:selected {{
    background-color: {_BG_MEDIUM};
    color: {_TEXT_PRIMARY};
    border-bottom: 2px solid {_ACCENT};
}}

QTabBar::tab:disabled {{
    color: {_TEXT_MUTED};
}}

/* ===== Group Box ===== */
QGroupBox {{
    background-color: {_BG_CARD};
    border: 1px solid {_BORDER};
    border-radius: 8px;
    margin-top: 14px;
    padding: 20px 12px 10px 12px;
    font-weight: 600;
}}

QGroupBox::title {{
    subcontrol-origin: margin;
    subcontrol-position: top left;
    padding: 4px 12px;
    color: {_ACCENT};
}}

QLabel {{
    background-color: transparent;
    font-size: 13px;
}}

QLabel[class="dropzone"] {{
    background-color: {_BG_INPUT};
    border: 2px dashed {_SCROLLBAR_HANDLE};
    border-radius: 12px;
    color: {_TEXT_SECONDARY};
    padding: 16px;
}}

QLabel[class="dropzone"][state="drag"] {{
    border-color: {_ACCENT};
    color: {_ACCENT};
}}

QLabel[class="dropzone"][state="loaded"] {{
    border: 2px solid {_SUCCESS};
    color: {_SUCCESS};
}}

/* ===== Buttons ===== */
QPushButton {{
    background-color: {_ACCENT};
    color: #ffffff;
    border: none;
    border-radius: 6px;
    padding: 8px 20px;
    font-weight: 600;
    font-size: 13px;
}}

QPushButton:hover {{
    background-color: {_ACCENT_HOVER};
}}

QPushButton:pressed {{
    background-color: {_ACCENT_PRESSED};
}}

QPushButton:disabled {{
    background-color: {_BG_LIGHT};
    color: {_TEXT_MUTED};
}}

QPushButton[class="secondary"] {{
    background-color: {_BG_LIGHT};
    border: 1px solid {_BORDER};
}}

QPushButton[class="secondary"]:hover {{
    border-color: {_ACCENT};
}}

QPushButton[class="danger"] {{
    background-color: {_ERROR};
}}

QPushButton[class="success"] {{
    background-color: {_SUCCESS};
    color: {_BG_DARK};
}}

/* ===== Diary text ===== */
QPlainTextEdit {{
    background-color: {_BG_INPUT};
    border: 1px solid {_BORDER};
    border-radius: 6px;
    padding: 8px;
    font-family: {_ENTRY_FONT};
    font-size: 14px;
    selection-background-color: {_ACCENT};
}}

QPlainTextEdit:focus {{
    border-color: {_ACCENT};
}}

QScrollBar:vertical {{
    background-color: {_BORDER};
    width: 10px;
    border-radius: 5px;
}}

QScrollBar::handle:vertical {{
    background-color: {_SCROLLBAR_HANDLE};
    min-height: 30px;
    border-radius: 5px;
}}

QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical {{
    height: 0px;
}}

QScrollArea, QScrollArea > QWidget > QWidget {{
    background-color: transparent;
    border: none;
}}

/* ===== Chrome ===== */
QStatusBar {{
    background-color: {_BG_MEDIUM};
    color: {_TEXT_SECONDARY};
    border-top: 1px solid {_BORDER};
    font-size: 12px;
}}

QMenuBar {{
    border-bottom: 1px solid {_BORDER};
}}

QMenuBar::item:selected, QMenu::item:selected {{
    background-color: {_BG_LIGHT};
}}

QMenu {{
    background-color: {_BG_CARD};
    border: 1px solid {_BORDER};
    padding: 4px;
}}

QMenu::item {{
    padding: 6px 24px;
}}
"""
