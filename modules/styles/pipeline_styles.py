"""
Стили канбан-доски лидов
"""

from config.settings import config

UI_CONFIG = config.ui

BASE_FONT_SIZE = UI_CONFIG.font_size if UI_CONFIG.font_size > 0 else 14
FONT_FAMILY = UI_CONFIG.font_family or 'Arial'

FONT_SIZES = {
    'h1': f"{int(BASE_FONT_SIZE * 1.43)}px",
    'h3': f"{int(BASE_FONT_SIZE * 1.14)}px",
    'normal': f"{BASE_FONT_SIZE}px",
    'small': f"{int(BASE_FONT_SIZE * 0.86)}px",
}

SIZES = {
    'padding_small': 4,
    'padding_normal': 6,
    'border_radius_small': 4,
    'border_radius_normal': 6,
}

COLORS = {
    'primary': '#2066B0',
    'primary_dark': '#1A5490',
    'secondary': '#F5F5F5',
    'white': '#FFFFFF',
    'text_dark': '#535C69',
    'text_light': '#828282',
    'border': '#D5D5D5',
    'success': '#9ECF00',
    'error': '#E53935',
}

LABEL_STYLES = {
    'h1': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['h1']}; font-weight: bold; color: {COLORS['primary']};",
    'h3': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['h3']}; font-weight: bold; color: {COLORS['text_dark']};",
    'normal': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['normal']}; color: {COLORS['text_dark']};",
    'small': f"font-family: \"{FONT_FAMILY}\"; font-size: {FONT_SIZES['small']}; color: {COLORS['text_light']};",
}

KANBAN_HEADER_STYLE = f"""
    QLabel {{
        background: {COLORS['primary']};
        color: {COLORS['white']};
        padding: {SIZES['padding_normal']}px;
        border-radius: {SIZES['border_radius_small']}px;
        font-weight: bold;
    }}
"""

KANBAN_COLUMN_STYLE = f"""
    QFrame {{
        background: {COLORS['white']};
        border: 1px solid {COLORS['border']};
        border-radius: {SIZES['border_radius_normal']}px;
    }}
"""

LEAD_CARD_STYLE = f"""
    QFrame {{
        background: {COLORS['secondary']};
        border: 1px solid {COLORS['border']};
        border-radius: {SIZES['border_radius_normal']}px;
    }}
    QFrame:hover {{
        border: 2px solid {COLORS['primary']};
        background: {COLORS['white']};
    }}
"""

NOTICE_STYLES = {
    'success': f"color: {COLORS['white']}; background: {COLORS['success']}; padding: {SIZES['padding_normal']}px;",
    'error': f"color: {COLORS['white']}; background: {COLORS['error']}; padding: {SIZES['padding_normal']}px;",
}


def apply_label_style(widget, style_type='normal'):
    widget.setStyleSheet(LABEL_STYLES.get(style_type, LABEL_STYLES['normal']))


def apply_kanban_header_style(widget):
    widget.setStyleSheet(KANBAN_HEADER_STYLE)


def apply_kanban_column_style(widget):
    widget.setStyleSheet(KANBAN_COLUMN_STYLE)


def apply_lead_card_style(widget):
    widget.setStyleSheet(LEAD_CARD_STYLE)


def apply_notice_style(widget, level='success'):
    widget.setStyleSheet(NOTICE_STYLES.get(level, NOTICE_STYLES['error']))
