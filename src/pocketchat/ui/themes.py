"""Theme definitions for the TUI.

Dark palette echoing the mobile chat screens: near-black background,
blue bubbles for the user, graphite bubbles for the assistant.
"""

from textual.theme import Theme

POCKET_DARK = Theme(
    name="pocket-dark",
    primary="#3D5AFE",      # Send button indigo
    secondary="#1E88E5",    # User bubble blue
    accent="#90CAF9",       # Light blue highlights
    foreground="#FFFFFF",
    background="#121212",   # Screen background
    success="#66BB6A",
    warning="#FFB74D",
    error="#EF5350",
    surface="#2C2C2E",      # Assistant bubble graphite
    panel="#1C1C1E",        # Input bar background
    dark=True,
    variables={
        "border": "#333333",
        "border-blurred": "#2A2A2A",
        "input-cursor-background": "#FFFFFF",
        "input-cursor-foreground": "#121212",
        "input-selection-background": "#3D5AFE 30%",
        "scrollbar": "#2A2A2A",
        "scrollbar-hover": "#555555",
        "scrollbar-active": "#3D5AFE",
        "scrollbar-background": "#121212",
        "footer-foreground": "#BBBBBB",
        "footer-background": "#121212",
        "footer-key-foreground": "#90CAF9",
        "footer-key-background": "#2A2A2A",
        "text-muted": "#8E8E93",
        "text-disabled": "#555555",
    },
)
