"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.

Layout: one column. Chat history fills the screen, the optional log
panel sits under it, and the bottom bar holds the status line and the
input bar.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 1fr;
    background: $background;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

/* ============================================
   Chat Bubbles
   ============================================ */
.chat-message {
    width: 80%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 1;
}

.user-message {
    background: $secondary;
    margin-left: 8;

    & .message-header {
        color: $foreground 80%;
        text-style: bold;
    }
}

.assistant-message {
    background: $surface;

    & .message-header {
        color: $accent;
        text-style: bold;
    }
}

.pending-message {
    background: $surface 50%;

    & .message-content {
        color: $text-muted;
        text-style: italic;
    }
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    color: $foreground;
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-x: auto;
}

/* ============================================
   Bottom Bar - Status + Input
   ============================================ */
#bottom-bar {
    height: auto;
    padding: 0 1;
    background: $panel;
    border-top: solid $border;
}

#status {
    height: 1;
    padding: 0 1;
    color: $text-muted;
}

ChatInputBar {
    height: 5;
    border: round $border;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;

    &:disabled {
        color: $text-disabled;
    }
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    min-width: 8;
    border: tall $primary;
    background: $primary;
    color: $foreground;
    text-style: bold;

    &:hover {
        background: $primary-lighten-1;
    }

    &:disabled {
        background: $surface;
        border: tall $surface;
        color: $text-disabled;
    }
}

Header {
    background: $panel;
    height: 1;
}

Footer {
    background: $panel;
}
"""
