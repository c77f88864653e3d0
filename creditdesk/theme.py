class Theme:
    LIGHT = {
        "bg_primary": "#F3F4F6",      # Main background (light gray)
        "text_primary": "#1F2937",    # Dark Gray/Black
        "text_secondary": "#4B5563",  # Medium Gray
        "text_muted": "#9CA3AF",
        "border": "#E5E7EB",          # Light Border
        "card_bg": "#FFFFFF",
        "card_border": "#E5E7EB",
        "success": "#10B981",         # Completed / current step
        "success_text": "#FFFFFF",
        "danger": "#EF4444",
    }

    DARK = {
        "bg_primary": "#111827",      # Very Dark Gray/Black
        "text_primary": "#F9FAFB",    # Off-white
        "text_secondary": "#9CA3AF",  # Light Gray
        "text_muted": "#6B7280",
        "border": "#374151",          # Dark Border
        "card_bg": "#1F2937",
        "card_border": "#374151",
        "success": "#34D399",
        "success_text": "#022c22",
        "danger": "#F87171",
    }


class ThemeManager:
    def __init__(self, theme_name="Light"):
        self.set_theme(theme_name)

    def set_theme(self, theme_name):
        self.current_theme_name = theme_name
        self.colors = Theme.LIGHT if theme_name == "Light" else Theme.DARK

    def get_color(self, key):
        return self.colors.get(key, "#ff0000") # Return red if key missing

    def toggle_theme(self):
        new_theme = "Dark" if self.current_theme_name == "Light" else "Light"
        self.set_theme(new_theme)
        return new_theme
