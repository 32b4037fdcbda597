"""Web interface for the Swedish mortgage calculator."""
