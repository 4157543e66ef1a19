"""Preview rendering core: identifier resolution, format dispatch, sizing, rendering and fallback."""
