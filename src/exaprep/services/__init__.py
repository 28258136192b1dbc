"""Service layer used by the UI: generation state and PDF export."""
