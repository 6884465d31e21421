"""Report generation and export helpers."""
