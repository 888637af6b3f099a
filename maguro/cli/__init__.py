"""
Command-Line Interface Layer.

Typer commands, Rich output formatting, and the download progress display.
"""
