"""Image export and Pillow-backed image edits."""
