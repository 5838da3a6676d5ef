"""
The CONTROLLER layer owns the committed scene and drives loading and export.

Note: This package should not import PySide6.
"""
