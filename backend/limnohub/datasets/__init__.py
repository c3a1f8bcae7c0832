"""Dataset definitions: SQL templates and filter allow-lists."""
