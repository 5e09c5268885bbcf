"""REST API for QuillPass."""
