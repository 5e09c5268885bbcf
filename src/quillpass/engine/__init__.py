"""Pass execution engine for QuillPass."""

from quillpass.engine.build import prepare_context, run_project_build
from quillpass.engine.pipeline import PassEngine, sort_diagnostics

__all__ = [
    "PassEngine",
    "prepare_context",
    "run_project_build",
    "sort_diagnostics",
]
