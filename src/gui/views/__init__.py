"""GUI view layer: upload, editor and diagram widgets.

Exports:
 - UploadView
 - EditorView
 - DiagramView
"""

from .upload_view import UploadView  # noqa: F401
from .editor_view import EditorView  # noqa: F401
from .diagram_view import DiagramView  # noqa: F401
