"""
どこで: `src/grafplot/canvas/__init__.py`。
何を: 描画コンテキスト（規約・SVG・記録用）を再エクスポートする。
"""

from grafplot.canvas.context import BaseContext, DrawContext, DrawStyle
from grafplot.canvas.recording import DrawCommand, RecordingContext
from grafplot.canvas.svg import SvgContext

__all__ = [
    "BaseContext",
    "DrawCommand",
    "DrawContext",
    "DrawStyle",
    "RecordingContext",
    "SvgContext",
]
