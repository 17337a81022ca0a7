"""
どこで: `src/grafplot/canvas/recording.py`。
何を: 描画命令をそのまま記録するコンテキスト `RecordingContext`。
なぜ: Graph がどの座標・スタイルで命令を発行したかを、ラスタライズなしで検査できるようにするため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from grafplot.canvas.context import BaseContext, DrawStyle


@dataclass(frozen=True, slots=True)
class DrawCommand:
    """1 回の描画命令。args はピクセル座標（変換適用前）のまま保持する。"""

    op: str
    args: tuple[Any, ...]
    style: DrawStyle


class RecordingContext(BaseContext):
    """全ての描画命令を `commands` に積むコンテキスト。"""

    def __init__(self, width: int = 1000, height: int = 1000) -> None:
        self.commands: list[DrawCommand] = []
        super().__init__(width, height)
        # 初期化時の resize は記録しない。
        self.commands.clear()

    def _record(self, op: str, *args: Any) -> None:
        self.commands.append(DrawCommand(op=op, args=tuple(args), style=self.style()))

    def ops(self) -> list[str]:
        return [c.op for c in self.commands]

    def find(self, op: str) -> list[DrawCommand]:
        return [c for c in self.commands if c.op == op]

    def clear_commands(self) -> None:
        self.commands.clear()

    def resize(self, width: int, height: int) -> None:
        super().resize(width, height)
        self._record("resize", self.width, self.height)

    def begin_path(self) -> None:
        self._record("begin_path")

    def move_to(self, x: float, y: float) -> None:
        self._record("move_to", float(x), float(y))

    def line_to(self, x: float, y: float) -> None:
        self._record("line_to", float(x), float(y))

    def arc(
        self,
        x: float,
        y: float,
        radius: float,
        start_angle: float,
        end_angle: float,
        anticlockwise: bool = False,
    ) -> None:
        self._record(
            "arc",
            float(x),
            float(y),
            float(radius),
            float(start_angle),
            float(end_angle),
            bool(anticlockwise),
        )

    def close_path(self) -> None:
        self._record("close_path")

    def stroke(self) -> None:
        self._record("stroke")

    def fill(self) -> None:
        self._record("fill")

    def fill_text(self, text: str, x: float, y: float) -> None:
        self._record("fill_text", str(text), float(x), float(y))

    def fill_rect(self, x: float, y: float, width: float, height: float) -> None:
        self._record("fill_rect", float(x), float(y), float(width), float(height))

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        self._record("clear_rect", float(x), float(y), float(width), float(height))

    def draw_image(self, image: str, x: float, y: float, width: float, height: float) -> None:
        self._record("draw_image", str(image), float(x), float(y), float(width), float(height))

    def translate(self, x: float, y: float) -> None:
        super().translate(x, y)
        self._record("translate", float(x), float(y))

    def rotate(self, angle: float) -> None:
        super().rotate(angle)
        self._record("rotate", float(angle))

    def reset_transform(self) -> None:
        super().reset_transform()
        self._record("reset_transform")


__all__ = ["DrawCommand", "RecordingContext"]
