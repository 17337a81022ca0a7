"""
どこで: `src/grafplot/export/image.py`。
何を: SvgContext を SVG/PNG として保存し、SVG を外部ラスタライザ（resvg）で PNG に変換する。
なぜ: SVG を正（ソース）として保存し、PNG は `export.png.scale` 倍で再生成できるようにするため。
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from grafplot.canvas.svg import SvgContext
from grafplot.core.color import Color
from grafplot.core.runtime_config import output_root_dir, runtime_config
from grafplot.export.svg import export_svg

_logger = logging.getLogger(__name__)


def export_image(context: SvgContext, path: str | Path) -> Path:
    """コンテキストの描画内容を画像として保存する。

    Notes
    -----
    `.svg` はそのまま保存する。`.png` は同名の `.svg` を隣に保存してから
    resvg でラスタライズする。
    """
    _path = Path(path)
    suffix = _path.suffix.lower()

    if suffix == ".svg":
        return export_svg(context, _path)

    if suffix == ".png":
        svg_path = _path.with_suffix(".svg")
        export_svg(context, svg_path)
        try:
            return rasterize_svg_to_png(
                svg_path,
                _path,
                output_size=png_output_size((context.width, context.height)),
                background=runtime_config().background,
            )
        except RuntimeError:
            _logger.exception("PNG の書き出しに失敗しました: %s", _path)
            raise

    raise ValueError(f"未対応の画像フォーマット: {suffix!r}")


def default_output_path(name: str, ext: str = "svg") -> Path:
    """`{output_root}/{ext}/{name}.{ext}` を返す。"""

    _ext = str(ext).lstrip(".").lower()
    if not _ext:
        raise ValueError("ext は空にできない")
    return output_root_dir() / _ext / f"{name}.{_ext}"


def png_output_size(canvas_size: tuple[int, int]) -> tuple[int, int]:
    """canvas_size を基準に PNG 出力ピクセルサイズを返す。"""

    canvas_w, canvas_h = canvas_size
    if int(canvas_w) <= 0 or int(canvas_h) <= 0:
        raise ValueError("canvas_size は正の (width, height) である必要がある")
    scale = float(runtime_config().png_scale)
    return int(int(canvas_w) * scale), int(int(canvas_h) * scale)


def _background_hex(background: str) -> str:
    try:
        return Color.from_css(background).to_hex_string().upper()
    except ValueError as exc:
        raise ValueError(f"背景色を解釈できない: {background!r}") from exc


def _resvg_command(
    *,
    input_svg: Path,
    output_png: Path,
    output_size: tuple[int, int],
    background: str,
) -> list[str]:
    out_w, out_h = output_size
    if int(out_w) <= 0 or int(out_h) <= 0:
        raise ValueError("output_size は正の (width, height) である必要がある")
    return [
        "resvg",
        "--width",
        str(int(out_w)),
        "--height",
        str(int(out_h)),
        "--background",
        _background_hex(background),
        str(input_svg),
        str(output_png),
    ]


def rasterize_svg_to_png(
    svg_path: str | Path,
    png_path: str | Path,
    *,
    output_size: tuple[int, int],
    background: str = "#FFFFFF",
) -> Path:
    """SVG を PNG として保存する。

    Parameters
    ----------
    svg_path : str or Path
        入力 SVG パス。
    png_path : str or Path
        出力 PNG パス。
    output_size : tuple[int, int]
        出力 PNG の (width, height) ピクセルサイズ。
    background : str
        背景色（CSS 色）。既定は白。

    Returns
    -------
    Path
        出力 PNG パス。

    Raises
    ------
    RuntimeError
        resvg が見つからない、またはラスタライズに失敗した場合。
    """

    _svg_path = Path(svg_path)
    _png_path = Path(png_path)
    _png_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = _resvg_command(
        input_svg=_svg_path,
        output_png=_png_path,
        output_size=output_size,
        background=background,
    )
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        raise RuntimeError(
            "resvg が見つかりません（`resvg` をインストールして PATH を通してください）"
        ) from e

    if proc.returncode != 0:
        details = (proc.stderr or proc.stdout or "").strip()
        raise RuntimeError(f"resvg が失敗しました (code={proc.returncode}). {details}".strip())

    _logger.debug("PNG saved: %s (%dx%d)", _png_path, output_size[0], output_size[1])
    return _png_path


__all__ = [
    "default_output_path",
    "export_image",
    "png_output_size",
    "rasterize_svg_to_png",
]
