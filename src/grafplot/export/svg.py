"""
どこで: `src/grafplot/export/svg.py`。
何を: SvgContext（または SVG テキスト）をファイルへ保存する関数を提供する。
なぜ: 描画結果をヘッドレスに保存し、PNG 生成の入力としても再利用するため。
"""

from __future__ import annotations

import logging
from pathlib import Path

from grafplot.canvas.svg import SvgContext

_logger = logging.getLogger(__name__)


def export_svg(source: SvgContext | str, path: str | Path) -> Path:
    """SVG を保存する。

    Parameters
    ----------
    source : SvgContext or str
        描画済みのコンテキスト、または SVG 文書テキスト。
    path : str or Path
        出力先パス。親ディレクトリは必要なら作る。

    Returns
    -------
    Path
        保存先パス。

    Raises
    ------
    TypeError
        source が SvgContext でも str でもない場合。
    """
    if isinstance(source, SvgContext):
        text = source.to_svg()
    elif isinstance(source, str):
        text = source
    else:
        raise TypeError(f"export_svg は SvgContext か str のみ対応: got={type(source).__name__}")

    _path = Path(path)
    _path.parent.mkdir(parents=True, exist_ok=True)
    with _path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(text)

    _logger.debug("SVG saved: %s", _path)
    return _path


__all__ = ["export_svg"]
