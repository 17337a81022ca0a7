from __future__ import annotations

import math

import numpy as np
import pytest

from grafplot.canvas.context import DrawContext
from grafplot.canvas.recording import RecordingContext


def test_recording_context_satisfies_protocol() -> None:
    assert isinstance(RecordingContext(), DrawContext)


def test_initial_state_and_no_commands() -> None:
    ctx = RecordingContext(300, 200)

    assert (ctx.width, ctx.height) == (300, 200)
    assert ctx.commands == []
    assert ctx.line_cap == "butt"
    assert ctx.font == "10px sans-serif"
    assert not ctx.has_transform()


def test_commands_snapshot_style_at_call_time() -> None:
    ctx = RecordingContext()
    ctx.stroke_style = "red"
    ctx.line_width = 4
    ctx.begin_path()
    ctx.move_to(1, 2)
    ctx.line_to(3, 4)
    ctx.stroke()
    ctx.stroke_style = "blue"

    assert ctx.ops() == ["begin_path", "move_to", "line_to", "stroke"]
    stroke = ctx.find("stroke")[0]
    assert stroke.style.stroke_style == "red"
    assert stroke.style.line_width == 4.0
    assert ctx.find("line_to")[0].args == (3.0, 4.0)


def test_arc_and_text_arguments() -> None:
    ctx = RecordingContext()
    ctx.arc(10, 20, 5, 0, math.tau)
    ctx.fill_text("abc", 1, 2)

    assert ctx.commands[0].args == (10.0, 20.0, 5.0, 0.0, math.tau, False)
    assert ctx.commands[1].args == ("abc", 1.0, 2.0)


def test_resize_resets_state_and_is_recorded() -> None:
    ctx = RecordingContext()
    ctx.line_width = 9
    ctx.translate(5, 5)
    ctx.clear_commands()

    ctx.resize(50, 60)

    assert ctx.ops() == ["resize"]
    assert ctx.line_width == 1.0
    assert not ctx.has_transform()
    with pytest.raises(ValueError):
        ctx.resize(0, 10)


def test_transform_ops_update_matrix() -> None:
    ctx = RecordingContext()
    ctx.translate(10, 0)
    ctx.rotate(math.pi / 2)

    assert ctx.apply_transform(1, 0) == pytest.approx((10.0, 1.0))
    ctx.reset_transform()
    np.testing.assert_array_equal(ctx.transform, np.eye(3))
    assert ctx.ops() == ["translate", "rotate", "reset_transform"]
