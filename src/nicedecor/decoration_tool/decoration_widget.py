# nicedecor/src/nicedecor/decoration_tool/decoration_widget.py

from __future__ import annotations

from typing import Optional

import numpy as np
from nicegui import ui, events
from PIL import Image

from nicedecor.utils.logging import get_logger
from .config import DecorationToolConfig, MosaicLevel, Tool
from .errors import Severity
from .mosaic import SelectionRect
from .session import EditSession, SessionState, StatusMessage
from .viewport import ViewTransform

logger = get_logger(__name__)

# Pointer position relative to the canvas box, plus the box's CSS size.
_POINTER_JS = """(e) => {
    const r = e.currentTarget.getBoundingClientRect();
    emit({x: e.clientX - r.left, y: e.clientY - r.top,
          width: r.width, height: r.height, buttons: e.buttons, button: e.button});
}"""

_WHEEL_JS = """(e) => {
    e.preventDefault();
    const r = e.currentTarget.getBoundingClientRect();
    emit({x: e.clientX - r.left, y: e.clientY - r.top,
          width: r.width, height: r.height, deltaY: e.deltaY});
}"""

_TOOL_LABELS = {
    Tool.PEN: "Pen",
    Tool.ERASER: "Eraser",
    Tool.MOSAIC: "Mosaic",
    Tool.HAND: "Hand",
}

_STATUS_CLASSES = {
    Severity.INFO: "text-gray-600",
    Severity.LOADING: "text-blue-600",
    Severity.SUCCESS: "text-green-600",
    Severity.ERROR: "text-red-600",
}


def render_view(pixels: np.ndarray, view: ViewTransform) -> Image.Image:
    """Render an RGBA array through the pan/zoom transform at its own size."""
    img = Image.fromarray(pixels)
    if view.is_identity:
        return img

    inv = 1.0 / view.scale
    # PIL maps each output (device) pixel back to an input (bitmap) pixel
    data = (inv, 0.0, -view.origin_x * inv, 0.0, inv, -view.origin_y * inv)
    return img.transform(
        img.size,
        Image.Transform.AFFINE,
        data,
        resample=Image.Resampling.NEAREST,
    )


def selection_overlay_svg(
    selection: Optional[SelectionRect],
    config: DecorationToolConfig,
) -> str:
    """Dashed rectangle for an in-progress mosaic selection, in bitmap pixels."""
    if selection is None:
        return ""
    x, y, w, h = selection.normalized()
    return (
        f'<rect x="{x}" y="{y}" width="{w}" height="{h}" '
        f'stroke="{config.selection_color}" stroke-width="{config.selection_line_width}" '
        f'stroke-dasharray="{config.selection_dash}" fill="none" />'
    )


class DecorationToolWidget:
    """NiceGUI shell around an :class:`EditSession`.

    - Toolbar: tool, color, pen size, mosaic level, clear/undo/redo/save.
    - Canvas: interactive image showing the bitmap through the view transform,
      with the mosaic selection drawn as an SVG overlay.
    - Status line rendered from the session's last status message.

    All edits go through the session's command interface; the widget only
    renders from ``session.state``.
    """

    def __init__(
        self,
        session: EditSession,
        *,
        parent=None,
        download_filename: str = "decorated.png",
    ) -> None:
        self.session = session
        self.config = session.config
        self._download_filename = download_filename
        self._updating_programmatically = False
        self._last_status: Optional[StatusMessage] = None

        if session.export_fallback is None:
            session.export_fallback = self._download

        container = parent if parent is not None else ui.element("div").classes("w-full")

        with container:
            self._build_toolbar()

            self.interactive = (
                ui.interactive_image(self._render_pil(), cross=False)
                .classes("w-full")
                .style(self._canvas_style())
            )
            self.interactive.on("pointerdown", self._on_pointer_down, js_handler=_POINTER_JS)
            self.interactive.on("pointermove", self._on_pointer_move, js_handler=_POINTER_JS)
            self.interactive.on("pointerup", self._on_pointer_up, js_handler=_POINTER_JS)
            self.interactive.on("pointerleave", self._on_pointer_leave, js_handler=_POINTER_JS)
            self.interactive.on("wheel", self._on_wheel, js_handler=_WHEEL_JS)

            with ui.row().classes("w-full items-center gap-4"):
                self._status_label = ui.label("").classes("text-sm")
                self._zoom_label = ui.label("").classes("text-sm text-gray-500")

            ui.keyboard(on_key=self._on_key)

        session.on_state_changed(self._on_state)
        session.on_canvas_changed(self._update_image)

        self._on_state(session.state)
        logger.info(
            f"DecorationToolWidget initialized: hand_tool={self.config.enable_hand_tool}, "
            f"palette={len(self.config.palette)}, sizes={self.config.pen_sizes}"
        )

    # ------------- internals: building -------------

    def _build_toolbar(self) -> None:
        cfg = self.config
        state = self.session.state
        tools = [t for t in Tool if t is not Tool.HAND or cfg.enable_hand_tool]

        with ui.row().classes("w-full items-center gap-2"):
            self._tool_toggle = ui.toggle(
                {t.value: _TOOL_LABELS[t] for t in tools},
                value=state.tool.value,
                on_change=self._on_tool_change,
            )

            with ui.row().classes("items-center gap-1"):
                for color in cfg.palette:
                    ui.button(on_click=lambda _e, c=color: self.session.select_color(c)).props(
                        f"round dense size=sm color={color}"
                    ).style(f"background-color: {color} !important")

            self._size_select = ui.select(
                cfg.pen_sizes,
                value=state.pen_size,
                label="Size",
                on_change=self._on_size_change,
            ).classes("w-20")

            self._mosaic_select = ui.select(
                {level.value: f"{level.label} ({level.block_size}px)" for level in MosaicLevel},
                value=state.mosaic_level.value,
                label="Mosaic",
                on_change=self._on_mosaic_change,
            ).classes("w-36")

            ui.button("Clear", on_click=self.session.clear).props("outline")
            self._undo_button = ui.button("Undo", on_click=self.session.undo)
            self._redo_button = ui.button("Redo", on_click=self.session.redo)
            if cfg.enable_hand_tool:
                ui.button("Reset view", on_click=self.session.reset_view).props("outline")
            ui.button("Save", on_click=self._on_save).props("color=primary")

    def _canvas_style(self) -> str:
        state = self.session.state
        cursor = "grab" if state.tool is Tool.HAND else "crosshair"
        return (
            f"aspect-ratio: {max(state.bitmap_width, 1)} / {max(state.bitmap_height, 1)}; "
            f"object-fit: contain; border: 1px solid #666; cursor: {cursor}; touch-action: none;"
        )

    # ------------- internals: rendering -------------

    def _render_pil(self) -> Image.Image:
        bitmap = self.session.bitmap
        if bitmap is None:
            return Image.new("RGBA", (self.config.placeholder_width, self.config.placeholder_height))
        return render_view(bitmap.pixels, self.session.view)

    def _update_image(self) -> None:
        """Redraw bitmap + selection overlay."""
        self.interactive.set_source(self._render_pil())
        self.interactive.content = selection_overlay_svg(self.session.selection, self.config)
        self.interactive.update()

    def _on_state(self, state: SessionState) -> None:
        self._updating_programmatically = True
        try:
            self._tool_toggle.value = state.tool.value
            self._size_select.value = state.pen_size
            self._mosaic_select.value = state.mosaic_level.value
        finally:
            self._updating_programmatically = False

        self._undo_button.set_enabled(state.can_undo)
        self._redo_button.set_enabled(state.can_redo)
        self.interactive.style(self._canvas_style())
        self._zoom_label.text = f"{state.scale * 100:.0f}%  history {state.history_position}"

        status = state.status
        if status is not None and status is not self._last_status:
            self._last_status = status
            self._status_label.text = status.message
            self._status_label.classes(
                replace=f"text-sm {_STATUS_CLASSES[status.severity]}"
            )
            if status.severity is Severity.ERROR:
                ui.notify(status.message, type="negative")

    # ------------- internals: events -------------

    def _on_tool_change(self, e: events.ValueChangeEventArguments) -> None:
        if self._updating_programmatically or e.value is None:
            return
        self.session.select_tool(e.value)

    def _on_size_change(self, e: events.ValueChangeEventArguments) -> None:
        if self._updating_programmatically or e.value is None:
            return
        self.session.select_size(int(e.value))

    def _on_mosaic_change(self, e: events.ValueChangeEventArguments) -> None:
        if self._updating_programmatically or e.value is None:
            return
        self.session.select_mosaic_level(int(e.value))

    @staticmethod
    def _pointer_args(e: events.GenericEventArguments) -> tuple[float, float, float, float]:
        args = e.args or {}
        return (
            float(args.get("x", 0.0)),
            float(args.get("y", 0.0)),
            float(args.get("width", 0.0)),
            float(args.get("height", 0.0)),
        )

    def _on_pointer_down(self, e: events.GenericEventArguments) -> None:
        if (e.args or {}).get("button", 0) != 0:
            return
        self.session.pointer_down(*self._pointer_args(e))

    def _on_pointer_move(self, e: events.GenericEventArguments) -> None:
        # only drags with the primary button
        if not int((e.args or {}).get("buttons", 0)) & 1:
            return
        self.session.pointer_move(*self._pointer_args(e))

    def _on_pointer_up(self, e: events.GenericEventArguments) -> None:
        self.session.pointer_up()

    def _on_pointer_leave(self, e: events.GenericEventArguments) -> None:
        self.session.pointer_leave()

    def _on_wheel(self, e: events.GenericEventArguments) -> None:
        args = e.args or {}
        dy = args.get("deltaY", 0)
        if not isinstance(dy, (int, float)) or dy == 0:
            return
        self.session.wheel(
            float(args.get("x", 0.0)),
            float(args.get("y", 0.0)),
            float(args.get("width", 0.0)),
            float(args.get("height", 0.0)),
            float(dy),
        )

    def _on_key(self, e: events.KeyEventArguments) -> None:
        if not e.action.keydown:
            return
        self.session.handle_key(
            e.key.name,
            ctrl=e.modifiers.ctrl,
            meta=e.modifiers.meta,
            shift=e.modifiers.shift,
        )

    async def _on_save(self) -> None:
        await self.session.save()

    def _download(self, png: bytes) -> None:
        ui.download(png, self._download_filename)
        logger.info(f"offered {len(png)} bytes as download {self._download_filename!r}")
