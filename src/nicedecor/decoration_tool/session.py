# nicedecor/src/nicedecor/decoration_tool/session.py
"""Edit session: owns the bitmap, its history and the tool state.

The session is UI-agnostic. A shell (see ``decoration_widget``) forwards
pointer, wheel and keyboard input plus toolbar commands, and re-renders from
:attr:`EditSession.state` whenever a registered handler fires.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

import numpy as np

from nicedecor.utils.logging import get_logger, get_session_logger
from .bitmap import Bitmap
from .config import DecorationToolConfig, MosaicLevel, Tool
from .errors import (
    DecorationError,
    HostUnavailable,
    ImageLoadFailed,
    InvalidViewport,
    NoImageSelected,
    RegionTooSmall,
    SaveFailed,
    Severity,
)
from .history import HistoryStack
from .host import ImageSourceProvider, SaveMetadata, SelectedImage, load_pixel_url
from .mosaic import SelectionRect, apply_mosaic
from .stroke import TRANSPARENT, parse_color, render_stroke
from .viewport import Point, ViewTransform, device_to_bitmap, device_to_view_bitmap

logger = get_logger(__name__)


class SessionPhase(Enum):
    """Lifecycle of an edit session."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    DISPOSED = "disposed"


@dataclass
class ToolState:
    tool: Tool
    color: str
    pen_size: int
    mosaic_level: MosaicLevel


@dataclass(frozen=True)
class StatusMessage:
    message: str
    severity: Severity


@dataclass(frozen=True)
class SessionState:
    """Read-only view of everything the UI shell renders."""

    phase: SessionPhase
    tool: Tool
    color: str
    pen_size: int
    mosaic_level: MosaicLevel
    scale: float
    origin_x: float
    origin_y: float
    can_undo: bool
    can_redo: bool
    history_position: str
    bitmap_width: int
    bitmap_height: int
    selection: Optional[Tuple[int, int, int, int]]
    image_name: Optional[str]
    status: Optional[StatusMessage]
    hand_tool_enabled: bool


Notifier = Callable[[str, Severity], None]
ExportFallback = Callable[[bytes], None]


def _log_notifier(message: str, severity: Severity) -> None:
    logger.info(f"[{severity.value}] {message}")


class EditSession:
    """Single-image raster edit session.

    Lifecycle: initialize, then load_selected_image as often as the host asks,
    then dispose. hide() ends any active gesture and ignores pointer and wheel
    input until show() re-renders the session.

    Events (via callback registration):
        on_state_changed(handler): handler(SessionState) after tool, view,
            history or lifecycle changes.
        on_canvas_changed(handler): handler() after pixels or the selection
            overlay changed.
    """

    def __init__(
        self,
        config: DecorationToolConfig | None = None,
        *,
        host: ImageSourceProvider | None = None,
        notify: Notifier | None = None,
        export_fallback: ExportFallback | None = None,
        session_id: str | None = None,
    ) -> None:
        self._log = get_session_logger(__name__, session_id)
        self.config = config if config is not None else DecorationToolConfig()
        self.host = host
        self._notify: Notifier = notify if notify is not None else _log_notifier
        self.export_fallback = export_fallback

        self.phase = SessionPhase.UNINITIALIZED
        self.visible = True
        self.bitmap: Optional[Bitmap] = None
        self.history = HistoryStack(self.config.max_history)
        self.view = ViewTransform()
        self.tools = ToolState(
            tool=Tool.PEN,
            color=self.config.default_color,
            pen_size=self.config.default_pen_size,
            mosaic_level=self.config.default_mosaic_level,
        )
        self.selected_image: Optional[SelectedImage] = None
        self.status: Optional[StatusMessage] = None

        # Pixels of the loaded source image, used by clear()
        self._source_pixels: Optional[np.ndarray] = None
        # Incremented per load; a load whose epoch is no longer current is dropped
        self._load_epoch: int = 0

        # Interaction state: "idle", "drawing", "selecting", "panning"
        self._mode: str = "idle"
        self._last_point: Optional[Point] = None
        self._selection: Optional[SelectionRect] = None
        self._pan_start: Optional[Point] = None
        self._pan_view_orig: Optional[ViewTransform] = None

        self._state_handlers: List[Callable[[SessionState], None]] = []
        self._canvas_handlers: List[Callable[[], None]] = []

    # ------------- properties -------------

    @property
    def is_ready(self) -> bool:
        return self.phase is SessionPhase.READY and self.bitmap is not None

    @property
    def selection(self) -> Optional[SelectionRect]:
        return self._selection

    @property
    def state(self) -> SessionState:
        bitmap_w, bitmap_h = self.bitmap.size if self.bitmap is not None else (0, 0)
        selection = None
        if self._selection is not None:
            selection = self._selection.clipped(bitmap_w, bitmap_h)
        return SessionState(
            phase=self.phase,
            tool=self.tools.tool,
            color=self.tools.color,
            pen_size=self.tools.pen_size,
            mosaic_level=self.tools.mosaic_level,
            scale=self.view.scale,
            origin_x=self.view.origin_x,
            origin_y=self.view.origin_y,
            can_undo=self.history.can_undo,
            can_redo=self.history.can_redo,
            history_position=self.history.position,
            bitmap_width=bitmap_w,
            bitmap_height=bitmap_h,
            selection=selection,
            image_name=self.selected_image.name if self.selected_image else None,
            status=self.status,
            hand_tool_enabled=self.config.enable_hand_tool,
        )

    # ------------- public event registration API -------------

    def on_state_changed(self, handler: Callable[[SessionState], None]) -> None:
        """Register callback called with the new SessionState."""
        self._state_handlers.append(handler)

    def on_canvas_changed(self, handler: Callable[[], None]) -> None:
        """Register callback called when pixels or the overlay need a redraw."""
        self._canvas_handlers.append(handler)

    # ------------- lifecycle -------------

    def initialize(self) -> None:
        """Create the standalone placeholder canvas and seed history."""
        if self.phase is not SessionPhase.UNINITIALIZED:
            return
        cfg = self.config
        self.bitmap = Bitmap.blank(
            cfg.placeholder_width, cfg.placeholder_height, cfg.placeholder_fill
        )
        self._source_pixels = None
        self.history.clear()
        self.history.commit(self.bitmap)
        self.phase = SessionPhase.READY
        self._log.info(
            f"EditSession initialized: placeholder={cfg.placeholder_width}x{cfg.placeholder_height}, "
            f"max_history={cfg.max_history}, hand_tool={cfg.enable_hand_tool}"
        )
        self._emit_state()
        self._emit_canvas()

    def show(self) -> None:
        """Accept input again and ask the shell to redraw."""
        if self.phase is SessionPhase.DISPOSED or self.visible:
            return
        self.visible = True
        self._log.debug("session shown")
        self._emit_state()
        self._emit_canvas()

    def hide(self) -> None:
        if self.phase is SessionPhase.DISPOSED or not self.visible:
            return
        if self.is_ready:
            self._finish_gesture()
        self.visible = False
        self._log.debug("session hidden")

    def dispose(self) -> None:
        """Shut the session down; pending loads are discarded."""
        if self.phase is SessionPhase.DISPOSED:
            return
        self._load_epoch += 1
        self._reset_gesture()
        self.history.clear()
        self._source_pixels = None
        self.phase = SessionPhase.DISPOSED
        self._state_handlers.clear()
        self._canvas_handlers.clear()
        self._log.info("EditSession disposed")

    async def load_selected_image(self) -> bool:
        """Fetch the host's selected image and make it the edited bitmap.

        Failures are reported and leave the current canvas usable.
        Returns True if the image became the current bitmap.
        """
        if self.phase is SessionPhase.DISPOSED:
            return False
        if self.phase is SessionPhase.UNINITIALIZED:
            self.initialize()

        if self.host is None or not self.host.available:
            self._report_error(HostUnavailable())
            return False

        self._load_epoch += 1
        epoch = self._load_epoch
        self._finish_gesture()
        self.phase = SessionPhase.LOADING
        self._report("Loading the selected image...", Severity.LOADING)

        try:
            item = await self.host.get_selected_image()
            if item is None:
                raise NoImageSelected()
            image = await asyncio.to_thread(load_pixel_url, item.pixel_url)
        except DecorationError as e:
            if epoch == self._load_epoch:
                self._finish_failed_load(e)
            return False
        except Exception as e:
            self._log.exception("host image fetch failed")
            if epoch == self._load_epoch:
                self._finish_failed_load(ImageLoadFailed(f"Failed to get the selected image: {e}"))
            return False

        if epoch != self._load_epoch:
            self._log.info(f"discarding stale image load for {item.name!r} (epoch {epoch})")
            return False

        size = (item.width, item.height) if item.width > 0 and item.height > 0 else image.size
        self.bitmap = Bitmap.from_image(image, size)
        self._source_pixels = self.bitmap.pixels.copy()
        self.selected_image = item
        self.view.reset()
        self.history.clear()
        self.history.commit(self.bitmap)
        self.phase = SessionPhase.READY

        self._log.info(f"loaded {item.name!r} ({self.bitmap.width}x{self.bitmap.height})")
        self._report(
            f"Loaded {item.name} ({self.bitmap.width}x{self.bitmap.height})",
            Severity.SUCCESS,
        )
        self._emit_canvas()
        return True

    def _finish_failed_load(self, error: DecorationError) -> None:
        self.phase = SessionPhase.READY if self.bitmap is not None else SessionPhase.UNINITIALIZED
        self._report_error(error)

    # ------------- commands -------------

    def select_tool(self, tool: Union[Tool, str]) -> None:
        tool = Tool(tool)
        if tool is Tool.HAND and not self.config.enable_hand_tool:
            raise ValueError("hand tool is disabled in this configuration")
        if tool is self.tools.tool:
            return
        if self._mode != "idle":
            self.pointer_up()
        self.tools.tool = tool
        self._log.debug(f"tool: {tool.value}")
        self._emit_state()

    def select_color(self, color: str) -> None:
        parse_color(color)
        self.tools.color = color
        self._log.debug(f"color: {color}")
        self._emit_state()

    def select_size(self, size: int) -> None:
        size = int(size)
        if size < 1:
            raise ValueError(f"pen size must be positive, got {size}")
        self.tools.pen_size = size
        self._log.debug(f"pen size: {size}")
        self._emit_state()

    def select_mosaic_level(self, level: Union[MosaicLevel, int, str]) -> None:
        if isinstance(level, str):
            level = MosaicLevel[level.upper()]
        self.tools.mosaic_level = MosaicLevel(level)
        self._log.debug(f"mosaic level: {self.tools.mosaic_level.name} ({self.tools.mosaic_level.block_size}px)")
        self._emit_state()

    def clear(self) -> None:
        """Revert to the loaded source image (transparent if none) as a new edit."""
        if not self.is_ready:
            return
        self._finish_gesture()
        if self._source_pixels is not None:
            self.bitmap = Bitmap(self._source_pixels.copy())
        else:
            self.bitmap.fill(TRANSPARENT)
        self._commit("clear")

    def undo(self) -> bool:
        if not self.is_ready:
            return False
        self._finish_gesture()
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.bitmap.restore(snapshot)
        self._log.info(f"Undo: {self.history.position}")
        self._emit_state()
        self._emit_canvas()
        return True

    def redo(self) -> bool:
        if not self.is_ready:
            return False
        self._finish_gesture()
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.bitmap.restore(snapshot)
        self._log.info(f"Redo: {self.history.position}")
        self._emit_state()
        self._emit_canvas()
        return True

    def reset_view(self) -> None:
        self.view.reset()
        self._emit_state()
        self._emit_canvas()

    async def save(self) -> Optional[str]:
        """Export the bitmap as PNG to the host library.

        Returns the host item id, or None when nothing was saved to the host.
        """
        if not self.is_ready:
            return None

        host_ready = self.host is not None and self.host.available
        item = self.selected_image

        if item is None:
            if self.export_fallback is not None:
                self.export_fallback(self.bitmap.to_png_bytes())
                self._report("Exported the decorated image", Severity.SUCCESS)
            elif not host_ready:
                self._report_error(HostUnavailable())
            else:
                self._report_error(NoImageSelected("No image to save back to the library"))
            return None

        if not host_ready:
            self._report_error(HostUnavailable())
            return None

        cfg = self.config
        metadata = SaveMetadata(
            name=f"{item.name}{cfg.save_name_suffix}",
            website=cfg.save_website,
            tags=list(cfg.save_tags),
            folders=list(item.folders),
            annotation=cfg.save_annotation,
        )
        png = self.bitmap.to_png_bytes()

        try:
            item_id = await self.host.save_image(png, metadata)
        except Exception as e:
            self._log.exception("host rejected the export")
            self._report_error(SaveFailed(f"Failed to save the image: {e}"))
            return None

        self._log.info(f"saved {metadata.name!r} to host as {item_id}")
        self._report("Saved the decorated image to the library", Severity.SUCCESS)
        return item_id

    def handle_key(
        self,
        key: str,
        *,
        ctrl: bool = False,
        meta: bool = False,
        shift: bool = False,
    ) -> bool:
        """Map Ctrl/Cmd+Z to undo and Ctrl/Cmd+Y or Ctrl/Cmd+Shift+Z to redo.

        Returns True if the key combination was handled.
        """
        if not (ctrl or meta):
            return False
        k = key.lower()
        if k == "z" and not shift:
            self.undo()
            return True
        if k == "y" or (k == "z" and shift):
            self.redo()
            return True
        return False

    # ------------- pointer input -------------

    def view_point(self, x: float, y: float, css_width: float, css_height: float) -> Point:
        """Bitmap point currently rendered under a CSS pointer position."""
        return device_to_view_bitmap(x, y, self.bitmap.size, (css_width, css_height), self.view)

    def pointer_down(self, x: float, y: float, css_width: float, css_height: float) -> None:
        if not self.is_ready or not self.visible:
            return
        pos = self._map_pointer(x, y, css_width, css_height)
        if pos is None:
            return

        tool = self.tools.tool
        if tool is Tool.MOSAIC:
            self._mode = "selecting"
            self._selection = SelectionRect(start=pos, end=pos)
            self._emit_canvas()
            return

        if tool is Tool.HAND:
            self._mode = "panning"
            self._pan_start = pos
            self._pan_view_orig = replace(self.view)
            return

        self._mode = "drawing"
        self._last_point = pos
        self._stroke_to(pos)

    def pointer_move(self, x: float, y: float, css_width: float, css_height: float) -> None:
        if not self.is_ready or self._mode == "idle":
            return
        pos = self._map_pointer(x, y, css_width, css_height)
        if pos is None:
            return

        if self._mode == "drawing":
            self._stroke_to(pos)
            return

        if self._mode == "selecting" and self._selection is not None:
            self._selection.end = pos
            self._emit_canvas()
            return

        if self._mode == "panning" and self._pan_start is not None and self._pan_view_orig is not None:
            dx = pos[0] - self._pan_start[0]
            dy = pos[1] - self._pan_start[1]
            self.view = self._pan_view_orig.panned(dx, dy)
            self._emit_state()
            self._emit_canvas()

    def pointer_up(self) -> None:
        if not self.is_ready:
            return
        mode = self._mode

        if mode == "drawing":
            self._reset_gesture()
            self._commit("stroke")
            return

        if mode == "selecting":
            selection = self._selection
            self._reset_gesture()
            if selection is not None:
                self._finish_mosaic(selection)
            self._emit_canvas()
            return

        # Pan end: view state is not undoable
        self._reset_gesture()

    def pointer_leave(self) -> None:
        """Leaving the canvas ends the gesture like releasing the button."""
        self.pointer_up()

    def wheel(
        self,
        x: float,
        y: float,
        css_width: float,
        css_height: float,
        delta_y: float,
    ) -> bool:
        """Zoom one notch around the pointer. Returns True if the scale changed."""
        if not self.is_ready or not self.visible:
            return False
        if not self.config.enable_hand_tool or not delta_y:
            return False
        device = self._map_pointer(x, y, css_width, css_height)
        if device is None:
            return False

        step = self.config.zoom_step if delta_y < 0 else -self.config.zoom_step
        changed = self.view.zoom_at(
            device[0],
            device[1],
            step,
            min_scale=self.config.min_scale,
            max_scale=self.config.max_scale,
        )
        if changed:
            self._log.debug(
                f"Zoom: scale={self.view.scale:.2f}, "
                f"origin=({self.view.origin_x:.1f}, {self.view.origin_y:.1f})"
            )
            self._emit_state()
            self._emit_canvas()
        return changed

    # ------------- internals: editing -------------

    def _map_pointer(self, x: float, y: float, css_width: float, css_height: float) -> Optional[Point]:
        try:
            return device_to_bitmap(x, y, self.bitmap.size, (css_width, css_height))
        except InvalidViewport as e:
            self._finish_gesture()
            self._report_error(e)
            return None

    def _stroke_to(self, pos: Point) -> None:
        start = self._last_point if self._last_point is not None else pos
        render_stroke(
            self.bitmap.pixels,
            start,
            pos,
            self.tools.pen_size,
            self.tools.color,
            erase=self.tools.tool is Tool.ERASER,
        )
        self._last_point = pos
        self._emit_canvas()

    def _finish_mosaic(self, selection: SelectionRect) -> None:
        level = self.tools.mosaic_level
        try:
            x, y, w, h = apply_mosaic(
                self.bitmap.pixels,
                selection,
                level.block_size,
                min_size=self.config.min_mosaic_size,
            )
        except RegionTooSmall as e:
            self._log.debug(f"mosaic skipped: {e}")
            self._report_error(e)
            return
        self._log.info(f"Mosaic: ({x}, {y}) {w}x{h}, level={level.name}")
        self._commit("mosaic")

    def _commit(self, reason: str) -> None:
        self.history.commit(self.bitmap)
        self._log.info(f"committed {reason}: history {self.history.position}")
        self._emit_state()
        self._emit_canvas()

    def _finish_gesture(self) -> None:
        """End any active gesture, committing a stroke already on the canvas."""
        drawing = self._mode == "drawing"
        had_selection = self._selection is not None
        self._reset_gesture()
        if drawing:
            self._commit("stroke")
        elif had_selection:
            self._emit_canvas()

    def _reset_gesture(self) -> None:
        self._mode = "idle"
        self._last_point = None
        self._selection = None
        self._pan_start = None
        self._pan_view_orig = None

    # ------------- internals: notification -------------

    def _report(self, message: str, severity: Severity) -> None:
        self.status = StatusMessage(message=message, severity=severity)
        try:
            self._notify(message, severity)
        except Exception:
            self._log.exception("Error in notify handler")
        self._emit_state()

    def _report_error(self, error: DecorationError) -> None:
        self._log.warning(f"{type(error).__name__}: {error.message}")
        self._report(error.message, error.severity)

    def _emit_state(self) -> None:
        if not self._state_handlers:
            return
        state = self.state
        for handler in list(self._state_handlers):
            try:
                handler(state)
            except Exception:
                self._log.exception("Error in state_changed handler")

    def _emit_canvas(self) -> None:
        for handler in list(self._canvas_handlers):
            try:
                handler()
            except Exception:
                self._log.exception("Error in canvas_changed handler")
