from __future__ import annotations

import sys
from pathlib import Path

from nicegui import context, ui

from nicedecor.decoration_tool import (
    DecorationToolConfig,
    DecorationToolWidget,
    DirectoryImageSource,
    EditSession,
)
from nicedecor.utils.logging import configure_logging

configure_logging(level="DEBUG")

# usage: python sample_decoration_tool.py [image_path] [output_dir]
IMAGE_PATH = Path(sys.argv[1]) if len(sys.argv) > 1 else None
OUTPUT_DIR = Path(sys.argv[2]) if len(sys.argv) > 2 else Path("decorated")


@ui.page("/")
def index() -> None:
    host = DirectoryImageSource(IMAGE_PATH, OUTPUT_DIR) if IMAGE_PATH is not None else None
    session = EditSession(DecorationToolConfig(), host=host, session_id=context.client.id)

    session.initialize()

    ui.label("Decoration tool demo").classes("text-lg font-bold")
    DecorationToolWidget(session)

    if host is not None:
        ui.timer(0.1, session.load_selected_image, once=True)

    context.client.on_disconnect(session.dispose)


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(title="nicedecor")
