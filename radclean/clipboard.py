"""Copy the narrative to the system clipboard with transient feedback."""

import logging
import shutil
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass

from radclean.config import Settings, settings as default_settings
from radclean.errors import ClipboardUnavailableError

logger = logging.getLogger(__name__)

COPIED = "Copied"
COPY_FAILED = "Copy failed"

# First available wins
CLIPBOARD_COMMANDS = (
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
)


@dataclass(frozen=True)
class CopyFeedback:
    ok: bool
    message: str
    expires_at: float

    def visible(self, now: float | None = None) -> bool:
        return (time.monotonic() if now is None else now) < self.expires_at


def system_clipboard_writer(text: str) -> None:
    for command in CLIPBOARD_COMMANDS:
        if shutil.which(command[0]):
            subprocess.run(command, input=text.encode("utf-8"), check=True, timeout=5)
            return
    raise ClipboardUnavailableError()


def copy_narrative(
    text: str,
    writer: Callable[[str], None] | None = None,
    settings: Settings | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> CopyFeedback:
    """Write ``text`` to the clipboard. Failures become a "Copy failed" message."""
    settings = settings or default_settings
    writer = writer or system_clipboard_writer
    try:
        writer(text)
    except Exception as e:
        logger.warning("Clipboard copy failed: %s", e)
        return CopyFeedback(ok=False, message=COPY_FAILED, expires_at=clock() + settings.copy_failed_seconds)
    logger.debug("Copied %d characters to clipboard", len(text))
    return CopyFeedback(ok=True, message=COPIED, expires_at=clock() + settings.copy_ok_seconds)
