"""Graphviz rasterization through the external ``dot`` executable."""

import logging
import shutil
import subprocess

from pyimportgraph.config import ImageFormat
from pyimportgraph.errors import RenderFailed, RendererMissing

from .framework import ImageRenderer
from .models import RenderedImage

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ImageFormat.SVG.value: "image/svg+xml",
    ImageFormat.PNG.value: "image/png",
    ImageFormat.GIF.value: "image/gif",
    ImageFormat.JPEG.value: "image/jpeg",
}


def content_type_for(image_format: str) -> str:
    """MIME type of an image format."""
    try:
        return CONTENT_TYPES[image_format]
    except KeyError:
        available = ", ".join(CONTENT_TYPES)
        raise ValueError(f"Unknown image format '{image_format}'. Available: {available}") from None


class GraphvizRenderer(ImageRenderer):
    """Pipes a DOT document through ``dot -T<format>`` and captures the image."""

    def __init__(self, command: str = "dot", image_format: str = ImageFormat.SVG.value):
        self.command = command
        self.image_format = ImageFormat(image_format).value
        self.content_type = content_type_for(self.image_format)
        self._executable: str | None = None

    def ensure_available(self) -> str:
        """Locate the executable on the search path.

        Raises:
            RendererMissing: If the command cannot be found
        """
        executable = shutil.which(self.command)
        if executable is None:
            raise RendererMissing(self.command, "executable file not found in PATH")
        self._executable = executable
        logger.debug(f"Using renderer {executable}")
        return executable

    def render(self, description: str) -> RenderedImage:
        """Run the renderer once, blocking until its output is complete.

        Raises:
            RendererMissing: If the command cannot be found
            RenderFailed: If the renderer fails or produces no output
        """
        executable = self._executable or self.ensure_available()
        args = [executable, f"-T{self.image_format}"]
        logger.info(f"Rendering graph with {' '.join(args)}")

        try:
            completed = subprocess.run(
                args,
                input=description.encode("utf-8"),
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise RenderFailed(f"cannot run {executable}: {e}") from e

        stderr = completed.stderr.decode("utf-8", errors="replace").strip()
        if completed.returncode != 0:
            raise RenderFailed(f"{self.command} exited with status {completed.returncode}", stderr)
        if not completed.stdout:
            raise RenderFailed(f"{self.command} produced no output", stderr)
        if stderr:
            logger.warning(f"{self.command}: {stderr}")

        return RenderedImage(completed.stdout, self.content_type, self.image_format)
