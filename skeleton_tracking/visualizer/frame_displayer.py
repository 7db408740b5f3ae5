import logging
from typing import Optional, Tuple

import cv2 as cv  # type: ignore
import numpy as np

logger = logging.getLogger(__name__)


class FrameDisplayer:
    """
    Debug display: one window for the raw input frame, one for the rendered output.

    Windows must be opened, shown and closed from the same thread.
    """

    def __init__(self,
                 input_window: str = "view",
                 output_window: str = "skeleton",
                 output_size: Optional[Tuple[int, int]] = None,
                 wait_ms: int = 30):
        self.input_window = input_window
        self.output_window = output_window
        self.output_size = output_size
        self.wait_ms = wait_ms
        self.is_open = False

    def open(self) -> None:
        if self.is_open:
            return
        cv.namedWindow(self.input_window)
        cv.namedWindow(self.output_window, cv.WINDOW_NORMAL)
        if self.output_size is not None:
            cv.resizeWindow(self.output_window, *self.output_size)
        cv.startWindowThread()
        self.is_open = True
        logger.info(f"Debug display opened: '{self.input_window}', '{self.output_window}'")

    def show(self, input_frame: np.ndarray, output_image: np.ndarray) -> int:
        """Show both frames and wait briefly so the windows refresh. Returns the pressed key or -1."""
        if not self.is_open:
            raise RuntimeError("FrameDisplayer.show() called before open()")
        cv.imshow(self.input_window, input_frame)
        cv.imshow(self.output_window, output_image)
        return cv.waitKey(self.wait_ms)

    def close(self) -> None:
        if not self.is_open:
            return
        self.is_open = False
        for window in (self.output_window, self.input_window):
            try:
                cv.destroyWindow(window)
            except cv.error as e:
                logger.warning(f"Failed to destroy window '{window}': {e}")
        logger.info("Debug display closed")
