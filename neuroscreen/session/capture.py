from abc import ABC, abstractmethod

from neuroscreen.utils.logger import info


class CaptureSink(ABC):
    """
    Receives camera/microphone lifetime signals from the phase controller.
    The controller is the only caller.
    """

    @abstractmethod
    def start_capture(self, phase) -> None:
        ...

    @abstractmethod
    def stop_capture(self, phase) -> None:
        ...


class LoggingCaptureSink(CaptureSink):
    """Default sink when capture is owned by a remote client."""

    def __init__(self):
        self.capturing = None

    def start_capture(self, phase) -> None:
        self.capturing = phase
        info(f"[CAPTURE] start ({phase.value})")

    def stop_capture(self, phase) -> None:
        self.capturing = None
        info(f"[CAPTURE] stop ({phase.value})")
