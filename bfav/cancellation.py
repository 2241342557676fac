"""
Cooperative cancellation for long-running batch passes.
"""


class CancellationToken:
    """
    Abort flag handed to a batch operation.

    The operation polls ``cancelled`` at document and row boundaries, so a
    request in flight always finishes; its result is dropped.
    """

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        """Request that the running pass stops at the next safe point."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
