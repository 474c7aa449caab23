import threading

from seat_chart.models import Workspace


class SessionStore:
    """Holds the one workspace the API edits. Updates swap the whole value.

    FastAPI runs plain ``def`` endpoints in a threadpool, so every
    read-then-replace goes through ``update`` under the store's lock.
    """

    def __init__(self, workspace=None):
        self.workspace = workspace or Workspace()
        self.lock = threading.RLock()

    def replace(self, workspace):
        with self.lock:
            self.workspace = workspace
            return workspace

    def update(self, change):
        """Apply ``change(workspace) -> workspace``; an exception leaves the workspace as it was."""
        with self.lock:
            self.workspace = change(self.workspace)
            return self.workspace


store = SessionStore()


def get_session():
    return store
