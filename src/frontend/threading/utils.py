from PySide6.QtCore import QCoreApplication, QObject, QTimer


def call_soon(callback, *args, context: QObject | None = None, **kwargs):
    """Run ``callback`` on the next turn of the Qt event loop (GUI thread).

    With a ``context`` object the call is dropped if that object is deleted
    first. Without a running application the callback runs immediately.
    """
    app = QCoreApplication.instance()
    if app is None:
        callback(*args, **kwargs)
        return
    QTimer.singleShot(0, context if context is not None else app, lambda: callback(*args, **kwargs))
