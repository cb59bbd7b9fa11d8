def emit(log_fn, msg):
    """Best-effort diagnostic: no sink means no output, a broken sink is ignored."""
    if log_fn is None:
        return
    try:
        log_fn(msg)
    except OSError:
        pass
