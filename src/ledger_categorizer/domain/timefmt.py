def format_duration(seconds: float) -> str:
    if seconds <= 0:
        return "0 ms"
    if seconds < 1:
        return f"{seconds * 1000:.1f} ms"
    if seconds < 60:
        return f"{seconds:.2f} s"
    return f"{seconds / 60:.2f} min"


def format_rate(count: int, seconds: float) -> str:
    """Transactions per second, for training progress logs."""
    if count <= 0 or seconds <= 0:
        return "n/a"
    return f"{count / seconds:.0f} tx/s"
