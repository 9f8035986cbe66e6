"""
Formatting utilities for display.

Used by the CLI and by anything rendering a LiveSnapshot.
"""


def format_duration(seconds: float) -> str:
    """
    Format seconds as 'Hh Mm' or 'Mm Ss'.

    Args:
        seconds: Duration in seconds (e.g., 5430)

    Returns:
        Formatted string (e.g., '1h 30m')
    """
    if seconds < 0:
        return "—"

    total = int(seconds)
    h = total // 3600
    m = (total % 3600) // 60
    s = total % 60

    if h == 0:
        return f"{m}m {s:02d}s"
    return f"{h}h {m:02d}m"


def format_distance(meters: float) -> str:
    """
    Format distance.

    Args:
        meters: Distance in meters

    Returns:
        Formatted string (e.g., '12.5 km' or '850 m')
    """
    if meters < 1000:
        return f"{int(round(meters))} m"
    return f"{meters / 1000:.1f} km"


def format_elevation(meters: float) -> str:
    """Format elevation change with sign (e.g., '+450 m')."""
    sign = "+" if meters >= 0 else "-"
    return f"{sign}{abs(int(round(meters)))} m"


def format_percent(fraction: float) -> str:
    """Format a 0-1 fraction as a whole percentage."""
    return f"{int(round(fraction * 100))}%"
