"""Display helpers for paces, durations and distances."""


def format_pace(seconds_per_km: float) -> str:
    """Format pace as M:SS (per km), or '-' when there is no pace."""
    if not seconds_per_km or seconds_per_km <= 0:
        return "-"
    minutes = int(seconds_per_km // 60)
    seconds = int(seconds_per_km % 60)
    return f"{minutes}:{seconds:02d}"


def format_time(seconds: float) -> str:
    """Format seconds as H:MM:SS or M:SS string."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    else:
        return f"{minutes}:{secs:02d}"


def format_distance(meters: float) -> str:
    """Format distance as '12.3km' above one kilometer, '800m' below."""
    if meters >= 1000:
        return f"{meters / 1000:.1f}km"
    return f"{meters:g}m"


def parse_time(time_str: str) -> int:
    """Parse time string (H:MM:SS or MM:SS) to seconds."""
    parts = time_str.strip().split(":")

    try:
        if len(parts) == 3:
            hours, minutes, seconds = int(parts[0]), int(parts[1]), int(parts[2])
            return hours * 3600 + minutes * 60 + seconds
        elif len(parts) == 2:
            minutes, seconds = int(parts[0]), int(parts[1])
            return minutes * 60 + seconds
    except ValueError:
        pass
    raise ValueError(f"Invalid time format: {time_str}")
