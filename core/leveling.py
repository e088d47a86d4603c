from core.config import settings

def xp_required_for_level(level: int) -> float:
    """XP needed to advance from `level` to `level + 1`."""
    # Level 1 uses index 0. Level N uses index N-1.
    threshold_index = level - 1
    if threshold_index < len(settings.LEVEL_XP_THRESHOLDS):
        return settings.LEVEL_XP_THRESHOLDS[threshold_index]
    # Fallback to last defined threshold
    return settings.LEVEL_XP_THRESHOLDS[-1]

def calculate_new_level_and_xp(current_level: int, current_xp: float, xp_gain: float):
    """
    Calculates the new level and XP based on the gain and scaling thresholds.

    Args:
        current_level (int): The user's current level (1-based).
        current_xp (float): The user's current XP.
        xp_gain (float): The amount of XP gained (can be negative when a score is undone).

    Returns:
        tuple: (new_level, new_xp, xp_required_for_next_level)
    """
    total_xp = current_xp + xp_gain
    new_level = current_level

    # Handle XP Loss: de-level until XP is non-negative, capped at Level 1, 0 XP
    while total_xp < 0:
        if new_level <= 1:
            return 1, 0.0, xp_required_for_level(1)
        new_level -= 1
        # Add back the XP that was spent completing the level we dropped out of
        total_xp += xp_required_for_level(new_level)

    # Handle XP Gain (Level Up)
    while total_xp >= xp_required_for_level(new_level):
        total_xp -= xp_required_for_level(new_level)
        new_level += 1

    return new_level, total_xp, xp_required_for_level(new_level)
