def percentage(part: int, whole: int) -> int:
    """Whole-number percentage rounded half up, 0 when there is nothing to divide by"""
    if not whole:
        return 0
    return int(part * 100 / whole + 0.5)
