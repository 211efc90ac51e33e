import math


def js_round(value: float) -> float:
    """
    Round half toward positive infinity (2.5 -> 3, -2.5 -> -2).

    Glucose samples are rounded this way before they enter the history
    buffer. NaN passes through unchanged.
    """
    if math.isnan(value):
        return value
    return float(math.floor(value + 0.5))


def quantize(value: float, increment: float) -> float:
    """
    Round a rate to the nearest multiple of a pump increment.

    Args:
        value (float): The raw rate (e.g. U/h).
        increment (float): Device-representable step. Zero or negative
                           disables quantization.

    Returns:
        float: The quantized rate.
    """
    if not increment or increment <= 0 or math.isnan(value):
        return value
    return math.floor(value / increment + 0.5) * increment
