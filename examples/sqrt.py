"""Square root by Newton's method.

Each step is a two-subject match over `(x, guess)`. A guard ends the
iteration once `guess` squared is close enough to `x`; otherwise the
wildcard clause recurses with an improved guess.

Run with:
    matchkit trace examples.sqrt:mysqrt 2.0
"""

from matchkit import _, guard, match

TOLERANCE = 0.0001


def close_enough(x: float, guess: float) -> bool:
    return abs(guess * guess - x) < TOLERANCE


def improve(x: float, guess: float) -> float:
    return (guess + x / guess) / 2.0


def _iterate(x: float, guess: float) -> float:
    return (
        match(x, guess)
        | guard(close_enough) >> (lambda _x, g: g)
        | _ >> (lambda x, g: _iterate(x, improve(x, g)))
    ).materialize(float)


def mysqrt(x: float) -> float:
    """Approximate the square root of a non-negative number."""
    if x < 0:
        msg = f"Cannot take the square root of a negative number: {x}"
        raise ValueError(msg)
    return _iterate(x, 1.0)


if __name__ == "__main__":
    x = 2.0
    print(f"The square root of {x} is approximately {mysqrt(x)}")  # noqa: T201
