import pytest

from stl_to_pins import Mesh, Triangle, Vec3


def tri(a, b, c):
    return Triangle(Vec3(*a), Vec3(*b), Vec3(*c))


@pytest.fixture
def pyramid():
    """Square pyramid, apex (5, 5, 10), base (0, 0)-(10, 10) at z=0, closed."""
    apex = (5, 5, 10)
    return Mesh([
        tri((0, 0, 0), (10, 0, 0), apex),
        tri((10, 0, 0), (10, 10, 0), apex),
        tri((10, 10, 0), (0, 10, 0), apex),
        tri((0, 10, 0), (0, 0, 0), apex),
        # base, facing down
        tri((0, 0, 0), (10, 10, 0), (10, 0, 0)),
        tri((0, 0, 0), (0, 10, 0), (10, 10, 0)),
    ])


@pytest.fixture
def flat_down():
    """One downward triangle at z=5 covering (0, 0)-(10, 10)."""
    return Mesh([tri((-10, -10, 5), (-10, 40, 5), (40, -10, 5))])
