"""Smoke test to verify the project is set up correctly."""

from py_cgi import __doc__, __version__


def test_package_is_importable() -> None:
    """Verify that py_cgi can be imported."""
    assert __doc__ is not None
    assert __version__
