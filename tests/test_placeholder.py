"""Placeholder test verifying package import."""


def test_import() -> None:
    """Verify top-level package is importable."""
    import data_jar

    assert data_jar.__version__ is not None
    assert data_jar.__version__ == "0.1.0"
