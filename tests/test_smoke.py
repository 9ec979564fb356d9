"""Basic package import smoke tests."""


def test_package_imports() -> None:
    """Ensure the top-level package metadata is importable."""
    import trayicon  # noqa: PLC0415

    assert hasattr(trayicon, "__all__")
    assert "TrayIconBuilder" in trayicon.__all__
