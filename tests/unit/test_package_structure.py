"""Test package structure and imports."""

import sys
from pathlib import Path

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))


def test_package_imports() -> None:
    """Test that voicerelay package can be imported."""
    import voicerelay

    assert voicerelay.__version__ == "0.1.0"


def test_main_module_imports() -> None:
    """Test that main module can be imported without error."""
    from voicerelay.__main__ import main

    assert callable(main)


def test_create_app_is_lazily_exported() -> None:
    """Test create_app resolves through the package attribute hook."""
    import voicerelay
    from voicerelay.server.app import create_app

    assert voicerelay.create_app is create_app


def test_unknown_attribute_raises() -> None:
    """Test unknown package attributes raise AttributeError."""
    import pytest

    import voicerelay

    with pytest.raises(AttributeError, match="has no attribute 'nope'"):
        voicerelay.nope  # noqa: B018
