"""cargo-3ds: build, package and run Rust programs for the Nintendo 3DS."""

__version__ = "0.1.0"
