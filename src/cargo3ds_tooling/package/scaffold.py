"""Turn a fresh `cargo new` project into a 3DS homebrew project."""

from __future__ import annotations

import sys
from pathlib import Path

from cargo3ds_tooling.errors import ConfigurationError

ROMFS_PLACEHOLDER = "PUT_YOUR_ROMFS_FILES_HERE.txt"

TOML_CHANGES = """ctru-rs = { git = "https://github.com/rust3ds/ctru-rs" }

[package.metadata.cargo-3ds]
romfs_dir = "romfs"
"""

CUSTOM_MAIN_RS = r"""use ctru::prelude::*;

fn main() {
    let apt = Apt::new().unwrap();
    let mut hid = Hid::new().unwrap();
    let gfx = Gfx::new().unwrap();
    let _console = Console::new(gfx.top_screen.borrow_mut());

    println!("Hello, World!");
    println!("\x1b[29;16HPress Start to exit");

    while apt.main_loop() {
        gfx.wait_for_vblank();

        hid.scan_input();
        if hid.keys_down().contains(KeyPad::START) {
            break;
        }
    }
}
"""


def scaffold_project(project_path: Path) -> None:
    """Add romfs/, ctru-rs dependency, cargo-3ds metadata and a ctru main.rs to a new project."""
    manifest = project_path / "Cargo.toml"
    if not manifest.is_file():
        msg = f"{manifest} not found after `cargo new`"
        raise ConfigurationError(msg)

    romfs = project_path / "romfs"
    romfs.mkdir(exist_ok=True)
    (romfs / ROMFS_PLACEHOLDER).touch()

    content = manifest.read_text()
    if not content.endswith("\n"):
        content += "\n"
    manifest.write_text(content + TOML_CHANGES)

    # `cargo new --lib` has no main.rs
    main_rs = project_path / "src" / "main.rs"
    if main_rs.is_file():
        main_rs.write_text(CUSTOM_MAIN_RS)
    print(f"Set up 3DS project in {project_path}", file=sys.stderr)
