"""Render one small example per CLI option into examples/cli-options/."""

from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--x-res", "160", "--y-res", "120", "--cycles", "200"]


@dataclass
class Example:
    name: str
    args: list[str]
    expected: Path
    is_dir: bool = False

    def full_args(self) -> list[str]:
        return [sys.executable, "render.py", *BASE_ARGS, *self.args]


def _image(name: str, filename: str, *args: str) -> Example:
    path = EXAMPLES_ROOT / name / filename
    return Example(name=name, args=[*args, "--output", str(path)], expected=path)


EXAMPLES: list[Example] = [
    _image("default", "default.png"),
    _image("grayscale", "grayscale.png", "--color-mode", "grayscale"),
    _image("gradient-colors", "sunset.png", "--start-color", "#ffcc00", "--end-color", "0.75,0.9,0.4"),
    _image("pan", "seahorse-valley.png", "--x-center", "-0.745", "--y-center", "0.113", "--zoom", "1.0"),
    _image("julia", "dendrite.png", "--julia", "0", "1", "--zoom", "0.3"),
    _image("aspect", "widescreen.png", "--x-res", "256", "--aspect", "16:9"),
    _image("window-offset", "offset.png", "--window-offset", "40", "30"),
    _image("screenshot", "output.ppm"),
    _image("tiles", "tiled.png", "--tile-rows", "16", "--workers", "4"),
    _image("final-zoom", "target-scale.png", "--frames", "5", "--final-zoom", "50", "--focus", "20", "60"),
    Example(
        name="gif",
        args=["--mode", "gif", "--frames", "6", "--zoom-factor", "1.5",
              "--output", str(EXAMPLES_ROOT / "gif" / "movie.gif")],
        expected=EXAMPLES_ROOT / "gif" / "movie.gif",
    ),
    Example(
        name="frames",
        args=["--mode", "frames", "--frames", "3", "--frame-dir", str(EXAMPLES_ROOT / "frames" / "sequence")],
        expected=EXAMPLES_ROOT / "frames" / "sequence",
        is_dir=True,
    ),
]


def _verify(example: Example) -> None:
    if example.is_dir:
        if not example.expected.is_dir() or not any(example.expected.iterdir()):
            raise RuntimeError(f"Directory {example.expected} was not populated")
    elif not example.expected.is_file():
        raise RuntimeError(f"Expected file {example.expected} was not created")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        target = EXAMPLES_ROOT / example.name
        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True)
        subprocess.run(example.full_args(), check=True)
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
