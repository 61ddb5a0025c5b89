"""
Demo of the Trees diagram compiler.
Compiles a set of sample diagrams and shows either the call tree or the
diagnostic for each one.
"""

import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from diagnostic_render import render_error, render_grid, render_tree
from trees_compiler import (
    DEFAULT_CONFIG,
    CharWidthMode,
    CompileConfig,
    CompileError,
    compile_diagram,
    find_blocks,
    normalize_lines,
)
from tree_codec import encode_tree


SAMPLES: dict[str, list[str]] = {
    "print_product": [
        "        ┌─────┐      ",
        "        │print│      ",
        "        └──┬──┘      ",
        "        ┌──┴──┐      ",
        "        │  *  │      ",
        "        └┬───┬┘      ",
        "     ┌───┘   └───┐   ",
        "   ┌─┴─┐       ┌─┴─┐ ",
        "   │ 3 │       │ 4 │ ",
        "   └───┘       └───┘ ",
    ],
    "side_plugs": [
        "        ┌─────┐      ",
        "        │print│      ",
        "        └───┬─┘      ",
        "        ┌───┴─┐      ",
        "    ┌───┤  +  ├──┐   ",
        "    │   └─────┘  │   ",
        "┌───┴─┐      ┌───┴─┐ ",
        "│  3  │      │  4  │ ",
        "└─────┘      └─────┘ ",
    ],
    "quote_and_expand": [
        "┌───────┐",
        "│  map  │",
        "└─┬───@─┘",
        "┌─•─┐ │  ",
        "│ f │ │  ",
        "└───┘ │  ",
        "    ┌─┴──┐",
        "    │ xs │",
        "    └────┘",
    ],
    "dangling": [
        "┌───────┐",
        "│ abc   │",
        "└───┬───┘",
        "    │    ",
        "         ",
        "┌───┴──┐ ",
        "│ def  │ ",
        "└──────┘ ",
    ],
    "cycle": [
        "  ┌────────┐   ┌───┐",
        "┌─┴─┐      │   │ a │",
        "│ b │      │   └───┘",
        "└─┬─┘      │        ",
        "┌─┴─┐      │        ",
        "│ c │      │        ",
        "└─┬─┘      │        ",
        "  └────────┘        ",
    ],
    "unterminated": [
        "┌─────┐",
        "│ abc │",
        "└── ──┘",
    ],
    "invalid_character": [
        "┌─────┐",
        "│ a\tb │",
        "└─────┘",
    ],
}


def compile_panel(name: str, lines: list[str], config: CompileConfig = DEFAULT_CONFIG) -> Panel:
    """Compile one sample and build a panel showing the result."""
    content = Text()
    try:
        tree = compile_diagram(lines, config)
    except CompileError as e:
        title = f"{name} - {e.kind.value}"
        try:
            grid = normalize_lines(lines, config)
        except CompileError:
            # No grid to point into; show the message alone
            content.append(f"{e.kind.value}: ", style="bold red")
            content.append(e.message)
            return Panel(content, title=title, border_style="red")
        try:
            blocks = find_blocks(grid, config)
        except CompileError:
            blocks = []
        content.append(Text.from_ansi(render_error(grid, e, blocks)))
        return Panel(content, title=title, border_style="red")

    grid = normalize_lines(lines, config)
    content.append(Text.from_ansi(render_grid(grid, blocks=find_blocks(grid, config))))
    content.append("\n\n")
    content.append("Call tree:\n", style="bold cyan")
    content.append(render_tree(tree))
    content.append("\n\n")
    content.append("Bytecode: ", style="bold")
    content.append(encode_tree(tree).hex(" "))
    return Panel(content, title=name, border_style="green")


def main(names: list[str], config: CompileConfig = DEFAULT_CONFIG) -> None:
    console = Console()
    for name in names or SAMPLES:
        if name not in SAMPLES:
            console.print(f"[bold red]Unknown sample:[/] {name} (choose from {', '.join(SAMPLES)})")
            continue
        console.print(compile_panel(name, SAMPLES[name], config))


if __name__ == "__main__":
    # Usage: compile_demo.py [-v] [--half] [sample ...]
    args = sys.argv[1:]
    if "-v" in args:
        args.remove("-v")
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    config = DEFAULT_CONFIG
    if "--half" in args:
        args.remove("--half")
        config = CompileConfig(char_width=CharWidthMode.HALF)
    main(args, config)
