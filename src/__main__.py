#!/usr/bin/env python3
"""
postdown - Post content renderer

Renders short-form post text to a standalone HTML page. Posts are
lightweight markup mixed with a few extras:

    - Hashtags: #news, #travel/japan (rendered as clickable chips)
    - Spoilers: {% spoiler style:box color:red the butler did it %}
    - Raw HTML blocks: ```__html ... ``` (passed through verbatim)
    - Emoji shortcodes: :smileys_grin: (rendered as images)

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Usage:
    postdown inputdir/ outputdir/ --inputFile post.md

Examples:
    # Basic rendering
    postdown . output/ --inputFile post.md

    # Highlight a tag and use a custom emoji catalog
    postdown . output/ --inputFile post.md --activeTag travel/japan --emojiCatalog emoji.yaml

    # Verbose output
    postdown . output/ --inputFile post.md -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import (
    Assembler,
    Compiler,
    EmojiResolver,
    EmojiCatalogError,
    MarkupRenderer,
    content_parse,
    __version__,
    LOG,
    state_connectToLogger,
)
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="postdown - Render posts with tags, spoilers and emoji to HTML",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input post file (relative to inputdir)"
)

parser.add_argument(
    "--activeTag",
    default=None,
    type=str,
    help="Tag to render as selected (e.g. travel/japan)",
)

parser.add_argument(
    "--emojiCatalog",
    default=None,
    type=str,
    help="YAML emoji catalog (categories, base_url, formats). Defaults to settings",
)

parser.add_argument(
    "--outputFile",
    default="index.html",
    type=str,
    help="Name of the HTML page written to outputdir",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with inputSourceFile, htmlOutputdir and envOK set

    Exits:
        1 if the input file or emoji catalog is not found
    """
    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.exists():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    if state.emojiCatalog and not Path(state.emojiCatalog).exists():
        print(f"Error: Emoji catalog not found: {state.emojiCatalog}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.htmlOutputdir = state.outputdir
    state.htmlOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.htmlOutputdir}", level=2)

    state.envOK = True
    return state


def resolver_build(state: ProgramState) -> EmojiResolver:
    """Emoji resolver from --emojiCatalog, else from settings"""
    if state.emojiCatalog:
        return EmojiResolver.from_yaml(state.emojiCatalog, appsettings)
    return EmojiResolver.from_settings(appsettings)


def source_parse(inputstate: ProgramState) -> ProgramState:
    """
    Read the post and turn it into render nodes.

    Args:
        inputstate: Program state with inputSourceFile path set

    Returns:
        ProgramState with emojiResolver and renderNodes set

    Exits:
        1 if the file cannot be read or the emoji catalog is invalid
    """
    state = inputstate.copy()

    LOG("Reading post...", level=1)

    try:
        source = state.inputSourceFile.read_text(encoding="utf-8")
        LOG(f"Read {len(source)} characters from {state.inputSourceFile.name}", level=2)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        state.emojiResolver = resolver_build(state)
    except EmojiCatalogError as e:
        print(f"Emoji catalog error: {e}", file=sys.stderr)
        sys.exit(1)

    LOG("Segmenting and assembling post...", level=1)
    assembler = Assembler(
        active_tag=state.activeTag,
        renderer=MarkupRenderer(resolver=state.emojiResolver, settings=appsettings),
        settings=appsettings,
    )
    state.renderNodes = assembler.assemble(content_parse(source, appsettings))
    LOG(f"Assembled {len(state.renderNodes)} render nodes", level=2)
    return state


def html_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile render nodes to a standalone HTML page.

    Args:
        inputstate: Program state with renderNodes

    Returns:
        ProgramState with compileResult set (status, output_file,
        node_count, tag_count)

    Exits:
        1 if renderNodes is None or compilation fails
    """
    state = inputstate.copy()

    LOG("Compiling render nodes to HTML...", level=1)

    if state.renderNodes is None:
        print("Error: No render nodes available", file=sys.stderr)
        sys.exit(1)

    try:
        compiler = Compiler(
            nodes=state.renderNodes,
            output_dir=str(state.htmlOutputdir),
            output_file=state.outputFile,
            resolver=state.emojiResolver,
            settings=appsettings,
            title=state.inputSourceFile.stem,
        )
        state.compileResult = compiler.compile()
        LOG(f"Compilation complete: {state.compileResult['node_count']} nodes", level=2)
    except OSError as e:
        print(f"Compilation error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display compilation results.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if compileResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.compileResult:
        print("Error: Compilation failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Rendering successful!", level=1)
    LOG(f"  Output: {state.compileResult['output_file']}", level=1)
    LOG(f"  Nodes:  {state.compileResult['node_count']}", level=1)
    LOG(f"  Tags:   {state.compileResult['tag_count']}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="postdown - Post content renderer",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - render a post to HTML.

    Runs the pipeline env_check -> source_parse -> html_compile ->
    results_report.

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the post
        outputdir: Directory where the page will be written
    """
    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    state_connectToLogger(state)

    pipeline(state, env_check, source_parse, html_compile, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
