"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from functools import reduce
from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    State carried through the CLI pipeline; each stage fills in its fields.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, activeTag,
          emojiCatalog, outputFile
        - env_check: inputSourceFile, htmlOutputdir, envOK
        - source_parse: emojiResolver, renderNodes
        - html_compile: compileResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the post source
        outputdir: Directory for the compiled page
        verbosity: Logging verbosity level (1-3)
        inputFile: Post filename (relative to inputdir)
        activeTag: Tag rendered as selected, if any
        emojiCatalog: Optional YAML emoji catalog path
        outputFile: Name of the written HTML page
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the post source
        htmlOutputdir: Resolved output directory
        emojiResolver: Emoji resolver shared by assembly and compilation
        renderNodes: Assembled render nodes
        compileResult: Compilation results (output_file, node_count, tag_count, status)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    activeTag: Optional[str] = field(default=None)
    emojiCatalog: Optional[str] = field(default=None)
    outputFile: str = field(default="index.html")

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    htmlOutputdir: Path = field(default=Path("/"))
    emojiResolver: Optional[Any] = field(default=None)  # EmojiResolver at runtime
    renderNodes: Optional[List[Any]] = field(default=None)  # List[RenderNode] at runtime
    compileResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Options without a matching field are ignored.

        Args:
            options: Parsed CLI arguments (inputFile, activeTag, etc.)
            inputdir: Directory containing the post
            outputdir: Directory for compilation output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        return cls(**{**filtered_options, "inputdir": inputdir, "outputdir": outputdir})

    def copy(self: PS) -> PS:
        """Shallow copy, so stages never mutate their input state."""
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(initial_state, env_check, source_parse, html_compile)

    is equivalent to html_compile(source_parse(env_check(initial_state))).
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
