from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import CorruptError, CriticalStop
from .installer import Installer, OpResult, Transform, Validator
from .lib.documents import load_document
from .logging_utils import configure_logging
from .state import RunState, save_report

logger = logging.getLogger(__name__)


# Required arguments of every recipe operation, in call order.
OPERATIONS: Dict[str, tuple] = {
    "set_composer": ("path",),
    "make_dir": ("dir",),
    "dir": ("vendor_app", "source", "destination"),
    "file": ("vendor_app", "source", "destination"),
    "file_ifne": ("vendor_app", "source", "destination"),
    "set_file_contents_ife": ("uri", "contents"),
    "set_file_contents_ifne": ("uri", "contents"),
    "empty_dir_recursively": ("dir",),
    "ask_for": ("key", "prompt"),
    "log": ("text",),
}

OPTIONAL: Dict[str, tuple] = {
    "file": ("replace",),
    "file_ifne": ("replace",),
    "ask_for": ("pattern", "on_failure"),
}


@dataclass(frozen=True)
class RecipeStep:
    step_id: str
    op: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Recipe:
    steps: List[RecipeStep]
    composer: Optional[str] = None
    critical_stop: bool = True
    echo: bool = True


@dataclass(frozen=True)
class RecipeResult:
    state: RunState
    completed: bool
    ran_steps: List[str]
    failed_steps: List[str]
    stopped_at: Optional[str] = None


def _parse_step(index: int, raw: Any) -> RecipeStep:
    if not isinstance(raw, dict) or len(raw) != 1:
        raise CorruptError(f"step {index} must be a mapping with exactly one operation")

    op, args = next(iter(raw.items()))
    if op not in OPERATIONS:
        raise CorruptError(f"step {index} uses unknown operation `{op}`")

    required = OPERATIONS[op]
    # `- make_dir: out/src` is shorthand for `- make_dir: {dir: out/src}`.
    if not isinstance(args, dict):
        if len(required) != 1:
            raise CorruptError(f"step {index} (`{op}`) needs arguments {', '.join(required)}")
        args = {required[0]: args}

    missing = [name for name in required if name not in args]
    if missing:
        raise CorruptError(f"step {index} (`{op}`) is missing {', '.join(missing)}")

    unknown = set(args) - set(required) - set(OPTIONAL.get(op, ()))
    if unknown:
        raise CorruptError(f"step {index} (`{op}`) has unknown arguments {', '.join(sorted(unknown))}")

    replace = args.get("replace")
    if replace is not None and not isinstance(replace, dict):
        raise CorruptError(f"step {index} (`{op}`) `replace` must be a mapping")

    pattern = args.get("pattern")
    if pattern:
        try:
            re.compile(str(pattern))
        except re.error as e:
            raise CorruptError(f"step {index} (`{op}`) has invalid pattern: {e}") from e

    return RecipeStep(step_id=f"{index:02d}_{op}", op=op, args=dict(args))


def parse_recipe(raw: Dict[str, Any]) -> Recipe:
    steps = raw.get("steps") or []
    if not isinstance(steps, list):
        raise CorruptError("recipe `steps` must be a list")

    composer = raw.get("composer")
    return Recipe(
        steps=[_parse_step(i, s) for i, s in enumerate(steps, start=1)],
        composer=str(composer) if composer else None,
        critical_stop=bool(raw.get("critical_stop", True)),
        echo=bool(raw.get("echo", True)),
    )


def load_recipe(path: str) -> Recipe:
    """Load an installation recipe from a YAML or JSON file."""
    raw = load_document(path, not_found="recipe file not found or uri leads not to a file")
    return parse_recipe(raw)


def _replace_transform(replace: Dict[str, Any], installer: Installer) -> Transform:
    def transform(text: str) -> str:
        answers = installer.user_inputs
        for needle, replacement in replace.items():
            try:
                value = str(replacement).format_map(answers)
            except KeyError as e:
                raise ValueError(f"no answer given for `{e.args[0]}`") from e
            text = text.replace(str(needle), value)
        return text

    return transform


def _pattern_validator(pattern: str) -> Validator:
    compiled = re.compile(pattern)
    return lambda answer: compiled.fullmatch(answer) is not None


def _run_step(installer: Installer, step: RecipeStep) -> OpResult:
    a = step.args
    op = step.op

    if op == "set_composer":
        return installer.set_composer(str(a["path"]))
    if op == "make_dir":
        return installer.make_dir(str(a["dir"]))
    if op == "empty_dir_recursively":
        return installer.empty_dir_recursively(str(a["dir"]))
    if op == "dir":
        return installer.dir(str(a["vendor_app"]), str(a["source"]), str(a["destination"]))
    if op in {"file", "file_ifne"}:
        transform = _replace_transform(a["replace"], installer) if a.get("replace") else None
        install = installer.file if op == "file" else installer.file_ifne
        return install(str(a["vendor_app"]), str(a["source"]), str(a["destination"]), transform)
    if op == "set_file_contents_ife":
        return installer.set_file_contents_ife(str(a["uri"]), str(a["contents"]))
    if op == "set_file_contents_ifne":
        return installer.set_file_contents_ifne(str(a["uri"]), str(a["contents"]))
    if op == "ask_for":
        validator = _pattern_validator(str(a["pattern"])) if a.get("pattern") else None
        hint = str(a["on_failure"]) if a.get("on_failure") else None
        installer.ask_for(str(a["key"]), str(a["prompt"]), validator, hint)
        return OpResult(ok=True)
    if op == "log":
        installer.get_logger().line(str(a["text"]))
        return OpResult(ok=True)

    raise CorruptError(f"unknown operation `{op}`")


def run_recipe(
    recipe: Recipe,
    *,
    installer: Optional[Installer] = None,
    state_path: Optional[str] = None,
    log_path: Optional[str] = None,
) -> RecipeResult:
    """Run every recipe step in order.

    A critical stop ends the run early; it is reported through the result
    rather than raised. The run report is saved to `state_path` either way.
    """

    if log_path:
        configure_logging(log_path=log_path)

    if installer is None:
        installer = Installer(echo=recipe.echo)
    elif not recipe.echo:
        installer.get_logger().disable_echo()

    if recipe.critical_stop:
        installer.enable_critical_stop()
    else:
        installer.disable_critical_stop()

    steps = list(recipe.steps)
    if recipe.composer:
        steps.insert(0, RecipeStep(step_id="00_set_composer", op="set_composer", args={"path": recipe.composer}))

    ran: List[str] = []
    failed: List[str] = []
    stopped_at: Optional[str] = None

    try:
        for step in steps:
            logger.info("Running step %s", step.step_id)
            ran.append(step.step_id)
            try:
                result = _run_step(installer, step)
            except CriticalStop:
                stopped_at = step.step_id
                failed.append(step.step_id)
                logger.error("Installation stopped at step %s", step.step_id)
                break
            if not result.ok:
                failed.append(step.step_id)
        else:
            installer.state.completed = True
    finally:
        if state_path:
            save_report(state_path, installer.state)

    return RecipeResult(
        state=installer.state,
        completed=installer.state.completed,
        ran_steps=ran,
        failed_steps=failed,
        stopped_at=stopped_at,
    )
