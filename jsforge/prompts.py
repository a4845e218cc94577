"""Interactive questions that resolve a ``ProjectConfig``."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from jsforge.config import Language, ProjectConfig, validate_project_name
from jsforge.utils import console as default_console, print_error

DEFAULT_PROJECT_NAME = "my_project"


def ask_questions(console: Optional[Console] = None) -> ProjectConfig:
    """Ask the four setup questions and return the validated answers.

    The project name is asked again until it is a usable directory name.
    """
    console = console or default_console

    while True:
        raw_name = Prompt.ask(
            "Please provide a project name",
            default=DEFAULT_PROJECT_NAME,
            console=console,
        )
        try:
            project_name = validate_project_name(raw_name)
            break
        except ValueError as exc:
            print_error(f"Invalid project name: {exc}")

    language = Prompt.ask(
        "Would you like to set up a JavaScript or TypeScript project?",
        choices=[lang.value for lang in Language],
        default=Language.JAVASCRIPT.value,
        console=console,
    )
    use_tailwind = Confirm.ask(
        "Would you like to use Tailwind CSS?", default=False, console=console
    )
    use_git = Confirm.ask("Would you like to set up Git?", default=True, console=console)

    return ProjectConfig.from_answers(
        project_name=project_name,
        language=language,
        use_tailwind=use_tailwind,
        use_git=use_git,
    )
