"""input()-based prompts: yes/no, numbered menus and free text."""

from typing import Callable, Optional, Sequence, TypeVar

from geeto.ui.output import BLUE, GRAY, GREEN, NC, YELLOW

T = TypeVar("T")

Option = tuple[str, T]


def parse_choices(answer: str, count: int) -> Optional[list[int]]:
    """Zero-based indexes from '1,3', '2-4' or 'all'. None when the answer is not valid."""
    answer = answer.strip().lower()
    if answer == "all":
        return list(range(count))
    picked: list[int] = []
    for part in answer.replace(" ", "").split(","):
        if not part:
            continue
        start, dash, end = part.partition("-")
        if not start.isdigit() or (dash and not end.isdigit()):
            return None
        first, last = int(start), int(end or start)
        if not 1 <= first <= last <= count:
            return None
        for n in range(first, last + 1):
            if n - 1 not in picked:
                picked.append(n - 1)
    return picked


class Prompter:
    """Asks the user things. `input_fn` is swappable so tests can script answers.

    With `assume_defaults` set, yes/no questions take their default answer without
    reading input; menus and free text are still asked.
    """

    def __init__(self, input_fn: Callable[[str], str] = input, assume_defaults: bool = False):
        self.input_fn = input_fn
        self.assume_defaults = assume_defaults

    def _read(self, prompt: str) -> str:
        return self.input_fn(prompt).strip()

    def confirm(self, question: str, default: bool = True) -> bool:
        hint = "[Y/n]" if default else "[y/N]"
        if self.assume_defaults:
            print(f"  {question} {GRAY}{hint}{NC} {GREEN}{'yes' if default else 'no'}{NC}")
            return default
        while True:
            answer = self._read(f"  {question} {GRAY}{hint}{NC} ").lower()
            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            print(f"  {YELLOW}Please answer y or n{NC}")

    def _print_menu(self, question: str, options: Sequence[Option], default: Optional[int]) -> None:
        print(f"\n  {BLUE}?{NC} {question}")
        for i, (label, _) in enumerate(options, 1):
            marker = f"{GRAY}(default){NC}" if i - 1 == default else ""
            print(f"    {i}. {label} {marker}".rstrip())

    def select(self, question: str, options: Sequence[Option], default: int = 0) -> T:
        """Numbered menu; returns the value of the chosen option."""
        if not options:
            raise ValueError("select() needs at least one option")
        self._print_menu(question, options, default)
        while True:
            answer = self._read(f"  Choose 1-{len(options)}: ")
            if not answer:
                return options[default][1]
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1][1]
            print(f"  {YELLOW}Enter a number between 1 and {len(options)}{NC}")

    def select_many(self, question: str, options: Sequence[Option]) -> list[T]:
        """Numbered menu accepting '1,3', '2-4' or 'all'. Empty input picks nothing."""
        if not options:
            return []
        self._print_menu(question, options, None)
        while True:
            answer = self._read(f"  Choose (e.g. 1,3 or 1-{len(options)} or all, Enter for none): ")
            if not answer:
                return []
            picked = parse_choices(answer, len(options))
            if picked is not None:
                return [options[i][1] for i in picked]
            print(f"  {YELLOW}Use numbers between 1 and {len(options)}, commas and ranges{NC}")

    def ask(
        self,
        question: str,
        default: str = "",
        validate: Optional[Callable[[str], Optional[str]]] = None,
    ) -> str:
        """Free text. `validate` returns an error message to re-ask, or None to accept."""
        suffix = f" {GRAY}({default}){NC}" if default else ""
        while True:
            answer = self._read(f"  {question}{suffix}: ") or default
            problem = validate(answer) if validate else None
            if problem is None:
                return answer
            print(f"  {YELLOW}{problem}{NC}")
