# src/wcforge/errors.py
"""Exception types raised by wcforge.

Every class here derives from one of the builtin types that `cli.main()`
treats as a controlled failure, so they are reported without a traceback
unless debug logging is on.
"""


class ExternalError(RuntimeError):
    """Something outside of wcforge is not in the state it needs to be."""


class ConfigError(ExternalError):
    """The configuration is missing a value or holds an unusable one."""


class CommandError(ExternalError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, output: str) -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        msg = f"Command `{' '.join(command)}` failed with exit code {returncode}."
        if output:
            msg += f"\n{output}"
        super().__init__(msg)


class ProcessingError(ValueError):
    """Source code uses an import or export form that cannot be rewritten."""


class UncertainEntryFileError(RuntimeError):
    """The entrypoint pattern does not name exactly one file."""

    def __init__(self, pattern: str, matches: int) -> None:
        self.pattern = pattern
        self.matches = matches
        super().__init__(
            f"Cannot determine entry file: `{pattern}` matched {matches} files."
        )
